from enum import Enum, auto
import math


class Order:
    """
    Operator precedence classes for generated Python, lowest number binds
    tightest. Fractional classes share a level for parenthesisation but are
    distinguished by the no-paren overrides below.
    """
    ATOMIC = 0.0             # 0 "" ...
    COLLECTION = 1.0         # tuples, lists, dictionaries
    STRING_CONVERSION = 1.0  # `expression...`
    MEMBER = 2.1             # . []
    FUNCTION_CALL = 2.2      # ()
    EXPONENTIATION = 3.0     # **
    UNARY_SIGN = 4.0         # + -
    BITWISE_NOT = 4.0        # ~
    MULTIPLICATIVE = 5.0     # * / // %
    ADDITIVE = 6.0           # + -
    BITWISE_SHIFT = 7.0      # << >>
    BITWISE_AND = 8.0        # &
    BITWISE_XOR = 9.0        # ^
    BITWISE_OR = 10.0        # |
    RELATIONAL = 11.0        # in, not in, is, is not, <, <=, >, >=, <>, !=, ==
    LOGICAL_NOT = 12.0       # not
    LOGICAL_AND = 13.0       # and
    LOGICAL_OR = 14.0        # or
    CONDITIONAL = 15.0       # if else
    LAMBDA = 16.0            # lambda
    NONE = 99.0              # (...)

    # (outer, inner) pairs that never need parentheses.
    OVERRIDES = frozenset({
        (FUNCTION_CALL, MEMBER),          # a.b()
        (FUNCTION_CALL, FUNCTION_CALL),   # a()()
        (MEMBER, MEMBER),                 # a.b.c
        (MEMBER, FUNCTION_CALL),          # a().b
        (LOGICAL_NOT, LOGICAL_NOT),       # not not x
        (LOGICAL_AND, LOGICAL_AND),       # a and b and c
        (LOGICAL_OR, LOGICAL_OR),         # a or b or c
    })

    @staticmethod
    def needs_parens(outer: float, inner: float) -> bool:
        if (outer, inner) in Order.OVERRIDES:
            return False
        outer_level = math.floor(outer)
        inner_level = math.floor(inner)
        if outer_level <= inner_level:
            if outer_level == inner_level and outer_level in (0, 99):
                return False
            return True
        return False


class OutputKind(Enum):
    """Capability tag describing what a block's output produces."""
    ANY = "any"
    TABULAR = "tabular"
    ARRAY = "array"
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    MODEL = "model"
    LAYOUT = "layout"
    NONE = "none"            # statement only

    def isValue(self) -> bool:
        return self != OutputKind.NONE


class NodeShape(Enum):
    EXPRESSION = auto()      # plugged into a socket, returns (text, order)
    STATEMENT = auto()       # chained through "next", returns text


class KindTag(Enum):
    """Classification tags resolved once when the catalog is built."""
    MODEL_LIKE = "model-like"
    AGGREGATE_LIKE = "aggregate-like"
    DYNAMIC_COLLECTION = "dynamic-collection"
    MULTI_SELECT = "multi-select"
    ASSIGNMENT = "assignment"
    NAME_REFERENCE = "name-reference"
