"""
Core language blocks: variables, literals, logic, lists and control flow.
"""
from __future__ import annotations

import math
import re

from ...core.NodePort import BlockSchema, DynamicSockets, FieldSpec, SocketSpec
from ...core.Types import KindTag, Order, OutputKind
from ...noderegistry.NodeRegistry import block
from ..writer import CodeWriter
from .common import python_quote


# ── Variables ─────────────────────────────────────────────────────────────────

@block("variables_set", BlockSchema(
    sockets=[SocketSpec("VALUE", default="0")],
    fields=[FieldSpec("VAR", "item")],
    output=OutputKind.NONE,
    tags={KindTag.ASSIGNMENT},
))
def variables_set(b):
    value = b.value("VALUE", Order.NONE)
    return f"{b.variable(b.field('VAR'))} = {value}\n"


@block("variables_get", BlockSchema(
    fields=[FieldSpec("VAR", "item")],
    tags={KindTag.NAME_REFERENCE},
))
def variables_get(b):
    return b.variable(b.field("VAR")), Order.ATOMIC


# ── Literals ──────────────────────────────────────────────────────────────────

@block("math_number", BlockSchema(
    fields=[FieldSpec("NUM", 0)],
    output=OutputKind.NUMBER,
    literal_field="NUM",
))
def math_number(b):
    number = float(b.field("NUM", 0))
    if math.isinf(number):
        code = 'float("inf")' if number > 0 else '-float("inf")'
        return code, (Order.FUNCTION_CALL if number > 0 else Order.UNARY_SIGN)
    if math.isnan(number):
        return 'float("nan")', Order.FUNCTION_CALL
    code = str(int(number)) if number.is_integer() else repr(number)
    return code, (Order.ATOMIC if number >= 0 else Order.UNARY_SIGN)


@block("text", BlockSchema(
    fields=[FieldSpec("TEXT", "")],
    output=OutputKind.STRING,
    literal_field="TEXT",
))
def text(b):
    return python_quote(str(b.field("TEXT", ""))), Order.ATOMIC


@block("logic_boolean", BlockSchema(
    fields=[FieldSpec("BOOL", "TRUE", options=("TRUE", "FALSE"))],
    output=OutputKind.BOOLEAN,
))
def logic_boolean(b):
    return ("True" if b.field("BOOL") == "TRUE" else "False"), Order.ATOMIC


@block("logic_null", BlockSchema())
def logic_null(b):
    return "None", Order.ATOMIC


# ── Operators ─────────────────────────────────────────────────────────────────

_ARITHMETIC = {
    "ADD": (" + ", Order.ADDITIVE),
    "MINUS": (" - ", Order.ADDITIVE),
    "MULTIPLY": (" * ", Order.MULTIPLICATIVE),
    "DIVIDE": (" / ", Order.MULTIPLICATIVE),
    "POWER": (" ** ", Order.EXPONENTIATION),
}


@block("math_arithmetic", BlockSchema(
    sockets=[SocketSpec("A", OutputKind.NUMBER, "0"), SocketSpec("B", OutputKind.NUMBER, "0")],
    fields=[FieldSpec("OP", "ADD", options=tuple(_ARITHMETIC))],
    output=OutputKind.NUMBER,
))
def math_arithmetic(b):
    operator, order = _ARITHMETIC[b.field("OP")]
    return b.value("A", order) + operator + b.value("B", order), order


_COMPARE = {"EQ": "==", "NEQ": "!=", "LT": "<", "LTE": "<=", "GT": ">", "GTE": ">="}


@block("logic_compare", BlockSchema(
    sockets=[SocketSpec("A", default="0"), SocketSpec("B", default="0")],
    fields=[FieldSpec("OP", "EQ", options=tuple(_COMPARE))],
    output=OutputKind.BOOLEAN,
))
def logic_compare(b):
    operator = _COMPARE[b.field("OP")]
    order = Order.RELATIONAL
    return f"{b.value('A', order)} {operator} {b.value('B', order)}", order


@block("logic_operation", BlockSchema(
    sockets=[SocketSpec("A", OutputKind.BOOLEAN), SocketSpec("B", OutputKind.BOOLEAN)],
    fields=[FieldSpec("OP", "AND", options=("AND", "OR"))],
    output=OutputKind.BOOLEAN,
))
def logic_operation(b):
    operator = "and" if b.field("OP") == "AND" else "or"
    order = Order.LOGICAL_AND if operator == "and" else Order.LOGICAL_OR
    left = b.raw("A", order)
    right = b.raw("B", order)
    if not left and not right:
        left = right = "False"
    else:
        neutral = "True" if operator == "and" else "False"
        left = left or neutral
        right = right or neutral
    return f"{left} {operator} {right}", order


@block("logic_negate", BlockSchema(
    sockets=[SocketSpec("BOOL", OutputKind.BOOLEAN, "True")],
    output=OutputKind.BOOLEAN,
))
def logic_negate(b):
    return "not " + b.value("BOOL", Order.LOGICAL_NOT), Order.LOGICAL_NOT


# ── Lists ─────────────────────────────────────────────────────────────────────

@block("lists_create_with", BlockSchema(
    dynamic=DynamicSockets(initial=3, item_default="None"),
    output=OutputKind.ARRAY,
    tags={KindTag.DYNAMIC_COLLECTION},
))
def lists_create_with(b):
    elements = [b.item_value(i, Order.NONE) for i in b.items()]
    return "[" + ", ".join(elements) + "]", Order.ATOMIC


# ── Statements ────────────────────────────────────────────────────────────────

@block("text_print", BlockSchema(
    sockets=[SocketSpec("TEXT", default="''")],
    output=OutputKind.NONE,
))
def text_print(b):
    return f"print({b.value('TEXT', Order.NONE)})\n"


@block("controls_if", BlockSchema(
    sockets=[
        SocketSpec("IF0", OutputKind.BOOLEAN, "False"),
        SocketSpec("DO0", statement=True),
        SocketSpec("ELSE", statement=True),
    ],
    output=OutputKind.NONE,
))
def controls_if(b):
    writer = CodeWriter(unit=b.indent)
    writer.writeln(f"if {b.value('IF0', Order.NONE)}:").body(b.statement("DO0", indent=False))
    if b.target("ELSE") is not None:
        writer.writeln("else:").body(b.statement("ELSE", indent=False))
    return writer.result() + "\n"


_DIGITS = re.compile(r"^\d+$")


@block("controls_repeat_ext", BlockSchema(
    sockets=[SocketSpec("TIMES", OutputKind.NUMBER, "0"), SocketSpec("DO", statement=True)],
    output=OutputKind.NONE,
))
def controls_repeat_ext(b):
    repeats = b.value("TIMES", Order.NONE)
    repeats = repeats if _DIGITS.match(repeats) else f"int({repeats})"
    counter = b.distinct_name("count")
    writer = CodeWriter(unit=b.indent)
    writer.writeln(f"for {counter} in range({repeats}):").body(b.statement("DO", indent=False))
    return writer.result() + "\n"


@block("controls_forEach", BlockSchema(
    sockets=[SocketSpec("LIST", OutputKind.ARRAY, "[]"), SocketSpec("DO", statement=True)],
    fields=[FieldSpec("VAR", "i")],
    output=OutputKind.NONE,
))
def controls_forEach(b):
    variable = b.variable(b.field("VAR"))
    writer = CodeWriter(unit=b.indent)
    writer.writeln(f"for {variable} in {b.value('LIST', Order.RELATIONAL)}:")
    writer.body(b.statement("DO", indent=False))
    return writer.result() + "\n"
