import pytest

from blockgraph.core.Types import Order, OutputKind, NodeShape
from blockgraph.core.NodePort import BlockSchema
from blockgraph.compiler.writer import CodeWriter, prefix_lines, tidy


class TestOrder:

    @pytest.mark.parametrize("outer, inner, expected", [
        (Order.MULTIPLICATIVE, Order.ADDITIVE, True),
        (Order.ADDITIVE, Order.MULTIPLICATIVE, False),
        (Order.ADDITIVE, Order.ADDITIVE, True),
        (Order.EXPONENTIATION, Order.UNARY_SIGN, True),
        (Order.NONE, Order.LOGICAL_OR, False),
        (Order.ATOMIC, Order.ATOMIC, False),
        (Order.NONE, Order.NONE, False),
        (Order.MEMBER, Order.FUNCTION_CALL, False),
        (Order.FUNCTION_CALL, Order.MEMBER, False),
        (Order.LOGICAL_AND, Order.LOGICAL_AND, False),
        (Order.LOGICAL_AND, Order.LOGICAL_OR, True),
        (Order.RELATIONAL, Order.RELATIONAL, True),
    ])
    def test_needs_parens(self, outer, inner, expected):
        assert Order.needs_parens(outer, inner) is expected

    def test_overrides_share_a_level(self):
        # same floor, so only the override table keeps these bare
        assert int(Order.MEMBER) == int(Order.FUNCTION_CALL)
        assert (Order.MEMBER, Order.MEMBER) in Order.OVERRIDES

    def test_schema_shape_follows_output(self):
        assert BlockSchema(output=OutputKind.NONE).shape == NodeShape.STATEMENT
        assert BlockSchema(output=OutputKind.TABULAR).shape == NodeShape.EXPRESSION
        assert BlockSchema().shape == NodeShape.EXPRESSION


class TestWriter:

    def test_prefix_lines_keeps_trailing_newline_bare(self):
        assert prefix_lines("a\nb\n", "  ") == "  a\n  b\n"
        assert prefix_lines("a\nb", "  ") == "  a\n  b"

    def test_tidy(self):
        assert tidy("\n\n\n\nx = 1\n") == "x = 1\n"
        assert tidy("x = 1   \ny = 2\n") == "x = 1\ny = 2\n"
        assert tidy("x = 1\n\n\n") == "x = 1\n"

    def test_body_with_no_statements_is_pass(self):
        writer = CodeWriter(unit="    ")
        writer.writeln("while True:").body("")
        assert writer.result() == "while True:\n    pass"

    def test_body_indents_rendered_code(self):
        writer = CodeWriter(unit="  ")
        writer.writeln("if x:").body("a = 1\nb = 2\n")
        assert writer.lines() == ["if x:", "  a = 1", "  b = 2"]

    def test_push_pop(self):
        writer = CodeWriter(unit="  ")
        writer.writeln("def f():").push().writeln("return 1").pop().pop()
        writer.writeln("f()")
        assert writer.result() == "def f():\n  return 1\nf()"
