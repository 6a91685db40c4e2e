import pytest

from blockgraph.core import Mutator
from blockgraph.core.GraphPrimitives import Graph
from blockgraph.noderegistry import default_catalog


class ProgramBuilder:
    """Small helper to assemble block programs in tests."""

    def __init__(self):
        self.graph = Graph(default_catalog(), name="test")

    def node(self, kind, **fields):
        return self.graph.create_node(kind, fields=fields or None)

    def number(self, value):
        return self.node("math_number", NUM=value)

    def text(self, value):
        return self.node("text", TEXT=value)

    def get(self, name):
        return self.node("variables_get", VAR=name)

    def items(self, *values):
        node = self.node("lists_create_with")
        Mutator.set_arity(self.graph, node, len(values))
        for i, value in enumerate(values):
            self.graph.connect(node, f"ADD{i}", value)
        return node

    def bind(self, node, **sockets):
        for socket, value in sockets.items():
            self.graph.connect(node, socket, value)
        return node

    def assign(self, name, value):
        node = self.bind(self.node("variables_set", VAR=name), VALUE=value)
        self.graph.add_statement(node)
        return node

    def statement(self, node):
        self.graph.add_statement(node)
        return node


@pytest.fixture
def program():
    return ProgramBuilder()


