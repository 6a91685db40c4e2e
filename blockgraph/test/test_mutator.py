import logging

import pytest

from blockgraph.core import Mutator
from blockgraph.core.Errors import ArityDesyncError
from blockgraph.core.GraphPrimitives import Graph
from blockgraph.core.NodePort import EMPTY_SOCKET
from blockgraph.noderegistry import default_catalog


class TestMutator:

    def setup_method(self):
        self.graph = Graph(default_catalog())
        self.items = self.graph.create_node("lists_create_with")

    def _number(self, value):
        return self.graph.create_node("math_number", fields={"NUM": value})

    def _bindings(self):
        return Mutator.decompose(self.graph, self.items)

    def test_initial_arity(self):
        assert self.items.arity == 3
        assert [s.name for s in self.items.item_sockets()] == ["ADD0", "ADD1", "ADD2"]
        assert self.items.get_socket(EMPTY_SOCKET) is None

    def test_grow_appends_empty_socket(self):
        name = Mutator.grow(self.graph, self.items)
        assert name == "ADD3"
        assert self.items.arity == 4
        assert self.graph.get_target(self.items, "ADD3") is None

    def test_shrink_returns_dropped_producer(self):
        last = self._number(3)
        self.graph.connect(self.items, "ADD2", last)
        assert Mutator.shrink(self.graph, self.items) == last.id
        assert self.items.arity == 2
        assert self.items.get_socket("ADD2") is None
        # the dropped subtree stays in the graph, unbound
        assert last.id in self.graph
        assert self.graph.parent_of(last) is None

    def test_shrink_to_zero_leaves_placeholder(self):
        Mutator.set_arity(self.graph, self.items, 0)
        assert self.items.arity == 0
        assert self.items.item_sockets() == []
        assert self.items.get_socket(EMPTY_SOCKET).isPlaceholder()
        with pytest.raises(ValueError):
            Mutator.shrink(self.graph, self.items)

        Mutator.grow(self.graph, self.items)
        assert self.items.get_socket(EMPTY_SOCKET) is None

    def test_grow_then_shrink_restores_bindings(self):
        a, b = self._number(1), self._number(2)
        self.graph.connect(self.items, "ADD0", a)
        self.graph.connect(self.items, "ADD1", b)
        before = self._bindings()

        Mutator.set_arity(self.graph, self.items, 6)
        Mutator.set_arity(self.graph, self.items, 3)
        assert self._bindings() == before

    def test_shrink_then_grow_does_not_restore(self):
        a, c = self._number(1), self._number(3)
        self.graph.connect(self.items, "ADD0", a)
        self.graph.connect(self.items, "ADD2", c)

        Mutator.set_arity(self.graph, self.items, 1)
        Mutator.set_arity(self.graph, self.items, 3)
        assert self._bindings() == [a.id, None, None]

    def test_compose_reorders(self):
        a, b = self._number(1), self._number(2)
        self.graph.connect(self.items, "ADD0", a)
        self.graph.connect(self.items, "ADD1", b)

        Mutator.compose(self.graph, self.items, [b.id, a.id])
        assert self.items.arity == 2
        assert self._bindings() == [b.id, a.id]

    def test_compose_keeps_matching_positions(self):
        a, b = self._number(1), self._number(2)
        self.graph.connect(self.items, "ADD0", a)
        edge = self.graph.incoming_edges[(self.items.id, "ADD0")]

        Mutator.compose(self.graph, self.items, [a.id, None, None, b.id])
        assert self._bindings() == [a.id, None, None, b.id]
        assert self.graph.incoming_edges[(self.items.id, "ADD0")] is edge

    @pytest.mark.parametrize("tokens", [
        ["n1", "ghost"],
        ["n1", "n1"],
        ["n1", "outsider"],
        ["n1", "show"],
    ])
    def test_rejected_compose_changes_nothing(self, tokens):
        numbers = [self.graph.create_node("math_number", node_id=f"n{i}", fields={"NUM": i}) for i in (1, 2, 3)]
        for i, number in enumerate(numbers):
            self.graph.connect(self.items, f"ADD{i}", number)
        other = self.graph.create_node("lists_create_with")
        self.graph.connect(other, "ADD0", self.graph.create_node("math_number", node_id="outsider"))
        self.graph.create_node("text_print", node_id="show")

        with pytest.raises(ValueError):
            Mutator.compose(self.graph, self.items, tokens)
        assert self.items.arity == 3
        assert self._bindings() == ["n1", "n2", "n3"]

    def test_compose_rejects_own_ancestor(self):
        outer = self.graph.create_node("lists_create_with")
        self.graph.connect(outer, "ADD0", self.items)
        with pytest.raises(ValueError, match="cycle|already connected"):
            Mutator.compose(self.graph, self.items, [outer.id])
        assert self.items.arity == 3
        assert self._bindings() == [None, None, None]

    def test_item_fields_follow_arity(self):
        frame = self.graph.create_node("dataframe_dic")
        self.graph.set_field(frame, "FIELDNAME2", "c")
        Mutator.shrink(self.graph, frame)
        assert "FIELDNAME2" not in frame.fields
        Mutator.grow(self.graph, frame)
        assert frame.field("FIELDNAME2") == ""

    def test_item_fields_from_index(self):
        rows = self.graph.create_node("filter")
        assert rows.field("MIDDLE0") is None
        Mutator.grow(self.graph, rows)
        assert rows.field("MIDDLE1") == "and"
        assert rows.field("DROPDOWN1") == "gt"

    def test_verify(self):
        Mutator.verify(self.items)
        self.items.arity = 5
        with pytest.raises(ArityDesyncError) as info:
            Mutator.verify(self.items)
        assert info.value.expected == 5
        assert info.value.live == 3

    def test_reconcile_grows_to_persisted_arity(self, caplog):
        caplog.set_level(logging.DEBUG, logger="blockgraph.core.Mutator")
        self.items.arity = 5
        Mutator.reconcile(self.graph, self.items)
        assert self.items.item_count() == 5
        assert self.items.arity == 5
        assert "repairing" in caplog.text

    def test_reconcile_shrinks_to_persisted_arity(self):
        self.items.arity = 1
        Mutator.reconcile(self.graph, self.items)
        assert [s.name for s in self.items.item_sockets()] == ["ADD0"]

    def test_static_blocks_are_rejected(self):
        number = self._number(1)
        with pytest.raises(ValueError):
            Mutator.grow(self.graph, number)
        Mutator.reconcile(self.graph, number)
