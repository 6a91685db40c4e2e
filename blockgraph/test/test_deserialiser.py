import copy
import json
import logging

import pytest

from blockgraph.compiler import Compiler, SchemaError, compile_graph, dump_graph, load_graph, load_graph_file, validate


def make_document():
    return {
        "graph_name": "numbers",
        "nodes": [
            {"id": "set_v", "kind": "variables_set", "fields": {"VAR": "v"}},
            {"id": "list", "kind": "lists_create_with", "arity": 2},
            {"id": "one", "kind": "math_number", "fields": {"NUM": 1}},
            {"id": "two", "kind": "math_number", "fields": {"NUM": 2}},
            {"id": "show", "kind": "text_print"},
            {"id": "get_v", "kind": "variables_get", "fields": {"VAR": "v"}},
        ],
        "bindings": [
            {"consumer": "set_v", "socket": "VALUE", "producer": "list"},
            {"consumer": "list", "socket": "ADD0", "producer": "one"},
            {"consumer": "list", "socket": "ADD1", "producer": "two"},
            {"consumer": "show", "socket": "TEXT", "producer": "get_v"},
        ],
        "next": [{"from": "set_v", "to": "show"}],
        "program": ["set_v"],
    }


class TestValidate:

    def setup_method(self):
        self.document = make_document()

    def test_valid_document(self):
        validate(self.document)

    @pytest.mark.parametrize("mutate, message", [
        (lambda d: d.pop("graph_name"), "missing required field 'graph_name'"),
        (lambda d: d.update(nodes={}), "nodes must be a list"),
        (lambda d: d["nodes"].append({"id": "one", "kind": "math_number"}), "duplicate node id 'one'"),
        (lambda d: d["nodes"][0].pop("kind"), "missing required field 'kind'"),
        (lambda d: d["nodes"][1].update(arity=-1), "arity must be a non-negative integer"),
        (lambda d: d["nodes"][1].update(arity=True), "arity must be a non-negative integer"),
        (lambda d: d["bindings"][0].update(producer="ghost"), "producer 'ghost' not found"),
        (lambda d: d["next"][0].pop("to"), "missing required field 'to'"),
        (lambda d: d["program"].append("ghost"), "'ghost' not found in nodes"),
        (lambda d: d["program"].append("set_v"), "listed twice"),
    ])
    def test_structural_errors(self, mutate, message):
        mutate(self.document)
        with pytest.raises(SchemaError) as info:
            validate(self.document)
        assert message in str(info.value)
        assert isinstance(info.value, ValueError)

    def test_unknown_kind_warns(self, caplog):
        caplog.set_level(logging.WARNING)
        self.document["nodes"].append({"id": "x", "kind": "mystery"})
        validate(self.document)
        assert "unknown block kind 'mystery'" in caplog.text

    def test_unknown_kind_strict(self):
        self.document["nodes"].append({"id": "x", "kind": "mystery"})
        with pytest.raises(SchemaError):
            validate(self.document, strict=True)


class TestLoadGraph:

    def test_load_and_compile(self):
        graph = load_graph(make_document())
        assert graph.name == "numbers"
        assert graph.get_node("list").item_count() == 2
        assert compile_graph(graph) == "v = [1, 2]\nprint(v)\n"

    def test_persisted_arity_is_replayed(self):
        document = make_document()
        document["nodes"][1]["arity"] = 4
        graph = load_graph(document)
        assert graph.get_node("list").arity == 4
        assert compile_graph(graph) == "v = [1, 2, None, None]\nprint(v)\n"

    def test_item_fields_survive_arity_replay(self):
        document = {
            "graph_name": "frame",
            "nodes": [
                {"id": "set", "kind": "variables_set", "fields": {"VAR": "df"}},
                {"id": "frame", "kind": "dataframe_dic", "arity": 1, "fields": {"FIELDNAME0": "a"}},
                {"id": "get", "kind": "variables_get", "fields": {"VAR": "v"}},
            ],
            "bindings": [
                {"consumer": "set", "socket": "VALUE", "producer": "frame"},
                {"consumer": "frame", "socket": "ADD0", "producer": "get"},
            ],
            "program": ["set"],
        }
        graph = load_graph(document)
        assert "FIELDNAME2" not in graph.get_node("frame").fields
        assert compile_graph(graph).endswith('df = pd.DataFrame({"a": v})\n')

    def test_binding_to_missing_socket(self):
        document = make_document()
        document["bindings"].append({"consumer": "list", "socket": "ADD7", "producer": "show"})
        with pytest.raises(SchemaError) as info:
            load_graph(document)
        assert "no socket 'ADD7'" in str(info.value)

    def test_program_entry_that_is_plugged(self):
        document = make_document()
        document["program"].append("show")
        with pytest.raises(SchemaError):
            load_graph(document)

    def test_unknown_kind_keeps_its_subtree(self):
        document = make_document()
        document["nodes"].append({"id": "odd", "kind": "mystery"})
        document["nodes"].append({"id": "three", "kind": "math_number", "fields": {"NUM": 3}})
        document["bindings"].append({"consumer": "odd", "socket": "IN", "producer": "three"})
        document["bindings"][0]["producer"] = "odd"
        graph = load_graph(document)

        assert graph.get_target("odd", "IN").id == "three"
        result = Compiler().compile(graph)
        assert result.source == "v = 0\nprint(v)\n"
        assert [type(e).__name__ for e in result.diagnostics] == ["UnknownKindError"]

    def test_dump_round_trip(self):
        graph = load_graph(make_document())
        document = dump_graph(graph)
        assert json.loads(json.dumps(document)) == document
        again = load_graph(copy.deepcopy(document))
        assert compile_graph(again) == compile_graph(graph)
        assert dump_graph(again) == document

    def test_load_graph_file(self, tmp_path):
        path = tmp_path / "numbers.json"
        path.write_text(json.dumps(make_document()), encoding="utf-8")
        assert compile_graph(load_graph_file(path)) == "v = [1, 2]\nprint(v)\n"
