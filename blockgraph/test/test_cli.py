import json

import pytest

from blockgraph.compile_from_json import main


GRAPH = {
    "graph_name": "hello",
    "nodes": [
        {"id": "greet", "kind": "text_print"},
        {"id": "msg", "kind": "text", "fields": {"TEXT": "hello"}},
    ],
    "bindings": [{"consumer": "greet", "socket": "TEXT", "producer": "msg"}],
    "program": ["greet"],
}


@pytest.fixture
def graph_file(tmp_path):
    path = tmp_path / "hello.json"
    path.write_text(json.dumps(GRAPH), encoding="utf-8")
    return path


class TestCompileFromJson:

    def test_prints_source(self, graph_file, capsys):
        assert main([str(graph_file)]) == 0
        assert capsys.readouterr().out == "print('hello')\n"

    def test_writes_output_file(self, graph_file, tmp_path, capsys):
        out = tmp_path / "build" / "hello.py"
        assert main([str(graph_file), "-o", str(out)]) == 0
        assert out.read_text(encoding="utf-8") == "print('hello')\n"
        assert capsys.readouterr().out == ""

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.json")]) == 1
        assert "[error] File not found" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{ not json", encoding="utf-8")
        assert main([str(path)]) == 1
        assert "is not valid JSON" in capsys.readouterr().err

    def test_schema_error(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({**GRAPH, "program": ["ghost"]}), encoding="utf-8")
        assert main([str(path)]) == 1
        assert "Schema validation failed" in capsys.readouterr().err

    def test_strict_rejects_unknown_kinds(self, tmp_path, capsys):
        document = {**GRAPH, "nodes": GRAPH["nodes"] + [{"id": "odd", "kind": "mystery"}]}
        path = tmp_path / "odd.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        assert main([str(path), "--strict"]) == 1
        assert "unknown block kind 'mystery'" in capsys.readouterr().err

    def test_diagnostics_are_json_lines(self, tmp_path, capsys):
        document = {
            "graph_name": "odd",
            "nodes": [{"id": "odd", "kind": "mystery"}],
            "program": ["odd"],
        }
        path = tmp_path / "odd.json"
        path.write_text(json.dumps(document), encoding="utf-8")

        assert main([str(path), "--diagnostics"]) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        lines = [json.loads(line) for line in captured.err.splitlines() if line.startswith("{")]
        assert lines == [{
            "error": "UnknownKindError",
            "node_id": "odd",
            "message": lines[0]["message"],
        }]
        assert "mystery" in lines[0]["message"]
