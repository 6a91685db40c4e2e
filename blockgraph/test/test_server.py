import pytest
from fastapi.testclient import TestClient

from blockgraph.server.main import app


@pytest.fixture
def client():
    return TestClient(app)


def hello_payload(**extra):
    payload = {
        "graph_name": "hello",
        "nodes": [
            {"id": "set", "kind": "variables_set", "fields": {"VAR": "greeting"}},
            {"id": "msg", "kind": "text", "fields": {"TEXT": "hello"}},
            {"id": "show", "kind": "text_print"},
            {"id": "get", "kind": "variables_get", "fields": {"VAR": "greeting"}},
        ],
        "bindings": [
            {"consumer": "set", "socket": "VALUE", "producer": "msg"},
            {"consumer": "show", "socket": "TEXT", "producer": "get"},
        ],
        "next": [{"from": "set", "to": "show"}],
        "program": ["set"],
    }
    payload.update(extra)
    return payload


class TestServer:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_blocks(self, client):
        response = client.get("/api/blocks")
        assert response.status_code == 200
        blocks = {entry["kind"]: entry for entry in response.json()}
        assert "filter" in blocks
        assert blocks["lists_create_with"]["dynamic"]["initial"] == 3
        kinds = [entry["kind"] for entry in response.json()]
        assert kinds == sorted(kinds)

    def test_compile(self, client):
        response = client.post("/api/compile", json=hello_payload())
        assert response.status_code == 200
        assert response.json() == {
            "source": "greeting = 'hello'\nprint(greeting)\n",
            "diagnostics": [],
        }

    def test_compile_with_arity(self, client):
        payload = {
            "nodes": [
                {"id": "set", "kind": "variables_set", "fields": {"VAR": "v"}},
                {"id": "list", "kind": "lists_create_with", "arity": 1},
                {"id": "one", "kind": "math_number", "fields": {"NUM": 1}},
            ],
            "bindings": [
                {"consumer": "set", "socket": "VALUE", "producer": "list"},
                {"consumer": "list", "socket": "ADD0", "producer": "one"},
            ],
            "program": ["set"],
        }
        response = client.post("/api/compile", json=payload)
        assert response.status_code == 200
        assert response.json()["source"] == "v = [1]\n"

    def test_compile_reports_diagnostics(self, client):
        payload = hello_payload()
        payload["nodes"].append({"id": "odd", "kind": "mystery"})
        payload["program"].append("odd")
        response = client.post("/api/compile", json=payload)
        assert response.status_code == 200
        diagnostics = response.json()["diagnostics"]
        assert [d["error"] for d in diagnostics] == ["UnknownKindError"]
        assert diagnostics[0]["node_id"] == "odd"

    def test_strict_compile_rejects_unknown_kind(self, client):
        payload = hello_payload(strict=True)
        payload["nodes"].append({"id": "odd", "kind": "mystery"})
        response = client.post("/api/compile", json=payload)
        assert response.status_code == 422
        assert "mystery" in response.json()["detail"]

    def test_bad_program_reference(self, client):
        response = client.post("/api/compile", json=hello_payload(program=["ghost"]))
        assert response.status_code == 422
        assert "ghost" in response.json()["detail"]

    def test_occupied_socket(self, client):
        payload = hello_payload()
        payload["bindings"].append({"consumer": "set", "socket": "VALUE", "producer": "get"})
        response = client.post("/api/compile", json=payload)
        assert response.status_code == 422
