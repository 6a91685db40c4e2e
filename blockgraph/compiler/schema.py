"""
Graph document format + validator
=================================
A JSON description of a block program, used by the command line compiler and
the HTTP service. It carries exactly what the compiler reads: node kinds,
literal field values, persisted arity, socket bindings, statement chains and
the ordered list of top-level statements.

    {
      "graph_name": "iris",                        // human label (str, required)
      "nodes": [
        {
          "id":     "n1",                          // unique within this graph (str, required)
          "kind":   "variables_set",               // catalog kind (str, required)
          "fields": { "VAR": "df" },               // literal field values (dict, optional)
          "arity":  2                              // dynamic kinds only (int >= 0, optional)
        }
      ],
      "bindings": [
        { "consumer": "n1", "socket": "VALUE", "producer": "n2" }
      ],
      "next":    [ { "from": "n1", "to": "n3" } ], // statement chains (optional)
      "program": [ "n1" ]                          // top-level statements in order
    }
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..noderegistry.NodeRegistry import Catalog


logger = logging.getLogger(__name__)


class SchemaError(ValueError):
    """Raised when a graph document fails structural validation."""


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise SchemaError(message)


def _require_keys(obj: Dict, keys: List[str], context: str) -> None:
    for key in keys:
        _require(key in obj, f"{context}: missing required field '{key}'")


def _require_strings(obj: Dict, keys: List[str], context: str) -> None:
    for key in keys:
        _require(isinstance(obj[key], str), f"{context}.{key} must be a string")


# ── Public validator ─────────────────────────────────────────────────────────

def validate(data: Dict[str, Any], *, strict: bool = False,
             catalog: Optional["Catalog"] = None) -> None:
    """
    Validate a parsed graph document.

    Args:
        data:    A pre-parsed dict (result of json.load / json.loads).
        strict:  When True, raise SchemaError for kinds the catalog does not
                 know. When False (default), unknown kinds are logged and the
                 compiler later turns them into diagnostics.
        catalog: Catalog to check kinds against; the bundled one by default.

    Raises:
        SchemaError: On any structural violation.
    """
    if catalog is None:
        from ..noderegistry.NodeRegistry import default_catalog
        catalog = default_catalog()

    _require(isinstance(data, dict), "graph document must be a JSON object at the top level")
    _require_keys(data, ["graph_name", "nodes", "program"], "graph root")

    _require(isinstance(data["graph_name"], str), "graph_name must be a string")
    _require(isinstance(data["nodes"], list), "nodes must be a list")
    _require(isinstance(data["program"], list), "program must be a list")
    _require(isinstance(data.get("bindings", []), list), "bindings must be a list")
    _require(isinstance(data.get("next", []), list), "next must be a list")

    # ── Nodes ───────────────────────────────────────────────────────────────

    node_ids: set[str] = set()

    for i, node in enumerate(data["nodes"]):
        ctx = f"nodes[{i}]"
        _require(isinstance(node, dict), f"{ctx}: each node must be a JSON object")
        _require_keys(node, ["id", "kind"], ctx)
        _require_strings(node, ["id", "kind"], ctx)
        _require(node["id"] not in node_ids, f"{ctx}: duplicate node id '{node['id']}'")
        node_ids.add(node["id"])

        if "fields" in node:
            _require(isinstance(node["fields"], dict), f"{ctx}.fields must be an object")
        if node.get("arity") is not None:
            arity = node["arity"]
            _require(isinstance(arity, int) and not isinstance(arity, bool) and arity >= 0,
                     f"{ctx}.arity must be a non-negative integer")

        kind = node["kind"]
        if kind not in catalog:
            msg = f"{ctx}: unknown block kind '{kind}'"
            if strict:
                raise SchemaError(msg)
            logger.warning("%s (it will compile to nothing)", msg)

    # ── Bindings and chains ─────────────────────────────────────────────────

    for i, binding in enumerate(data.get("bindings", [])):
        ctx = f"bindings[{i}]"
        _require(isinstance(binding, dict), f"{ctx}: each binding must be a JSON object")
        _require_keys(binding, ["consumer", "socket", "producer"], ctx)
        _require_strings(binding, ["consumer", "socket", "producer"], ctx)
        for key in ("consumer", "producer"):
            _require(binding[key] in node_ids, f"{ctx}: {key} '{binding[key]}' not found in nodes")

    for i, link in enumerate(data.get("next", [])):
        ctx = f"next[{i}]"
        _require(isinstance(link, dict), f"{ctx}: each link must be a JSON object")
        _require_keys(link, ["from", "to"], ctx)
        _require_strings(link, ["from", "to"], ctx)
        for key in ("from", "to"):
            _require(link[key] in node_ids, f"{ctx}: {key} '{link[key]}' not found in nodes")

    seen: set[str] = set()
    for i, node_id in enumerate(data["program"]):
        _require(isinstance(node_id, str), f"program[{i}] must be a string")
        _require(node_id in node_ids, f"program[{i}]: '{node_id}' not found in nodes")
        _require(node_id not in seen, f"program[{i}]: '{node_id}' listed twice")
        seen.add(node_id)


__all__ = ["SchemaError", "validate"]
