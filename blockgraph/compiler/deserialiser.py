"""
Graph document deserialiser
===========================
Turns a graph document (see schema.py) into a live Graph, and back.

    graph.json  ->  [schema.validate]  ->  [load_graph]  ->  Graph
    Graph       ->  [dump_graph]       ->  dict

Dynamic blocks are created with the catalog's initial arity; the persisted
``arity`` is then assigned and replayed through ``Mutator.reconcile`` so the
live ``ADDi`` sockets match before any binding is restored. Kinds the catalog
does not know get one ad-hoc socket per binding that targets them, which keeps
their subtree addressable even though it compiles to nothing.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..core import Mutator
from ..core.GraphPrimitives import Graph, NEXT_SOCKET
from ..core.NodePort import SocketSpec
from ..noderegistry.NodeRegistry import Catalog, default_catalog
from .schema import SchemaError, validate


logger = logging.getLogger(__name__)


def load_graph(data: Dict[str, Any], catalog: Optional[Catalog] = None, *,
               strict: bool = False) -> Graph:
    """
    Build a Graph from a parsed graph document.

    Raises:
        SchemaError: If the document is malformed or one of its bindings
                     breaks a graph invariant (occupied socket, cycle, ...).
    """
    if catalog is None:
        catalog = default_catalog()
    validate(data, strict=strict, catalog=catalog)

    graph = Graph(catalog, name=data["graph_name"])
    bindings = data.get("bindings", [])

    for entry in data["nodes"]:
        node = graph.create_node(entry["kind"], node_id=entry["id"], fields=entry.get("fields"))
        arity = entry.get("arity")
        if arity is not None and node.isDynamic():
            node.arity = arity
            Mutator.reconcile(graph, node)

    # unknown kinds: one socket per binding, shaped like its producer
    for binding in bindings:
        consumer = graph.get_node(binding["consumer"])
        socket = binding["socket"]
        if consumer.schema is None and socket != NEXT_SOCKET and consumer.get_socket(socket) is None:
            producer = graph.get_node(binding["producer"])
            consumer.add_socket(SocketSpec(socket, statement=producer.isStatement()))

    try:
        for binding in bindings:
            if binding["socket"] == NEXT_SOCKET:
                graph.chain(binding["consumer"], binding["producer"])
            else:
                graph.connect(binding["consumer"], binding["socket"], binding["producer"])
        for link in data.get("next", []):
            graph.chain(link["from"], link["to"])
        for node_id in data["program"]:
            graph.add_statement(node_id)
    except ValueError as exc:
        raise SchemaError(f"graph '{graph.name}': {exc}") from exc

    logger.debug("Loaded graph '%s': %d nodes, %d bindings, %d statements",
                 graph.name, len(graph), len(graph.edges), len(graph.program))
    return graph


def load_graph_file(path: Union[str, Path], catalog: Optional[Catalog] = None, *,
                    strict: bool = False) -> Graph:
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    return load_graph(data, catalog, strict=strict)


def dump_graph(graph: Graph) -> Dict[str, Any]:
    """The graph document describing ``graph``, reachable or not."""
    nodes = []
    for node in graph.nodes.values():
        entry: Dict[str, Any] = {"id": node.id, "kind": node.kind, "fields": dict(node.fields)}
        if node.isDynamic():
            entry["arity"] = node.arity
        nodes.append(entry)

    bindings = []
    chains = []
    for edge in graph.edges:
        if edge.edge_type == "next":
            chains.append({"from": edge.to_node_id, "to": edge.from_node_id})
        else:
            bindings.append({
                "consumer": edge.to_node_id,
                "socket": edge.to_port_name,
                "producer": edge.from_node_id,
            })

    return {
        "graph_name": graph.name,
        "nodes": nodes,
        "bindings": bindings,
        "next": chains,
        "program": list(graph.program),
    }


__all__ = ["load_graph", "load_graph_file", "dump_graph"]
