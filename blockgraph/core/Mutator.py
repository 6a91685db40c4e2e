"""
Dynamic-arity protocol for blocks that expose a variable number of
homogeneous ``ADDi`` sockets.

    grow      k -> k+1   append an empty socket at index k
    shrink    k -> k-1   drop the highest socket and whatever it held
    compose   tokens     reorder / rebind to an ordered list of child ids
    reconcile            replay grow/shrink until the live socket count
                         matches the persisted arity
"""
from typing import List, Optional
import logging

from .Errors import ArityDesyncError
from .GraphPrimitives import Graph
from .Node import Node


logger = logging.getLogger(__name__)


def _require_dynamic(node: Node) -> None:
    if not node.isDynamic():
        raise ValueError(f"{node!r} does not have a dynamic number of sockets")


def grow(graph: Graph, node: Node) -> str:
    """Append one empty socket, returning its name."""
    _require_dynamic(node)
    socket = node._append_item()
    logger.debug("Mutator: %r grew to %d", node, node.arity)
    return socket.name


def shrink(graph: Graph, node: Node) -> Optional[str]:
    """
    Remove the highest-indexed socket. The binding it held is discarded and
    the producer id is returned; that subgraph stays in the graph, unreachable.
    """
    _require_dynamic(node)
    if node.item_count() == 0:
        raise ValueError(f"{node!r} has no sockets left to remove")
    name = node.item_socket_name(node.item_count() - 1)
    dropped = graph.disconnect(node, name)
    node._pop_item()
    logger.debug("Mutator: %r shrank to %d", node, node.arity)
    return dropped


def set_arity(graph: Graph, node: Node, arity: int) -> None:
    if arity < 0:
        raise ValueError(f"arity must be >= 0, got {arity}")
    _require_dynamic(node)
    while node.item_count() < arity:
        grow(graph, node)
    while node.item_count() > arity:
        shrink(graph, node)


def decompose(graph: Graph, node: Node) -> List[Optional[str]]:
    """Child tokens in socket order, None for an empty socket."""
    _require_dynamic(node)
    return [graph.get_target_id(node, socket.name) for socket in node.item_sockets()]


def _check_tokens(graph: Graph, node: Node, tokens: List[Optional[str]]) -> None:
    """Reject a token list that could not be plugged, before anything changes."""
    seen = set()
    for token in tokens:
        if token is None:
            continue
        if token in seen:
            raise ValueError(f"{node!r}: token '{token}' appears more than once")
        seen.add(token)
        if token not in graph.nodes:
            raise ValueError(f"{node!r}: token '{token}' is not a node of this graph")
        child = graph.nodes[token]
        if child.schema is not None and child.isStatement():
            raise ValueError(f"{node!r}: statement block {child!r} cannot be an item")
        parent = graph.parent_of(child)
        if parent is not None and parent[0] is not node:
            raise ValueError(f"{node!r}: {child!r} is already connected to another block")
        if parent is None and graph._is_ancestor(child.id, node.id):
            raise ValueError(f"Binding {child!r} into {node!r} would create a cycle")


def compose(graph: Graph, node: Node, tokens: List[Optional[str]]) -> None:
    """
    Rebuild the sockets to match ``tokens``. A socket keeps its binding when
    the same token sits at the same position; every other binding is released
    before arity is adjusted and the remaining tokens are plugged in order.
    """
    _require_dynamic(node)
    _check_tokens(graph, node, tokens)
    for index, socket in enumerate(node.item_sockets()):
        current = graph.get_target_id(node, socket.name)
        wanted = tokens[index] if index < len(tokens) else None
        if current is not None and current != wanted:
            graph.disconnect(node, socket.name)

    set_arity(graph, node, len(tokens))

    for index, token in enumerate(tokens):
        if token is None:
            continue
        name = node.item_socket_name(index)
        if graph.get_target_id(node, name) == token:
            continue
        graph.connect(node, name, token)


def verify(node: Node) -> None:
    live = node.item_count()
    if node.arity != live:
        raise ArityDesyncError(node.arity, live, node.id)


def reconcile(graph: Graph, node: Node) -> None:
    """Bring live sockets in line with the persisted arity."""
    if not node.isDynamic():
        return
    try:
        verify(node)
    except ArityDesyncError as exc:
        target = max(node.arity or 0, 0)
        logger.debug("Mutator: repairing %r: %s", node, exc)
        node.arity = node.item_count()
        set_arity(graph, node, target)
