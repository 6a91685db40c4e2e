"""
Variable Type Repository
========================
Maps a variable name to the signature of the value assigned to it, so a
block that only sees ``features`` as a bare name can still tell whether the
value came from a model, an aggregate or a literal list.

Rebuilt from scratch at the start of every compile pass with one flat scan
over the reachable nodes; the last assignment to a name wins.
"""
from __future__ import annotations

import json
import logging
from typing import Dict, Iterator, NamedTuple, Optional, TYPE_CHECKING

from ..core.GraphPrimitives import VARIABLE_FIELD
from ..core.Types import KindTag, Order

if TYPE_CHECKING:
    from .context import CompileContext


logger = logging.getLogger(__name__)

ASSIGNED_SOCKET = "VALUE"


class Signature(NamedTuple):
    label: str
    features: str
    kind: str


class VariableTypeRepository:
    def __init__(self):
        self._entries: Dict[str, Signature] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def lookup(self, name: str) -> Optional[Signature]:
        return self._entries.get(name)

    def record(self, name: str, signature: Signature) -> None:
        if name in self._entries:
            logger.debug("Repository: '%s' reassigned, %s replaces %s",
                         name, signature.kind, self._entries[name].kind)
        self._entries[name] = signature

    def clear(self) -> None:
        self._entries.clear()

    def rebuild(self, ctx: "CompileContext") -> None:
        """
        Scan every reachable node plugged into an assignment and record the
        signature of the tagged ones. Operand text is produced by a scratch
        engine whose preamble and generated names are thrown away.
        """
        from .engine import CodeGenerator

        self.clear()
        scratch = CodeGenerator(ctx.scratch())
        graph = ctx.graph

        for node in graph.walk():
            parent = graph.parent_of(node)
            if parent is None:
                continue
            assignment, socket_name = parent
            if socket_name != ASSIGNED_SOCKET or not assignment.hasTag(KindTag.ASSIGNMENT):
                continue
            raw_name = assignment.field(VARIABLE_FIELD)
            if not raw_name:
                continue
            name = ctx.names.get_name(raw_name)

            if node.hasTag(KindTag.MODEL_LIKE):
                label = scratch.value_to_code(node, "label", Order.MEMBER) or "[]"
                features = scratch.value_to_code(node, "features", Order.MEMBER) or "[]"
                self.record(name, Signature(label, features, node.kind))
            elif node.hasTag(KindTag.DYNAMIC_COLLECTION):
                elements = [
                    scratch.value_to_code(node, socket.name, Order.NONE) or "null"
                    for socket in node.item_sockets()
                ]
                self.record(name, Signature("", json.dumps(elements), node.kind))
            elif node.hasTag(KindTag.AGGREGATE_LIKE):
                self.record(name, Signature("", "", node.kind))

        logger.debug("Repository: %d signatures", len(self._entries))
