"""
Code Generation Engine
======================
Recursive resolver from nodes to Python text.

    emit(node)                 -> Fragment(text, order)
    value_to_code(node, s, o)  -> text of the child in socket s, parenthesised
                                  for an outer precedence o
    statement_to_code(node, s) -> indented text of the chain in socket s
    chain(node)                -> a statement and everything after it

Children are emitted before their parent and each fragment is memoised for
the rest of the pass. Every failure below a node (unknown kind, a generator
raising) turns into an empty fragment plus a diagnostic on the context.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from ..core.Errors import (
    AmbiguousProvenanceError,
    GeneratorFault,
    MissingRequiredSocketError,
    UnknownKindError,
)
from ..core.GraphPrimitives import Graph, VARIABLE_FIELD
from ..core.Node import Node
from ..core.NodePort import BlockSchema
from ..core.Types import KindTag, NodeShape, Order
from .context import CompileContext
from .preamble import FUNCTION_NAME_PLACEHOLDER
from .repository import Signature
from .writer import prefix_lines


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fragment:
    text: str
    order: Optional[float] = None   # None for statements

    def isStatement(self) -> bool:
        return self.order is None


EMPTY_STATEMENT = Fragment("", None)
EMPTY_VALUE = Fragment("", Order.NONE)


class BlockContext:
    """The view of one node that a generator works with."""

    FN = FUNCTION_NAME_PLACEHOLDER

    def __init__(self, engine: "CodeGenerator", node: Node, schema: BlockSchema):
        self.engine = engine
        self.node = node
        self.schema = schema

    @property
    def graph(self) -> Graph:
        return self.engine.ctx.graph

    @property
    def kind(self) -> str:
        return self.node.kind

    @property
    def arity(self) -> int:
        return self.node.item_count()

    # ── Fields ────────────────────────────────────────────────────────────────

    def field(self, name: str, default: Any = None) -> Any:
        return self.node.field(name, default)

    def item_field(self, name: str, index: int, default: Any = None) -> Any:
        return self.node.item_field(name, index, default)

    # ── Sockets ───────────────────────────────────────────────────────────────

    def value(self, socket: str, order: float = Order.NONE, node: Optional[Node] = None) -> str:
        """Code for a socket, or the socket's declared default when unbound."""
        node = node or self.node
        code = self.engine.value_to_code(node, socket, order)
        if code:
            return code
        spec = node.schema.socket_spec(socket) if node.schema else None
        return spec.default if spec else ""

    def raw(self, socket: str, order: float = Order.NONE, node: Optional[Node] = None) -> str:
        """Code for a socket with no default substitution."""
        return self.engine.value_to_code(node or self.node, socket, order)

    def item_value(self, index: int, order: float = Order.NONE, node: Optional[Node] = None) -> str:
        node = node or self.node
        return self.value(node.item_socket_name(index), order, node)

    def items(self, node: Optional[Node] = None) -> List[int]:
        node = node or self.node
        return [socket.index for socket in node.item_sockets()]

    def statement(self, socket: str, indent: bool = True) -> str:
        if indent:
            return self.engine.statement_to_code(self.node, socket)
        child = self.target(socket)
        return self.engine.chain(child) if child is not None else ""

    def target(self, socket: str, node: Optional[Node] = None) -> Optional[Node]:
        return self.graph.get_target(node or self.node, socket)

    def provenance(self, socket: str, node: Optional[Node] = None) -> Optional[Node]:
        return self.engine.provenance(node or self.node, socket)

    def literal(self, socket: str, node: Optional[Node] = None) -> Optional[str]:
        """Raw literal of the bound child (e.g. a text block's TEXT)."""
        child = self.target(socket, node)
        if child is None or child.schema is None or child.schema.literal_field is None:
            return None
        value = child.field(child.schema.literal_field)
        return None if value is None else str(value)

    # ── Repository ────────────────────────────────────────────────────────────

    def signature_of(self, code: str) -> Optional[Signature]:
        return self.engine.ctx.repository.lookup(code)

    def signature(self, socket: str) -> Optional[Signature]:
        return self.signature_of(self.raw(socket))

    def produced_by(self, code: str, tag: KindTag) -> bool:
        """True when ``code`` names a variable whose producer carries ``tag``."""
        signature = self.signature_of(code)
        if signature is None:
            return False
        schema = self.engine.ctx.catalog.schema_of(signature.kind)
        return schema is not None and schema.has(tag)

    # ── Preamble and names ────────────────────────────────────────────────────

    def add_definition(self, key: str, text: str) -> None:
        self.engine.ctx.preamble.add_definition(key, text)

    def provide_function(self, desired_name: str, lines: List[str]) -> str:
        ctx = self.engine.ctx
        return ctx.preamble.provide_function(desired_name, lines, ctx.names)

    def variable(self, name: str) -> str:
        return self.engine.ctx.names.get_name(name)

    def distinct_name(self, name: str) -> str:
        return self.engine.ctx.names.get_distinct_name(name)

    @property
    def indent(self) -> str:
        return self.engine.ctx.indent

    def warn(self, message: str) -> None:
        logger.warning("%s [%s]: %s", self.kind, self.node.id, message)


def tagged(node: Optional[Node], tag: KindTag) -> bool:
    return node is not None and node.hasTag(tag)


class CodeGenerator:
    def __init__(self, ctx: CompileContext):
        self.ctx = ctx
        self._fragments: Dict[str, Fragment] = {}
        self._active: Set[str] = set()

    # ── Nodes ─────────────────────────────────────────────────────────────────

    def emit(self, node: Node) -> Fragment:
        cached = self._fragments.get(node.id)
        if cached is not None:
            return cached
        if node.id in self._active:
            logger.warning("Engine: %r re-entered while being emitted", node)
            return EMPTY_VALUE

        self._active.add(node.id)
        try:
            fragment = self._emit(node)
        finally:
            self._active.discard(node.id)
        self._fragments[node.id] = fragment
        return fragment

    def _emit(self, node: Node) -> Fragment:
        try:
            schema, generator = self.ctx.catalog.resolve(node.kind)
        except UnknownKindError as exc:
            exc.node_id = node.id
            self.ctx.report(exc)
            return EMPTY_STATEMENT if node.isStatement() else EMPTY_VALUE

        empty = EMPTY_STATEMENT if schema.shape == NodeShape.STATEMENT else EMPTY_VALUE

        for socket in node.value_sockets():
            child = self.ctx.graph.get_target(node, socket.name)
            if child is not None:
                self.emit(child)
            elif socket.spec.required:
                self.ctx.report(MissingRequiredSocketError(node.kind, socket.name, node.id))

        try:
            result = generator(BlockContext(self, node, schema))
        except Exception as exc:
            logger.debug("Engine: generator for %r raised", node, exc_info=True)
            self.ctx.report(GeneratorFault(node.kind, exc, node.id))
            return empty

        if result is None:
            return empty
        if isinstance(result, tuple):
            text, order = result
            return Fragment(text or "", float(order))
        return Fragment(result, None)

    # ── Sockets ───────────────────────────────────────────────────────────────

    def value_to_code(self, node: Node, socket_name: str, outer_order: float) -> str:
        child = self.ctx.graph.get_target(node, socket_name)
        if child is None:
            return ""
        fragment = self.emit(child)
        if not fragment.text or fragment.isStatement():
            return fragment.text
        if Order.needs_parens(outer_order, fragment.order):
            return f"({fragment.text})"
        return fragment.text

    def statement_to_code(self, node: Node, socket_name: str) -> str:
        child = self.ctx.graph.get_target(node, socket_name)
        if child is None:
            return ""
        code = self.chain(child)
        return prefix_lines(code, self.ctx.indent) if code else ""

    def chain(self, node: Node) -> str:
        parts: List[str] = []
        seen: Set[str] = set()
        current: Optional[Node] = node
        while current is not None and current.id not in seen:
            seen.add(current.id)
            fragment = self.emit(current)
            text = fragment.text
            if text and not fragment.isStatement():
                text += "\n"
            parts.append(text)
            current = self.ctx.graph.next_of(current)
        return "".join(parts)

    def program_to_code(self) -> str:
        """Top-level statements in program order, one blank line apart."""
        blocks = [code for code in (self.chain(root) for root in self.ctx.graph.roots()) if code]
        return "\n".join(blocks)

    # ── Provenance ────────────────────────────────────────────────────────────

    def provenance(self, node: Node, socket_name: str) -> Optional[Node]:
        """
        The node whose value arrives in a socket. A bare variable reference is
        followed to the value plugged into its assignment; the reference is
        returned unchanged when nothing assigns the name.
        """
        graph = self.ctx.graph
        child = graph.get_target(node, socket_name)
        if not tagged(child, KindTag.NAME_REFERENCE):
            return child
        name = child.field(VARIABLE_FIELD)
        try:
            assignment = graph.resolve_producer(name)
        except AmbiguousProvenanceError as exc:
            logger.debug("Engine: %s; using the last one", exc)
            assignment = graph.get_node(exc.candidates[-1])
        if assignment is None:
            return child
        return graph.get_target(assignment, "VALUE")
