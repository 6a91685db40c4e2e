from typing import Optional, List, Dict, Any, TYPE_CHECKING
import logging
import uuid

from .NodePort import EMPTY_SOCKET, Socket, SocketSpec, placeholder_socket
from .Types import KindTag, NodeShape

if TYPE_CHECKING:
    from .NodePort import BlockSchema


# Get a logger for this module
logger = logging.getLogger(__name__)


class Node:
    """
    One block instance: a kind, literal field values and the live sockets the
    schema (and, for dynamic kinds, the current arity) calls for.

    ``arity`` is the persisted item count. Only the Mutator changes it together
    with the live ``ADDi`` sockets; a loader may assign it directly and then ask
    the Mutator to reconcile.
    """

    def __init__(self,
                 kind: str,
                 node_id: Optional[str] = None,
                 schema: Optional["BlockSchema"] = None,
                 fields: Optional[Dict[str, Any]] = None):
        self.id = node_id or uuid.uuid4().hex
        self.kind = kind
        self.schema = schema
        self.fields: Dict[str, Any] = {}
        self.sockets: Dict[str, Socket] = {}
        self.arity: Optional[int] = None

        if schema is not None:
            for spec in schema.fields:
                self.fields[spec.name] = spec.default
            for spec in schema.sockets:
                self.sockets[spec.name] = Socket(self.id, spec)
            if schema.dynamic is not None:
                self.arity = 0
                self.sockets[EMPTY_SOCKET] = placeholder_socket(self.id)
                for _ in range(schema.dynamic.initial):
                    self._append_item()

        if fields:
            self.fields.update(fields)

    def __repr__(self):
        return f"Node({self.kind}:{self.id})"

    # ── Classification ────────────────────────────────────────────────────────

    def isDynamic(self) -> bool:
        return self.schema is not None and self.schema.dynamic is not None

    def isStatement(self) -> bool:
        return self.schema is not None and self.schema.shape == NodeShape.STATEMENT

    def hasTag(self, tag: KindTag) -> bool:
        return self.schema is not None and self.schema.has(tag)

    # ── Fields ────────────────────────────────────────────────────────────────

    def field(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def item_field(self, name: str, index: int, default: Any = None) -> Any:
        return self.fields.get(f"{name}{index}", default)

    # ── Sockets ───────────────────────────────────────────────────────────────

    def get_socket(self, name: str) -> Optional[Socket]:
        return self.sockets.get(name)

    def add_socket(self, spec: SocketSpec) -> Socket:
        """Attach an ad-hoc socket, used for kinds the catalog does not know."""
        socket = Socket(self.id, spec)
        self.sockets[spec.name] = socket
        return socket

    def input_sockets(self) -> List[Socket]:
        return [s for s in self.sockets.values() if not s.isPlaceholder()]

    def value_sockets(self) -> List[Socket]:
        return [s for s in self.input_sockets() if not s.isStatement()]

    def item_sockets(self) -> List[Socket]:
        items = [s for s in self.sockets.values() if s.isDynamic()]
        return sorted(items, key=lambda s: s.index)

    def item_count(self) -> int:
        return len(self.item_sockets())

    def item_socket_name(self, index: int) -> str:
        return self.schema.dynamic.socket_name(index)

    # ── Low level arity steps, driven by Mutator ──────────────────────────────

    def _append_item(self) -> Socket:
        dynamic = self.schema.dynamic
        index = self.item_count()
        socket = Socket(self.id, dynamic.item_spec(index), index=index)
        self.sockets.pop(EMPTY_SOCKET, None)
        self.sockets[socket.name] = socket
        for field_name, spec in dynamic.fields_for(index):
            self.fields.setdefault(field_name, spec.default_for(index))
        self.arity = index + 1
        return socket

    def _pop_item(self) -> Socket:
        dynamic = self.schema.dynamic
        index = self.item_count() - 1
        socket = self.sockets.pop(dynamic.socket_name(index))
        for field_name, _ in dynamic.fields_for(index):
            self.fields.pop(field_name, None)
        self.arity = index
        if index == 0:
            self.sockets[EMPTY_SOCKET] = placeholder_socket(self.id)
        return socket
