"""
Socket and field schema records plus the live Socket attached to a Node.

A block schema names its fixed sockets, its literal fields and optionally one
group of dynamic sockets (``ADD0 .. ADD{n-1}``). Fields that belong to one
dynamic socket are declared on the group (``item_fields``) and stored on the
node as ``<FIELD><index>``, so a template asks for ``item_field("FIELDNAME", 2)``
instead of counting field positions.
"""
from dataclasses import dataclass
from typing import Any, FrozenSet, List, Optional, Tuple

from .Types import KindTag, NodeShape, OutputKind


EMPTY_SOCKET = "EMPTY"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    default: Any = ""
    options: Optional[Tuple[str, ...]] = None
    # item fields only: first index that carries the field, per-index defaults
    from_index: int = 0
    defaults: Tuple[Any, ...] = ()

    def default_for(self, index: Optional[int] = None) -> Any:
        if index is not None and index < len(self.defaults):
            return self.defaults[index]
        return self.default


@dataclass(frozen=True)
class SocketSpec:
    name: str
    check: Optional[OutputKind] = None   # editor hint, never enforced
    default: str = ""
    required: bool = False
    statement: bool = False


@dataclass(frozen=True)
class DynamicSockets:
    prefix: str = "ADD"
    initial: int = 3
    item_fields: Tuple[FieldSpec, ...] = ()
    item_default: str = ""
    item_check: Optional[OutputKind] = None
    item_required: bool = False

    def socket_name(self, index: int) -> str:
        return f"{self.prefix}{index}"

    def index_of(self, socket_name: str) -> Optional[int]:
        suffix = socket_name[len(self.prefix):]
        if socket_name.startswith(self.prefix) and suffix.isdigit():
            return int(suffix)
        return None

    def item_spec(self, index: int) -> SocketSpec:
        return SocketSpec(
            self.socket_name(index),
            check=self.item_check,
            default=self.item_default,
            required=self.item_required,
        )

    def fields_for(self, index: int) -> List[Tuple[str, FieldSpec]]:
        return [
            (f"{spec.name}{index}", spec)
            for spec in self.item_fields
            if index >= spec.from_index
        ]


@dataclass(frozen=True)
class BlockSchema:
    sockets: Tuple[SocketSpec, ...] = ()
    fields: Tuple[FieldSpec, ...] = ()
    dynamic: Optional[DynamicSockets] = None
    output: OutputKind = OutputKind.ANY
    tags: FrozenSet[KindTag] = frozenset()
    # field a parent may read as raw text instead of the generated code
    literal_field: Optional[str] = None
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "sockets", tuple(self.sockets))
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "tags", frozenset(self.tags))

    @property
    def shape(self) -> NodeShape:
        return NodeShape.EXPRESSION if self.output.isValue() else NodeShape.STATEMENT

    def has(self, tag: KindTag) -> bool:
        return tag in self.tags

    def socket_spec(self, name: str) -> Optional[SocketSpec]:
        for spec in self.sockets:
            if spec.name == name:
                return spec
        if self.dynamic is not None:
            index = self.dynamic.index_of(name)
            if index is not None:
                return self.dynamic.item_spec(index)
        return None

    def to_dict(self) -> dict:
        return {
            "output": self.output.value,
            "shape": self.shape.name.lower(),
            "tags": sorted(tag.value for tag in self.tags),
            "sockets": [
                {"name": s.name, "required": s.required, "statement": s.statement,
                 "check": s.check.value if s.check else None}
                for s in self.sockets
            ],
            "fields": [
                {"name": f.name, "default": f.default,
                 "options": list(f.options) if f.options else None}
                for f in self.fields
            ],
            "dynamic": None if self.dynamic is None else {
                "prefix": self.dynamic.prefix,
                "initial": self.dynamic.initial,
                "item_fields": [f.name for f in self.dynamic.item_fields],
            },
        }


class Socket:
    """A live input slot on a node. Bindings themselves live in the Graph."""

    def __init__(self, node_id: str, spec: SocketSpec,
                 index: Optional[int] = None, placeholder: bool = False):
        self.node_id = node_id
        self.spec = spec
        self.index = index
        self._placeholder = placeholder

    @property
    def name(self) -> str:
        return self.spec.name

    def isStatement(self) -> bool:
        return self.spec.statement

    def isDynamic(self) -> bool:
        return self.index is not None

    def isPlaceholder(self) -> bool:
        return self._placeholder

    def __repr__(self):
        return f"Socket({self.node_id}.{self.name})"


def placeholder_socket(node_id: str) -> Socket:
    return Socket(node_id, SocketSpec(EMPTY_SOCKET), placeholder=True)
