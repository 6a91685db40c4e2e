"""
Node Type Catalog: block kind -> (schema, generator).

Template modules register against the bundled catalog with the ``block``
decorator. ``default_catalog()`` imports them once and hands out a frozen
copy whose tag index is computed up front, so the engine asks
``schema.has(KindTag.MODEL_LIKE)`` rather than inspecting kind strings.
"""
from __future__ import annotations

import functools
import importlib
import logging
from typing import Callable, Dict, FrozenSet, Iterator, List, NamedTuple, Optional, Tuple, Union, TYPE_CHECKING

from ..core.Errors import UnknownKindError
from ..core.NodePort import BlockSchema
from ..core.Types import KindTag

if TYPE_CHECKING:
    from ..compiler.engine import BlockContext


logger = logging.getLogger(__name__)

Generator = Callable[["BlockContext"], Union[str, Tuple[str, float]]]

TEMPLATE_MODULES = (
    "blockgraph.compiler.templates.builtins",
    "blockgraph.compiler.templates.dataframe",
    "blockgraph.compiler.templates.models",
    "blockgraph.compiler.templates.metrics",
    "blockgraph.compiler.templates.charts",
)


class CatalogEntry(NamedTuple):
    kind: str
    schema: BlockSchema
    generator: Generator


class Catalog:
    def __init__(self, name: str = "catalog"):
        self.name = name
        self._entries: Dict[str, CatalogEntry] = {}
        self._by_tag: Dict[KindTag, FrozenSet[str]] = {}
        self._frozen = False

    def __contains__(self, kind: str) -> bool:
        return kind in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ── Registration ──────────────────────────────────────────────────────────

    def register(self, kind: str, schema: BlockSchema, generator: Generator) -> None:
        if self._frozen:
            raise ValueError(f"Catalog '{self.name}' is frozen; cannot register '{kind}'")
        if kind in self._entries:
            raise ValueError(f"Block kind '{kind}' is already registered.")
        self._entries[kind] = CatalogEntry(kind, schema, generator)

    def block(self, kind: str, schema: BlockSchema) -> Callable[[Generator], Generator]:
        """Decorator to register a generator function under ``kind``."""
        def decorator(generator: Generator) -> Generator:
            self.register(kind, schema, generator)
            return generator
        return decorator

    def copy(self, name: Optional[str] = None) -> "Catalog":
        """An unfrozen copy, e.g. to add project specific blocks."""
        clone = Catalog(name or self.name)
        clone._entries = dict(self._entries)
        return clone

    def freeze(self) -> "Catalog":
        by_tag: Dict[KindTag, set] = {tag: set() for tag in KindTag}
        for entry in self._entries.values():
            for tag in entry.schema.tags:
                by_tag[tag].add(entry.kind)
        self._by_tag = {tag: frozenset(kinds) for tag, kinds in by_tag.items()}
        self._frozen = True
        logger.debug("Catalog '%s' frozen with %d kinds", self.name, len(self._entries))
        return self

    # ── Lookup ────────────────────────────────────────────────────────────────

    def resolve(self, kind: str) -> Tuple[BlockSchema, Generator]:
        entry = self._entries.get(kind)
        if entry is None:
            raise UnknownKindError(kind)
        return entry.schema, entry.generator

    def schema_of(self, kind: str) -> Optional[BlockSchema]:
        entry = self._entries.get(kind)
        return entry.schema if entry else None

    def kinds(self) -> List[str]:
        return sorted(self._entries)

    def kinds_tagged(self, tag: KindTag) -> FrozenSet[str]:
        if not self._frozen:
            return frozenset(e.kind for e in self._entries.values() if tag in e.schema.tags)
        return self._by_tag.get(tag, frozenset())


# Bundled templates register here as a side effect of being imported.
TEMPLATES = Catalog("bundled")
block = TEMPLATES.block


@functools.lru_cache(maxsize=None)
def default_catalog() -> Catalog:
    for module in TEMPLATE_MODULES:
        importlib.import_module(module)
    return TEMPLATES.copy("default").freeze()
