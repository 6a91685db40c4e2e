"""
Per-compile state: the graph being read, the catalog, generated names, the
preamble, the variable repository and collected diagnostics. One context
belongs to exactly one compile call and is thrown away afterwards.
"""
from __future__ import annotations

import builtins
import copy
import keyword
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from .. import settings
from ..core.Errors import CompileError
from ..core.GraphPrimitives import Graph
from ..noderegistry.NodeRegistry import Catalog
from .preamble import PreambleCollector
from .repository import VariableTypeRepository


logger = logging.getLogger(__name__)

# Names generated code must never shadow: keywords, builtins and the aliases
# the bundled templates import.
LIBRARY_ALIASES = (
    "pd", "np", "sns", "plt", "metrics", "keras", "tensorflow", "folium",
    "display", "Source", "train_test_split", "accuracy_score",
    "confusion_matrix", "classification_report",
)
PYTHON_RESERVED = frozenset(
    list(keyword.kwlist)
    + [name for name in dir(builtins) if not name.startswith("_")]
    + list(LIBRARY_ALIASES)
)

_UNSAFE = re.compile(r"[^\w]", re.ASCII)


class NameDB:
    """Maps user-facing names to safe, distinct Python identifiers."""

    def __init__(self, reserved: Iterable[str] = PYTHON_RESERVED):
        self._reserved: Set[str] = set(reserved)
        self._db: Dict[Tuple[str, str], str] = {}
        self._used: Set[str] = set()

    @staticmethod
    def safe_name(name: str) -> str:
        if not name:
            return "unnamed"
        name = _UNSAFE.sub("_", name.replace(" ", "_"))
        if name[0].isdigit():
            name = "my_" + name
        return name

    def get_name(self, name: str, kind: str = "VARIABLE") -> str:
        key = (kind, name)
        if key not in self._db:
            self._db[key] = self.get_distinct_name(name, kind)
        return self._db[key]

    def get_distinct_name(self, name: str, kind: str = "VARIABLE") -> str:
        safe = self.safe_name(name)
        suffix = ""
        while safe + suffix in self._used or safe + suffix in self._reserved:
            suffix = str(int(suffix) + 1) if suffix else "2"
        self._used.add(safe + suffix)
        return safe + suffix

    def fork(self) -> "NameDB":
        return copy.deepcopy(self)

    def reset(self) -> None:
        self._db.clear()
        self._used.clear()


@dataclass
class CompileContext:
    graph: Graph
    catalog: Catalog
    names: NameDB = field(default_factory=NameDB)
    preamble: PreambleCollector = field(default_factory=PreambleCollector)
    repository: VariableTypeRepository = field(default_factory=VariableTypeRepository)
    diagnostics: List[CompileError] = field(default_factory=list)
    indent: str = settings.INDENT

    def scratch(self) -> "CompileContext":
        """
        A throwaway context sharing graph, catalog and repository. Names are
        forked and the preamble and diagnostics start empty, so nothing done
        with it shows up in the real output.
        """
        return CompileContext(
            graph=self.graph,
            catalog=self.catalog,
            names=self.names.fork(),
            repository=self.repository,
            indent=self.indent,
        )

    def report(self, error: CompileError) -> None:
        logger.warning("%s", error)
        self.diagnostics.append(error)

    def reset(self) -> None:
        self.names.reset()
        self.preamble.clear()
        self.repository.clear()
