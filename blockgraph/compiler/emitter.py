"""
Compiler entry point.

    rebuild repository  ->  emit top-level statements  ->  assemble preamble

Output layout::

    <sorted import lines>

    <helper functions, first-seen order>

    <program body>
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.Errors import CompileError
from ..core.GraphPrimitives import Graph
from ..noderegistry.NodeRegistry import Catalog, default_catalog
from .context import CompileContext
from .engine import CodeGenerator
from .writer import tidy


logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    source: str
    diagnostics: List[CompileError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


class Compiler:
    def __init__(self, catalog: Optional[Catalog] = None):
        self.catalog = catalog

    def compile(self, graph: Graph) -> CompileResult:
        catalog = next((c for c in (self.catalog, graph.catalog) if c is not None), None)
        if catalog is None:
            catalog = default_catalog()
        ctx = CompileContext(graph=graph, catalog=catalog)

        # variable names claim their identifiers before any generated name
        for name in graph.variable_names():
            ctx.names.get_name(name)

        ctx.repository.rebuild(ctx)

        engine = CodeGenerator(ctx)
        body = engine.program_to_code()
        source = tidy(ctx.preamble.assemble(body))

        result = CompileResult(source, list(ctx.diagnostics))
        logger.debug("Compiled '%s': %d nodes, %d preamble entries, %d diagnostics",
                    graph.name, len(graph), len(ctx.preamble), len(result.diagnostics))
        ctx.reset()
        return result


def compile_graph(graph: Graph, catalog: Optional[Catalog] = None) -> str:
    """Compile ``graph`` into Python source. Never raises for graph content."""
    return Compiler(catalog).compile(graph).source
