"""
Blockgraph: compiles block-based visual programs into Python source.

    from blockgraph import Graph, compile_graph, default_catalog

    graph = Graph(default_catalog())
    ...
    print(compile_graph(graph))
"""

from .compiler import Compiler, CompileResult, compile_graph, load_graph
from .core import Graph, Node
from .noderegistry import Catalog, default_catalog

__all__ = [
    "Catalog",
    "CompileResult",
    "Compiler",
    "Graph",
    "Node",
    "compile_graph",
    "default_catalog",
    "load_graph",
]
