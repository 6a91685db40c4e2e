"""
Block Program Compiler
======================
Compiles a block Graph into a single Python source file (pandas,
scikit-learn, seaborn, ...).

Pipeline:
    Graph  ->  [repository.rebuild]        ->  variable signatures
    Graph  ->  [engine.program_to_code]    ->  program body
    body   ->  [preamble.assemble + tidy]  ->  Python source str

Public API
----------
    from blockgraph.compiler import compile_graph, load_graph

    graph = load_graph(json.load(open("graph.json")))
    source = compile_graph(graph)
    # or, to keep the diagnostics
    result = Compiler().compile(graph)
    for error in result.diagnostics:
        print(error.to_dict())
"""

from __future__ import annotations

from .context import CompileContext, NameDB
from .deserialiser import dump_graph, load_graph, load_graph_file
from .emitter import CompileResult, Compiler, compile_graph
from .engine import BlockContext, CodeGenerator, Fragment
from .repository import Signature, VariableTypeRepository
from .schema import SchemaError, validate


__all__ = [
    "BlockContext",
    "CodeGenerator",
    "CompileContext",
    "CompileResult",
    "Compiler",
    "Fragment",
    "NameDB",
    "SchemaError",
    "Signature",
    "VariableTypeRepository",
    "compile_graph",
    "dump_graph",
    "load_graph",
    "load_graph_file",
    "validate",
]
