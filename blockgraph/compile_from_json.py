"""
compile_from_json.py: CLI for the block program compiler
=====================================================
Compiles a graph document (see compiler/schema.py) into a Python script.

Usage
-----
    blockgraph-compile <graph.json> [options]

Options
-------
    -o, --out   <file>   Write the generated source here (default: stdout)
    --strict             Treat unknown block kinds as errors (default: warnings only)
    --diagnostics        Print compile diagnostics to stderr, one JSON object per line
    --log-level <level>  Logging level (default: BLOCKGRAPH_LOG_LEVEL or INFO)

Examples
--------
    # Print the generated source:
    blockgraph-compile graphs/iris.json

    # Write it to a file and list anything that compiled to nothing:
    blockgraph-compile graphs/iris.json -o iris.py --diagnostics
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from . import settings
from .compiler import Compiler, SchemaError, load_graph


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="blockgraph-compile",
        description="Compile a block graph document to a Python script.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument(
        "graph_json",
        metavar="graph.json",
        help="Path to the graph document to compile.",
    )
    p.add_argument(
        "-o", "--out",
        metavar="FILE",
        default=None,
        help="Output file for the generated source (default: print to stdout).",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        default=settings.STRICT_SCHEMA,
        help="Treat unknown block kinds as errors rather than warnings.",
    )
    p.add_argument(
        "--diagnostics",
        action="store_true",
        help="Print compile diagnostics to stderr as JSON lines.",
    )
    p.add_argument(
        "--log-level",
        metavar="LEVEL",
        default=settings.LOG_LEVEL,
        help=f"Logging level (default: {settings.LOG_LEVEL}).",
    )
    return p


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings.configure_logging(args.log_level)

    json_path = Path(args.graph_json)
    if not json_path.exists():
        print(f"[error] File not found: {json_path}", file=sys.stderr)
        return 1

    # ── Load and validate ────────────────────────────────────────────────────
    try:
        with json_path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        graph = load_graph(data, strict=args.strict)
    except json.JSONDecodeError as exc:
        print(f"[error] {json_path} is not valid JSON: {exc}", file=sys.stderr)
        return 1
    except SchemaError as exc:
        print(f"[error] Schema validation failed: {exc}", file=sys.stderr)
        return 1

    logger.info("graph %s: %d nodes, %d statements", graph.name, len(graph), len(graph.program))

    # ── Compile ──────────────────────────────────────────────────────────────
    result = Compiler().compile(graph)

    if args.diagnostics:
        for error in result.diagnostics:
            print(json.dumps(error.to_dict()), file=sys.stderr)

    # ── Output ───────────────────────────────────────────────────────────────
    if args.out is None:
        sys.stdout.write(result.source)
        return 0

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(result.source, encoding="utf-8")
    logger.info("wrote %s (%d diagnostics)", out_path, len(result.diagnostics))
    return 0


if __name__ == "__main__":
    sys.exit(main())
