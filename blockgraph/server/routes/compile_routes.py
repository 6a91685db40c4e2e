"""
Compile REST routes.

All routes are mounted under /api by main.py.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ... import settings
from ...compiler import Compiler, SchemaError, load_graph
from ...noderegistry import default_catalog


logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request / response bodies ─────────────────────────────────────────────────

class NodeBody(BaseModel):
    id: str
    kind: str
    fields: Dict[str, Any] = Field(default_factory=dict)
    arity: Optional[int] = None


class BindingBody(BaseModel):
    consumer: str
    socket: str
    producer: str


class NextBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str


class GraphBody(BaseModel):
    graph_name: str = "program"
    nodes: List[NodeBody] = Field(default_factory=list)
    bindings: List[BindingBody] = Field(default_factory=list)
    next: List[NextBody] = Field(default_factory=list)
    program: List[str] = Field(default_factory=list)


class CompileBody(GraphBody):
    strict: bool = settings.STRICT_SCHEMA


class CompileResponse(BaseModel):
    source: str
    diagnostics: List[Dict[str, Any]]


# ── GET /blocks ───────────────────────────────────────────────────────────────

@router.get("/blocks")
async def list_blocks() -> List[Dict[str, Any]]:
    catalog = default_catalog()
    return [
        {"kind": entry.kind, "description": entry.schema.description, **entry.schema.to_dict()}
        for entry in sorted(catalog, key=lambda e: e.kind)
    ]


# ── POST /compile ─────────────────────────────────────────────────────────────

@router.post("/compile", response_model=CompileResponse)
async def compile_program(body: CompileBody) -> Dict[str, Any]:
    document = body.model_dump(by_alias=True, exclude={"strict"})
    try:
        graph = load_graph(document, strict=body.strict)
    except SchemaError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    result = Compiler().compile(graph)
    logger.info("compiled '%s': %d diagnostics", graph.name, len(result.diagnostics))
    return {
        "source": result.source,
        "diagnostics": [error.to_dict() for error in result.diagnostics],
    }
