"""
FastAPI service exposing the block compiler.

Start with:
    python -m blockgraph.server.main

Or via uvicorn directly:
    uvicorn blockgraph.server.main:app --port 8000 --reload
"""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blockgraph import settings
from blockgraph.server.routes.compile_routes import router

settings.configure_logging()

# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title="Blockgraph Compiler API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "blockgraph.server.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
    )
