"""Runtime settings for the compiler, CLI and HTTP service.

All values read from environment variables with defaults. A ``.env`` file in
the working directory is loaded first so local overrides need no ``export``.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()


def _int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _str(key: str, default: str) -> str:
    return os.getenv(key, default)


def _bool(key: str, default: bool) -> bool:
    return os.getenv(key, str(default)).strip().lower() in ("1", "true", "yes", "on")


# =====================================================================
# Code generation
# =====================================================================

# One indentation step in generated Python
INDENT = _str("BLOCKGRAPH_INDENT", "  ")

# Reject graph documents that use block kinds the catalog does not know
STRICT_SCHEMA = _bool("BLOCKGRAPH_STRICT_SCHEMA", False)


# =====================================================================
# Logging
# =====================================================================

LOG_LEVEL = _str("BLOCKGRAPH_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
    )


# =====================================================================
# HTTP service
# =====================================================================

HOST = _str("BLOCKGRAPH_HOST", "127.0.0.1")
PORT = _int("BLOCKGRAPH_PORT", 8000)
CORS_ORIGINS = [o.strip() for o in _str("BLOCKGRAPH_CORS_ORIGINS", "*").split(",") if o.strip()]
