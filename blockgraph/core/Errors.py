from typing import List, Optional


class CompileError(Exception):
    """Base class for every recoverable compile-time condition."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.node_id = node_id

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "node_id": self.node_id,
            "message": self.message,
        }


class UnknownKindError(CompileError, KeyError):
    def __init__(self, kind: str, node_id: Optional[str] = None):
        super().__init__(f"unknown block kind '{kind}'", node_id)
        self.kind = kind

    def __str__(self):
        return self.message


class MissingRequiredSocketError(CompileError):
    def __init__(self, kind: str, socket: str, node_id: Optional[str] = None):
        super().__init__(f"{kind}: required socket '{socket}' is not connected", node_id)
        self.kind = kind
        self.socket = socket


class ArityDesyncError(CompileError):
    def __init__(self, expected: int, live: int, node_id: Optional[str] = None):
        super().__init__(
            f"persisted arity {expected} disagrees with {live} live sockets", node_id)
        self.expected = expected
        self.live = live


class AmbiguousProvenanceError(CompileError):
    def __init__(self, name: str, candidates: List[str]):
        super().__init__(
            f"variable '{name}' is assigned by {len(candidates)} statements")
        self.name = name
        # assignment node ids in program order, the last one wins
        self.candidates = candidates


class GeneratorFault(CompileError):
    def __init__(self, kind: str, cause: BaseException, node_id: Optional[str] = None):
        super().__init__(f"{kind}: generator failed: {cause!r}", node_id)
        self.kind = kind
        self.cause = cause
