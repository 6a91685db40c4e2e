from .Errors import (
    AmbiguousProvenanceError,
    ArityDesyncError,
    CompileError,
    GeneratorFault,
    MissingRequiredSocketError,
    UnknownKindError,
)
from .GraphPrimitives import Edge, Graph
from .Node import Node
from .NodePort import BlockSchema, DynamicSockets, FieldSpec, Socket, SocketSpec
from .Types import KindTag, NodeShape, Order, OutputKind
