from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Set, Tuple, Union, TYPE_CHECKING
from collections import defaultdict
import logging

from .Errors import AmbiguousProvenanceError
from .Node import Node
from .Types import KindTag

if TYPE_CHECKING:
    from ..noderegistry.NodeRegistry import Catalog


logger = logging.getLogger(__name__)

NEXT_SOCKET = "next"
OUTPUT_PORT = "output"
PREVIOUS_PORT = "previous"
VARIABLE_FIELD = "VAR"

NodeRef = Union[Node, str]


# A binding runs from the producer (child) to the consumer's named socket.
# Statement chains use the same record: the following block is the producer
# plugged into the "next" socket of the block before it.
class Edge(NamedTuple):
    from_node_id: str
    from_port_name: str
    to_node_id: str
    to_port_name: str

    edge_type: str = "value"  # "value", "statement", "next"

    def __repr__(self):
        return f"Edge({self.from_node_id}.{self.from_port_name} -> {self.to_node_id}.{self.to_port_name})"


class Graph:
    """
    Arena holding every node instance and binding of one program.

    Each socket holds at most one binding and each node is plugged into at
    most one parent, so the indexes below are single valued. ``program`` is
    the ordered list of top-level statement roots; anything not reachable from
    it does not exist as far as the compiler is concerned.
    """

    def __init__(self, catalog: Optional["Catalog"] = None, name: str = "program"):
        self.name = name
        self.catalog = catalog
        self.nodes: Dict[str, Node] = {}
        self.edges: List[Edge] = []
        self.program: List[str] = []

        self.incoming_edges: Dict[Tuple[str, str], Edge] = {}  # (consumer, socket) -> edge
        self.outgoing_edges: Dict[str, Edge] = {}              # producer -> edge

        # assignment producer index: raw variable name -> assignment node ids
        self._assignments: Dict[str, List[str]] = defaultdict(list)
        self._positions: Optional[Dict[str, int]] = None

    def __len__(self):
        return len(self.nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.nodes

    # ── Nodes ─────────────────────────────────────────────────────────────────

    def create_node(self, kind: str, node_id: Optional[str] = None,
                    fields: Optional[Dict[str, Any]] = None) -> Node:
        schema = self.catalog.schema_of(kind) if self.catalog is not None else None
        if schema is None:
            logger.warning("Graph: creating node of unregistered kind '%s'", kind)
        node = Node(kind, node_id=node_id, schema=schema, fields=fields)
        return self.add_node(node)

    def add_node(self, node: Node) -> Node:
        if node.id in self.nodes:
            raise ValueError(f"Node with id '{node.id}' already exists in the graph")
        self.nodes[node.id] = node
        if self._isAssignment(node):
            self._index_assignment(node.id, node.field(VARIABLE_FIELD))
        logger.debug("Graph: added %r", node)
        return node

    def remove_node(self, node: NodeRef) -> Node:
        node_id = self._id(node)
        removed = self.get_node(node_id)
        for edge in [e for e in self.edges if node_id in (e.from_node_id, e.to_node_id)]:
            self._drop_edge(edge)
        if node_id in self.program:
            self.program.remove(node_id)
        if self._isAssignment(removed):
            self._unindex_assignment(node_id, removed.field(VARIABLE_FIELD))
        del self.nodes[node_id]
        self._invalidate()
        return removed

    def get_node(self, node_id: str) -> Node:
        node = self.nodes.get(node_id)
        if node is None:
            raise KeyError(f"Node '{node_id}' not found")
        return node

    def find_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def set_field(self, node: NodeRef, name: str, value: Any) -> None:
        node = self.get_node(self._id(node))
        if self._isAssignment(node) and name == VARIABLE_FIELD:
            self._unindex_assignment(node.id, node.field(VARIABLE_FIELD))
            self._index_assignment(node.id, value)
        node.fields[name] = value

    # ── Bindings ──────────────────────────────────────────────────────────────

    def connect(self, consumer: NodeRef, socket_name: str, producer: NodeRef) -> Edge:
        consumer = self.get_node(self._id(consumer))
        producer = self.get_node(self._id(producer))

        if consumer.id == producer.id:
            raise ValueError(f"Cannot bind {consumer!r} to itself")

        if socket_name == NEXT_SOCKET:
            if consumer.schema is not None and not consumer.isStatement():
                raise ValueError(f"{consumer!r} is not a statement block and has no 'next'")
            edge_type = "next"
            statement = True
        else:
            socket = consumer.get_socket(socket_name)
            if socket is None:
                raise ValueError(f"{consumer!r} has no socket '{socket_name}'")
            if socket.isPlaceholder():
                raise ValueError(f"Socket '{socket_name}' on {consumer!r} is a placeholder")
            statement = socket.isStatement()
            edge_type = "statement" if statement else "value"

        if producer.schema is not None and producer.isStatement() != statement:
            expected = "statement" if statement else "value"
            raise ValueError(f"{producer!r} cannot be plugged into {expected} socket '{socket_name}'")
        if (consumer.id, socket_name) in self.incoming_edges:
            raise ValueError(f"Socket '{socket_name}' on {consumer!r} is already connected")
        if producer.id in self.outgoing_edges:
            raise ValueError(f"{producer!r} is already connected to another block")
        if self._is_ancestor(producer.id, consumer.id):
            raise ValueError(f"Binding {producer!r} into {consumer!r} would create a cycle")

        if producer.id in self.program:
            self.program.remove(producer.id)

        port = PREVIOUS_PORT if statement else OUTPUT_PORT
        edge = Edge(producer.id, port, consumer.id, socket_name, edge_type)
        self.edges.append(edge)
        self.incoming_edges[(consumer.id, socket_name)] = edge
        self.outgoing_edges[producer.id] = edge
        self._invalidate()
        return edge

    def disconnect(self, consumer: NodeRef, socket_name: str) -> Optional[str]:
        """Drop the binding on a socket and return the producer id it held."""
        edge = self.incoming_edges.get((self._id(consumer), socket_name))
        if edge is None:
            return None
        self._drop_edge(edge)
        self._invalidate()
        return edge.from_node_id

    def chain(self, prev: NodeRef, nxt: NodeRef) -> Edge:
        return self.connect(prev, NEXT_SOCKET, nxt)

    def unchain(self, prev: NodeRef) -> Optional[str]:
        return self.disconnect(prev, NEXT_SOCKET)

    def get_target_id(self, node: NodeRef, socket_name: str) -> Optional[str]:
        edge = self.incoming_edges.get((self._id(node), socket_name))
        return edge.from_node_id if edge else None

    def get_target(self, node: NodeRef, socket_name: str) -> Optional[Node]:
        target_id = self.get_target_id(node, socket_name)
        return self.nodes.get(target_id) if target_id else None

    def next_of(self, node: NodeRef) -> Optional[Node]:
        return self.get_target(node, NEXT_SOCKET)

    def parent_of(self, node: NodeRef) -> Optional[Tuple[Node, str]]:
        edge = self.outgoing_edges.get(self._id(node))
        if edge is None:
            return None
        return self.nodes[edge.to_node_id], edge.to_port_name

    # ── Program ───────────────────────────────────────────────────────────────

    def add_statement(self, node: NodeRef, index: Optional[int] = None) -> None:
        node_id = self.get_node(self._id(node)).id
        if node_id in self.outgoing_edges:
            raise ValueError(f"Node '{node_id}' is plugged into a parent and cannot be a root")
        if node_id in self.program:
            raise ValueError(f"Node '{node_id}' is already a top-level statement")
        if index is None:
            self.program.append(node_id)
        else:
            self.program.insert(index, node_id)
        self._invalidate()

    def remove_statement(self, node: NodeRef) -> None:
        self.program.remove(self._id(node))
        self._invalidate()

    def roots(self) -> List[Node]:
        return [self.nodes[node_id] for node_id in self.program]

    def walk(self) -> Iterator[Node]:
        """Reachable nodes in program order: a node, its sockets, then its next."""
        seen: Set[str] = set()
        for root in self.roots():
            yield from self._walk(root, seen)

    def _walk(self, node: Node, seen: Set[str]) -> Iterator[Node]:
        while node is not None and node.id not in seen:
            seen.add(node.id)
            yield node
            for socket in node.input_sockets():
                child = self.get_target(node, socket.name)
                if child is not None:
                    yield from self._walk(child, seen)
            node = self.next_of(node)

    def isReachable(self, node: NodeRef) -> bool:
        return self._id(node) in self._program_positions()

    def variable_names(self) -> List[str]:
        names: List[str] = []
        for node in self.walk():
            if node.schema is not None and any(f.name == VARIABLE_FIELD for f in node.schema.fields):
                name = node.field(VARIABLE_FIELD)
                if name and name not in names:
                    names.append(name)
        return names

    # ── Assignment producers ──────────────────────────────────────────────────

    def assignments_to(self, name: str) -> List[Node]:
        """Reachable assignments to ``name`` in program order."""
        positions = self._program_positions()
        candidates = [nid for nid in self._assignments.get(name, []) if nid in positions]
        candidates.sort(key=positions.__getitem__)
        return [self.nodes[nid] for nid in candidates]

    def resolve_producer(self, name: str) -> Optional[Node]:
        """
        The assignment statement that produces ``name``.

        Raises AmbiguousProvenanceError when several reachable assignments
        share the name; its ``candidates`` are in program order.
        """
        assignments = self.assignments_to(name)
        if not assignments:
            return None
        if len(assignments) > 1:
            raise AmbiguousProvenanceError(name, [n.id for n in assignments])
        return assignments[0]

    # ── Internals ─────────────────────────────────────────────────────────────

    @staticmethod
    def _id(node: NodeRef) -> str:
        return node if isinstance(node, str) else node.id

    @staticmethod
    def _isAssignment(node: Node) -> bool:
        return node.hasTag(KindTag.ASSIGNMENT)

    def _index_assignment(self, node_id: str, name: Optional[str]) -> None:
        if name:
            self._assignments[name].append(node_id)

    def _unindex_assignment(self, node_id: str, name: Optional[str]) -> None:
        ids = self._assignments.get(name)
        if ids and node_id in ids:
            ids.remove(node_id)
            if not ids:
                del self._assignments[name]

    def _drop_edge(self, edge: Edge) -> None:
        self.edges.remove(edge)
        self.incoming_edges.pop((edge.to_node_id, edge.to_port_name), None)
        self.outgoing_edges.pop(edge.from_node_id, None)

    def _is_ancestor(self, candidate: str, node_id: str) -> bool:
        current = node_id
        while current is not None:
            if current == candidate:
                return True
            edge = self.outgoing_edges.get(current)
            current = edge.to_node_id if edge else None
        return False

    def _invalidate(self) -> None:
        self._positions = None

    def _program_positions(self) -> Dict[str, int]:
        if self._positions is None:
            self._positions = {node.id: i for i, node in enumerate(self.walk())}
        return self._positions
