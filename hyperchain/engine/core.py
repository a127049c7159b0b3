"""Core hypergraph data structures and operations.

A directed hypergraph stored as two arenas: nodes and hyperedges are
referenced by small integer indices issued in insertion order, and all
adjacency sets hold indices only. Node keys and edge payloads are arbitrary;
the graph never inspects a payload.

Lifecycle:
    The graph is built once (insert_node / insert_edge), then frozen and
    queried read-only. Mutation during an in-progress traversal is not
    supported; freeze() turns any later mutation into a GraphFrozen error:

        graph = Hypergraph()
        graph.insert_node("iron-ore")
        graph.insert_node("iron-ingot")
        graph.insert_edge(["iron-ore"], ["iron-ingot"], smelt)
        graph.freeze()

Edge identity:
    Two hyperedges are the same edge when their source sets and destination
    sets are equal. The payload is not part of identity: inserting an edge
    whose shape is already stored returns the stored index and keeps the
    first payload.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from hyperchain.errors import DuplicateEdge, EdgeNotFound, GraphFrozen, NodeNotFound

logger = logging.getLogger("hyperchain.engine.core")

K = TypeVar("K", bound=Hashable)
P = TypeVar("P")

NodeIndex = int
EdgeIndex = int
EdgeShape = tuple[frozenset[NodeIndex], frozenset[NodeIndex]]


@dataclass
class Hypernode:
    """Adjacency record for one node.

    Attributes:
        outgoing: Indices of edges where this node is a source
        incoming: Indices of edges where this node is a destination
    """

    outgoing: set[EdgeIndex] = field(default_factory=set)
    incoming: set[EdgeIndex] = field(default_factory=set)


@dataclass
class Hyperedge(Generic[P]):
    """A stored hyperedge: source and destination node indices plus a payload.

    Equality and hashing use only the (sources, destinations) shape.
    """

    sources: frozenset[NodeIndex]
    destinations: frozenset[NodeIndex]
    payload: P = field(compare=False)

    @property
    def shape(self) -> EdgeShape:
        return (self.sources, self.destinations)

    def __hash__(self) -> int:
        return hash(self.shape)


@dataclass(frozen=True)
class EdgeView(Generic[K, P]):
    """Key-level view of a stored hyperedge, returned by Hypergraph.get_edge()."""

    index: EdgeIndex
    sources: frozenset[K]
    destinations: frozenset[K]
    payload: P


class Hypergraph(Generic[K, P]):
    """Append-only directed hypergraph with bidirectional adjacency.

    Args:
        strict: If True, inserting an edge whose shape is already stored with
            a different payload raises DuplicateEdge. If False (default) the
            second payload is dropped and the stored index is returned.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self._keys: list[K] = []
        self._index_of: dict[K, NodeIndex] = {}
        self._nodes: list[Hypernode] = []
        self._edges: list[Hyperedge[P]] = []
        # Shape index for O(1) duplicate detection
        self._edge_index: dict[EdgeShape, EdgeIndex] = {}
        self._strict = strict
        self._frozen = False

    def __repr__(self) -> str:
        state = ", frozen" if self._frozen else ""
        return f"Hypergraph(order={self.order()}, size={self.size()}{state})"

    # ========== Lifecycle ==========

    @property
    def frozen(self) -> bool:
        """True once freeze() has been called."""
        return self._frozen

    @property
    def strict(self) -> bool:
        return self._strict

    def freeze(self) -> Hypergraph[K, P]:
        """End the mutation phase. Returns self so calls can be chained."""
        self._frozen = True
        return self

    def _check_mutable(self) -> None:
        if self._frozen:
            raise GraphFrozen("Hypergraph is frozen; no further insertions are allowed")

    # ========== Node Operations ==========

    def insert_node(self, key: K) -> NodeIndex:
        """Insert a node, or return the index of an existing one.

        Re-inserting a known key is a no-op: the node keeps its index and
        its adjacency.

        Returns:
            The node's insertion-order index
        """
        self._check_mutable()
        index = self._index_of.get(key)
        if index is not None:
            return index
        index = len(self._keys)
        self._keys.append(key)
        self._index_of[key] = index
        self._nodes.append(Hypernode())
        logger.debug("Inserted node %r at index %d", key, index)
        return index

    def has_node(self, key: K) -> bool:
        return key in self._index_of

    def index_of(self, key: K) -> NodeIndex:
        """Get the index of a node key.

        Raises:
            NodeNotFound: If the key was never inserted
        """
        try:
            return self._index_of[key]
        except KeyError:
            raise NodeNotFound(key) from None

    def get_node(self, index: NodeIndex) -> K:
        """Reverse lookup: node key for an index.

        Raises:
            NodeNotFound: If the index is out of range
        """
        if not 0 <= index < len(self._keys):
            raise NodeNotFound(index)
        return self._keys[index]

    def nodes(self) -> Iterator[K]:
        """Iterate node keys in insertion order."""
        return iter(list(self._keys))

    def order(self) -> int:
        """Number of distinct nodes."""
        return len(self._keys)

    # ========== Edge Operations ==========

    def insert_edge(self, sources: Iterable[K], destinations: Iterable[K], payload: P) -> EdgeIndex:
        """Insert a hyperedge from a set of source keys to a set of destination keys.

        If an edge with the same source and destination sets is already
        stored, its index is returned and ``payload`` is discarded (or, on a
        strict graph with a differing payload, DuplicateEdge is raised).

        Args:
            sources: Keys of the source nodes (duplicates collapse)
            destinations: Keys of the destination nodes (duplicates collapse)
            payload: Arbitrary data carried by the edge

        Returns:
            The edge's insertion-order index

        Raises:
            NodeNotFound: If any key was never inserted
            DuplicateEdge: Strict graph, same shape, different payload
            GraphFrozen: If the graph has been frozen
        """
        self._check_mutable()
        src = frozenset(self.index_of(key) for key in sources)
        dst = frozenset(self.index_of(key) for key in destinations)
        shape = (src, dst)

        existing = self._edge_index.get(shape)
        if existing is not None:
            stored = self._edges[existing].payload
            if self._strict and stored != payload:
                raise DuplicateEdge(
                    existing,
                    f"Edge {existing} already connects these nodes with a different payload",
                )
            logger.debug("Edge shape already stored at index %d; payload dropped", existing)
            return existing

        index = len(self._edges)
        self._edges.append(Hyperedge(src, dst, payload))
        self._edge_index[shape] = index
        for node_index in src:
            self._nodes[node_index].outgoing.add(index)
        for node_index in dst:
            self._nodes[node_index].incoming.add(index)
        logger.debug("Inserted edge %d (%d sources, %d destinations)", index, len(src), len(dst))
        return index

    def get_weight(self, index: EdgeIndex) -> P:
        """Get the payload of an edge.

        Raises:
            EdgeNotFound: If the index is out of range
        """
        return self._edge_at(index).payload

    def get_edge(self, index: EdgeIndex) -> EdgeView[K, P]:
        """Get a key-level view of an edge.

        Raises:
            EdgeNotFound: If the index is out of range
        """
        edge = self._edge_at(index)
        return EdgeView(
            index=index,
            sources=frozenset(self._keys[i] for i in edge.sources),
            destinations=frozenset(self._keys[i] for i in edge.destinations),
            payload=edge.payload,
        )

    def find_edge(self, sources: Iterable[K], destinations: Iterable[K]) -> EdgeIndex | None:
        """Index of the edge with exactly these source and destination sets, or None.

        Raises:
            NodeNotFound: If any key was never inserted
        """
        src = frozenset(self.index_of(key) for key in sources)
        dst = frozenset(self.index_of(key) for key in destinations)
        return self._edge_index.get((src, dst))

    def edges(self) -> Iterator[EdgeView[K, P]]:
        """Iterate all edges in insertion order."""
        return (self.get_edge(i) for i in range(len(self._edges)))

    def size(self) -> int:
        """Number of distinct (sources, destinations) edges."""
        return len(self._edges)

    def _edge_at(self, index: EdgeIndex) -> Hyperedge[P]:
        if not 0 <= index < len(self._edges):
            raise EdgeNotFound(index)
        return self._edges[index]

    # ========== Adjacency ==========

    def neighbors(self, key: K) -> set[EdgeIndex]:
        """Edges where ``key`` is a source (outgoing edges).

        Raises:
            NodeNotFound: If the key was never inserted
        """
        return set(self._nodes[self.index_of(key)].outgoing)

    def neighbor_of(self, key: K) -> set[EdgeIndex]:
        """Edges where ``key`` is a destination (incoming edges).

        Raises:
            NodeNotFound: If the key was never inserted
        """
        return set(self._nodes[self.index_of(key)].incoming)

    def producers(self, key: K) -> list[EdgeIndex]:
        """Incoming edges of ``key`` in stored edge order."""
        return sorted(self.neighbor_of(key))

    def consumers(self, key: K) -> list[EdgeIndex]:
        """Outgoing edges of ``key`` in stored edge order."""
        return sorted(self.neighbors(key))

    # ========== Summary ==========

    def stats(self) -> dict[str, Any]:
        """Node and edge counts, plus how many nodes have no producing edge."""
        return {
            "node_count": len(self._nodes),
            "edge_count": len(self._edges),
            "source_only_count": sum(1 for node in self._nodes if not node.incoming),
            "frozen": self._frozen,
        }

    def validate(self) -> dict[str, Any]:
        """Check adjacency consistency between the node and edge arenas.

        Checks for:
        - Edges referencing node indices outside the node arena
        - Adjacency entries referencing missing edges
        - Edges missing from the adjacency of one of their nodes
        - Shape index drift

        Nodes that no edge produces are reported as warnings, not errors.

        Returns:
            Dict with 'valid' (bool), 'errors' and 'warnings' (lists of str)
        """
        errors: list[str] = []
        warnings: list[str] = []
        node_count = len(self._nodes)
        edge_count = len(self._edges)

        for index, edge in enumerate(self._edges):
            for node_index in edge.sources | edge.destinations:
                if not 0 <= node_index < node_count:
                    errors.append(f"Edge {index} references non-existent node index {node_index}")
            for node_index in edge.sources:
                if node_index < node_count and index not in self._nodes[node_index].outgoing:
                    errors.append(
                        f"Edge {index} missing from outgoing of {self._keys[node_index]!r}"
                    )
            for node_index in edge.destinations:
                if node_index < node_count and index not in self._nodes[node_index].incoming:
                    errors.append(
                        f"Edge {index} missing from incoming of {self._keys[node_index]!r}"
                    )
            if self._edge_index.get(edge.shape) != index:
                errors.append(f"Shape index does not point at edge {index}")

        for node_index, node in enumerate(self._nodes):
            key = self._keys[node_index]
            for edge_index in node.outgoing | node.incoming:
                if not 0 <= edge_index < edge_count:
                    errors.append(f"Adjacency of {key!r} references non-existent edge {edge_index}")
            if not node.incoming:
                warnings.append(f"Node {key!r} has no producing edge")

        if len(self._edge_index) != edge_count:
            errors.append(
                f"Shape index has {len(self._edge_index)} entries for {edge_count} edges"
            )

        return {"valid": not errors, "errors": errors, "warnings": warnings}
