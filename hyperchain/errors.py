"""Exception hierarchy for Hyperchain.

Every failure the graph, resolver or loader can report derives from
HyperchainError. Lookup failures also derive from LookupError and payload
problems from ValueError, so callers can catch them the usual way.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence


class HyperchainError(Exception):
    """Base class for all Hyperchain errors."""


class NodeNotFound(HyperchainError, LookupError):
    """A node key or node index is not present in the hypergraph."""

    def __init__(self, key: Hashable) -> None:
        super().__init__(f"Node does not exist: {key!r}")
        self.key = key


class EdgeNotFound(HyperchainError, LookupError):
    """An edge index is outside the hypergraph's edge arena."""

    def __init__(self, index: int) -> None:
        super().__init__(f"Edge does not exist: {index!r}")
        self.index = index


class NoProducer(HyperchainError, LookupError):
    """Resolution was requested for a node that no edge produces."""

    def __init__(self, key: Hashable) -> None:
        super().__init__(f"No edge produces {key!r}")
        self.key = key


class InvalidPayload(HyperchainError, ValueError):
    """A payload cannot be used to compute a rate (zero duration or output)."""


class CycleDetected(HyperchainError):
    """Resolution reached a node that is already on the current path.

    ``path`` lists the keys from the resolution root down to the repeated
    key, which appears both earlier in the path and as its last element.
    """

    def __init__(self, path: Sequence[Hashable]) -> None:
        self.path = tuple(path)
        chain = " -> ".join(str(key) for key in self.path)
        super().__init__(f"Cycle detected while resolving: {chain}")


class DuplicateEdge(HyperchainError, ValueError):
    """A strict hypergraph was given a second, different payload for an edge shape."""

    def __init__(self, index: int, message: str) -> None:
        super().__init__(message)
        self.index = index


class GraphFrozen(HyperchainError, RuntimeError):
    """Mutation was attempted on a hypergraph that has been frozen."""


class BankError(HyperchainError, ValueError):
    """A recipe bank file is missing, unreadable or malformed."""
