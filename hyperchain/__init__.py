"""Hyperchain: production-chain planning over a recipe hypergraph with exact rates."""

__version__ = "0.1.0"

from hyperchain.engine import Hypergraph, RoseTree, Selection, resolve, select_producer, to_rate
from hyperchain.errors import (
    BankError,
    CycleDetected,
    DuplicateEdge,
    EdgeNotFound,
    GraphFrozen,
    HyperchainError,
    InvalidPayload,
    NodeNotFound,
    NoProducer,
)
from hyperchain.loader import build_graph, load_bank
from hyperchain.models import HypergraphStats, ItemQuantity, Recipe, ValidationResult

__all__ = [
    "BankError",
    "CycleDetected",
    "DuplicateEdge",
    "EdgeNotFound",
    "GraphFrozen",
    "HyperchainError",
    "Hypergraph",
    "HypergraphStats",
    "InvalidPayload",
    "ItemQuantity",
    "NoProducer",
    "NodeNotFound",
    "Recipe",
    "RoseTree",
    "Selection",
    "ValidationResult",
    "__version__",
    "build_graph",
    "load_bank",
    "resolve",
    "select_producer",
    "to_rate",
]
