from hyperchain.engine.core import EdgeView, Hyperedge, Hypergraph, Hypernode
from hyperchain.engine.rates import TIME_UNITS, per_second, to_rate
from hyperchain.engine.resolver import Selection, resolve, select_producer, totals
from hyperchain.engine.tree import RoseTree

__all__ = [
    "Hypergraph",
    "Hypernode",
    "Hyperedge",
    "EdgeView",
    "RoseTree",
    "Selection",
    "resolve",
    "select_producer",
    "totals",
    "to_rate",
    "per_second",
    "TIME_UNITS",
]
