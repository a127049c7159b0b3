"""Rate-based resolution of production chains over a hypergraph.

Given a target node and a requested rate, the resolver picks the incoming
edge whose throughput divides the rate with the least over-production
("least waste"), works out how many parallel instances of that edge are
needed, and repeats for every reagent of the chosen edge at the rate those
instances consume it. The result is a RoseTree of Selection records.

Payloads only need to look like a recipe (see the Producer protocol):
a ``duration``, an ordered ``reagents`` sequence of ``widget``/``quantity``
pairs, and ``produced(widget)``.

Resolution walks an explicit stack rather than recursing, and every frame
carries the chain of keys above it. A key that reappears on its own chain
raises CycleDetected.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Protocol

from hyperchain.engine.core import Hypergraph
from hyperchain.engine.rates import RateLike, ceil_int, fractional_part, to_rate
from hyperchain.engine.tree import RoseTree
from hyperchain.errors import CycleDetected, InvalidPayload, NoProducer

logger = logging.getLogger("hyperchain.engine.resolver")


class Ingredient(Protocol):
    widget: Any
    quantity: Any


class Producer(Protocol):
    """Structural type for edge payloads the resolver can use."""

    @property
    def duration(self) -> Any: ...

    @property
    def reagents(self) -> Sequence[Ingredient]: ...

    def produced(self, widget: Any) -> Any: ...


@dataclass(frozen=True)
class Selection:
    """One resolved step: which edge payload was chosen and how many instances.

    Attributes:
        payload: The chosen edge's payload
        multiplier: Parallel instances needed, ceil(rate / candidate_rate)
        widget: Key of the node this step produces
        rate: Requested rate for ``widget`` (units per second)
        candidate_rate: Output rate of one instance of the payload
        waste: Fractional over-production of the choice, in [0, 1)
    """

    payload: Any
    multiplier: int
    widget: Hashable
    rate: Fraction
    candidate_rate: Fraction
    waste: Fraction

    @property
    def capacity(self) -> Fraction:
        """Rate actually produced by ``multiplier`` instances."""
        return self.candidate_rate * self.multiplier


def producer_rate(payload: Producer, widget: Hashable) -> Fraction:
    """Output rate of ``widget`` for one instance of ``payload``.

    Raises:
        InvalidPayload: If the duration is not positive or the payload does
            not produce ``widget``
    """
    duration = to_rate(payload.duration)
    produced = to_rate(payload.produced(widget))
    if duration <= 0:
        raise InvalidPayload(f"Payload {payload!r} has non-positive duration {duration}")
    if produced <= 0:
        raise InvalidPayload(f"Payload {payload!r} does not produce {widget!r}")
    return produced / duration


def waste(requested_rate: Fraction, candidate_rate: Fraction) -> Fraction:
    """Over-production incurred by meeting ``requested_rate`` with whole instances."""
    return fractional_part(requested_rate / candidate_rate)


def select_producer(graph: Hypergraph, widget: Hashable, rate: RateLike) -> Selection:
    """Pick the least-waste producing edge of ``widget`` for ``rate``.

    Candidates are scored in stored edge order; on equal waste the earlier
    edge is kept.

    Raises:
        NodeNotFound: If ``widget`` is not in the graph
        NoProducer: If no edge produces ``widget``
        InvalidPayload: If a candidate payload cannot yield a rate
    """
    requested = to_rate(rate)
    candidates = graph.producers(widget)
    if not candidates:
        raise NoProducer(widget)

    best: Selection | None = None
    for index in candidates:
        payload = graph.get_weight(index)
        candidate_rate = producer_rate(payload, widget)
        ratio = requested / candidate_rate
        candidate_waste = fractional_part(ratio)
        if best is None or candidate_waste < best.waste:
            best = Selection(
                payload=payload,
                multiplier=ceil_int(ratio),
                widget=widget,
                rate=requested,
                candidate_rate=candidate_rate,
                waste=candidate_waste,
            )

    assert best is not None
    logger.debug(
        "Selected %r for %r at %s/s: %dx, waste %s",
        best.payload,
        widget,
        requested,
        best.multiplier,
        best.waste,
    )
    return best


def resolve(graph: Hypergraph, target: Hashable, requested_rate: RateLike) -> RoseTree[Selection]:
    """Build the dependency tree that produces ``target`` at ``requested_rate``.

    For the selected payload with duration ``d`` and multiplier ``m``, each
    reagent of quantity ``q`` is resolved at exactly ``q * m / d``; children
    follow the payload's reagent order.

    Args:
        graph: Hypergraph whose payloads follow the Producer protocol
        target: Key of the node to produce
        requested_rate: Units of ``target`` per second; floats are
            approximated once here, everything below is exact

    Returns:
        RoseTree whose nodes hold Selection records

    Raises:
        NodeNotFound: If ``target`` or any reagent is not in the graph
        NoProducer: If ``target`` or a reagent has no producing edge
        InvalidPayload: If a candidate payload cannot yield a rate
        CycleDetected: If a reagent chain leads back to one of its ancestors
        ValueError: If ``requested_rate`` is negative
    """
    rate = to_rate(requested_rate)
    if rate < 0:
        raise ValueError(f"Requested rate must not be negative, got: {rate}")

    root: RoseTree[Selection] | None = None
    # (widget, rate, parent, keys from the root down to the parent)
    stack: list[tuple[Hashable, Fraction, RoseTree[Selection] | None, tuple[Hashable, ...]]]
    stack = [(target, rate, None, ())]
    while stack:
        widget, widget_rate, parent, path = stack.pop()
        if widget in path:
            raise CycleDetected(path + (widget,))

        selection = select_producer(graph, widget, widget_rate)
        tree = RoseTree(selection)
        if parent is None:
            root = tree
        else:
            parent.insert(tree)

        payload = selection.payload
        duration = to_rate(payload.duration)
        child_path = path + (widget,)
        frames = [
            (
                reagent.widget,
                to_rate(reagent.quantity) * selection.multiplier / duration,
                tree,
                child_path,
            )
            for reagent in payload.reagents
        ]
        # Reversed so the first reagent is popped, and attached, first
        stack.extend(reversed(frames))

    assert root is not None
    return root


def totals(tree: RoseTree[Selection]) -> dict[Any, int]:
    """Sum multipliers per payload across the whole tree.

    Payloads must be hashable. Keys keep first-seen (pre-order) order.
    """
    counts: dict[Any, int] = {}
    for node in tree.walk():
        counts[node.payload] = counts.get(node.payload, 0) + node.multiplier
    return counts
