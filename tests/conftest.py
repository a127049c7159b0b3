"""Shared fixtures for Hyperchain tests."""

from fractions import Fraction
from pathlib import Path

import pytest

from hyperchain import Hypergraph, ItemQuantity, Recipe, load_bank

DATA_DIR = Path(__file__).parent / "data"

# Five reinforced iron plates per minute from tests/data/recipes.yaml
EXPECTED_RIP = """\
1x Assembler -> Reinforced Iron Plate
├── 2x Constructor -> Iron Plate
|   └── 2x Smelter -> Iron Ingot
|       └── 1x Miner Mk.1 -> Iron Ore
└── 2x Constructor -> Cast Screw
    └── 1x Smelter -> Iron Ingot
        └── 1x Miner Mk.1 -> Iron Ore"""


def make_recipe(
    name: str,
    product: str,
    quantity=1,
    duration=1,
    reagents: dict | None = None,
    builder: str = "Constructor",
) -> Recipe:
    """Recipe producing ``quantity`` of ``product`` every ``duration`` seconds."""
    return Recipe(
        name=name,
        builder=builder,
        duration=duration,
        products=(ItemQuantity(widget=product, quantity=quantity),),
        reagents=tuple(
            ItemQuantity(widget=widget, quantity=qty) for widget, qty in (reagents or {}).items()
        ),
    )


def recipe_graph(*recipes: Recipe) -> Hypergraph:
    """Frozen graph holding the given recipes, nodes created as needed."""
    graph: Hypergraph = Hypergraph()
    for recipe in recipes:
        for widget in (*recipe.reagent_widgets, *recipe.product_widgets):
            graph.insert_node(widget)
    for recipe in recipes:
        graph.insert_edge(recipe.reagent_widgets, recipe.product_widgets, recipe)
    return graph.freeze()


@pytest.fixture()
def basic_graph() -> Hypergraph:
    """The minimal worked example.

    Nodes 1, 2, 3, 4 (indices 0..3).

    Edges:
        0: {1, 2} -> {3, 4}, weight 15
        1: {3} -> {1}, weight 30
        2: {4} -> {2}, weight 45
    """
    graph: Hypergraph = Hypergraph()
    for key in (1, 2, 3, 4):
        graph.insert_node(key)
    graph.insert_edge([1, 2], [3, 4], 15)
    graph.insert_edge([3], [1], 30)
    graph.insert_edge([4], [2], 45)
    return graph


@pytest.fixture()
def bank_path() -> Path:
    """Sample recipe bank (tests/data/recipes.yaml).

    Items (8): reinforced-iron-plate, iron-plate, screw, iron-rod,
        iron-ingot, iron-ore, concrete, limestone (raw)

    Recipes (8), edge index in brackets:
        [0] Reinforced Iron Plate: 6 iron-plate + 12 screw -> 1, 12s
        [1] Iron Plate: 3 iron-ingot -> 2, 6s
        [2] Screw: 1 iron-rod -> 4, 6s
        [3] Cast Screw: 5 iron-ingot -> 20, 24s
        [4] Iron Rod: 1 iron-ingot -> 1, 4s
        [5] Iron Ingot: 1 iron-ore -> 1, 2s
        [6] Iron Ore: -> 1, 1s
        [7] Concrete: 3 limestone -> 1, 4s
    """
    return DATA_DIR / "recipes.yaml"


@pytest.fixture()
def bank_graph(bank_path) -> Hypergraph:
    return load_bank(bank_path)


@pytest.fixture()
def rip_rate() -> Fraction:
    """Five reinforced iron plates per minute, in units per second."""
    return Fraction(5, 60)
