"""Load a YAML recipe bank into a frozen Hypergraph.

Bank format (one top-level key per item):

    reinforced-iron-plate:
      recipes:
        - name: Reinforced Iron Plate
          builder: Assembler
          duration: 12
          quantity: 1
          reagents:
            - widget: iron-plate
              quantity: 6
            - widget: screw
              quantity: 12
    iron-ore:            # listed with no recipes: a raw input

Every item key and every reagent/byproduct widget becomes a node. Every
recipe becomes a hyperedge from its reagents to its products, carrying a
models.Recipe payload. Recipes with identical reagent and product sets
collapse into the first one loaded.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from hyperchain.engine.core import Hypergraph
from hyperchain.errors import BankError
from hyperchain.models import Recipe, RecipeBank

logger = logging.getLogger("hyperchain.loader")


def parse_bank(data: Any) -> RecipeBank:
    """Validate raw bank data (as parsed from YAML).

    Raises:
        BankError: If the data does not follow the bank format, including
            zero or negative durations and quantities
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise BankError(f"Recipe bank must be a mapping of items, got: {type(data).__name__}")
    try:
        return RecipeBank.model_validate(data)
    except ValidationError as exc:
        raise BankError(f"Invalid recipe bank: {exc}") from exc


def build_graph(data: Any, *, strict: bool = False) -> Hypergraph[str, Recipe]:
    """Build a frozen hypergraph from raw bank data.

    Args:
        data: Mapping of item key -> {"recipes": [...]}
        strict: Passed to Hypergraph; reject recipes that duplicate the
            reagent and product sets of an earlier, different recipe

    Raises:
        BankError: If the data is malformed
        DuplicateEdge: Strict mode only, on conflicting duplicate recipes
    """
    bank = parse_bank(data)
    graph: Hypergraph[str, Recipe] = Hypergraph(strict=strict)

    recipes: list[Recipe] = []
    for widget, entry in bank.items():
        graph.insert_node(widget)
        for recipe_entry in entry.recipes:
            try:
                recipes.append(recipe_entry.to_recipe(widget))
            except ValidationError as exc:
                raise BankError(f"Invalid recipe {recipe_entry.name!r} for {widget!r}: {exc}") from exc

    # Reagents and byproducts need not be listed as top-level items
    for recipe in recipes:
        for widget in (*recipe.reagent_widgets, *recipe.product_widgets):
            graph.insert_node(widget)

    for recipe in recipes:
        before = graph.size()
        graph.insert_edge(recipe.reagent_widgets, recipe.product_widgets, recipe)
        if graph.size() == before:
            logger.warning(
                "Recipe %r duplicates the inputs and outputs of an earlier recipe; skipped",
                recipe.name,
            )

    logger.info("Loaded recipe bank: %d items, %d recipes", graph.order(), graph.size())
    return graph.freeze()


def load_bank(path: str | Path, *, strict: bool = False) -> Hypergraph[str, Recipe]:
    """Read a YAML recipe bank file and build its frozen hypergraph.

    Raises:
        BankError: If the file cannot be read, is not valid YAML, or does
            not follow the bank format
    """
    bank_path = Path(path)
    try:
        text = bank_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise BankError(f"Cannot read recipe bank {bank_path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise BankError(f"Recipe bank {bank_path} is not valid YAML: {exc}") from exc
    logger.debug("Parsed recipe bank %s", bank_path)
    return build_graph(data, strict=strict)
