"""Hyperchain MCP server, exposing production-chain resolution as tools for AI agents."""

from __future__ import annotations

import functools
import logging
import os
import sys
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP

from hyperchain.engine.core import Hypergraph
from hyperchain.engine.rates import TIME_UNITS, format_rate, per_second
from hyperchain.engine.resolver import producer_rate, resolve, totals
from hyperchain.loader import load_bank
from hyperchain.models import Recipe
from hyperchain.render import render_tree, totals_lines, tree_to_dict

# All logging goes to stderr; stdout is reserved for JSON-RPC
logging.basicConfig(stream=sys.stderr, level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger("hyperchain.mcp")

# ---------------------------------------------------------------------------
# Graph singleton, loaded once and frozen
# ---------------------------------------------------------------------------

_GRAPH: Hypergraph[str, Recipe] | None = None


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict]:
    global _GRAPH
    bank_path = os.environ.get("HYPERCHAIN_BANK_PATH", "recipes.yaml")
    logger.info("Loading recipe bank: %s", bank_path)
    _GRAPH = load_bank(bank_path)
    try:
        yield {}
    finally:
        _GRAPH = None


mcp = FastMCP(
    "Hyperchain",
    instructions=(
        "Hyperchain plans production chains over a recipe bank. "
        "Items are produced by recipes; each recipe consumes reagents and runs for a "
        "fixed duration in a builder. "
        "Use resolve_item to get the tree of builders needed to produce an item at a "
        "rate (e.g. rate='5', per='minute'). "
        "Rates are exact fractions and are returned as strings like '5/60'."
    ),
    lifespan=app_lifespan,
)


def _get_graph() -> Hypergraph[str, Recipe]:
    """Return the loaded recipe graph."""
    if _GRAPH is None:
        raise RuntimeError("Recipe bank is not loaded")
    return _GRAPH


def _safe_tool(fn: Callable[..., dict]) -> Callable[..., dict]:
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> dict:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            logger.exception("Tool %s failed", fn.__name__)
            return {"error": True, "message": f"{type(exc).__name__}: {exc}"}
    return wrapper


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------


def _recipe_dict(index: int, recipe: Recipe) -> dict:
    return {
        "index": index,
        "name": recipe.name,
        "builder": recipe.builder,
        "duration": format_rate(recipe.duration),
        "products": {item.widget: format_rate(item.quantity) for item in recipe.products},
        "reagents": {item.widget: format_rate(item.quantity) for item in recipe.reagents},
    }


# ===================================================================
# Tools (4)
# ===================================================================


@mcp.tool()
@_safe_tool
def resolve_item(
    item: str,
    rate: str = "1",
    per: str = "minute",
    include_totals: bool = False,
) -> dict:
    """Resolve the builders needed to produce an item at a rate.

    Args:
        item: Item key from the recipe bank (e.g. "reinforced-iron-plate").
        rate: Requested rate as a number or fraction string ("5", "2.5", "5/60").
        per: Time unit of the rate: "second", "minute" or "hour".
        include_totals: Also return builder counts summed per recipe.
    """
    graph = _get_graph()
    tree = resolve(graph, item, per_second(rate, per))
    result: dict[str, Any] = {
        "item": item,
        "rate_per_second": format_rate(tree.rate),
        "tree": tree_to_dict(tree),
        "text": render_tree(tree),
    }
    if include_totals:
        result["totals"] = totals_lines(totals(tree))
    return result


@mcp.tool()
@_safe_tool
def list_producers(item: str, per: str = "minute") -> dict:
    """List the recipes that produce an item, in bank order.

    Args:
        item: Item key from the recipe bank.
        per: Time unit for the reported output rate of one builder.
    """
    graph = _get_graph()
    seconds = TIME_UNITS[per]
    recipes = []
    for index in graph.producers(item):
        recipe = graph.get_weight(index)
        entry = _recipe_dict(index, recipe)
        entry["rate"] = format_rate(producer_rate(recipe, item) * seconds)
        recipes.append(entry)
    return {"item": item, "per": per, "count": len(recipes), "recipes": recipes}


@mcp.tool()
@_safe_tool
def get_recipe(index: int) -> dict:
    """Get a recipe by its index in the bank.

    Args:
        index: Recipe index as reported by list_producers.
    """
    graph = _get_graph()
    return _recipe_dict(index, graph.get_weight(index))


@mcp.tool()
@_safe_tool
def get_stats() -> dict:
    """Get item and recipe counts for the loaded bank."""
    return _get_graph().stats()


# ===================================================================
# Resources (1)
# ===================================================================


@mcp.resource("hyperchain://bank")
def bank_resource() -> str:
    """Loaded recipe bank: counts and the items nothing produces."""
    graph = _get_graph()
    stats = graph.stats()
    raw = [item for item in graph.nodes() if not graph.neighbor_of(item)]
    lines = [
        "# Hyperchain Recipe Bank\n",
        f"Items: {stats['node_count']}",
        f"Recipes: {stats['edge_count']}",
    ]
    if raw:
        lines.append("\n## Raw items")
        for item in raw:
            lines.append(f"- {item}")
    return "\n".join(lines)


# ===================================================================
# Entry point
# ===================================================================


def run_server() -> None:
    """Run the Hyperchain MCP server over stdio."""
    mcp.run(transport="stdio")
