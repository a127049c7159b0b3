"""Hyperchain CLI: resolve production chains from a recipe bank."""

from __future__ import annotations

import json
import logging
import sys
from fractions import Fraction

import click

from hyperchain.engine.core import Hypergraph
from hyperchain.engine.rates import TIME_UNITS, format_rate, per_second
from hyperchain.engine.resolver import producer_rate, resolve, totals
from hyperchain.errors import HyperchainError
from hyperchain.loader import load_bank
from hyperchain.models import HypergraphStats, Recipe, ValidationResult
from hyperchain.render import render_tree, totals_lines, tree_to_dict

DEFAULT_RATE = "1"
DEFAULT_UNIT = "minute"

bank_argument = click.argument("bank", type=click.Path(exists=True, dir_okay=False))
strict_option = click.option(
    "--strict", is_flag=True, help="Reject recipes that duplicate another recipe's inputs and outputs."
)


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(stream=sys.stderr, level=level, format="%(levelname)s: %(message)s")


def _load(bank: str, strict: bool = False) -> Hypergraph[str, Recipe]:
    try:
        return load_bank(bank, strict=strict)
    except HyperchainError as exc:
        raise click.ClickException(str(exc)) from exc


def _parse_rate(rate: str, unit: str) -> Fraction:
    try:
        value = per_second(rate, unit)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--rate") from exc
    if value < 0:
        raise click.BadParameter("rate must not be negative", param_hint="--rate")
    return value


@click.group()
@click.option("-v", "--verbose", count=True, help="Log to stderr (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """Hyperchain CLI: plan production chains over a recipe hypergraph."""
    _configure_logging(verbose)


@cli.command("resolve")
@bank_argument
@click.argument("item")
@click.option("--rate", default=DEFAULT_RATE, show_default=True, help="Requested rate, e.g. 5, 2.5 or 5/60.")
@click.option(
    "--per",
    "unit",
    type=click.Choice(sorted(TIME_UNITS)),
    default=DEFAULT_UNIT,
    show_default=True,
    help="Time unit of --rate.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the tree as JSON.")
@click.option("--totals", "show_totals", is_flag=True, help="Also print builder totals per recipe.")
@strict_option
def resolve_command(
    bank: str, item: str, rate: str, unit: str, as_json: bool, show_totals: bool, strict: bool
) -> None:
    """Resolve the builders needed to produce ITEM at a given rate."""
    requested = _parse_rate(rate, unit)
    graph = _load(bank, strict)
    try:
        tree = resolve(graph, item, requested)
    except HyperchainError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_json:
        data = tree_to_dict(tree)
        if show_totals:
            data = {"tree": data, "totals": totals_lines(totals(tree))}
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(render_tree(tree))
    if show_totals:
        click.echo("")
        click.echo("Totals:")
        for line in totals_lines(totals(tree)):
            click.echo(f"  {line}")


@cli.command()
@bank_argument
@click.argument("item")
@click.option(
    "--per",
    "unit",
    type=click.Choice(sorted(TIME_UNITS)),
    default=DEFAULT_UNIT,
    show_default=True,
    help="Time unit for the printed rates.",
)
def producers(bank: str, item: str, unit: str) -> None:
    """List the recipes that produce ITEM, in bank order."""
    graph = _load(bank)
    try:
        indices = graph.producers(item)
    except HyperchainError as exc:
        raise click.ClickException(str(exc)) from exc
    if not indices:
        click.echo(f"Nothing produces {item}.")
        return
    for index in indices:
        recipe = graph.get_weight(index)
        rate = producer_rate(recipe, item) * TIME_UNITS[unit]
        click.echo(f"  [{index}] {recipe.builder} -> {recipe.name}  {format_rate(rate)}/{unit}")


@cli.command()
@bank_argument
def stats(bank: str) -> None:
    """Show recipe bank statistics."""
    s = HypergraphStats(**_load(bank).stats())
    click.echo(f"Items: {s.node_count}  Recipes: {s.edge_count}  Raw items: {s.source_only_count}")


@cli.command()
@bank_argument
@strict_option
def validate(bank: str, strict: bool) -> None:
    """Validate internal consistency of the loaded recipe bank."""
    result = ValidationResult(**_load(bank, strict).validate())
    if result.valid:
        click.echo("Recipe bank is valid.")
    else:
        click.echo("Validation errors:")
        for err in result.errors:
            click.echo(f"  ERROR: {err}")
    for warn in result.warnings:
        click.echo(f"  WARNING: {warn}")
    if not result.valid:
        sys.exit(1)


@cli.command()
@click.option("--bank", default=None, help="Recipe bank path (overrides HYPERCHAIN_BANK_PATH).")
def mcp(bank: str | None) -> None:
    """Start the MCP server for AI agent integration."""
    import os

    if bank:
        os.environ["HYPERCHAIN_BANK_PATH"] = bank
    from hyperchain.mcp.server import run_server

    run_server()


if __name__ == "__main__":
    cli()
