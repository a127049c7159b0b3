"""Pydantic models for recipe payloads and the recipe bank file.

Recipe is the payload stored on every hyperedge of a loaded bank. The
*Entry models describe the YAML bank format and convert into Recipe.
All quantities and durations are exact Fractions; YAML floats are
approximated once, on validation.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    RootModel,
    field_validator,
    model_validator,
)

from hyperchain.engine.rates import to_rate


def _coerce_rate(value: Any) -> Fraction:
    try:
        return to_rate(value)
    except TypeError as exc:
        # pydantic only reports ValueError as a validation failure
        raise ValueError(str(exc)) from None


Rate = Annotated[
    Fraction,
    BeforeValidator(_coerce_rate),
    PlainSerializer(str, return_type=str),
]


class ItemQuantity(BaseModel):
    """A quantity of one item consumed or produced per recipe cycle."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    widget: str
    quantity: Rate

    @field_validator("quantity")
    @classmethod
    def _check_positive(cls, value: Fraction) -> Fraction:
        if value <= 0:
            raise ValueError(f"quantity must be positive, got: {value}")
        return value


def _check_unique(items: tuple[ItemQuantity, ...], side: str) -> None:
    seen: set[str] = set()
    for item in items:
        if item.widget in seen:
            raise ValueError(f"{side} lists {item.widget!r} more than once")
        seen.add(item.widget)


class Recipe(BaseModel):
    """A production process: reagents in, products out, once per ``duration`` seconds.

    Reagent order is significant; the resolver expands reagents in the
    order given here.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    builder: str
    duration: Rate
    products: tuple[ItemQuantity, ...] = Field(min_length=1)
    reagents: tuple[ItemQuantity, ...] = ()

    @field_validator("duration")
    @classmethod
    def _check_duration(cls, value: Fraction) -> Fraction:
        if value <= 0:
            raise ValueError(f"duration must be positive, got: {value}")
        return value

    @model_validator(mode="after")
    def _check_sides(self) -> Recipe:
        _check_unique(self.products, "products")
        _check_unique(self.reagents, "reagents")
        return self

    def __repr__(self) -> str:
        return f"Recipe({self.name!r}, builder={self.builder!r}, duration={self.duration})"

    @property
    def product_widgets(self) -> list[str]:
        return [item.widget for item in self.products]

    @property
    def reagent_widgets(self) -> list[str]:
        return [item.widget for item in self.reagents]

    def produced(self, widget: str) -> Fraction:
        """Units of ``widget`` produced per cycle (0 if not a product)."""
        for item in self.products:
            if item.widget == widget:
                return item.quantity
        return Fraction(0)

    def consumed(self, widget: str) -> Fraction:
        """Units of ``widget`` consumed per cycle (0 if not a reagent)."""
        for item in self.reagents:
            if item.widget == widget:
                return item.quantity
        return Fraction(0)

    def rate(self, widget: str) -> Fraction:
        """Units of ``widget`` produced per second by one instance."""
        return self.produced(widget) / self.duration


# --- Recipe bank file format ---


class RecipeEntry(BaseModel):
    """One recipe as written in the bank, listed under the item it makes.

    ``quantity`` is the output of the item the entry is listed under;
    ``byproducts`` are any further outputs.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    name: str
    builder: str
    duration: Rate
    quantity: Rate
    reagents: list[ItemQuantity] = Field(default_factory=list)
    byproducts: list[ItemQuantity] = Field(default_factory=list)

    def to_recipe(self, widget: str) -> Recipe:
        """Build the edge payload for this entry listed under ``widget``."""
        return Recipe(
            name=self.name,
            builder=self.builder,
            duration=self.duration,
            products=(ItemQuantity(widget=widget, quantity=self.quantity), *self.byproducts),
            reagents=tuple(self.reagents),
        )


class WidgetEntry(BaseModel):
    """An item of the bank and the recipes that produce it (possibly none)."""

    model_config = ConfigDict(extra="forbid")

    recipes: list[RecipeEntry] = Field(default_factory=list)


class RecipeBank(RootModel[dict[str, WidgetEntry]]):
    """A whole recipe bank: item key -> WidgetEntry."""

    @model_validator(mode="before")
    @classmethod
    def _fill_empty_items(cls, data: Any) -> Any:
        # `iron-ore:` with no body parses as None
        if isinstance(data, dict):
            return {key: ({} if value is None else value) for key, value in data.items()}
        return data

    def items(self) -> list[tuple[str, WidgetEntry]]:
        return list(self.root.items())


# --- Reporting ---


class ValidationResult(BaseModel):
    """Result of a hypergraph consistency check.

    Contains a pass/fail flag, a list of errors, and a list of warnings
    found during validation.
    """

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class HypergraphStats(BaseModel):
    """Summary counts for a loaded bank.

    ``source_only_count`` is the number of items nothing produces (raw
    inputs of the bank).
    """

    node_count: int
    edge_count: int
    source_only_count: int
    frozen: bool = False
