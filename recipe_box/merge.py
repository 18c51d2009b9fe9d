"""Merge recipe ingredients into an existing grocery list."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .categories import DEFAULT_CATEGORY, infer_category
from .models import GroceryEntry, RecipeIngredient
from .units import parse_number


@dataclass
class NewGroceryItem:
    """A grocery list row waiting to be inserted."""

    user_id: str
    name: str
    quantity: float | None = None
    unit: str | None = None
    category: str = DEFAULT_CATEGORY
    checked: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "category": self.category,
            "checked": self.checked,
        }


@dataclass(frozen=True)
class QuantityUpdate:
    """New total quantity for an existing grocery list row."""

    id: str
    quantity: float


@dataclass
class MergeResult:
    """Writes needed to fold a recipe's ingredients into a grocery list."""

    items_to_insert: list[NewGroceryItem] = field(default_factory=list)
    items_to_update: list[QuantityUpdate] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items_to_insert and not self.items_to_update


def normalize_name(name: str | None) -> str:
    """Normalize an item name for matching."""
    return (name or "").strip().lower()


def normalize_unit(unit: str | None) -> str:
    """Normalize a unit for matching. A missing unit matches another missing unit."""
    return (unit or "").strip().lower()


def _quantity_or_zero(value: object) -> float:
    number = parse_number(value)
    return number if number is not None else 0.0


def resolve_category(ingredient: RecipeIngredient) -> str:
    """Use the ingredient's own category unless it is missing or the default."""
    if ingredient.category and ingredient.category != DEFAULT_CATEGORY:
        return ingredient.category
    return infer_category(ingredient.name)


def find_matching_entry(
    entries: Sequence[GroceryEntry], name: str | None, unit: str | None
) -> GroceryEntry | None:
    """Return the first entry with the same normalized name and unit."""
    norm_name = normalize_name(name)
    norm_unit = normalize_unit(unit)
    for entry in entries:
        if normalize_name(entry.name) == norm_name and normalize_unit(entry.unit) == norm_unit:
            return entry
    return None


def merge_grocery_items(
    existing: Sequence[GroceryEntry],
    incoming: Sequence[RecipeIngredient],
    owner_id: str,
) -> MergeResult:
    """
    Work out how to add a recipe's ingredients to a grocery list.

    Each ingredient is checked against the existing (unchecked) entries on
    its own. A match on normalized name and unit becomes a quantity update
    (missing or non-numeric quantities count as 0); anything else becomes a
    new row, categorized by the ingredient's category or by inference.

    Two ingredients that only collide with each other are not combined:
    each is matched against the original list.

    Args:
        existing: The owner's unchecked grocery entries
        incoming: Ingredients of the recipe being added
        owner_id: User the new rows belong to

    Returns:
        MergeResult with rows to insert and quantities to update
    """
    result = MergeResult()

    for ingredient in incoming:
        match = find_matching_entry(existing, ingredient.name, ingredient.unit)

        if match is not None:
            result.items_to_update.append(
                QuantityUpdate(
                    id=match.id,
                    quantity=_quantity_or_zero(match.quantity)
                    + _quantity_or_zero(ingredient.quantity),
                )
            )
        else:
            result.items_to_insert.append(
                NewGroceryItem(
                    user_id=owner_id,
                    name=ingredient.name,
                    quantity=ingredient.quantity,
                    unit=ingredient.unit,
                    category=resolve_category(ingredient),
                    checked=False,
                )
            )

    return result
