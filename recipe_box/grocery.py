"""Grocery list operations with optimistic cache updates."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol

from .cache import QueryCache
from .categories import DEFAULT_CATEGORY, group_by_category, infer_category
from .merge import MergeResult, NewGroceryItem, merge_grocery_items
from .models import GroceryEntry, RecipeIngredient
from .units import parse_number

logger = logging.getLogger(__name__)

GROCERY_LIST_KEY = "grocery_list"


class GroceryBackend(Protocol):
    """Storage the grocery list needs. Store implements it."""

    def list_grocery_items(self, user_id: str) -> list[GroceryEntry]: ...

    def list_unchecked_grocery_items(self, user_id: str) -> list[GroceryEntry]: ...

    def insert_grocery_item(self, item: NewGroceryItem) -> GroceryEntry: ...

    def insert_grocery_items(self, items: list[NewGroceryItem]) -> list[GroceryEntry]: ...

    def update_grocery_quantity(self, item_id: str, quantity: float | None) -> bool: ...

    def set_grocery_checked(self, item_id: str, checked: bool) -> bool: ...

    def delete_grocery_item(self, item_id: str) -> bool: ...

    def delete_checked_grocery_items(self, user_id: str) -> int: ...

    def apply_grocery_merge(self, result: MergeResult) -> list[GroceryEntry]: ...


class GroceryList:
    """A user's grocery list backed by a store and a shared query cache."""

    def __init__(self, store: GroceryBackend, cache: QueryCache, user_id: str) -> None:
        self.store = store
        self.cache = cache
        self.user_id = user_id

    @property
    def cache_key(self) -> tuple[str, str]:
        return (GROCERY_LIST_KEY, self.user_id)

    def items(self) -> list[GroceryEntry]:
        """All items, newest first. Served from the cache when fresh."""
        return self.cache.fetch(self.cache_key, lambda: self.store.list_grocery_items(self.user_id))

    def grouped(self) -> dict[str, list[GroceryEntry]]:
        """Items grouped by category for display."""
        return group_by_category(self.items())

    def refresh(self) -> None:
        self.cache.invalidate(self.cache_key)

    def _find(self, item_id: str) -> GroceryEntry:
        for item in self.items():
            if item.id == item_id:
                return item
        raise LookupError(f"Grocery item '{item_id}' not found")

    def add_item(
        self,
        name: str,
        category: str | None = None,
        quantity: object = None,
        unit: str | None = None,
    ) -> GroceryEntry:
        """
        Add an item to the list.

        Without a category one is inferred from the name. Quantities that
        are not numbers are stored as empty.

        Raises:
            ValueError: If the name is blank
            StoreError: If the write fails (the cached list is rolled back)
        """
        name = name.strip()
        if not name:
            raise ValueError("Item name cannot be empty")

        draft = NewGroceryItem(
            user_id=self.user_id,
            name=name,
            quantity=parse_number(quantity),
            unit=unit or None,
            category=category or infer_category(name),
        )
        placeholder = GroceryEntry(
            id=f"temp-{uuid.uuid4().hex}",
            name=draft.name,
            quantity=draft.quantity,
            unit=draft.unit,
            category=draft.category,
            checked=False,
            user_id=self.user_id,
        )

        with self.cache.optimistic(
            self.cache_key, lambda items: [placeholder, *items], default=[]
        ):
            entry = self.store.insert_grocery_item(draft)

        logger.debug("Added grocery item %s (%s)", entry.name, entry.category)
        return entry

    def toggle_item(self, item_id: str) -> bool:
        """
        Flip an item's checked state.

        Returns:
            The new checked state
        """
        checked = not self._find(item_id).checked

        def mark(items: list[GroceryEntry]) -> list[GroceryEntry]:
            return [
                replace(item, checked=checked) if item.id == item_id else item
                for item in items
            ]

        with self.cache.optimistic(self.cache_key, mark, default=[]):
            self.store.set_grocery_checked(item_id, checked)

        return checked

    def remove_item(self, item_id: str) -> bool:
        """Delete an item. Returns False if it did not exist."""
        with self.cache.optimistic(
            self.cache_key,
            lambda items: [item for item in items if item.id != item_id],
            default=[],
        ):
            removed = self.store.delete_grocery_item(item_id)
        return removed

    def clear_checked(self) -> int:
        """Delete all checked items. Returns the number removed."""
        with self.cache.optimistic(
            self.cache_key,
            lambda items: [item for item in items if not item.checked],
            default=[],
        ):
            removed = self.store.delete_checked_grocery_items(self.user_id)

        logger.info("Cleared %d checked grocery items", removed)
        return removed

    def plan_recipe_ingredients(self, ingredients: Sequence[RecipeIngredient]) -> MergeResult:
        """Work out the writes for adding ingredients, without applying them."""
        existing = self.store.list_unchecked_grocery_items(self.user_id)
        return merge_grocery_items(existing, ingredients, self.user_id)

    def add_recipe_ingredients(self, ingredients: Sequence[RecipeIngredient]) -> MergeResult:
        """
        Merge a recipe's ingredients into the list.

        Matching unchecked items have their quantities increased; the rest
        are added as new items. The writes are applied atomically.

        Returns:
            The MergeResult that was applied
        """
        result = self.plan_recipe_ingredients(ingredients)
        if result.is_empty:
            return result

        try:
            self.store.apply_grocery_merge(result)
        finally:
            self.cache.invalidate(self.cache_key)

        return result


def format_entry(entry: GroceryEntry) -> str:
    """Human-readable line for a grocery entry, e.g. "2 l milk"."""
    return str(
        RecipeIngredient(
            name=entry.name,
            quantity=parse_number(entry.quantity),
            unit=entry.unit,
            category=entry.category or DEFAULT_CATEGORY,
        )
    )
