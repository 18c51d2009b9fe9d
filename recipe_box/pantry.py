"""Pantry management: what's at home and when it expires."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, timedelta
from typing import TYPE_CHECKING

from .cache import QueryCache
from .models import PantryItem
from .units import parse_number

if TYPE_CHECKING:
    from .store import Store

logger = logging.getLogger(__name__)

PANTRY_KEY = "pantry_items"


def parse_expiry_date(value: str | date | None) -> date | None:
    """
    Parse an expiry date given as YYYY-MM-DD.

    Raises:
        ValueError: If the text is not an ISO date
    """
    if value is None or isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"Invalid expiry date '{value}', expected YYYY-MM-DD") from e


def _sort_key(item: PantryItem) -> tuple[bool, date]:
    return (item.expiry_date is None, item.expiry_date or date.max)


class Pantry:
    """A user's pantry items backed by a store and a shared query cache."""

    def __init__(self, store: Store, cache: QueryCache, user_id: str) -> None:
        self.store = store
        self.cache = cache
        self.user_id = user_id

    @property
    def cache_key(self) -> tuple[str, str]:
        return (PANTRY_KEY, self.user_id)

    def items(self) -> list[PantryItem]:
        """All pantry items, soonest expiry first."""
        return self.cache.fetch(self.cache_key, lambda: self.store.list_pantry_items(self.user_id))

    def get_item(self, item_id: str) -> PantryItem:
        for item in self.items():
            if item.id == item_id:
                return item
        raise LookupError(f"Pantry item '{item_id}' not found")

    def add_item(
        self,
        name: str,
        quantity: object = None,
        unit: str | None = None,
        expiry_date: str | date | None = None,
    ) -> PantryItem:
        name = name.strip()
        if not name:
            raise ValueError("Item name cannot be empty")

        draft = PantryItem(
            id=f"temp-{uuid.uuid4().hex}",
            user_id=self.user_id,
            name=name,
            quantity=parse_number(quantity),
            unit=unit or None,
            expiry_date=parse_expiry_date(expiry_date),
        )

        with self.cache.optimistic(
            self.cache_key, lambda items: sorted([draft, *items], key=_sort_key), default=[]
        ):
            stored = self.store.insert_pantry_item(draft)

        logger.debug("Added pantry item %s", stored.name)
        return stored

    def update_item(
        self,
        item_id: str,
        *,
        name: str | None = None,
        quantity: object = None,
        unit: str | None = None,
        expiry_date: str | date | None = None,
    ) -> PantryItem:
        """
        Change the given fields of a pantry item.

        Omitted (None) fields are kept. An empty string clears the quantity,
        unit or expiry date.

        Raises:
            LookupError: If the item does not exist
            ValueError: If the name is blank, the quantity is not a number or
                the expiry date is not YYYY-MM-DD
        """
        current = self.get_item(item_id)
        changes: dict[str, object] = {}
        if name is not None:
            if not name.strip():
                raise ValueError("Item name cannot be empty")
            changes["name"] = name.strip()
        if isinstance(quantity, str) and not quantity.strip():
            changes["quantity"] = None
        elif quantity is not None:
            parsed = parse_number(quantity)
            if parsed is None:
                raise ValueError(f"Invalid quantity '{quantity}'")
            changes["quantity"] = parsed
        if unit is not None:
            changes["unit"] = unit.strip() or None
        if expiry_date is not None:
            changes["expiry_date"] = parse_expiry_date(expiry_date)
        updated = replace(current, **changes)

        with self.cache.optimistic(
            self.cache_key,
            lambda items: [updated if item.id == item_id else item for item in items],
            default=[],
        ):
            self.store.update_pantry_item(updated)

        return updated

    def delete_item(self, item_id: str) -> bool:
        """Delete a pantry item. Returns False if it did not exist."""
        with self.cache.optimistic(
            self.cache_key,
            lambda items: [item for item in items if item.id != item_id],
            default=[],
        ):
            deleted = self.store.delete_pantry_item(item_id)
        return deleted

    def expired_items(self, today: date | None = None) -> list[PantryItem]:
        """Items whose expiry date is before today."""
        return [item for item in self.items() if item.is_expired(today)]

    def expiring_soon(self, days: int = 3, today: date | None = None) -> list[PantryItem]:
        """Items that are still good but expire within the given number of days."""
        today = today or date.today()
        limit = today + timedelta(days=days)
        return [
            item
            for item in self.items()
            if item.expiry_date is not None and today <= item.expiry_date <= limit
        ]
