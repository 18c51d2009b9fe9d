"""Meal planning: schedule recipes on weekdays and stock the grocery list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .cache import QueryCache
from .grocery import GroceryList
from .merge import MergeResult
from .models import WEEKDAYS, MealPlanEntry, Recipe

if TYPE_CHECKING:
    from .store import Store

logger = logging.getLogger(__name__)

MEAL_PLAN_KEY = "meal-plan"

_FULL_DAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class PlannerError(ValueError):
    """Exception raised for invalid meal plan requests."""

    pass


@dataclass
class PlannedMeal:
    """Outcome of adding a recipe to the plan."""

    entry: MealPlanEntry
    groceries: MergeResult

    @property
    def items_added(self) -> int:
        return len(self.groceries.items_to_insert)

    @property
    def items_updated(self) -> int:
        return len(self.groceries.items_to_update)


def normalize_day(day: str) -> str:
    """
    Normalize a weekday name to its short form.

    Accepts "mon", "Monday", "MON" etc.

    Raises:
        PlannerError: If the text is not a weekday
    """
    text = day.strip().lower()
    for short, full in zip(WEEKDAYS, _FULL_DAY_NAMES, strict=True):
        if text in (short.lower(), full):
            return short
    raise PlannerError(f"Unknown day '{day}'. Use one of: {', '.join(WEEKDAYS)}")


class MealPlanner:
    """A user's weekly meal plan backed by a store and a shared query cache."""

    def __init__(self, store: Store, cache: QueryCache, user_id: str) -> None:
        self.store = store
        self.cache = cache
        self.user_id = user_id
        self.groceries = GroceryList(store, cache, user_id)

    def _cache_key(self, day: str) -> tuple[str, str, str]:
        return (MEAL_PLAN_KEY, self.user_id, day)

    def meals_for_day(self, day: str) -> list[MealPlanEntry]:
        day = normalize_day(day)
        return self.cache.fetch(
            self._cache_key(day), lambda: self.store.list_meals(self.user_id, day)
        )

    def week(self) -> dict[str, list[MealPlanEntry]]:
        """Meals for every weekday, Monday first."""
        return {day: self.meals_for_day(day) for day in WEEKDAYS}

    def add_recipe(self, recipe: Recipe, day: str) -> PlannedMeal:
        """
        Schedule a recipe and add its ingredients to the grocery list.

        Ingredients are merged into the unchecked grocery items: matching
        name and unit increase the quantity, everything else is added.

        Args:
            recipe: The recipe to schedule
            day: Weekday to schedule it on

        Returns:
            PlannedMeal with the new plan entry and the grocery changes
        """
        day = normalize_day(day)
        entry = self.store.add_meal(self.user_id, day, recipe.title, recipe.id)
        self.cache.invalidate(self._cache_key(day))
        logger.info("Planned '%s' on %s", recipe.title, day)

        groceries = MergeResult()
        if recipe.ingredients:
            groceries = self.groceries.add_recipe_ingredients(recipe.ingredients)

        return PlannedMeal(entry=entry, groceries=groceries)

    def add_recipe_by_id(self, recipe_id: str, day: str) -> PlannedMeal:
        recipe = self.store.get_recipe(recipe_id)
        if recipe is None:
            raise LookupError(f"Recipe '{recipe_id}' not found")
        return self.add_recipe(recipe, day)

    def remove_meal(self, meal_id: str, day: str | None = None) -> bool:
        """Remove a meal from the plan. The grocery list is left as is."""
        days = [normalize_day(day)] if day else list(WEEKDAYS)
        try:
            return self.store.delete_meal(meal_id)
        finally:
            for d in days:
                self.cache.invalidate(self._cache_key(d))
