"""Recipe Box - recipes, meal plans, grocery lists and pantry in one place."""

__version__ = "1.0.0"

from .cache import QueryCache
from .categories import GROCERY_CATEGORIES, infer_category
from .grocery import GroceryList
from .merge import MergeResult, NewGroceryItem, QuantityUpdate, merge_grocery_items
from .models import GroceryEntry, MealPlanEntry, PantryItem, Recipe, RecipeIngredient
from .pantry import Pantry
from .planner import MealPlanner
from .store import Store, StoreError
from .units import UnitConversionError, convert, format_conversion

__all__ = [
    "QueryCache",
    "GROCERY_CATEGORIES",
    "infer_category",
    "GroceryList",
    "MergeResult",
    "NewGroceryItem",
    "QuantityUpdate",
    "merge_grocery_items",
    "GroceryEntry",
    "MealPlanEntry",
    "PantryItem",
    "Recipe",
    "RecipeIngredient",
    "Pantry",
    "MealPlanner",
    "Store",
    "StoreError",
    "UnitConversionError",
    "convert",
    "format_conversion",
]
