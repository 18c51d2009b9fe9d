"""Records persisted per user: grocery items, pantry items, meal plans and recipes."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .categories import DEFAULT_CATEGORY
from .units import format_quantity

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


@dataclass
class GroceryEntry:
    """A line item on a user's grocery list."""

    id: str
    name: str
    quantity: float | None = None
    unit: str | None = None
    category: str | None = DEFAULT_CATEGORY
    checked: bool = False
    user_id: str | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "category": self.category,
            "checked": self.checked,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_row(cls, row: Any) -> "GroceryEntry":
        """Create from a sqlite3.Row or dict-like object."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            quantity=row["quantity"],
            unit=row["unit"],
            category=row["category"],
            checked=bool(row["checked"]),
            created_at=_parse_datetime(row["created_at"]),
        )


@dataclass
class PantryItem:
    """Something the user already has at home."""

    id: str
    name: str
    quantity: float | None = None
    unit: str | None = None
    expiry_date: date | None = None
    user_id: str | None = None

    def is_expired(self, today: date | None = None) -> bool:
        """True if the expiry date has passed (an item expiring today is still good)."""
        if self.expiry_date is None:
            return False
        return self.expiry_date < (today or date.today())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
        }

    @classmethod
    def from_row(cls, row: Any) -> "PantryItem":
        """Create from a sqlite3.Row or dict-like object."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            quantity=row["quantity"],
            unit=row["unit"],
            expiry_date=_parse_date(row["expiry_date"]),
        )


@dataclass
class MealPlanEntry:
    """A recipe scheduled on a weekday."""

    id: str
    day: str
    meal: str
    recipe_id: str | None = None
    user_id: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Any) -> "MealPlanEntry":
        """Create from a sqlite3.Row or dict-like object."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            day=row["day"],
            meal=row["meal"],
            recipe_id=row["recipe_id"],
            created_at=_parse_datetime(row["created_at"]),
        )


@dataclass(frozen=True)
class RecipeIngredient:
    """An ingredient line belonging to a recipe."""

    name: str
    quantity: float | None = None
    unit: str | None = None
    category: str | None = None

    def __str__(self) -> str:
        parts = []
        if self.quantity is not None:
            parts.append(format_quantity(self.quantity))
        if self.unit:
            parts.append(self.unit)
        parts.append(self.name)
        return " ".join(parts)


@dataclass
class Recipe:
    """A user's recipe with its ingredients and numbered steps."""

    title: str
    user_id: str | None = None
    id: str | None = None
    description: str | None = None
    cuisine: str | None = None
    meal_type: str | None = None
    mastery: str | None = None
    cook_time: int | None = None
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fats: float | None = None
    created_at: datetime | None = None
    ingredients: list[RecipeIngredient] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert recipe to dictionary for serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "cuisine": self.cuisine,
            "meal_type": self.meal_type,
            "mastery": self.mastery,
            "cook_time": self.cook_time,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "ingredients": [
                {
                    "name": ing.name,
                    "quantity": ing.quantity,
                    "unit": ing.unit,
                    "category": ing.category,
                }
                for ing in self.ingredients
            ],
            "steps": list(self.steps),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recipe":
        """Create recipe from dictionary."""
        ingredients = [
            RecipeIngredient(
                name=ing["name"],
                quantity=ing.get("quantity"),
                unit=ing.get("unit"),
                category=ing.get("category"),
            )
            for ing in data.get("ingredients", [])
        ]
        return cls(
            id=data.get("id"),
            user_id=data.get("user_id"),
            title=data["title"],
            description=data.get("description"),
            cuisine=data.get("cuisine"),
            meal_type=data.get("meal_type"),
            mastery=data.get("mastery"),
            cook_time=data.get("cook_time"),
            calories=data.get("calories"),
            protein=data.get("protein"),
            carbs=data.get("carbs"),
            fats=data.get("fats"),
            created_at=_parse_datetime(data.get("created_at")),
            ingredients=ingredients,
            steps=list(data.get("steps", [])),
        )
