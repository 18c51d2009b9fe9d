"""SQLite storage for grocery lists, pantry items, meal plans and recipes."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .models import GroceryEntry, MealPlanEntry, PantryItem, Recipe

if TYPE_CHECKING:
    from .merge import MergeResult, NewGroceryItem

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Exception raised when a database read or write fails."""

    pass


SCHEMA = """
    CREATE TABLE IF NOT EXISTS grocery_list (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        quantity REAL,
        unit TEXT,
        category TEXT,
        checked INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS pantry_items (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        quantity REAL,
        unit TEXT,
        expiry_date TEXT
    );

    CREATE TABLE IF NOT EXISTS meal_plan (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        day TEXT NOT NULL,
        meal TEXT NOT NULL,
        recipe_id TEXT,
        created_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS recipes (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        cuisine TEXT,
        meal_type TEXT,
        mastery TEXT,
        cook_time INTEGER,
        calories REAL,
        protein REAL,
        carbs REAL,
        fats REAL,
        created_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS recipe_ingredients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        recipe_id TEXT NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        quantity REAL,
        unit TEXT,
        category TEXT
    );

    CREATE TABLE IF NOT EXISTS recipe_steps (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        recipe_id TEXT NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
        step_number INTEGER NOT NULL,
        instruction TEXT NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_grocery_user ON grocery_list(user_id, checked);
    CREATE INDEX IF NOT EXISTS idx_pantry_user ON pantry_items(user_id);
    CREATE INDEX IF NOT EXISTS idx_meal_plan_user_day ON meal_plan(user_id, day);
    CREATE INDEX IF NOT EXISTS idx_recipes_user ON recipes(user_id);
"""

_RECIPE_COLUMNS = (
    "title",
    "description",
    "cuisine",
    "meal_type",
    "mastery",
    "cook_time",
    "calories",
    "protein",
    "carbs",
    "fats",
)


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now().isoformat()


class Store:
    """Persistence for one local database file."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            path = str(self._db_path)
            if path != ":memory:":
                Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)
                path = str(Path(path).expanduser())
            try:
                conn = sqlite3.connect(path)
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA foreign_keys = ON")
                conn.executescript(SCHEMA)
                conn.commit()
            except sqlite3.Error as e:
                raise StoreError(f"Failed to open database {path}: {e}") from e
            self._conn = conn
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back and raise StoreError on any database error."""
        conn = self._get_conn()
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            logger.warning("Database write failed: %s", e)
            raise StoreError(str(e)) from e

    def _query(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        try:
            return self._get_conn().execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e

    # ------------------------------------------------------------------
    # Grocery list
    # ------------------------------------------------------------------

    def list_grocery_items(self, user_id: str) -> list[GroceryEntry]:
        """All of a user's grocery items, newest first."""
        rows = self._query(
            "SELECT * FROM grocery_list WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
            (user_id,),
        )
        return [GroceryEntry.from_row(r) for r in rows]

    def list_unchecked_grocery_items(self, user_id: str) -> list[GroceryEntry]:
        """A user's grocery items that have not been ticked off, oldest first."""
        rows = self._query(
            "SELECT * FROM grocery_list WHERE user_id = ? AND checked = 0 "
            "ORDER BY created_at, rowid",
            (user_id,),
        )
        return [GroceryEntry.from_row(r) for r in rows]

    def get_grocery_item(self, item_id: str) -> GroceryEntry | None:
        rows = self._query("SELECT * FROM grocery_list WHERE id = ?", (item_id,))
        return GroceryEntry.from_row(rows[0]) if rows else None

    @staticmethod
    def _insert_grocery_row(conn: sqlite3.Connection, item: NewGroceryItem) -> GroceryEntry:
        created_at = datetime.now()
        entry = GroceryEntry(
            id=_new_id(),
            user_id=item.user_id,
            name=item.name,
            quantity=item.quantity,
            unit=item.unit,
            category=item.category,
            checked=item.checked,
            created_at=created_at,
        )
        conn.execute(
            """INSERT INTO grocery_list
               (id, user_id, name, quantity, unit, category, checked, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                entry.id,
                entry.user_id,
                entry.name,
                entry.quantity,
                entry.unit,
                entry.category,
                int(entry.checked),
                created_at.isoformat(),
            ),
        )
        return entry

    def insert_grocery_item(self, item: NewGroceryItem) -> GroceryEntry:
        """Insert one grocery item and return the stored row."""
        with self._transaction() as conn:
            return self._insert_grocery_row(conn, item)

    def insert_grocery_items(self, items: list[NewGroceryItem]) -> list[GroceryEntry]:
        """Insert several grocery items in one transaction."""
        with self._transaction() as conn:
            return [self._insert_grocery_row(conn, item) for item in items]

    def update_grocery_quantity(self, item_id: str, quantity: float | None) -> bool:
        """Set the quantity of a grocery item. Returns False if no such item exists."""
        with self._transaction() as conn:
            cur = conn.execute(
                "UPDATE grocery_list SET quantity = ? WHERE id = ?", (quantity, item_id)
            )
            return cur.rowcount > 0

    def set_grocery_checked(self, item_id: str, checked: bool) -> bool:
        """Tick or untick a grocery item. Returns False if no such item exists."""
        with self._transaction() as conn:
            cur = conn.execute(
                "UPDATE grocery_list SET checked = ? WHERE id = ?", (int(checked), item_id)
            )
            return cur.rowcount > 0

    def delete_grocery_item(self, item_id: str) -> bool:
        with self._transaction() as conn:
            cur = conn.execute("DELETE FROM grocery_list WHERE id = ?", (item_id,))
            return cur.rowcount > 0

    def delete_checked_grocery_items(self, user_id: str) -> int:
        """Remove every ticked-off item for a user. Returns the number removed."""
        with self._transaction() as conn:
            cur = conn.execute(
                "DELETE FROM grocery_list WHERE user_id = ? AND checked = 1", (user_id,)
            )
            return cur.rowcount

    def apply_grocery_merge(self, result: MergeResult) -> list[GroceryEntry]:
        """
        Write a merge result atomically.

        All inserts and quantity updates happen in one transaction; if any
        of them fails, none are applied.

        Returns:
            The newly inserted grocery entries
        """
        with self._transaction() as conn:
            inserted = [self._insert_grocery_row(conn, item) for item in result.items_to_insert]
            for update in result.items_to_update:
                conn.execute(
                    "UPDATE grocery_list SET quantity = ? WHERE id = ?",
                    (update.quantity, update.id),
                )
        logger.info(
            "Applied grocery merge: %d inserted, %d updated",
            len(inserted),
            len(result.items_to_update),
        )
        return inserted

    # ------------------------------------------------------------------
    # Pantry
    # ------------------------------------------------------------------

    def list_pantry_items(self, user_id: str) -> list[PantryItem]:
        """A user's pantry, soonest expiry first and undated items last."""
        rows = self._query(
            "SELECT * FROM pantry_items WHERE user_id = ? "
            "ORDER BY expiry_date IS NULL, expiry_date, rowid",
            (user_id,),
        )
        return [PantryItem.from_row(r) for r in rows]

    def get_pantry_item(self, item_id: str) -> PantryItem | None:
        rows = self._query("SELECT * FROM pantry_items WHERE id = ?", (item_id,))
        return PantryItem.from_row(rows[0]) if rows else None

    def insert_pantry_item(self, item: PantryItem) -> PantryItem:
        """Insert a pantry item, assigning a fresh id."""
        stored = PantryItem(
            id=_new_id(),
            user_id=item.user_id,
            name=item.name,
            quantity=item.quantity,
            unit=item.unit,
            expiry_date=item.expiry_date,
        )
        with self._transaction() as conn:
            conn.execute(
                """INSERT INTO pantry_items (id, user_id, name, quantity, unit, expiry_date)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    stored.id,
                    stored.user_id,
                    stored.name,
                    stored.quantity,
                    stored.unit,
                    stored.expiry_date.isoformat() if stored.expiry_date else None,
                ),
            )
        return stored

    def update_pantry_item(self, item: PantryItem) -> bool:
        with self._transaction() as conn:
            cur = conn.execute(
                """UPDATE pantry_items
                   SET name = ?, quantity = ?, unit = ?, expiry_date = ?
                   WHERE id = ?""",
                (
                    item.name,
                    item.quantity,
                    item.unit,
                    item.expiry_date.isoformat() if item.expiry_date else None,
                    item.id,
                ),
            )
            return cur.rowcount > 0

    def delete_pantry_item(self, item_id: str) -> bool:
        with self._transaction() as conn:
            cur = conn.execute("DELETE FROM pantry_items WHERE id = ?", (item_id,))
            return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Meal plan
    # ------------------------------------------------------------------

    def add_meal(
        self, user_id: str, day: str, meal: str, recipe_id: str | None = None
    ) -> MealPlanEntry:
        created_at = datetime.now()
        entry = MealPlanEntry(
            id=_new_id(),
            user_id=user_id,
            day=day,
            meal=meal,
            recipe_id=recipe_id,
            created_at=created_at,
        )
        with self._transaction() as conn:
            conn.execute(
                """INSERT INTO meal_plan (id, user_id, day, meal, recipe_id, created_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (entry.id, user_id, day, meal, recipe_id, created_at.isoformat()),
            )
        return entry

    def list_meals(self, user_id: str, day: str) -> list[MealPlanEntry]:
        rows = self._query(
            "SELECT * FROM meal_plan WHERE user_id = ? AND day = ? ORDER BY created_at, rowid",
            (user_id, day),
        )
        return [MealPlanEntry.from_row(r) for r in rows]

    def delete_meal(self, meal_id: str) -> bool:
        with self._transaction() as conn:
            cur = conn.execute("DELETE FROM meal_plan WHERE id = ?", (meal_id,))
            return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Recipes
    # ------------------------------------------------------------------

    def save_recipe(self, recipe: Recipe) -> Recipe:
        """
        Insert a new recipe or replace an existing one.

        Editing replaces the recipe's ingredients and steps wholesale. The
        recipe row, ingredients and steps are written in one transaction.

        Returns:
            The recipe with its id and created_at filled in
        """
        values = tuple(getattr(recipe, column) for column in _RECIPE_COLUMNS)

        with self._transaction() as conn:
            existing = None
            if recipe.id:
                existing = conn.execute(
                    "SELECT created_at FROM recipes WHERE id = ?", (recipe.id,)
                ).fetchone()

            if existing is not None:
                assignments = ", ".join(f"{column} = ?" for column in _RECIPE_COLUMNS)
                conn.execute(
                    f"UPDATE recipes SET {assignments} WHERE id = ?", (*values, recipe.id)
                )
                conn.execute("DELETE FROM recipe_ingredients WHERE recipe_id = ?", (recipe.id,))
                conn.execute("DELETE FROM recipe_steps WHERE recipe_id = ?", (recipe.id,))
                recipe_id = recipe.id
                created_at = existing["created_at"]
            else:
                recipe_id = recipe.id or _new_id()
                created_at = _now()
                columns = ", ".join(_RECIPE_COLUMNS)
                placeholders = ", ".join("?" for _ in _RECIPE_COLUMNS)
                conn.execute(
                    f"INSERT INTO recipes (id, user_id, {columns}, created_at) "
                    f"VALUES (?, ?, {placeholders}, ?)",
                    (recipe_id, recipe.user_id, *values, created_at),
                )

            conn.executemany(
                """INSERT INTO recipe_ingredients (recipe_id, name, quantity, unit, category)
                   VALUES (?, ?, ?, ?, ?)""",
                [
                    (recipe_id, ing.name, ing.quantity, ing.unit, ing.category)
                    for ing in recipe.ingredients
                ],
            )
            conn.executemany(
                """INSERT INTO recipe_steps (recipe_id, step_number, instruction)
                   VALUES (?, ?, ?)""",
                [(recipe_id, number, text) for number, text in enumerate(recipe.steps, 1)],
            )

        recipe.id = recipe_id
        recipe.created_at = datetime.fromisoformat(created_at)
        return recipe

    def get_recipe(self, recipe_id: str) -> Recipe | None:
        """Load a recipe with its ingredients and steps."""
        rows = self._query("SELECT * FROM recipes WHERE id = ?", (recipe_id,))
        if not rows:
            return None
        return self._load_recipe(rows[0])

    def list_recipes(self, user_id: str) -> list[Recipe]:
        rows = self._query(
            "SELECT * FROM recipes WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
            (user_id,),
        )
        return [self._load_recipe(r) for r in rows]

    def delete_recipe(self, recipe_id: str) -> bool:
        with self._transaction() as conn:
            cur = conn.execute("DELETE FROM recipes WHERE id = ?", (recipe_id,))
            return cur.rowcount > 0

    def _load_recipe(self, row: sqlite3.Row) -> Recipe:
        data: dict[str, Any] = dict(row)
        data["ingredients"] = [
            dict(r)
            for r in self._query(
                "SELECT name, quantity, unit, category FROM recipe_ingredients "
                "WHERE recipe_id = ? ORDER BY id",
                (row["id"],),
            )
        ]
        data["steps"] = [
            r["instruction"]
            for r in self._query(
                "SELECT instruction FROM recipe_steps WHERE recipe_id = ? ORDER BY step_number",
                (row["id"],),
            )
        ]
        return Recipe.from_dict(data)
