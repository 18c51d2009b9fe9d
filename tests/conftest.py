"""Shared fixtures for recipe-box tests."""

import pytest

from recipe_box.cache import QueryCache
from recipe_box.models import GroceryEntry, Recipe, RecipeIngredient
from recipe_box.store import Store

USER_ID = "user-1"


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def store(tmp_path):
    """A fresh store backed by a temporary database file."""
    db = Store(tmp_path / "test.db")
    yield db
    db.close()


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache()


@pytest.fixture
def sample_recipe() -> Recipe:
    """A simple recipe with a few ingredients."""
    return Recipe(
        title="Pancakes",
        user_id=USER_ID,
        ingredients=[
            RecipeIngredient(name="flour", quantity=200.0, unit="g"),
            RecipeIngredient(name="milk", quantity=0.5, unit="l"),
            RecipeIngredient(name="eggs", quantity=2.0),
        ],
        steps=["Whisk everything together.", "Fry in a hot pan."],
    )


@pytest.fixture
def grocery_entries() -> list[GroceryEntry]:
    """Unchecked grocery entries as they would come from the store."""
    return [
        GroceryEntry(id="g1", name="Milk", quantity=1.0, unit="l", category="Dairy"),
        GroceryEntry(id="g2", name="Eggs", quantity=None, unit=None, category="Dairy"),
        GroceryEntry(id="g3", name="flour", quantity=500.0, unit="g", category="Pantry"),
    ]
