"""Tests for the SQLite store."""

from datetime import date

import pytest

from recipe_box.merge import MergeResult, NewGroceryItem, QuantityUpdate
from recipe_box.models import PantryItem, Recipe, RecipeIngredient
from recipe_box.store import Store, StoreError

USER = "user-1"


def _new(name, **kwargs):
    return NewGroceryItem(user_id=USER, name=name, **kwargs)


# ============================================================================
# Grocery List Tests
# ============================================================================


class TestGroceryStorage:
    """Tests for grocery list rows."""

    def test_insert_and_list(self, store):
        entry = store.insert_grocery_item(_new("milk", quantity=1.0, unit="l", category="Dairy"))

        items = store.list_grocery_items(USER)
        assert len(items) == 1
        assert items[0].id == entry.id
        assert items[0].name == "milk"
        assert items[0].quantity == 1.0
        assert items[0].category == "Dairy"
        assert items[0].checked is False
        assert items[0].created_at is not None

    def test_list_newest_first(self, store):
        store.insert_grocery_items([_new("first"), _new("second"), _new("third")])
        names = [i.name for i in store.list_grocery_items(USER)]
        assert names == ["third", "second", "first"]

    def test_lists_are_per_user(self, store):
        store.insert_grocery_item(_new("milk"))
        store.insert_grocery_item(NewGroceryItem(user_id="other", name="bread"))

        assert [i.name for i in store.list_grocery_items(USER)] == ["milk"]
        assert [i.name for i in store.list_grocery_items("other")] == ["bread"]

    def test_unchecked_excludes_checked(self, store):
        milk = store.insert_grocery_item(_new("milk"))
        store.insert_grocery_item(_new("bread"))
        store.set_grocery_checked(milk.id, True)

        assert [i.name for i in store.list_unchecked_grocery_items(USER)] == ["bread"]

    def test_update_quantity(self, store):
        entry = store.insert_grocery_item(_new("flour", quantity=100.0, unit="g"))

        assert store.update_grocery_quantity(entry.id, 350.0) is True
        assert store.get_grocery_item(entry.id).quantity == 350.0

    def test_update_missing_item(self, store):
        assert store.update_grocery_quantity("missing", 1.0) is False
        assert store.set_grocery_checked("missing", True) is False

    def test_delete(self, store):
        entry = store.insert_grocery_item(_new("milk"))

        assert store.delete_grocery_item(entry.id) is True
        assert store.get_grocery_item(entry.id) is None
        assert store.delete_grocery_item(entry.id) is False

    def test_delete_checked(self, store):
        a = store.insert_grocery_item(_new("a"))
        b = store.insert_grocery_item(_new("b"))
        store.insert_grocery_item(_new("c"))
        store.set_grocery_checked(a.id, True)
        store.set_grocery_checked(b.id, True)

        assert store.delete_checked_grocery_items(USER) == 2
        assert [i.name for i in store.list_grocery_items(USER)] == ["c"]


class TestApplyGroceryMerge:
    """Tests for writing merge results."""

    def test_applies_inserts_and_updates(self, store):
        flour = store.insert_grocery_item(_new("flour", quantity=100.0, unit="g"))
        result = MergeResult(
            items_to_insert=[_new("eggs", quantity=2.0, category="Dairy")],
            items_to_update=[QuantityUpdate(id=flour.id, quantity=300.0)],
        )

        inserted = store.apply_grocery_merge(result)

        assert [e.name for e in inserted] == ["eggs"]
        assert store.get_grocery_item(flour.id).quantity == 300.0
        assert len(store.list_grocery_items(USER)) == 2

    def test_failure_applies_nothing(self, store):
        """A failing insert rolls back the whole merge."""
        flour = store.insert_grocery_item(_new("flour", quantity=100.0, unit="g"))
        result = MergeResult(
            items_to_insert=[_new("eggs"), NewGroceryItem(user_id=USER, name=None)],
            items_to_update=[QuantityUpdate(id=flour.id, quantity=300.0)],
        )

        with pytest.raises(StoreError):
            store.apply_grocery_merge(result)

        items = store.list_grocery_items(USER)
        assert [i.name for i in items] == ["flour"]
        assert items[0].quantity == 100.0


# ============================================================================
# Pantry Tests
# ============================================================================


class TestPantryStorage:
    """Tests for pantry rows."""

    def test_insert_assigns_id(self, store):
        item = store.insert_pantry_item(
            PantryItem(id="temp", name="rice", quantity=2.0, unit="kg", user_id=USER)
        )
        assert item.id != "temp"
        assert store.get_pantry_item(item.id).name == "rice"

    def test_ordered_by_expiry_with_undated_last(self, store):
        for name, expiry in [
            ("salt", None),
            ("yogurt", date(2026, 10, 25)),
            ("milk", date(2026, 10, 21)),
        ]:
            store.insert_pantry_item(PantryItem(id="", name=name, expiry_date=expiry, user_id=USER))

        assert [i.name for i in store.list_pantry_items(USER)] == ["milk", "yogurt", "salt"]

    def test_update(self, store):
        item = store.insert_pantry_item(PantryItem(id="", name="rice", user_id=USER))
        item.quantity = 5.0
        item.expiry_date = date(2027, 1, 1)

        assert store.update_pantry_item(item) is True
        stored = store.get_pantry_item(item.id)
        assert stored.quantity == 5.0
        assert stored.expiry_date == date(2027, 1, 1)

    def test_delete(self, store):
        item = store.insert_pantry_item(PantryItem(id="", name="rice", user_id=USER))
        assert store.delete_pantry_item(item.id) is True
        assert store.list_pantry_items(USER) == []


# ============================================================================
# Meal Plan Tests
# ============================================================================


class TestMealPlanStorage:
    """Tests for meal plan rows."""

    def test_add_and_list_by_day(self, store):
        store.add_meal(USER, "Mon", "Pancakes", "r1")
        store.add_meal(USER, "Mon", "Soup")
        store.add_meal(USER, "Tue", "Salad")

        meals = store.list_meals(USER, "Mon")
        assert [m.meal for m in meals] == ["Pancakes", "Soup"]
        assert meals[0].recipe_id == "r1"
        assert meals[1].recipe_id is None

    def test_delete(self, store):
        entry = store.add_meal(USER, "Wed", "Tacos")
        assert store.delete_meal(entry.id) is True
        assert store.list_meals(USER, "Wed") == []


# ============================================================================
# Recipe Tests
# ============================================================================


class TestRecipeStorage:
    """Tests for recipes with ingredients and steps."""

    def test_save_and_load(self, store, sample_recipe):
        saved = store.save_recipe(sample_recipe)

        assert saved.id
        assert saved.created_at is not None
        loaded = store.get_recipe(saved.id)
        assert loaded.title == "Pancakes"
        assert loaded.ingredients == sample_recipe.ingredients
        assert loaded.steps == ["Whisk everything together.", "Fry in a hot pan."]

    def test_edit_replaces_ingredients_and_steps(self, store, sample_recipe):
        saved = store.save_recipe(sample_recipe)
        created = saved.created_at

        edited = Recipe(
            id=saved.id,
            user_id=USER,
            title="Crepes",
            cook_time=15,
            ingredients=[RecipeIngredient(name="flour", quantity=100.0, unit="g")],
            steps=["Cook thin."],
        )
        store.save_recipe(edited)

        loaded = store.get_recipe(saved.id)
        assert loaded.title == "Crepes"
        assert loaded.cook_time == 15
        assert [i.name for i in loaded.ingredients] == ["flour"]
        assert loaded.steps == ["Cook thin."]
        assert loaded.created_at == created
        assert len(store.list_recipes(USER)) == 1

    def test_delete_cascades(self, store, sample_recipe):
        saved = store.save_recipe(sample_recipe)

        assert store.delete_recipe(saved.id) is True
        assert store.get_recipe(saved.id) is None
        conn = store._get_conn()
        assert conn.execute("SELECT COUNT(*) FROM recipe_ingredients").fetchone()[0] == 0
        assert conn.execute("SELECT COUNT(*) FROM recipe_steps").fetchone()[0] == 0

    def test_get_missing(self, store):
        assert store.get_recipe("missing") is None


class TestStoreConnection:
    """Tests for opening the database."""

    def test_in_memory(self):
        db = Store(":memory:")
        db.insert_grocery_item(_new("milk"))
        assert len(db.list_grocery_items(USER)) == 1
        db.close()

    def test_creates_parent_directory(self, tmp_path):
        db = Store(tmp_path / "nested" / "dir" / "box.db")
        db.list_recipes(USER)
        assert (tmp_path / "nested" / "dir" / "box.db").exists()
        db.close()
