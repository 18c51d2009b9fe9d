"""CLI entry point for Recipe Box."""

import json
import logging

import click

from . import __version__
from .cache import QueryCache
from .categories import DEFAULT_CATEGORY, GROCERY_CATEGORIES, infer_category
from .config import clear_user_id, get_db_path, get_user_id, save_user_id
from .grocery import GroceryList, format_entry
from .grocery_tui import interactive_checklist
from .models import MealPlanEntry, PantryItem
from .pantry import Pantry
from .planner import MealPlanner, normalize_day
from .recipes import MASTERY_LEVELS, MEAL_TYPES, build_recipe, parse_ingredient_text
from .store import Store, StoreError
from .units import UNITS_BY_FAMILY, format_conversion, format_quantity, get_unit_family

# Shared instances for one CLI invocation
_store: Store | None = None
_cache: QueryCache | None = None


def get_store() -> Store:
    """Get or create the store instance."""
    global _store
    if _store is None:
        _store = Store(get_db_path())
    return _store


def get_cache() -> QueryCache:
    """Get or create the query cache."""
    global _cache
    if _cache is None:
        _cache = QueryCache()
    return _cache


def require_user() -> str:
    """Return the current user id or exit with a hint."""
    user_id = get_user_id()
    if not user_id:
        click.echo(
            "No user set. Run 'recipe-box user set <id>' or set RECIPE_BOX_USER_ID.", err=True
        )
        raise SystemExit(1)
    return user_id


def fail(message: str) -> None:
    """Report an error and exit."""
    click.echo(f"✗ {message}", err=True)
    raise SystemExit(1)


def format_pantry_item(item: PantryItem) -> str:
    qty = format_quantity(item.quantity)
    parts = [p for p in (qty, item.unit or "", item.name) if p]
    line = " ".join(parts)
    if item.expiry_date:
        marker = " (EXPIRED)" if item.is_expired() else ""
        line += f"  - expires {item.expiry_date.isoformat()}{marker}"
    return line


def display_meals(day: str, meals: list[MealPlanEntry]) -> None:
    click.echo(f"\n{day}")
    click.echo("-" * 40)
    if not meals:
        click.echo("  (nothing planned)")
    for meal in meals:
        click.echo(f"  {meal.meal}  [{meal.id}]")


# ============================================================================
# Main CLI Group
# ============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="recipe-box")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Recipe Box: recipes, meal plans, grocery lists and pantry.

    Plan recipes on weekdays and their ingredients are merged into
    your grocery list automatically.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# User Commands
# ============================================================================


@cli.group()
def user():
    """Choose which user's data to work with."""
    pass


@user.command("set")
@click.argument("user_id")
def user_set(user_id: str):
    """Save the user id used by all commands."""
    save_user_id(user_id)
    click.echo(f"✓ Now using user {user_id}")


@user.command("show")
def user_show():
    """Show the current user id."""
    user_id = get_user_id()
    click.echo(user_id if user_id else "(no user set)")


@user.command("clear")
def user_clear():
    """Forget the saved user id."""
    clear_user_id()
    click.echo("✓ User cleared")


# ============================================================================
# Grocery Commands
# ============================================================================


@cli.group()
def grocery():
    """Manage your grocery list."""
    pass


@grocery.command("list")
def grocery_list():
    """Show the grocery list grouped by category."""
    groceries = GroceryList(get_store(), get_cache(), require_user())
    try:
        grouped = groceries.grouped()
    except StoreError as e:
        fail(f"Failed to load grocery list: {e}")
        return

    click.echo()
    click.echo("GROCERY LIST")
    click.echo("=" * 50)

    if not grouped:
        click.echo("  (empty)")
        click.echo()
        return

    total = 0
    done = 0
    for category, items in grouped.items():
        click.echo(f"\n{category}")
        for item in items:
            total += 1
            done += item.checked
            box = "[x]" if item.checked else "[ ]"
            click.echo(f"  {box} {format_entry(item)}  [{item.id}]")

    click.echo()
    click.echo(f"Total: {total} items ({done} done)")
    click.echo()


@grocery.command("add")
@click.argument("name")
@click.option("--quantity", "-q", help="Amount, e.g. 2 or 1.5")
@click.option("--unit", "-u", help="Unit, e.g. kg or l")
@click.option(
    "--category",
    "-c",
    type=click.Choice(GROCERY_CATEGORIES, case_sensitive=False),
    help="Category (guessed from the name if omitted)",
)
def grocery_add(name: str, quantity: str | None, unit: str | None, category: str | None):
    """Add an item to the grocery list.

    Examples:

        recipe-box grocery add milk -q 1 -u l

        recipe-box grocery add "chicken breast" -c Meat
    """
    groceries = GroceryList(get_store(), get_cache(), require_user())
    if category:
        category = next(c for c in GROCERY_CATEGORIES if c.lower() == category.lower())

    try:
        entry = groceries.add_item(name, category=category, quantity=quantity, unit=unit)
    except (StoreError, ValueError) as e:
        fail(f"Failed to add item: {e}")
        return

    click.echo(f"✓ Added {format_entry(entry)} ({entry.category})")


@grocery.command("toggle")
@click.argument("item_id")
def grocery_toggle(item_id: str):
    """Check or uncheck an item."""
    groceries = GroceryList(get_store(), get_cache(), require_user())
    try:
        checked = groceries.toggle_item(item_id)
    except (StoreError, LookupError) as e:
        fail(f"Failed to update item: {e}")
        return

    click.echo(f"✓ Item {'checked' if checked else 'unchecked'}")


@grocery.command("remove")
@click.argument("item_id")
def grocery_remove(item_id: str):
    """Remove an item from the grocery list."""
    groceries = GroceryList(get_store(), get_cache(), require_user())
    try:
        removed = groceries.remove_item(item_id)
    except StoreError as e:
        fail(f"Failed to delete item: {e}")
        return

    if not removed:
        fail(f"Grocery item '{item_id}' not found")
        return

    click.echo("✓ Item removed")


@grocery.command("clear-checked")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def grocery_clear_checked(yes: bool):
    """Remove all checked items."""
    if not yes:
        if not click.confirm("Remove all checked items?"):
            click.echo("Cancelled.")
            return

    groceries = GroceryList(get_store(), get_cache(), require_user())
    try:
        removed = groceries.clear_checked()
    except StoreError as e:
        fail(f"Failed to clear items: {e}")
        return

    click.echo(f"✓ Removed {removed} checked item(s)")


@grocery.command("check")
def grocery_check():
    """Tick off items interactively."""
    groceries = GroceryList(get_store(), get_cache(), require_user())
    try:
        items = groceries.items()
    except StoreError as e:
        fail(f"Failed to load grocery list: {e}")
        return

    if not items:
        click.echo("Your grocery list is empty.")
        return

    result = interactive_checklist(items)
    if not result.confirmed:
        click.echo("Cancelled.")
        return

    try:
        for item_id in result.toggled_ids:
            groceries.toggle_item(item_id)
    except (StoreError, LookupError) as e:
        fail(f"Failed to update items: {e}")
        return

    click.echo(f"✓ Updated {len(result.toggled_ids)} item(s)")


# ============================================================================
# Pantry Commands
# ============================================================================


@cli.group()
def pantry():
    """Manage what you have at home."""
    pass


@pantry.command("list")
def pantry_list():
    """List pantry items, soonest expiry first."""
    pantry_service = Pantry(get_store(), get_cache(), require_user())
    try:
        items = pantry_service.items()
    except StoreError as e:
        fail(f"Failed to load pantry: {e}")
        return

    click.echo()
    click.echo("YOUR PANTRY")
    click.echo("=" * 50)

    if items:
        for item in items:
            click.echo(f"  {format_pantry_item(item)}  [{item.id}]")
    else:
        click.echo("  (empty)")

    click.echo()
    click.echo(f"Total: {len(items)} items")
    click.echo()


@pantry.command("add")
@click.argument("name")
@click.option("--quantity", "-q", help="Amount")
@click.option("--unit", "-u", help="Unit")
@click.option("--expiry", "-e", help="Expiry date (YYYY-MM-DD)")
def pantry_add(name: str, quantity: str | None, unit: str | None, expiry: str | None):
    """Add an item to your pantry.

    Examples:

        recipe-box pantry add rice -q 2 -u kg

        recipe-box pantry add yogurt -e 2026-11-02
    """
    pantry_service = Pantry(get_store(), get_cache(), require_user())
    try:
        item = pantry_service.add_item(name, quantity=quantity, unit=unit, expiry_date=expiry)
    except (StoreError, ValueError) as e:
        fail(f"Failed to add item to pantry: {e}")
        return

    click.echo(f"✓ Added {format_pantry_item(item)}")


@pantry.command("update")
@click.argument("item_id")
@click.option("--name", "-n", help="New name")
@click.option("--quantity", "-q", help="New amount (\"\" clears it)")
@click.option("--unit", "-u", help="New unit (\"\" clears it)")
@click.option("--expiry", "-e", help="New expiry date (YYYY-MM-DD, \"\" clears it)")
def pantry_update(
    item_id: str,
    name: str | None,
    quantity: str | None,
    unit: str | None,
    expiry: str | None,
):
    """Change a pantry item."""
    pantry_service = Pantry(get_store(), get_cache(), require_user())
    try:
        item = pantry_service.update_item(
            item_id, name=name, quantity=quantity, unit=unit, expiry_date=expiry
        )
    except (StoreError, LookupError, ValueError) as e:
        fail(f"Failed to update item: {e}")
        return

    click.echo(f"✓ Updated {format_pantry_item(item)}")


@pantry.command("remove")
@click.argument("item_id")
def pantry_remove(item_id: str):
    """Remove an item from your pantry."""
    pantry_service = Pantry(get_store(), get_cache(), require_user())
    try:
        deleted = pantry_service.delete_item(item_id)
    except StoreError as e:
        fail(f"Failed to delete item: {e}")
        return

    if not deleted:
        fail(f"Pantry item '{item_id}' not found")
        return

    click.echo("✓ Item removed")


@pantry.command("expired")
@click.option("--soon", "-s", type=int, help="Also show items expiring within N days")
def pantry_expired(soon: int | None):
    """Show expired pantry items."""
    pantry_service = Pantry(get_store(), get_cache(), require_user())
    try:
        expired = pantry_service.expired_items()
        expiring = pantry_service.expiring_soon(soon) if soon is not None else []
    except StoreError as e:
        fail(f"Failed to load pantry: {e}")
        return

    if not expired and not expiring:
        click.echo("Nothing has expired.")
        return

    if expired:
        click.echo("EXPIRED")
        for item in expired:
            click.echo(f"  {format_pantry_item(item)}")
    if expiring:
        click.echo(f"EXPIRING WITHIN {soon} DAYS")
        for item in expiring:
            click.echo(f"  {format_pantry_item(item)}")


# ============================================================================
# Meal Plan Commands
# ============================================================================


@cli.group()
def plan():
    """Plan recipes for the week."""
    pass


@plan.command("show")
@click.argument("day", required=False)
def plan_show(day: str | None):
    """Show the meal plan for a day, or the whole week."""
    planner = MealPlanner(get_store(), get_cache(), require_user())
    try:
        if day:
            day = normalize_day(day)
            display_meals(day, planner.meals_for_day(day))
        else:
            for weekday, meals in planner.week().items():
                display_meals(weekday, meals)
    except (StoreError, ValueError) as e:
        fail(str(e))
        return

    click.echo()


@plan.command("add")
@click.argument("recipe_id")
@click.argument("day")
def plan_add(recipe_id: str, day: str):
    """Add a recipe to a day and its ingredients to the grocery list.

    Examples:

        recipe-box plan add 3f2a9c Mon
    """
    planner = MealPlanner(get_store(), get_cache(), require_user())
    try:
        planned = planner.add_recipe_by_id(recipe_id, day)
    except (StoreError, LookupError, ValueError) as e:
        fail(f"Failed to add to meal plan: {e}")
        return

    click.echo(f"✓ Added {planned.entry.meal} to {planned.entry.day}'s meal plan")
    if planned.items_added or planned.items_updated:
        click.echo(
            f"  Groceries: {planned.items_added} added, {planned.items_updated} updated"
        )


@plan.command("remove")
@click.argument("meal_id")
@click.argument("day", required=False)
def plan_remove(meal_id: str, day: str | None):
    """Remove a meal from a day's plan."""
    planner = MealPlanner(get_store(), get_cache(), require_user())
    try:
        removed = planner.remove_meal(meal_id, day)
    except (StoreError, ValueError) as e:
        fail(f"Could not remove meal: {e}")
        return

    if not removed:
        fail(f"Meal '{meal_id}' not found")
    click.echo("✓ Meal removed")


# ============================================================================
# Recipe Commands
# ============================================================================


@cli.group()
def recipe():
    """Manage your recipes."""
    pass


@recipe.command("list")
def recipe_list():
    """List your recipes."""
    try:
        recipes = get_store().list_recipes(require_user())
    except StoreError as e:
        fail(f"Failed to load recipes: {e}")
        return

    if not recipes:
        click.echo("No recipes yet. Add one with 'recipe-box recipe add'.")
        return

    for r in recipes:
        details = ", ".join(p for p in (r.meal_type, r.cuisine) if p)
        suffix = f" ({details})" if details else ""
        click.echo(f"  {r.title}{suffix}  [{r.id}]")


@recipe.command("show")
@click.argument("recipe_id")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
def recipe_show(recipe_id: str, as_json: bool):
    """Show a recipe with ingredients and steps."""
    try:
        r = get_store().get_recipe(recipe_id)
    except StoreError as e:
        fail(f"Failed to load recipe: {e}")
        return

    if r is None:
        fail(f"Recipe '{recipe_id}' not found")
        return

    if as_json:
        click.echo(json.dumps(r.to_dict(), indent=2, ensure_ascii=False))
        return

    click.echo()
    click.echo("=" * 60)
    click.echo(f"RECIPE: {r.title}")
    click.echo("=" * 60)
    if r.description:
        click.echo(r.description)
    if r.cook_time:
        click.echo(f"Cook time: {r.cook_time} min")

    click.echo("\nIngredients:")
    for i, ing in enumerate(r.ingredients, 1):
        category = ing.category or infer_category(ing.name)
        click.echo(f"  {i}. {ing}  ({category})")

    if r.steps:
        click.echo("\nSteps:")
        for i, step in enumerate(r.steps, 1):
            click.echo(f"  {i}. {step}")
    click.echo()


@recipe.command("add")
@click.argument("title")
@click.option(
    "--ingredient", "-i", "ingredients", multiple=True, help='Ingredient line, e.g. "2 cups flour"'
)
@click.option("--step", "-s", "steps", multiple=True, help="Instruction step, in order")
@click.option("--description", "-d", help="Short description")
@click.option("--cuisine", help="Cuisine, e.g. Italian")
@click.option("--meal-type", type=click.Choice(MEAL_TYPES, case_sensitive=False))
@click.option("--mastery", type=click.Choice(MASTERY_LEVELS, case_sensitive=False))
@click.option("--cook-time", type=int, help="Cook time in minutes")
@click.option("--calories", type=float)
@click.option("--protein", type=float)
@click.option("--carbs", type=float)
@click.option("--fats", type=float)
def recipe_add(
    title: str,
    ingredients: tuple[str, ...],
    steps: tuple[str, ...],
    **details,
):
    """Create a recipe.

    Examples:

        recipe-box recipe add "Pancakes" -i "2 cups flour" -i "1 cup milk" -i "2 eggs"
    """
    user_id = require_user()
    try:
        parsed = [parse_ingredient_text(line) for line in ingredients]
        new_recipe = build_recipe(
            title,
            user_id,
            ingredients=parsed,
            steps=list(steps),
            **{k: v for k, v in details.items() if v is not None},
        )
        saved = get_store().save_recipe(new_recipe)
    except (StoreError, ValueError) as e:
        fail(f"Failed to save recipe: {e}")
        return

    click.echo(f"✓ Saved '{saved.title}' with {len(saved.ingredients)} ingredient(s)")
    click.echo(f"  ID: {saved.id}")


@recipe.command("delete")
@click.argument("recipe_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def recipe_delete(recipe_id: str, yes: bool):
    """Delete a recipe. This cannot be undone."""
    if not yes:
        if not click.confirm("Delete this recipe?"):
            click.echo("Cancelled.")
            return

    try:
        deleted = get_store().delete_recipe(recipe_id)
    except StoreError as e:
        fail(f"Failed to delete recipe: {e}")
        return

    if not deleted:
        fail(f"Recipe '{recipe_id}' not found")
    click.echo("✓ Recipe deleted")


# ============================================================================
# Kitchen Helpers
# ============================================================================


@cli.command("convert", context_settings={"ignore_unknown_options": True})
@click.argument("value")
@click.argument("from_unit")
@click.argument("to_unit")
@click.option(
    "--family",
    "-f",
    type=click.Choice(list(UNITS_BY_FAMILY)),
    help="Unit family (detected from the units if omitted)",
)
def convert_cmd(value: str, from_unit: str, to_unit: str, family: str | None):
    """Convert between kitchen units.

    Examples:

        recipe-box convert 500 g oz

        recipe-box convert 180 C F
    """
    family = family or get_unit_family(from_unit)
    if family is None:
        units = ", ".join(u for group in UNITS_BY_FAMILY.values() for u in group)
        fail(f"Unknown unit '{from_unit}'. Supported: {units}")
        return

    try:
        result = format_conversion(value, from_unit, to_unit, family)
    except ValueError as e:
        fail(str(e))
        return

    if not result:
        fail(f"'{value}' is not a number")
        return

    click.echo(f"{value} {from_unit} = {result} {to_unit}")


@cli.command("classify")
@click.argument("names", nargs=-1, required=True)
def classify_cmd(names: tuple[str, ...]):
    """Show the grocery category for ingredient names.

    Examples:

        recipe-box classify "chicken breast" milk
    """
    for name in names:
        category = infer_category(name)
        marker = "" if category != DEFAULT_CATEGORY else " (no match)"
        click.echo(f"  {name}: {category}{marker}")


# ============================================================================
# Entry Point
# ============================================================================


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
