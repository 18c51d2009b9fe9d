"""Recipe creation and ingredient text parsing."""

import re
from typing import Any

from .models import Recipe, RecipeIngredient
from .units import parse_number


class RecipeError(ValueError):
    """Exception raised for invalid recipe input."""

    pass


# Recipe unit spellings mapped to the short forms used on the grocery list
UNIT_ALIASES: dict[str, str] = {
    # Volume
    "cup": "cup",
    "cups": "cup",
    "c": "cup",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "tbsp": "tbsp",
    "tbs": "tbsp",
    "tb": "tbsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "tsp": "tsp",
    "ts": "tsp",
    "ml": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "l": "l",
    "liter": "l",
    "liters": "l",
    "litre": "l",
    "litres": "l",
    "fl oz": "floz",
    "floz": "floz",
    "fluid ounce": "floz",
    "fluid ounces": "floz",
    # Weight
    "g": "g",
    "gram": "g",
    "grams": "g",
    "kg": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "pounds": "lb",
    # Count
    "piece": "pcs",
    "pieces": "pcs",
    "pcs": "pcs",
    "clove": "clove",
    "cloves": "clove",
    "slice": "slice",
    "slices": "slice",
    "bunch": "bunch",
    "bunches": "bunch",
    "can": "can",
    "cans": "can",
    "package": "pkg",
    "packages": "pkg",
    "pkg": "pkg",
    "bag": "bag",
    "bags": "bag",
    "bottle": "bottle",
    "bottles": "bottle",
    "head": "head",
    "heads": "head",
    "stalk": "stalk",
    "stalks": "stalk",
    "sprig": "sprig",
    "sprigs": "sprig",
}

# Fraction to decimal mapping
FRACTIONS = {
    "½": 0.5,
    "⅓": 0.333,
    "⅔": 0.667,
    "¼": 0.25,
    "¾": 0.75,
    "⅛": 0.125,
    "1/2": 0.5,
    "1/3": 0.333,
    "2/3": 0.667,
    "1/4": 0.25,
    "3/4": 0.75,
    "1/8": 0.125,
}

MEAL_TYPES = ("Breakfast", "Lunch", "Dinner", "Snack", "Dessert")
MASTERY_LEVELS = ("Easy", "Medium", "Hard")


def parse_quantity(text: str) -> tuple[float | None, str]:
    """
    Parse quantity from the beginning of an ingredient string.

    Handles decimals ("1.5", "1,5"), fractions ("1/2", "½"), mixed numbers
    ("1 1/2") and ranges ("2-3", the higher value is used).

    Returns:
        Tuple of (quantity, remaining_text)
    """
    text = text.strip()

    for frac, value in FRACTIONS.items():
        if text.startswith(frac):
            return value, text[len(frac) :].strip()

    pattern = r"^(\d+\s+\d+/\d+|\d+/\d+|\d+(?:[\.,]\d+)?(?:\s*[-–]\s*\d+(?:[\.,]\d+)?)?)"
    match = re.match(pattern, text)
    if not match:
        return None, text

    qty_str = match.group(1).replace(",", ".")
    remaining = text[match.end() :].strip()

    # Ranges: take the higher value
    if "-" in qty_str or "–" in qty_str:
        upper, _ = parse_quantity(re.split(r"[-–]", qty_str)[-1])
        return upper, remaining

    # Mixed numbers like "1 1/2"
    if " " in qty_str and "/" in qty_str:
        whole, frac = qty_str.split()
        numerator, denominator = frac.split("/")
        if float(denominator) == 0:
            return float(whole), remaining
        return float(whole) + float(numerator) / float(denominator), remaining

    if "/" in qty_str:
        numerator, denominator = qty_str.split("/")
        if float(denominator) == 0:
            return None, text
        return float(numerator) / float(denominator), remaining

    return float(qty_str), remaining


def parse_unit(text: str) -> tuple[str | None, str]:
    """
    Parse unit from the beginning of text.

    Returns:
        Tuple of (canonical unit, remaining_text)
    """
    words = text.strip().split()
    if not words:
        return None, text.strip()

    # Two-word units first (e.g. "fl oz", "fluid ounce")
    if len(words) >= 2:
        two_word = f"{words[0]} {words[1]}".lower()
        if two_word in UNIT_ALIASES:
            return UNIT_ALIASES[two_word], " ".join(words[2:])

    first_word = words[0].lower().rstrip(",.")
    if first_word in UNIT_ALIASES:
        return UNIT_ALIASES[first_word], " ".join(words[1:])

    return None, text.strip()


def parse_ingredient_text(text: str, category: str | None = None) -> RecipeIngredient:
    """
    Parse a single ingredient line.

    Examples:
        "2 cups flour, sifted" -> RecipeIngredient("flour", 2.0, "cup")
        "1 lb chicken breast" -> RecipeIngredient("chicken breast", 1.0, "lb")
        "salt" -> RecipeIngredient("salt")
    """
    quantity, remaining = parse_quantity(text)
    unit, remaining = parse_unit(remaining)

    # Drop preparation notes: "(optional)" or ", finely chopped"
    name = re.sub(r"\([^)]*\)", "", remaining)
    name = name.split(",", 1)[0]
    name = re.sub(r"\s+", " ", name).strip().rstrip(".")

    if not name:
        raise RecipeError(f"No ingredient name in '{text.strip()}'")

    return RecipeIngredient(name=name, quantity=quantity, unit=unit, category=category)


def parse_ingredients_text(text: str) -> list[RecipeIngredient]:
    """Parse multiple ingredients from text, one per line."""
    ingredients = []

    for line in text.strip().split("\n"):
        line = line.strip()
        if not line or line.lower().startswith(("ingredients", "for the", "---")):
            continue
        # Bullets and numbering
        line = re.sub(r"^[\-\*•]\s*", "", line)
        line = re.sub(r"^\d+\.\s*", "", line)

        if line:
            ingredients.append(parse_ingredient_text(line))

    return ingredients


def _clean_ingredient(ingredient: RecipeIngredient) -> RecipeIngredient | None:
    name = ingredient.name.strip()
    if not name:
        return None
    # A zero or non-numeric quantity is stored as no quantity
    quantity = parse_number(ingredient.quantity) or None
    return RecipeIngredient(
        name=name,
        quantity=quantity,
        unit=(ingredient.unit or "").strip() or None,
        category=ingredient.category or None,
    )


def build_recipe(
    title: str,
    user_id: str,
    ingredients: list[RecipeIngredient] | None = None,
    steps: list[str] | None = None,
    recipe_id: str | None = None,
    **details: Any,
) -> Recipe:
    """
    Validate and assemble a recipe for saving.

    Blank ingredients and steps are dropped. Numeric details (cook_time,
    calories, protein, carbs, fats) that are not numbers are stored empty.

    Raises:
        RecipeError: If the title is blank or a detail is unknown
    """
    title = title.strip()
    if not title:
        raise RecipeError("Recipe title cannot be empty")

    numeric = {"cook_time", "calories", "protein", "carbs", "fats"}
    text = {"description", "cuisine", "meal_type", "mastery"}
    unknown = set(details) - numeric - text
    if unknown:
        raise RecipeError(f"Unknown recipe fields: {', '.join(sorted(unknown))}")

    fields: dict[str, Any] = {}
    for key, value in details.items():
        if key in numeric:
            number = parse_number(value)
            if key == "cook_time" and number is not None:
                number = int(number)
            fields[key] = number
        else:
            fields[key] = (value or "").strip() or None

    cleaned = [c for c in (_clean_ingredient(i) for i in ingredients or []) if c is not None]
    cleaned_steps = [s.strip() for s in steps or [] if s and s.strip()]

    return Recipe(
        id=recipe_id,
        user_id=user_id,
        title=title,
        ingredients=cleaned,
        steps=cleaned_steps,
        **fields,
    )
