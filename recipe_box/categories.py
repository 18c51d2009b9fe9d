"""Grocery category inference from free-text ingredient names."""

import re
from typing import Any

DEFAULT_CATEGORY = "Other"

# Names shorter than this are too ambiguous to classify
MIN_NAME_LENGTH = 3

# Ordered by priority: the first category with a matching keyword wins.
# Keywords are matched as lowercase substrings, so avoid short fragments
# that occur inside unrelated words (e.g. "tea" in "steak", "ice" in "rice").
# The few short keywords that are kept go through WORD_PATTERNS instead.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Frozen",
        ("frozen", "ice cream", "ice cube", "popsicle", "sorbet", "fish fingers"),
    ),
    (
        "Beverages",
        (
            "juice",
            "coffee",
            "espresso",
            "club soda",
            "soda water",
            "champagne",
            "lemonade",
            "wine",
            "beer",
            "kombucha",
            "tea bag",
            "green tea",
            "black tea",
            "sparkling water",
            "mineral water",
        ),
    ),
    (
        "Meat",
        (
            "chicken",
            "beef",
            "pork",
            "ham",
            "bacon",
            "sausage",
            "turkey",
            "lamb",
            "veal",
            "duck",
            "steak",
            "mince",
            "salami",
            "prosciutto",
            "chorizo",
            "salmon",
            "tuna",
            "shrimp",
            "prawn",
            "fish",
        ),
    ),
    (
        "Produce",
        (
            "apple",
            "banana",
            "orange",
            "lemon",
            "lime",
            "berry",
            "berries",
            "grape",
            "mango",
            "avocado",
            "tomato",
            "potato",
            "onion",
            "garlic",
            "shallot",
            "carrot",
            "celery",
            "cucumber",
            "lettuce",
            "spinach",
            "kale",
            "cabbage",
            "broccoli",
            "cauliflower",
            "zucchini",
            "eggplant",
            "bell pepper",
            "chili",
            "mushroom",
            "ginger",
            "basil",
            "parsley",
            "cilantro",
            "coriander leaves",
            "mint",
            "sweet corn",
            "green peas",
            "snow peas",
            "squash",
            "butternut",
            "green bean",
        ),
    ),
    (
        "Dairy",
        (
            "milk",
            "cheese",
            "butter",
            "yogurt",
            "yoghurt",
            "cream",
            "egg",
            "parmesan",
            "mozzarella",
            "feta",
        ),
    ),
    (
        "Bakery",
        (
            "bread",
            "bagel",
            "baguette",
            "croissant",
            "tortilla",
            "pita",
            "muffin",
            "brioche",
            "bun",
        ),
    ),
    (
        "Pantry",
        (
            "flour",
            "sugar",
            "rice",
            "pasta",
            "spaghetti",
            "noodle",
            "oats",
            "cereal",
            "oil",
            "vinegar",
            "salt",
            "black pepper",
            "honey",
            "syrup",
            "sauce",
            "stock",
            "broth",
            "beans",
            "lentil",
            "chickpea",
            "yeast",
            "baking",
            "cumin",
            "paprika",
            "cinnamon",
            "oregano",
            "spice",
            "canned",
            "nuts",
        ),
    ),
)

GROCERY_CATEGORIES: tuple[str, ...] = tuple(label for label, _ in CATEGORY_KEYWORDS) + (
    DEFAULT_CATEGORY,
)

# Keywords matched as whole words with an optional plural "s". As substrings
# they would hit "veggie", "shampoo", "graham crackers" or "tin foil".
WORD_PATTERNS: dict[str, re.Pattern[str]] = {
    "egg": re.compile(r"\beggs?\b"),
    "ham": re.compile(r"\bhams?\b"),
    "bun": re.compile(r"\bbuns?\b"),
    "oil": re.compile(r"\boils?\b"),
    # lamb's lettuce is a salad leaf
    "lamb": re.compile(r"\blamb\b(?!'s? lettuce)"),
}


def _keyword_matches(keyword: str, normalized: str) -> bool:
    pattern = WORD_PATTERNS.get(keyword)
    if pattern is not None:
        return pattern.search(normalized) is not None
    return keyword in normalized


def infer_category(name: str | None) -> str:
    """
    Guess the grocery category for an ingredient name.

    Matching is case-insensitive and substring based, except for the short
    keywords in WORD_PATTERNS which must appear as whole words. Categories
    are tried in the order of CATEGORY_KEYWORDS and the first hit wins, so
    the same name always lands in the same category.

    Examples:
        "Chicken breast" -> "Meat"
        "whole milk" -> "Dairy"
        "xyz" -> "Other"

    Returns:
        One of GROCERY_CATEGORIES
    """
    if not name:
        return DEFAULT_CATEGORY

    normalized = name.strip().lower()
    if len(normalized) < MIN_NAME_LENGTH:
        return DEFAULT_CATEGORY

    for category, keywords in CATEGORY_KEYWORDS:
        if any(_keyword_matches(keyword, normalized) for keyword in keywords):
            return category

    return DEFAULT_CATEGORY


def group_by_category(items: list[Any]) -> dict[str, list[Any]]:
    """Group list items by their category attribute, falling back to Other."""
    groups: dict[str, list[Any]] = {}
    for item in items:
        category = getattr(item, "category", None) or DEFAULT_CATEGORY
        groups.setdefault(category, []).append(item)
    return groups
