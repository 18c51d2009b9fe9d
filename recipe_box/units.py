"""Unit conversion utilities for the kitchen unit converter."""

import math
from typing import Literal

UnitFamily = Literal["weight", "volume", "temperature"]


class UnitConversionError(ValueError):
    """Raised when a unit is not part of the requested family."""

    pass


# Conversion factors to base units (grams for weight, milliliters for volume)
CONVERSION_RATES: dict[str, tuple[float, UnitFamily]] = {
    # Weight -> grams
    "g": (1.0, "weight"),
    "kg": (1000.0, "weight"),
    "oz": (28.3495, "weight"),
    "lb": (453.592, "weight"),
    # Volume -> milliliters
    "ml": (1.0, "volume"),
    "l": (1000.0, "volume"),
    "tsp": (4.92892, "volume"),
    "tbsp": (14.7868, "volume"),
    "cup": (236.588, "volume"),
    "floz": (29.5735, "volume"),
}

TEMPERATURE_UNITS = ("C", "F")

# Selectable units per family, in display order
UNITS_BY_FAMILY: dict[UnitFamily, tuple[str, ...]] = {
    "weight": ("g", "kg", "oz", "lb"),
    "volume": ("ml", "l", "tsp", "tbsp", "cup", "floz"),
    "temperature": TEMPERATURE_UNITS,
}

# Decimals shown for a converted value
DISPLAY_DECIMALS: dict[UnitFamily, int] = {
    "weight": 2,
    "volume": 2,
    "temperature": 1,
}


def get_unit_family(unit: str | None) -> UnitFamily | None:
    """Get the family of a unit (weight, volume or temperature), or None if unknown."""
    if unit is None:
        return None

    unit = unit.strip()
    if unit.upper() in TEMPERATURE_UNITS:
        return "temperature"

    unit_lower = unit.lower()
    if unit_lower in CONVERSION_RATES:
        return CONVERSION_RATES[unit_lower][1]

    return None


def parse_number(value: object) -> float | None:
    """
    Parse a user-supplied value as a number.

    Accepts ints, floats and numeric strings (with "." or "," as decimal
    separator). Returns None for anything that is not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int | float):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _factor(unit: str, family: UnitFamily) -> float:
    """Look up the base-unit factor for a unit, checking it belongs to the family."""
    entry = CONVERSION_RATES.get(unit.strip().lower())
    if entry is None or entry[1] != family:
        raise UnitConversionError(f"Unknown {family} unit: {unit!r}")
    return entry[0]


def _check_temperature_unit(unit: str) -> str:
    normalized = unit.strip().upper()
    if normalized not in TEMPERATURE_UNITS:
        raise UnitConversionError(f"Unknown temperature unit: {unit!r}")
    return normalized


def _convert_temperature(value: float, from_unit: str, to_unit: str) -> float:
    if from_unit == "C" and to_unit == "F":
        return value * 9 / 5 + 32
    if from_unit == "F" and to_unit == "C":
        return (value - 32) * 5 / 9
    return value


def convert(
    value: object,
    from_unit: str,
    to_unit: str,
    family: UnitFamily,
) -> float | None:
    """
    Convert a value between two units of the same family.

    Weight and volume are linear through a base unit; temperature is
    affine (C <-> F). Full precision is kept, use format_conversion for
    display rounding.

    Args:
        value: The value to convert (number or numeric string)
        from_unit: Source unit
        to_unit: Target unit
        family: "weight", "volume" or "temperature"

    Returns:
        Converted value, or None if value is not numeric

    Raises:
        UnitConversionError: If either unit is not in the family's table
    """
    number = parse_number(value)

    if family == "temperature":
        from_temp = _check_temperature_unit(from_unit)
        to_temp = _check_temperature_unit(to_unit)
        if number is None:
            return None
        return _convert_temperature(number, from_temp, to_temp)

    if family not in ("weight", "volume"):
        raise UnitConversionError(f"Unknown unit family: {family!r}")

    from_factor = _factor(from_unit, family)
    to_factor = _factor(to_unit, family)

    if number is None:
        return None

    return number * from_factor / to_factor


def format_conversion(
    value: object,
    from_unit: str,
    to_unit: str,
    family: UnitFamily,
) -> str:
    """
    Convert and format a value for display.

    Returns:
        The rounded result (e.g. "35.27" or "32.0"), or "" when the input is
        not a number
    """
    result = convert(value, from_unit, to_unit, family)
    if result is None:
        return ""
    return f"{result:.{DISPLAY_DECIMALS[family]}f}"


def format_quantity(quantity: float | None) -> str:
    """Format a quantity without trailing zeros (2.0 -> "2", 1.25 -> "1.25")."""
    if quantity is None:
        return ""
    if quantity == int(quantity):
        return str(int(quantity))
    return f"{quantity:.2f}".rstrip("0").rstrip(".")
