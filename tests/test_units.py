"""Tests for the units module."""

import pytest

from recipe_box.units import (
    CONVERSION_RATES,
    UNITS_BY_FAMILY,
    UnitConversionError,
    convert,
    format_conversion,
    format_quantity,
    get_unit_family,
    parse_number,
)

# ============================================================================
# Unit Family Tests
# ============================================================================


class TestGetUnitFamily:
    """Tests for get_unit_family."""

    @pytest.mark.parametrize("unit", ["g", "kg", "oz", "lb"])
    def test_weight_units(self, unit):
        assert get_unit_family(unit) == "weight"

    @pytest.mark.parametrize("unit", ["ml", "l", "tsp", "tbsp", "cup", "floz"])
    def test_volume_units(self, unit):
        assert get_unit_family(unit) == "volume"

    @pytest.mark.parametrize("unit", ["C", "F", "c", "f"])
    def test_temperature_units(self, unit):
        assert get_unit_family(unit) == "temperature"

    def test_unknown_unit(self):
        assert get_unit_family("stone") is None
        assert get_unit_family(None) is None

    def test_every_listed_unit_has_a_family(self):
        for family, units in UNITS_BY_FAMILY.items():
            for unit in units:
                assert get_unit_family(unit) == family


# ============================================================================
# Number Parsing Tests
# ============================================================================


class TestParseNumber:
    """Tests for parse_number."""

    def test_numbers(self):
        assert parse_number(3) == 3.0
        assert parse_number(2.5) == 2.5

    def test_numeric_strings(self):
        assert parse_number("100") == 100.0
        assert parse_number(" 1.5 ") == 1.5
        assert parse_number("1,5") == 1.5

    @pytest.mark.parametrize("value", [None, "", "abc", "1.2.3", True, "nan", "inf"])
    def test_not_numbers(self, value):
        assert parse_number(value) is None


# ============================================================================
# Conversion Tests
# ============================================================================


class TestConvert:
    """Tests for convert."""

    def test_grams_to_ounces(self):
        assert convert(100, "g", "oz", "weight") == pytest.approx(3.5274, abs=1e-4)

    def test_kilograms_to_pounds(self):
        assert convert(1, "kg", "lb", "weight") == pytest.approx(2.20462, abs=1e-5)

    def test_cups_to_milliliters(self):
        assert convert(1, "cup", "ml", "volume") == pytest.approx(236.588)

    def test_tablespoons_to_teaspoons(self):
        assert convert(1, "tbsp", "tsp", "volume") == pytest.approx(3.0, abs=1e-3)

    def test_same_unit(self):
        assert convert(42, "ml", "ml", "volume") == 42

    def test_celsius_to_fahrenheit(self):
        assert convert(100, "C", "F", "temperature") == 212
        assert convert(0, "C", "F", "temperature") == 32

    def test_fahrenheit_to_celsius(self):
        assert convert(212, "F", "C", "temperature") == pytest.approx(100)
        assert convert(-40, "F", "C", "temperature") == pytest.approx(-40)

    def test_freezing_point(self):
        assert convert(32, "F", "C", "temperature") == 0
        assert convert(1000, "g", "kg", "weight") == 1

    def test_same_temperature_unit(self):
        assert convert(180, "C", "C", "temperature") == 180

    def test_string_input(self):
        assert convert("1000", "g", "kg", "weight") == pytest.approx(1.0)

    def test_non_numeric_input_gives_none(self):
        assert convert("abc", "g", "kg", "weight") is None
        assert convert("", "C", "F", "temperature") is None

    def test_keeps_full_precision(self):
        result = convert(1, "oz", "g", "weight")
        assert result == CONVERSION_RATES["oz"][0]

    def test_round_trip(self):
        there = convert(250, "ml", "cup", "volume")
        assert convert(there, "cup", "ml", "volume") == pytest.approx(250)

    def test_round_trip_weight(self):
        there = convert(250, "g", "oz", "weight")
        assert convert(there, "oz", "g", "weight") == pytest.approx(250)

    def test_unit_case_is_ignored(self):
        assert convert(1, "KG", "G", "weight") == pytest.approx(1000)

    def test_unknown_unit_raises(self):
        with pytest.raises(UnitConversionError):
            convert(1, "stone", "kg", "weight")

    def test_unit_from_other_family_raises(self):
        with pytest.raises(UnitConversionError):
            convert(1, "g", "ml", "weight")
        with pytest.raises(UnitConversionError):
            convert(1, "g", "F", "temperature")

    def test_units_are_checked_before_value(self):
        with pytest.raises(UnitConversionError):
            convert("abc", "g", "cup", "weight")

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            convert(1, "g", "kg", "volume")


class TestFormatConversion:
    """Tests for format_conversion."""

    def test_weight_two_decimals(self):
        assert format_conversion(100, "g", "oz", "weight") == "3.53"

    def test_volume_two_decimals(self):
        assert format_conversion(1, "l", "ml", "volume") == "1000.00"

    def test_temperature_one_decimal(self):
        assert format_conversion(0, "C", "F", "temperature") == "32.0"
        assert format_conversion(180, "C", "F", "temperature") == "356.0"

    def test_non_numeric_is_empty(self):
        assert format_conversion("lots", "g", "oz", "weight") == ""


class TestFormatQuantity:
    """Tests for format_quantity."""

    def test_whole_number(self):
        assert format_quantity(2.0) == "2"

    def test_decimal(self):
        assert format_quantity(1.25) == "1.25"
        assert format_quantity(0.5) == "0.5"

    def test_none(self):
        assert format_quantity(None) == ""
