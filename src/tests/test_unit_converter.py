"""
Unit tests for the unit conversion table.

Tests cover:
- Unit classification and standard units
- Tabulated conversions in both directions
- Identity fallback for missing, identical and untabulated units
- Price conversion moving opposite to quantity
"""

import pytest

from pantry_tracker.services.unit_converter import (
    CONVERSION_TABLE,
    IDENTITY,
    ConversionDirection,
    UnitDimension,
    canonical_unit,
    classify_unit,
    conversion_factor,
    convert_price,
    convert_quantity,
    format_conversion,
    standard_unit_for,
    units_compatible,
)


# ============================================================================
# Unit Classification Tests
# ============================================================================


class TestClassifyUnit:
    """Test unit dimension detection."""

    def test_weight_units(self):
        for unit in ["kg", "g", "mg", "lb", "oz"]:
            assert classify_unit(unit) is UnitDimension.WEIGHT

    def test_volume_units(self):
        for unit in ["l", "ml", "gal"]:
            assert classify_unit(unit) is UnitDimension.VOLUME

    def test_count_units(self):
        for unit in ["pcs", "bottle", "pack", "unit"]:
            assert classify_unit(unit) is UnitDimension.COUNT

    def test_case_and_whitespace_insensitive(self):
        assert classify_unit(" KG ") is UnitDimension.WEIGHT

    def test_unknown_and_missing(self):
        assert classify_unit("bushel") is UnitDimension.UNKNOWN
        assert classify_unit("") is UnitDimension.UNKNOWN
        assert classify_unit(None) is UnitDimension.UNKNOWN


class TestStandardUnits:
    """Test canonical unit selection."""

    def test_weight_standardizes_on_kg(self):
        assert canonical_unit(UnitDimension.WEIGHT, "g") == "kg"
        assert standard_unit_for("mg") == "kg"

    def test_volume_standardizes_on_liters(self):
        assert canonical_unit(UnitDimension.VOLUME, "ml") == "l"
        assert standard_unit_for("ml") == "l"

    def test_count_unit_is_its_own_standard(self):
        assert standard_unit_for("bottle") == "bottle"

    def test_missing_unit_defaults(self):
        assert canonical_unit(UnitDimension.UNKNOWN) == "unit"


class TestUnitsCompatible:
    def test_same_dimension(self):
        assert units_compatible("g", "kg") is True
        assert units_compatible("ml", "l") is True

    def test_different_dimension(self):
        assert units_compatible("ml", "kg") is False

    def test_unknown_is_never_compatible(self):
        assert units_compatible("bushel", "kg") is False


# ============================================================================
# Conversion Tests
# ============================================================================


class TestConversionFactor:
    """Test factor lookup."""

    def test_tabulated_pair(self):
        factor = conversion_factor("kg", "g")
        assert factor.factor == 1000.0
        assert factor.direction is ConversionDirection.MULTIPLY

    def test_reverse_pair_divides(self):
        factor = conversion_factor("g", "kg")
        assert factor.factor == 1000.0
        assert factor.direction is ConversionDirection.DIVIDE

    def test_every_pair_has_its_reverse(self):
        for from_unit, to_unit in CONVERSION_TABLE:
            assert (to_unit, from_unit) in CONVERSION_TABLE

    def test_same_unit_is_identity(self):
        assert conversion_factor("kg", "kg") is IDENTITY
        assert conversion_factor("KG", "kg") is IDENTITY

    def test_missing_unit_is_identity(self):
        assert conversion_factor(None, "kg") is IDENTITY
        assert conversion_factor("g", "") is IDENTITY

    def test_untabulated_pair_is_identity(self):
        assert conversion_factor("qt", "ml") is IDENTITY


class TestConvertQuantity:
    def test_grams_to_kilograms(self):
        assert convert_quantity(500, "g", "kg") == 0.5

    def test_kilograms_to_grams(self):
        assert convert_quantity(2, "kg", "g") == 2000

    def test_milliliters_to_liters(self):
        assert convert_quantity(250, "ml", "l") == 0.25

    def test_pounds_to_kilograms(self):
        assert convert_quantity(2.20462, "lb", "kg") == pytest.approx(1.0)

    def test_identity_fallback_keeps_value(self):
        assert convert_quantity(3, "pack", "pcs") == 3


class TestConvertPrice:
    def test_price_per_gram_to_price_per_kg(self):
        assert convert_price(0.12, "g", "kg") == pytest.approx(120.0)

    def test_price_per_kg_to_price_per_gram(self):
        assert convert_price(120.0, "kg", "g") == pytest.approx(0.12)

    def test_identity(self):
        assert convert_price(4.5, "bottle", "bottle") == 4.5


def test_format_conversion():
    assert format_conversion(500, "g", "kg") == "500 g = 0.50 kg"
