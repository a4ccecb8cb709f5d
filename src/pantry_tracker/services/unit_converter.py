"""
Unit conversion table for Pantry Tracker.

This module provides:
- Unit classification (weight, volume, count)
- Canonical (standard) unit per dimension
- Conversion factors between tabulated unit pairs
- Quantity and per-unit price conversion helpers

Conversion Strategy:
- Weight is standardized on kilograms, volume on liters
- Count units have no universal standard; an item's own unit is its standard
- Conversions are an explicit table of unit pairs with a factor and a
  direction; pairs that are not tabulated (including same units and
  missing units) fall back to an identity conversion
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Dict, Optional, Tuple

from ..utils.constants import (
    COUNT_UNITS,
    DEFAULT_COUNT_UNIT,
    STANDARD_VOLUME_UNIT,
    STANDARD_WEIGHT_UNIT,
    VOLUME_UNITS,
    WEIGHT_UNITS,
)

logger = logging.getLogger(__name__)


class UnitDimension(Enum):
    """What a unit measures."""

    WEIGHT = "weight"
    VOLUME = "volume"
    COUNT = "count"
    UNKNOWN = "unknown"


class ConversionDirection(Enum):
    """How a quantity in the source unit becomes a quantity in the target unit."""

    MULTIPLY = "multiply"
    DIVIDE = "divide"
    IDENTITY = "same"


@dataclass(frozen=True)
class ConversionFactor:
    """Factor and direction for converting a quantity between two units."""

    factor: float
    direction: ConversionDirection

    def apply(self, quantity: float) -> float:
        """Convert a quantity in the source unit to the target unit."""
        if self.direction is ConversionDirection.MULTIPLY:
            return quantity * self.factor
        if self.direction is ConversionDirection.DIVIDE:
            return quantity / self.factor
        return quantity

    def apply_to_price(self, price: float) -> float:
        """Convert a per-source-unit price to a per-target-unit price.

        Prices move opposite to quantities: 1 kg = 1000 g, so a price per
        kg is 1000 times a price per g.
        """
        if self.direction is ConversionDirection.MULTIPLY:
            return price / self.factor
        if self.direction is ConversionDirection.DIVIDE:
            return price * self.factor
        return price


IDENTITY = ConversionFactor(1.0, ConversionDirection.IDENTITY)


# ============================================================================
# Conversion Table
# ============================================================================

# (from_unit, to_unit) -> factor; converting a quantity multiplies by factor.
# The reverse pair is derived with the DIVIDE direction.
_QUANTITY_MULTIPLIERS: Dict[Tuple[str, str], float] = {
    # Metric weight
    ("kg", "g"): 1000.0,
    ("kg", "mg"): 1000000.0,
    ("g", "mg"): 1000.0,
    # Metric volume
    ("l", "ml"): 1000.0,
    # Imperial/metric
    ("kg", "lb"): 2.20462,
    ("oz", "g"): 28.3495,
    ("gal", "l"): 3.78541,
}


def _build_conversion_table() -> Dict[Tuple[str, str], ConversionFactor]:
    table = {}
    for (from_unit, to_unit), factor in _QUANTITY_MULTIPLIERS.items():
        table[(from_unit, to_unit)] = ConversionFactor(factor, ConversionDirection.MULTIPLY)
        table[(to_unit, from_unit)] = ConversionFactor(factor, ConversionDirection.DIVIDE)
    return table


CONVERSION_TABLE: Dict[Tuple[str, str], ConversionFactor] = _build_conversion_table()


# ============================================================================
# Unit Type Detection
# ============================================================================


def _normalize(unit: Optional[str]) -> str:
    return (unit or "").strip().lower()


def classify_unit(unit: Optional[str]) -> UnitDimension:
    """
    Determine the dimension of a unit.

    Args:
        unit: Unit string (case-insensitive)

    Returns:
        UnitDimension; UNKNOWN for missing or unlisted units
    """
    unit_lower = _normalize(unit)

    if unit_lower in WEIGHT_UNITS:
        return UnitDimension.WEIGHT
    elif unit_lower in VOLUME_UNITS:
        return UnitDimension.VOLUME
    elif unit_lower in COUNT_UNITS:
        return UnitDimension.COUNT

    return UnitDimension.UNKNOWN


def canonical_unit(dimension: UnitDimension, unit: Optional[str] = None) -> str:
    """
    Get the standard unit for a dimension.

    Args:
        dimension: Unit dimension
        unit: The unit being standardized; returned as-is for count and
              unknown dimensions

    Returns:
        "kg" for weight, "l" for volume, otherwise ``unit`` (or "unit")
    """
    if dimension is UnitDimension.WEIGHT:
        return STANDARD_WEIGHT_UNIT
    if dimension is UnitDimension.VOLUME:
        return STANDARD_VOLUME_UNIT
    return unit or DEFAULT_COUNT_UNIT


def standard_unit_for(unit: Optional[str]) -> str:
    """
    Get the standard unit a price for ``unit`` is compared in.

    Example:
        >>> standard_unit_for("g")
        'kg'
        >>> standard_unit_for("bottle")
        'bottle'
    """
    return canonical_unit(classify_unit(unit), unit)


def units_compatible(unit1: Optional[str], unit2: Optional[str]) -> bool:
    """
    Check if two units are of the same known dimension.

    Args:
        unit1: First unit
        unit2: Second unit

    Returns:
        True if both units are classified and share a dimension
    """
    dim1 = classify_unit(unit1)
    dim2 = classify_unit(unit2)

    if dim1 is UnitDimension.UNKNOWN or dim2 is UnitDimension.UNKNOWN:
        return False

    return dim1 == dim2


# ============================================================================
# Conversions
# ============================================================================


def conversion_factor(from_unit: Optional[str], to_unit: Optional[str]) -> ConversionFactor:
    """
    Look up the factor converting quantities from one unit to another.

    Missing units, identical units and pairs absent from the table all
    return the identity conversion. This includes pairs from different
    dimensions; callers that need to reject those check dimensions first.

    Args:
        from_unit: Source unit
        to_unit: Target unit

    Returns:
        ConversionFactor

    Example:
        >>> conversion_factor("kg", "g")
        ConversionFactor(factor=1000.0, direction=<ConversionDirection.MULTIPLY: 'multiply'>)
    """
    source = _normalize(from_unit)
    target = _normalize(to_unit)

    if not source or not target or source == target:
        return IDENTITY

    factor = CONVERSION_TABLE.get((source, target))
    if factor is None:
        logger.debug(f"No conversion rule for {from_unit} to {to_unit}, using identity")
        return IDENTITY

    return factor


def convert_quantity(value: float, from_unit: Optional[str], to_unit: Optional[str]) -> float:
    """
    Convert a quantity between units.

    Example:
        >>> convert_quantity(2000, "g", "kg")
        2.0
    """
    return conversion_factor(from_unit, to_unit).apply(value)


def convert_price(price: float, from_unit: Optional[str], to_unit: Optional[str]) -> float:
    """
    Convert a per-unit price between units.

    Example:
        >>> convert_price(0.12, "g", "kg")
        120.0
    """
    return conversion_factor(from_unit, to_unit).apply_to_price(price)


def format_conversion(value: float, from_unit: str, to_unit: str, precision: int = 2) -> str:
    """
    Format a unit conversion for display.

    Returns:
        Formatted string (e.g., "500 g = 0.50 kg")
    """
    converted = convert_quantity(value, from_unit, to_unit)
    return f"{value:g} {from_unit} = {converted:.{precision}f} {to_unit}"
