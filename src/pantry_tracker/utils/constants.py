"""
Constants for the Pantry Tracker application.

This module defines system-wide constants including:
- Application metadata
- Unit lists (weight, volume, count)
- Default categories seeded on first start
"""

from typing import List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Pantry Tracker"
APP_VERSION = "0.1.0"
DATABASE_VERSION = "6"
DATABASE_FILENAME = "pantry_tracker.sqlite"
APP_DIR_NAME = "PantryTracker"

# ============================================================================
# Unit Types
# ============================================================================

# Weight units
WEIGHT_UNITS: List[str] = [
    "kg",  # Kilogram
    "g",  # Gram
    "mg",  # Milligram
    "lb",  # Pound
    "oz",  # Ounce
]

# Volume units
VOLUME_UNITS: List[str] = [
    "l",  # Liter
    "ml",  # Milliliter
    "gal",  # Gallon
    "qt",  # Quart
    "pt",  # Pint
    "fl oz",  # Fluid ounce
]

# Count/discrete units
COUNT_UNITS: List[str] = [
    "pcs",
    "box",
    "pack",
    "bottle",
    "can",
    "bag",
    "jar",
    "unit",
]

# Canonical units per dimension
STANDARD_WEIGHT_UNIT = "kg"
STANDARD_VOLUME_UNIT = "l"
DEFAULT_COUNT_UNIT = "unit"

# Units a "1 x unit" purchase is treated as a reference price for
REFERENCE_PRICE_UNITS: List[str] = ["kg", "l", "bottle", "unit"]

# Decimal places kept on computed unit prices
UNIT_PRICE_PRECISION = 4

# ============================================================================
# Categories
# ============================================================================

DEFAULT_CATEGORIES: List[str] = [
    "Spices",
    "Grains",
    "Pulses",
    "Oils",
    "Dairy",
    "Vegetables",
    "Fruits",
    "Snacks",
    "Beverages",
    "Cleaning Supplies",
    "Others",
]
