"""Price/quantity normalization for purchase lines.

Given a purchase line (quantity, unit, total price) and the canonical unit
of the inventory item it is bought against, this module works out how much
stock to add in the item's unit and which standardized unit price to
record. It has no database access.

Standard unit price rules:
- A caller-supplied standard unit price (and unit) is trusted verbatim.
  Callers use this when they have already normalized the price, e.g. with
  ``standardize_unit_price`` or from earlier price history.
- Otherwise the price is ``total_price / purchased_quantity`` - a price per
  *purchase* unit, not re-expressed per canonical unit.
"""

from dataclasses import dataclass
import logging
import math
from typing import Optional

from ..utils.constants import UNIT_PRICE_PRECISION
from .exceptions import InvalidQuantity, UnsupportedConversion, ValidationError
from .unit_converter import UnitDimension, classify_unit, convert_quantity, format_conversion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurchaseLineRequest:
    """A purchase line as submitted by the caller.

    Attributes:
        item_id: Inventory item being bought
        purchased_quantity: Quantity in ``purchased_unit``
        purchased_unit: Unit of the purchase (None/"" means the item's unit)
        total_price: Total paid for the line
        standard_unit: Optional caller-computed standard unit
        standard_unit_price: Optional caller-computed price per standard unit
    """

    item_id: int
    purchased_quantity: float
    purchased_unit: Optional[str]
    total_price: float
    standard_unit: Optional[str] = None
    standard_unit_price: Optional[float] = None


@dataclass(frozen=True)
class NormalizedLine:
    """Result of normalizing a purchase line against an item."""

    quantity_to_add: float
    unit_price: float
    standard_unit: str
    standard_unit_price: float


def _round_price(value: float) -> float:
    return round(value, UNIT_PRICE_PRECISION)


def _positive_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def _same_unit(unit_a: Optional[str], unit_b: Optional[str]) -> bool:
    return (unit_a or "").strip().lower() == (unit_b or "").strip().lower()


def quantity_in_item_unit(
    purchased_quantity: float, purchased_unit: Optional[str], item_unit: Optional[str]
) -> float:
    """
    Convert a purchased quantity into the item's canonical unit.

    Args:
        purchased_quantity: Quantity in ``purchased_unit``
        purchased_unit: Unit of the purchase
        item_unit: The item's canonical unit

    Returns:
        Quantity in ``item_unit``

    Raises:
        UnsupportedConversion: If both units are known but measure different things
    """
    if not purchased_unit or not item_unit or _same_unit(purchased_unit, item_unit):
        return purchased_quantity

    purchased_dim = classify_unit(purchased_unit)
    item_dim = classify_unit(item_unit)

    if (
        purchased_dim is not UnitDimension.UNKNOWN
        and item_dim is not UnitDimension.UNKNOWN
        and purchased_dim != item_dim
    ):
        raise UnsupportedConversion(purchased_unit, item_unit)

    converted = convert_quantity(purchased_quantity, purchased_unit, item_unit)
    logger.debug(
        f"Stock conversion: "
        f"{format_conversion(purchased_quantity, purchased_unit, item_unit, precision=6)}"
    )
    return converted


def normalize_purchase_line(request: PurchaseLineRequest, item_unit: Optional[str]) -> NormalizedLine:
    """
    Normalize a purchase line against an inventory item's unit.

    Args:
        request: The purchase line
        item_unit: The item's canonical unit

    Returns:
        NormalizedLine with quantity to add (in ``item_unit``), the
        purchase-unit unit price and the standard unit price

    Raises:
        InvalidQuantity: If purchased_quantity is not a positive finite number, or
            is so small that the stock added or the unit price is not finite
        ValidationError: If total_price or a supplied standard_unit_price is
            negative or not finite
        UnsupportedConversion: If the units measure different dimensions

    Example:
        >>> line = normalize_purchase_line(
        ...     PurchaseLineRequest(item_id=1, purchased_quantity=500,
        ...                         purchased_unit="g", total_price=60),
        ...     item_unit="kg",
        ... )
        >>> line.quantity_to_add, line.standard_unit, line.standard_unit_price
        (0.5, 'kg', 0.12)
    """
    if not _positive_finite(request.purchased_quantity):
        raise InvalidQuantity(request.purchased_quantity)

    if (
        request.total_price is None
        or not math.isfinite(request.total_price)
        or request.total_price < 0
    ):
        raise ValidationError(["Total price must be a finite amount >= 0"])

    if request.standard_unit_price is not None and (
        not math.isfinite(request.standard_unit_price) or request.standard_unit_price < 0
    ):
        raise ValidationError(["Standard unit price must be a finite amount >= 0"])

    quantity_to_add = quantity_in_item_unit(
        request.purchased_quantity, request.purchased_unit, item_unit
    )
    if not _positive_finite(quantity_to_add):
        raise InvalidQuantity(request.purchased_quantity)

    unit_price = _round_price(request.total_price / request.purchased_quantity)
    if not math.isfinite(unit_price):
        raise InvalidQuantity(request.purchased_quantity)

    if request.standard_unit_price is not None:
        standard_unit_price = request.standard_unit_price
        standard_unit = request.standard_unit or item_unit or request.purchased_unit
    else:
        standard_unit_price = unit_price
        standard_unit = item_unit or request.purchased_unit

    return NormalizedLine(
        quantity_to_add=quantity_to_add,
        unit_price=unit_price,
        standard_unit=standard_unit,
        standard_unit_price=standard_unit_price,
    )


def standardize_unit_price(
    total_price: float,
    purchased_quantity: float,
    purchased_unit: Optional[str],
    canonical_unit: Optional[str],
) -> float:
    """
    Compute the price per canonical unit for a purchase.

    This is the fully normalized figure callers may pass as
    ``standard_unit_price``.

    Raises:
        InvalidQuantity: If the quantity (before or after conversion) is not a
            positive finite number, or the resulting price is not finite
        ValidationError: If total_price is negative or not finite

    Example:
        >>> standardize_unit_price(60, 500, "g", "kg")
        120.0
    """
    if not _positive_finite(purchased_quantity):
        raise InvalidQuantity(purchased_quantity)
    if total_price is None or not math.isfinite(total_price) or total_price < 0:
        raise ValidationError(["Total price must be a finite amount >= 0"])

    canonical_quantity = quantity_in_item_unit(purchased_quantity, purchased_unit, canonical_unit)
    if not _positive_finite(canonical_quantity):
        raise InvalidQuantity(canonical_quantity)

    price = _round_price(total_price / canonical_quantity)
    if not math.isfinite(price):
        raise InvalidQuantity(purchased_quantity)
    return price
