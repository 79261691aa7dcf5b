from __future__ import annotations

import math

from restock.config import UNITS_PER_GALLON
from restock.models import InventoryItem


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def total_gallons(item: InventoryItem) -> float:
    return max(0.0, float(item.loose_units) + float(item.gallon_fraction))


def total_units(item: InventoryItem) -> int:
    """
    Canonical on-hand count.

    - Liquids: gallons (whole + fraction) scaled to UNITS_PER_GALLON.
    - Cased items: cases * units_per_case + loose units.
    - Everything else: quantity + loose units.

    Loose eaches are a finer manual adjustment and never part of the total.
    """
    if item.is_liquid:
        return _round_half_up(total_gallons(item) * UNITS_PER_GALLON)
    if item.units_per_case > 0:
        return max(0, int(item.quantity) * int(item.units_per_case) + int(item.loose_units))
    return max(0, int(item.quantity) + int(item.loose_units))


def apply_total_gallons(item: InventoryItem, gallons: float) -> None:
    clamped = max(0.0, float(gallons))
    whole = math.floor(clamped)
    item.loose_units = int(whole)
    item.gallon_fraction = clamped - whole


def apply_total_units(item: InventoryItem, new_total: int) -> None:
    """Decompose a canonical total back into the item's count fields."""
    clamped = max(0, int(new_total))
    if item.is_liquid:
        apply_total_gallons(item, clamped / UNITS_PER_GALLON)
        return

    if item.units_per_case > 0:
        item.quantity = clamped // item.units_per_case
        item.loose_units = clamped % item.units_per_case
    else:
        item.quantity = clamped
        item.loose_units = 0
    item.loose_eaches = 0


def add_units(item: InventoryItem, delta: int) -> tuple[int, int]:
    """
    Shift on-hand by delta (positive for receipts). A result below zero is
    floored at zero. Returns (previous_units, new_units).
    """
    previous = total_units(item)
    apply_total_units(item, previous + int(delta))
    return previous, total_units(item)


def describe_on_hand(item: InventoryItem) -> str:
    if item.is_liquid:
        return f"{total_gallons(item):.2f} gal"

    parts = []
    if item.units_per_case > 0:
        parts.append(f"{item.quantity} cs")
        parts.append(f"{item.loose_units} u")
    else:
        parts.append(f"{item.quantity + item.loose_units} u")
    if item.eaches_per_unit > 0 and item.loose_eaches > 0:
        parts.append(f"{item.loose_eaches} ea")
    return " + ".join(parts)
