from __future__ import annotations

from typing import Optional

from restock.models import InventoryItem


def round_up_to_pack(units: int, case_pack: Optional[int]) -> int:
    pack = int(case_pack or 0)
    if pack <= 0:
        return units
    remainder = units % pack
    if remainder:
        units += pack - remainder
    return units


def adjust_order_quantity(
    raw_units: int,
    minimum_order_quantity: Optional[int] = None,
    reorder_case_pack: Optional[int] = None,
) -> int:
    """
    Apply supplier constraints to a raw suggestion.

    Case-pack rounding (always up) comes first; a minimum that is still not
    met is then raised to, and itself rounded up to, the case pack.
    17 units, pack 6, minimum 20 -> 18 -> 24.
    """
    units = int(raw_units)
    if units <= 0:
        return 0

    units = round_up_to_pack(units, reorder_case_pack)

    moq = int(minimum_order_quantity or 0)
    if moq > 0 and units < moq:
        units = round_up_to_pack(moq, reorder_case_pack)
    return units


def adjust_for_item(item: InventoryItem, raw_units: int) -> int:
    return adjust_order_quantity(raw_units, item.minimum_order_quantity, item.reorder_case_pack)
