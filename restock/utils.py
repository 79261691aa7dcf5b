from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    # Use UTC timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0)


def to_iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts is not None else None


def from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def clean_text(value: Optional[str]) -> str:
    return str(value).strip() if value is not None else ""


def optional_text(value: Optional[str]) -> Optional[str]:
    s = clean_text(value)
    return s if s else None


def positive_or_none(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    v = int(value)
    return v if v > 0 else None


def parse_usage_entry(text: str) -> float:
    """Boundary check for a typed daily-usage value ("18", "18.5")."""
    try:
        value = float(str(text).strip())
    except ValueError:
        raise ValueError("Enter a valid usage number such as 18 or 18.5.")
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise ValueError("Enter a valid usage number such as 18 or 18.5.")
    return value


def format_quantity(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        return "-"
    if abs(round(value) - value) < 0.01:
        return str(int(round(value)))
    return f"{value:.1f}"
