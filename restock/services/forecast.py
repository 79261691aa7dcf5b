from __future__ import annotations

from typing import Iterable, Optional

from restock.config import DEFAULT_DEMAND_WINDOW
from restock.models import InventoryItem

# Auto-reorder velocity weighting: recent behaviour vs. manual baseline.
MOVING_WEIGHT = 0.65
BASELINE_WEIGHT = 0.35


def parse_demand_samples(raw: Optional[str]) -> list[float]:
    """
    Read the stored comma-separated sample list. Blank, non-numeric and
    negative tokens are skipped.
    """
    out: list[float] = []
    for token in str(raw or "").split(","):
        token = token.strip()
        if not token:
            continue
        try:
            value = float(token)
        except ValueError:
            continue
        if value >= 0:
            out.append(value)
    return out


def format_demand_samples(samples: Iterable[float]) -> str:
    # Full float precision.
    return ",".join(repr(max(0.0, float(s))) for s in samples)


def set_daily_demand_samples(
    item: InventoryItem, samples: Iterable[float], limit: int = DEFAULT_DEMAND_WINDOW
) -> None:
    bounded = max(1, int(limit))
    normalized = [max(0.0, float(s)) for s in samples]
    item.daily_demand_samples = normalized[-bounded:]


def append_daily_demand_sample(
    item: InventoryItem, value: float, limit: int = DEFAULT_DEMAND_WINDOW
) -> None:
    """
    Push one day's usage onto the rolling window, evicting the oldest entries
    past the limit. The first logged sample seeds a zero baseline.
    """
    sample = max(0.0, float(value))
    set_daily_demand_samples(item, [*item.daily_demand_samples, sample], limit=limit)
    if item.average_daily_usage <= 0:
        item.average_daily_usage = sample


def moving_average_daily_demand(samples: Iterable[float]) -> Optional[float]:
    values = list(samples)
    if not values:
        return None
    return sum(values) / len(values)


def item_moving_average(item: InventoryItem) -> Optional[float]:
    return moving_average_daily_demand(item.daily_demand_samples)


def planning_forecast(baseline: float, moving: Optional[float]) -> float:
    """Planner/exception forecast: whichever source reports more demand."""
    return max(max(0.0, float(baseline)), max(0.0, moving) if moving is not None else 0.0)


def blended_velocity(moving: Optional[float], baseline: float) -> float:
    """
    Auto-reorder velocity. With both sources positive the recent window
    dominates 65/35; otherwise the single available source is used.
    """
    m = max(0.0, moving) if moving is not None else 0.0
    b = max(0.0, float(baseline))
    if m > 0 and b > 0:
        return m * MOVING_WEIGHT + b * BASELINE_WEIGHT
    return max(m, b)


def item_planning_forecast(item: InventoryItem) -> float:
    return planning_forecast(item.average_daily_usage, item_moving_average(item))


def item_blended_velocity(item: InventoryItem) -> float:
    return blended_velocity(item_moving_average(item), item.average_daily_usage)
