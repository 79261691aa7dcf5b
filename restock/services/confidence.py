from __future__ import annotations

from typing import Optional

HIGH = "HIGH"
MEDIUM = "MEDIUM"
LOW = "LOW"

CONFIDENCE_LABELS = {
    HIGH: "High confidence",
    MEDIUM: "Medium confidence",
    LOW: "Low confidence",
}


def score_confidence(sample_count: int, moving_demand: Optional[float], baseline_demand: float) -> str:
    # Display/priority metadata only; never decides whether a suggestion exists.
    moving = moving_demand or 0.0
    if sample_count >= 10 and moving > 0:
        return HIGH
    if sample_count >= 4 or (moving > 0 and baseline_demand > 0):
        return MEDIUM
    return LOW
