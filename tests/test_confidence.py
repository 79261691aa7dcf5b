"""Tests for forecast confidence scoring."""

from __future__ import annotations

import pytest

from restock.services.confidence import CONFIDENCE_LABELS, HIGH, LOW, MEDIUM, score_confidence


@pytest.mark.parametrize(
    "sample_count, moving, baseline, expected",
    [
        (10, 3.0, 0.0, HIGH),
        (14, 1.0, 5.0, HIGH),
        (10, None, 5.0, MEDIUM),
        (4, None, 0.0, MEDIUM),
        (2, 3.0, 5.0, MEDIUM),
        (2, 3.0, 0.0, LOW),
        (0, None, 5.0, LOW),
        (3, 0.0, 5.0, LOW),
    ],
)
def test_score_confidence(sample_count, moving, baseline, expected):
    assert score_confidence(sample_count, moving, baseline) == expected


def test_every_level_has_a_label():
    assert set(CONFIDENCE_LABELS) == {HIGH, MEDIUM, LOW}
