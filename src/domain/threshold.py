"""
Threshold Module

Validates the user-supplied insufficient-hours threshold.
"""

import math
from typing import Optional

from .entities import ThresholdResult, INSUFFICIENT_HOURS_THRESHOLD

DEFAULT_THRESHOLD_TEXT = str(INSUFFICIENT_HOURS_THRESHOLD)


def _parse_positive(text: Optional[str]) -> Optional[float]:
    """Return the positive finite number in text, or None."""
    trimmed = (text or "").strip()
    if not trimmed:
        return None
    try:
        value = float(trimmed)
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def parse_threshold(
    text: Optional[str],
    fallback: Optional[str] = DEFAULT_THRESHOLD_TEXT
) -> ThresholdResult:
    """
    Parse a threshold string.

    Invalid input falls back to ``fallback`` and then to the hard default
    10.5; in both cases the result is marked invalid and ``normalized``
    holds the text that was actually used.
    """
    value = _parse_positive(text)
    if value is not None:
        return ThresholdResult(value=value, normalized=text.strip(), valid=True)

    fallback_value = _parse_positive(fallback)
    if fallback_value is not None:
        return ThresholdResult(
            value=fallback_value,
            normalized=fallback.strip(),
            valid=False
        )

    return ThresholdResult(
        value=INSUFFICIENT_HOURS_THRESHOLD,
        normalized=DEFAULT_THRESHOLD_TEXT,
        valid=False
    )
