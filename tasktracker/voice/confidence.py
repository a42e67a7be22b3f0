"""Overall confidence blending for parsed voice input.

overall = base + date*dc + time*tc + category*cc + priority*pc

Each term is 0 when its field was not resolved. Nothing resolved
beyond the title still yields the base; no usable title yields 0.
"""

from __future__ import annotations

from tasktracker.voice.config import ConfidenceWeights

DEFAULT_WEIGHTS = ConfidenceWeights()


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def blend_confidence(
    title_resolved: bool,
    date_confidence: float | None = None,
    time_confidence: float | None = None,
    category_confidence: float | None = None,
    priority_confidence: float | None = None,
    weights: ConfidenceWeights | None = None,
) -> float:
    if not title_resolved:
        return 0.0

    w = weights or DEFAULT_WEIGHTS
    total = w.base
    for weight, conf in (
        (w.date, date_confidence),
        (w.time, time_confidence),
        (w.category, category_confidence),
        (w.priority, priority_confidence),
    ):
        if conf is not None:
            total += weight * clamp(conf)

    return round(clamp(total), 4)
