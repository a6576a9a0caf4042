"""Ordinary-least-squares trend fitting over short annual or monthly windows."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
T = TypeVar("T")


@dataclass(frozen=True)
class TrendModel:
    slope: float
    intercept: float

    def predict(self, x: float) -> float:
        # No bounds check: far extrapolations are returned as computed.
        return self.intercept + self.slope * x


def linear_regression(points: Sequence[Point]) -> Optional[TrendModel]:
    """Fit ``y = intercept + slope * x`` with the closed-form normal equations.

    Returns ``None`` for fewer than two points or when every x is identical.
    """
    if len(points) < 2:
        logger.debug("Trend fit skipped: %d point(s)", len(points))
        return None

    n = len(points)
    sum_x = sum_y = sum_xy = sum_xx = 0.0
    for x, y in points:
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_xx += x * x

    denom = n * sum_xx - sum_x * sum_x
    if denom == 0:
        logger.debug("Trend fit skipped: degenerate x values over %d points", n)
        return None

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n
    return TrendModel(slope=slope, intercept=intercept)


def project(model: Optional[TrendModel], x: float, fallback: float) -> float:
    """Predict at ``x``, or repeat ``fallback`` when there is no model."""
    return model.predict(x) if model is not None else fallback


def tail_by_year(series: Sequence[T], n: int) -> List[T]:
    """The ``n`` most recent items of ``series`` ordered by their ``year``."""
    ordered = sorted(series, key=lambda item: item.year)  # type: ignore[attr-defined]
    return ordered[-n:] if n > 0 else []
