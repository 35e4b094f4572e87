"""Placeholder values for metrics the café snapshot does not record.

Ratings, preparation times and supplier quality are not captured anywhere in
the ordering data, yet the dashboard has slots for them. The aggregators ask
an :class:`Estimator` for these values so the deterministic analytics never
depend on a random source directly.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence


class Estimator(Protocol):
    """Source of synthetic per-item and per-supplier figures."""

    def average_rating(self, item_name: str, line_count: int) -> float:
        ...

    def wastage_rate(self, item_name: str, daily_quantities: Sequence[float]) -> float:
        ...

    def preparation_time(self, item_name: str, line_count: int) -> int:
        ...

    def supplier_reliability(self, supplier: str) -> float:
        ...

    def supplier_delivery_days(self, supplier: str) -> float:
        ...

    def supplier_quality(self, supplier: str) -> float:
        ...

    def supplier_order_multiplier(self, supplier: str) -> int:
        ...


def variance_wastage_rate(daily_quantities: Sequence[float]) -> float:
    """Estimate wastage (%) from how unevenly an item sells day to day.

    Returns the variance-to-mean ratio scaled by 5 and clamped to [1, 15], or 0
    when nothing was sold.
    """

    if not daily_quantities or sum(daily_quantities) == 0:
        return 0.0
    days = max(1, len(daily_quantities))
    mean = sum(daily_quantities) / days
    variance = sum((value - mean) ** 2 for value in daily_quantities) / days
    if mean == 0:
        return 0.0
    return min(15.0, max(1.0, (variance / mean) * 5))


class RandomEstimator:
    """Production estimator backed by :class:`random.Random`.

    Passing ``seed`` makes the sequence reproducible.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._random = random.Random(seed)

    def average_rating(self, item_name: str, line_count: int) -> float:
        return min(5.0, 4.2 + self._random.random() * 0.6)

    def wastage_rate(self, item_name: str, daily_quantities: Sequence[float]) -> float:
        return variance_wastage_rate(daily_quantities)

    def preparation_time(self, item_name: str, line_count: int) -> int:
        return round(8 + self._random.random() * 10)

    def supplier_reliability(self, supplier: str) -> float:
        return 85 + self._random.random() * 15

    def supplier_delivery_days(self, supplier: str) -> float:
        return 1 + self._random.random() * 4

    def supplier_quality(self, supplier: str) -> float:
        return 3.5 + self._random.random() * 1.5

    def supplier_order_multiplier(self, supplier: str) -> int:
        return 10 + self._random.randrange(20)


@dataclass(frozen=True)
class FixedEstimator:
    """Deterministic estimator returning the same figures for every input."""

    rating: float = 4.5
    wastage: float = 5.0
    prep_minutes: int = 12
    reliability: float = 95.0
    delivery_days: float = 2.0
    quality: float = 4.5
    order_multiplier: int = 10

    def average_rating(self, item_name: str, line_count: int) -> float:
        return self.rating

    def wastage_rate(self, item_name: str, daily_quantities: Sequence[float]) -> float:
        return self.wastage if sum(daily_quantities) else 0.0

    def preparation_time(self, item_name: str, line_count: int) -> int:
        return self.prep_minutes

    def supplier_reliability(self, supplier: str) -> float:
        return self.reliability

    def supplier_delivery_days(self, supplier: str) -> float:
        return self.delivery_days

    def supplier_quality(self, supplier: str) -> float:
        return self.quality

    def supplier_order_multiplier(self, supplier: str) -> int:
        return self.order_multiplier


__all__ = ["Estimator", "FixedEstimator", "RandomEstimator", "variance_wastage_rate"]
