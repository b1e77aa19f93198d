from __future__ import annotations

import math
from typing import Callable


class CostScaling:
    """Determines how a purchase price changes with the owned count."""

    def __init__(self, fn: Callable[[float, int], float]) -> None:
        self._fn = fn

    def compute(self, base_cost: float, current_count: int) -> float:
        return self._fn(base_cost, current_count)

    @classmethod
    def exponential(cls, growth_rate: float = 1.12) -> CostScaling:
        """Cost = base * growth_rate^count."""
        gr = growth_rate  # capture

        def _compute(base: float, count: int) -> float:
            try:
                return base * gr ** count
            except OverflowError:
                return math.inf

        return cls(_compute)

    @classmethod
    def custom(cls, fn: Callable[[float, int], float]) -> CostScaling:
        """Arbitrary cost function."""
        return cls(fn)
