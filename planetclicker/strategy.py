from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from planetclicker.view import PurchaseOption

if TYPE_CHECKING:
    from planetclicker.runtime import EconomyRuntime


@dataclass
class ClickProfile:
    """Manual clicking rate used by strategies."""

    cps: float = 0.0

    def get_clicks(self, duration: float) -> int:
        """Number of clicks made during *duration* seconds."""
        return max(0, int(self.cps * duration))


class Strategy(ABC):
    """Base class for simulation strategies."""

    click_profile: ClickProfile | None = None

    @abstractmethod
    def decide_purchases(
        self, runtime: EconomyRuntime, affordable: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        """Return ordered list of purchases to attempt."""
        ...

    def get_clicks(self, duration: float) -> int:
        if self.click_profile:
            return self.click_profile.get_clicks(duration)
        return 0

    def should_rebirth(self, runtime: EconomyRuntime) -> bool:
        """Whether to rebirth voluntarily now."""
        return False

    @abstractmethod
    def describe(self) -> str: ...

    def _describe_clicks(self) -> str:
        if self.click_profile and self.click_profile.cps:
            return f" ({self.click_profile.cps:g} CPS)"
        return ""


class Idle(Strategy):
    """Click (optionally) but never buy anything."""

    def __init__(self, click_profile: ClickProfile | None = None) -> None:
        self.click_profile = click_profile

    def decide_purchases(
        self, runtime: EconomyRuntime, affordable: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        return []

    def describe(self) -> str:
        return "Idle" + self._describe_clicks()


class GreedyCheapest(Strategy):
    """Buy the cheapest affordable upgrade or auto clicker first."""

    def __init__(
        self,
        click_profile: ClickProfile | None = None,
        rebirth_mode: str = "never",
        auto_clicker_weight: float = 1.0,
    ) -> None:
        if rebirth_mode not in ("never", "first_opportunity"):
            raise ValueError(f"Unknown rebirth_mode: {rebirth_mode!r}")
        self.click_profile = click_profile
        self.rebirth_mode = rebirth_mode
        self.auto_clicker_weight = auto_clicker_weight

    def _weighted_cost(self, option: PurchaseOption) -> float:
        if option.kind == "auto":
            return option.cost * self.auto_clicker_weight
        return option.cost

    def decide_purchases(
        self, runtime: EconomyRuntime, affordable: list[PurchaseOption]
    ) -> list[PurchaseOption]:
        return sorted(affordable, key=self._weighted_cost)

    def should_rebirth(self, runtime: EconomyRuntime) -> bool:
        return self.rebirth_mode == "first_opportunity" and runtime.can_rebirth()

    def describe(self) -> str:
        parts = ["GreedyCheapest" + self._describe_clicks()]
        if self.rebirth_mode != "never":
            parts.append(f"rebirth={self.rebirth_mode}")
        return ", ".join(parts)
