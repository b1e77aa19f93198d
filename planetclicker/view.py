from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from planetclicker import formulas
from planetclicker.formatting import fmt
from planetclicker.planet import Planet

if TYPE_CHECKING:
    from planetclicker.runtime import EconomyRuntime


@dataclass(frozen=True)
class PurchaseOption:
    """Something the player can buy: an upgrade slot or an auto clicker."""

    kind: str  # "upgrade" or "auto"
    index: int | None
    cost: float

    def describe(self) -> str:
        if self.kind == "auto":
            return "auto clicker"
        return f"upgrade {self.index + 1}"


@dataclass(frozen=True)
class UpgradeStatus:
    """Read-only snapshot of one upgrade slot."""

    index: int
    cost: float
    owned: int
    affordable: bool

    @property
    def label(self) -> str:
        return f"Upgrade {self.index + 1}"


@dataclass(frozen=True)
class EconomyView:
    """Everything the rendering layer shows after a transition."""

    clicks: float
    clicks_text: str
    total_clicks_text: str
    click_power_text: str
    multiplier_text: str
    auto_clickers: int
    auto_clicker_cost: float
    auto_clicker_affordable: bool
    rebirths: int
    rebirth_mult_text: str
    can_rebirth: bool
    planet: Planet
    auto_enabled: bool
    auto_rebirth_enabled: bool
    upgrades: tuple[UpgradeStatus, ...]


def build_view(runtime: EconomyRuntime) -> EconomyView:
    """Take a consistent read of the runtime's state for display."""
    with runtime.locked() as s:
        upgrades = tuple(
            UpgradeStatus(
                index=i,
                cost=runtime.upgrade_cost(i),
                owned=s.upgrades[i],
                affordable=runtime.can_afford(runtime.upgrade_cost(i)),
            )
            for i in range(formulas.UPGRADE_SLOTS)
        )
        auto_cost = runtime.auto_clicker_cost()
        return EconomyView(
            clicks=s.clicks,
            clicks_text=fmt(s.clicks),
            total_clicks_text=fmt(s.total_clicks),
            click_power_text=fmt(s.click_power),
            multiplier_text=f"{s.multiplier:.2f}×",
            auto_clickers=s.auto_clickers,
            auto_clicker_cost=auto_cost,
            auto_clicker_affordable=runtime.can_afford(auto_cost),
            rebirths=s.rebirths,
            rebirth_mult_text=f"{fmt(s.rebirth_mult)}×",
            can_rebirth=runtime.can_rebirth(),
            planet=runtime.planet,
            auto_enabled=s.auto_enabled,
            auto_rebirth_enabled=s.auto_rebirth_enabled,
            upgrades=upgrades,
        )
