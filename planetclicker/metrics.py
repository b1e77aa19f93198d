from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from planetclicker.state import EconomyState


@dataclass
class BalanceSnapshot:
    time: float
    clicks: float
    total_clicks: float
    click_power: float
    multiplier: float
    auto_clickers: int
    rebirths: int


@dataclass
class PurchaseEvent:
    time: float
    kind: str
    index: int | None
    cost_paid: float
    clicks_after: float


@dataclass
class RebirthEvent:
    time: float
    rebirths: int
    rebirth_mult: float
    forced: bool
    run_duration: float


@dataclass
class MetricsCollector:
    """Accumulates snapshots and events during a simulation."""

    snapshots: list[BalanceSnapshot] = field(default_factory=list)
    purchases: list[PurchaseEvent] = field(default_factory=list)
    rebirths: list[RebirthEvent] = field(default_factory=list)
    _run_start: float = 0.0

    def record_snapshot(self, time: float, state: EconomyState) -> None:
        self.snapshots.append(
            BalanceSnapshot(
                time=time,
                clicks=state.clicks,
                total_clicks=state.total_clicks,
                click_power=state.click_power,
                multiplier=state.multiplier,
                auto_clickers=state.auto_clickers,
                rebirths=state.rebirths,
            )
        )

    def record_purchase(
        self, time: float, kind: str, index: int | None, cost: float, state: EconomyState
    ) -> None:
        self.purchases.append(
            PurchaseEvent(
                time=time,
                kind=kind,
                index=index,
                cost_paid=cost,
                clicks_after=state.clicks,
            )
        )

    def record_rebirth(self, time: float, state: EconomyState, forced: bool) -> None:
        self.rebirths.append(
            RebirthEvent(
                time=time,
                rebirths=state.rebirths,
                rebirth_mult=state.rebirth_mult,
                forced=forced,
                run_duration=time - self._run_start,
            )
        )
        self._run_start = time
