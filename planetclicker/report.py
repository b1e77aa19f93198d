from __future__ import annotations

from dataclasses import dataclass, field

from planetclicker.metrics import (
    BalanceSnapshot,
    MetricsCollector,
    PurchaseEvent,
    RebirthEvent,
)


@dataclass
class SimulationReport:
    """Container for simulation results and derived metrics."""

    strategy_description: str = ""
    outcome: str = ""
    total_time: float = 0.0

    # Raw metrics
    snapshots: list[BalanceSnapshot] = field(default_factory=list)
    purchases: list[PurchaseEvent] = field(default_factory=list)
    rebirths: list[RebirthEvent] = field(default_factory=list)

    # Derived metrics
    purchase_gaps: list[float] = field(default_factory=list)
    max_purchase_gap: float = 0.0
    mean_purchase_gap: float = 0.0
    purchases_per_minute: float = 0.0

    @property
    def final(self) -> BalanceSnapshot | None:
        return self.snapshots[-1] if self.snapshots else None

    @property
    def rebirth_times(self) -> list[float]:
        return [r.time for r in self.rebirths]

    def series(self, attr: str) -> list[tuple[float, float]]:
        """Return (time, value) pairs for one snapshot attribute."""
        return [(s.time, getattr(s, attr)) for s in self.snapshots]


def build_report(
    collector: MetricsCollector,
    strategy_description: str,
    outcome: str,
    total_time: float,
) -> SimulationReport:
    """Build a SimulationReport from collected metrics."""
    purchase_gaps: list[float] = []
    purchase_times = sorted(p.time for p in collector.purchases)
    if purchase_times:
        purchase_gaps.append(purchase_times[0])  # gap from t=0 to first purchase
        for i in range(1, len(purchase_times)):
            purchase_gaps.append(purchase_times[i] - purchase_times[i - 1])

    max_gap = max(purchase_gaps) if purchase_gaps else 0.0
    mean_gap = (sum(purchase_gaps) / len(purchase_gaps)) if purchase_gaps else 0.0
    ppm = (len(collector.purchases) / total_time * 60.0) if total_time > 0 else 0.0

    return SimulationReport(
        strategy_description=strategy_description,
        outcome=outcome,
        total_time=total_time,
        snapshots=collector.snapshots,
        purchases=collector.purchases,
        rebirths=collector.rebirths,
        purchase_gaps=purchase_gaps,
        max_purchase_gap=max_gap,
        mean_purchase_gap=mean_gap,
        purchases_per_minute=ppm,
    )
