from __future__ import annotations

import math

from planetclicker.config import GameConfig
from planetclicker.metrics import MetricsCollector
from planetclicker.report import SimulationReport, build_report
from planetclicker.runtime import EconomyRuntime
from planetclicker.scheduler import LoopSpec, TickLoops, VirtualClock
from planetclicker.strategy import Strategy

MAX_PURCHASES_PER_STEP = 10_000


class Simulation:
    """Headless run of the economy on a virtual clock.

    The auto-production and auto-rebirth loops fire at their configured
    periods; every *decision_interval* seconds the strategy clicks, buys and
    optionally rebirths.
    """

    def __init__(
        self,
        strategy: Strategy,
        duration: float,
        config: GameConfig | None = None,
        decision_interval: float = 1.0,
        snapshot_interval: float = 1.0,
        auto_rebirth: bool = False,
    ) -> None:
        if duration <= 0:
            raise ValueError("duration must be positive")
        self.strategy = strategy
        self.duration = duration
        self.config = config or GameConfig()
        self.decision_interval = decision_interval

        self.runtime = EconomyRuntime()
        self.runtime.set_flag("auto_rebirth_enabled", auto_rebirth)
        self.collector = MetricsCollector()
        self._voluntary_rebirth = False
        self.runtime.add_observer(self._on_event)

        loops = TickLoops(self.runtime, self.config, autosave=False)
        self.clock = VirtualClock(
            loops.specs()
            + [
                LoopSpec("strategy", decision_interval, self._step),
                LoopSpec("snapshot", snapshot_interval, self._snapshot),
            ]
        )

    def run(self) -> SimulationReport:
        self._snapshot()
        while self.clock.now < self.duration:
            chunk = min(self.decision_interval, self.duration - self.clock.now)
            self.clock.advance(chunk)

            # Safety: NaN/Inf detection
            clicks = self.runtime.get_state().clicks
            if math.isnan(clicks) or math.isinf(clicks):
                return self._build_report("Aborted: NaN/Inf detected")

        return self._build_report("Completed")

    def _step(self) -> None:
        # 1. Manual clicks
        for _ in range(self.strategy.get_clicks(self.decision_interval)):
            self.runtime.click()

        # 2. Purchases, re-evaluated after each one
        state = self.runtime.get_state()
        for _ in range(MAX_PURCHASES_PER_STEP):
            affordable = self.runtime.get_affordable_purchases()
            to_buy = self.strategy.decide_purchases(self.runtime, affordable)
            if not to_buy:
                break
            option = to_buy[0]
            if not self.runtime.purchase(option):
                break
            self.collector.record_purchase(
                self.clock.now, option.kind, option.index, option.cost, state
            )

        # 3. Voluntary rebirth
        if self.strategy.should_rebirth(self.runtime):
            self._voluntary_rebirth = True
            try:
                self.runtime.rebirth()
            finally:
                self._voluntary_rebirth = False

    def _snapshot(self) -> None:
        self.collector.record_snapshot(self.clock.now, self.runtime.get_state())

    def _on_event(self, event: str, runtime: EconomyRuntime) -> None:
        if event == "rebirth":
            self.collector.record_rebirth(
                self.clock.now, runtime.get_state(), forced=not self._voluntary_rebirth
            )

    def _build_report(self, outcome: str) -> SimulationReport:
        self._snapshot()
        return build_report(
            collector=self.collector,
            strategy_description=self.strategy.describe(),
            outcome=outcome,
            total_time=self.clock.now,
        )
