"""Periodic transitions: auto-production, auto-rebirth and autosave.

Live play runs each loop as an asyncio task on one event loop, so every
callback finishes before the next one starts. ``VirtualClock`` fires the same
callbacks in simulated time for headless runs.
"""

from __future__ import annotations

import asyncio
import heapq
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from planetclicker.config import GameConfig

if TYPE_CHECKING:
    from planetclicker.runtime import EconomyRuntime

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


@dataclass(frozen=True)
class LoopSpec:
    """A no-argument callback fired every *period* seconds."""

    name: str
    period: float
    callback: Callable[[], object]
    blocking: bool = False  # run off the event loop (file I/O)


class TickLoops:
    """The runtime's timer-driven transitions."""

    def __init__(
        self,
        runtime: EconomyRuntime,
        config: GameConfig | None = None,
        autosave: bool = True,
    ) -> None:
        self.runtime = runtime
        self.config = config or GameConfig()
        self.config.check()
        self.autosave = autosave
        self._tasks: list[asyncio.Task] = []

    def specs(self) -> list[LoopSpec]:
        specs = [
            LoopSpec(
                "auto_production",
                self.config.auto_click_period,
                self.runtime.auto_production_tick,
            ),
            LoopSpec(
                "auto_rebirth",
                self.config.auto_rebirth_period,
                self.runtime.auto_rebirth_tick,
            ),
        ]
        if self.autosave and self.runtime.store is not None:
            specs.append(
                LoopSpec(
                    "autosave",
                    self.config.autosave_period,
                    self.runtime.save,
                    blocking=True,
                )
            )
        return specs

    def start(self) -> list[asyncio.Task]:
        """Schedule every loop on the running event loop."""
        if self._tasks:
            return self._tasks
        self._tasks = [
            asyncio.create_task(_run_every(spec), name=spec.name)
            for spec in self.specs()
        ]
        logger.debug("Started loops: %s", ", ".join(t.get_name() for t in self._tasks))
        return self._tasks

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)


async def _run_every(spec: LoopSpec) -> None:
    while True:
        await asyncio.sleep(spec.period)
        try:
            if spec.blocking:
                await asyncio.to_thread(spec.callback)
            else:
                spec.callback()
        except Exception:
            logger.error("Loop %s failed", spec.name, exc_info=True)


class VirtualClock:
    """Fires loop callbacks in simulated time, in timestamp order.

    Callbacks due at the same instant fire in the order their specs were
    given. Fire times are computed as ``period * n`` so long runs do not
    accumulate rounding drift.
    """

    def __init__(self, specs: list[LoopSpec]) -> None:
        for spec in specs:
            if spec.period <= 0:
                raise ValueError(f"Loop {spec.name!r} needs a positive period")
        self.now = 0.0
        self.fired: dict[str, int] = {spec.name: 0 for spec in specs}
        self._queue: list[tuple[float, int, int, LoopSpec]] = [
            (spec.period, order, 1, spec) for order, spec in enumerate(specs)
        ]
        heapq.heapify(self._queue)

    def advance(self, seconds: float) -> int:
        """Run every callback due within the next *seconds*. Returns the count."""
        if seconds < 0:
            raise ValueError("Cannot advance by a negative duration")
        end = self.now + seconds
        count = 0
        while self._queue and self._queue[0][0] <= end + _EPSILON:
            at, order, n, spec = heapq.heappop(self._queue)
            self.now = at
            spec.callback()
            self.fired[spec.name] += 1
            count += 1
            heapq.heappush(self._queue, (spec.period * (n + 1), order, n + 1, spec))
        self.now = end
        return count
