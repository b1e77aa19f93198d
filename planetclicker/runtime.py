from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import Executor, Future
from contextlib import contextmanager
from typing import Callable, Iterator

from planetclicker import formulas
from planetclicker.audio import AudioCue, SilentAudio
from planetclicker.formatting import fmt
from planetclicker.persistence import MalformedSave, SaveStore, SaveUnavailable
from planetclicker.planet import PLANETS, Planet, is_valid_planet
from planetclicker.result import Failure, TransitionResult
from planetclicker.state import EconomyState
from planetclicker.view import PurchaseOption

logger = logging.getLogger(__name__)

Observer = Callable[[str, "EconomyRuntime"], None]

_FLAGS: dict[str, str] = {
    "auto_enabled": "auto_enabled",
    "autoEnabled": "auto_enabled",
    "auto_rebirth_enabled": "auto_rebirth_enabled",
    "autoRebirthEnabled": "auto_rebirth_enabled",
}


class EconomyRuntime:
    """Authoritative economy processor.

    Owns the single EconomyState of a session and applies every transition to
    it. Each transition holds a re-entrant lock for its whole duration, so the
    tick loops, the input layer and any server threads are serialized.
    Observers are called with the event name after each state change, outside
    the lock.

    Saves triggered by flag, multiplier and reset transitions go through
    *save_executor* when one is set, so the caller never waits on disk I/O.
    """

    def __init__(
        self,
        state: EconomyState | None = None,
        store: SaveStore | None = None,
        audio: AudioCue | None = None,
        planets: tuple[Planet, ...] = PLANETS,
        save_executor: Executor | None = None,
    ) -> None:
        self.state = state if state is not None else EconomyState()
        self.store = store
        self.audio = audio if audio is not None else SilentAudio()
        self.planets = planets
        self.save_executor = save_executor
        self._lock = threading.RLock()
        self._observers: list[Observer] = []

        if not is_valid_planet(self.state.current_planet, planets):
            self.state.current_planet = 0
        self.recompute_multiplier()

    # ── Queries ──────────────────────────────────────────────────────

    def get_state(self) -> EconomyState:
        """Return live reference to the economy state."""
        return self.state

    @property
    def planet(self) -> Planet:
        return self.planets[self.state.current_planet]

    def upgrade_cost(self, index: int) -> float:
        return formulas.upgrade_cost(index, self.state.upgrades[index])

    def auto_clicker_cost(self) -> float:
        return formulas.auto_clicker_cost(self.state.auto_clickers)

    def click_value(self) -> float:
        """Currency earned by one manual click."""
        return self.state.click_power * self.state.multiplier

    def production_per_tick(self) -> float:
        """Currency added by one auto-production tick (0 when paused)."""
        s = self.state
        if not s.auto_enabled or s.auto_clickers <= 0:
            return 0.0
        return s.click_power * s.multiplier * s.auto_clickers

    def can_afford(self, cost: float) -> bool:
        """True when the balance covers a finite *cost*."""
        return math.isfinite(cost) and self.state.clicks >= cost

    def can_rebirth(self) -> bool:
        return self.can_afford(formulas.REBIRTH_REQUIREMENT)

    def get_affordable_purchases(self) -> list[PurchaseOption]:
        """Every purchase the current balance covers, upgrades first."""
        with self._lock:
            options = [
                PurchaseOption("upgrade", i, self.upgrade_cost(i))
                for i in range(formulas.UPGRADE_SLOTS)
            ]
            options.append(PurchaseOption("auto", None, self.auto_clicker_cost()))
            return [o for o in options if self.can_afford(o.cost)]

    def snapshot(self) -> dict:
        """Serializable copy of the state, taken atomically."""
        with self._lock:
            return self.state.to_dict()

    @contextmanager
    def locked(self) -> Iterator[EconomyState]:
        """Hold the transition lock for a consistent multi-field read."""
        with self._lock:
            yield self.state

    # ── Player actions ───────────────────────────────────────────────

    def click(self) -> float:
        """Process one manual click. Returns the amount added."""
        with self._lock:
            value = self.click_value()
            self.state.clicks += value
            self.state.total_clicks += value
        self._cue()
        self._notify("click")
        return value

    def buy_upgrade(self, index: int) -> TransitionResult:
        """Attempt to buy one unit of upgrade slot *index*."""
        if isinstance(index, bool) or not isinstance(index, int) or not (
            0 <= index < formulas.UPGRADE_SLOTS
        ):
            return TransitionResult.failed(
                Failure.INVALID_INDEX, f"No upgrade {index!r}"
            )
        with self._lock:
            cost = self.upgrade_cost(index)
            if not self.can_afford(cost):
                return TransitionResult.failed(
                    Failure.INSUFFICIENT_FUNDS,
                    f"Upgrade {index + 1} costs {fmt(cost)}",
                )
            self.state.clicks -= cost
            self.state.upgrades[index] += 1
            self.state.click_power += 1
        logger.debug("Bought upgrade %d for %s", index, cost)
        self._cue()
        self._notify("buy_upgrade")
        return TransitionResult.ok()

    def buy_auto_clicker(self) -> TransitionResult:
        with self._lock:
            cost = self.auto_clicker_cost()
            if not self.can_afford(cost):
                return TransitionResult.failed(
                    Failure.INSUFFICIENT_FUNDS,
                    f"Auto clicker costs {fmt(cost)}",
                )
            self.state.clicks -= cost
            self.state.auto_clickers += 1
        logger.debug("Bought auto clicker for %s", cost)
        self._cue()
        self._notify("buy_auto_clicker")
        return TransitionResult.ok()

    def purchase(self, option: PurchaseOption) -> TransitionResult:
        if option.kind == "auto":
            return self.buy_auto_clicker()
        return self.buy_upgrade(option.index)

    def rebirth(self, forced: bool = False) -> TransitionResult:
        """Trade all clicks and upgrades for a larger permanent multiplier.

        Needs REBIRTH_REQUIREMENT clicks unless *forced*. Auto clickers are
        kept.
        """
        with self._lock:
            if not forced and not self.can_rebirth():
                return TransitionResult.failed(
                    Failure.INSUFFICIENT_FUNDS,
                    f"Need {fmt(formulas.REBIRTH_REQUIREMENT)} clicks to rebirth.",
                )
            result = self._apply_rebirth()
        self._cue()
        self._notify("rebirth")
        return result

    def set_planet(self, index: int) -> TransitionResult:
        if not is_valid_planet(index, self.planets):
            return TransitionResult.failed(
                Failure.INVALID_INDEX, f"No planet {index!r}"
            )
        with self._lock:
            self.state.current_planet = index
            self.recompute_multiplier()
        self._notify("set_planet")
        return TransitionResult.ok()

    def multiply_multiplier(self, factor: float) -> TransitionResult:
        """Scale the cached multiplier directly.

        The boost is not reflected in rebirth_mult or the planet, so the next
        planet change, rebirth, load or reset recomputes it away.
        """
        if (
            isinstance(factor, bool)
            or not isinstance(factor, (int, float))
            or not (math.isfinite(factor) and factor > 0)
        ):
            return TransitionResult.failed(
                Failure.INVALID_FACTOR, f"Factor must be a positive number, got {factor!r}"
            )
        with self._lock:
            boosted = self.state.multiplier * factor
            if not (math.isfinite(boosted) and boosted > 0):
                return TransitionResult.failed(
                    Failure.INVALID_FACTOR,
                    f"Multiplier {self.state.multiplier:g} × {factor:g} is out of range",
                )
            self.state.multiplier = boosted
        self._notify("set_multiplier")
        self._autosave()
        return TransitionResult.ok()

    def set_flag(self, name: str, value: bool) -> TransitionResult:
        attr = _FLAGS.get(name)
        if attr is None:
            return TransitionResult.failed(
                Failure.INVALID_FLAG,
                f"Unknown flag {name!r}. Expected one of {sorted(set(_FLAGS.values()))}",
            )
        with self._lock:
            setattr(self.state, attr, bool(value))
        self._notify("set_flag")
        self._autosave()
        return TransitionResult.ok()

    def reset(self) -> TransitionResult:
        """Reset ALL progress. Callers must obtain confirmation first."""
        with self._lock:
            self.state.reset()
            self.recompute_multiplier()
        logger.info("Game reset to defaults")
        self._notify("reset")
        self._autosave()
        return TransitionResult.ok()

    # ── Persistence ──────────────────────────────────────────────────

    def save(self) -> TransitionResult:
        """Write the state to the store. Never raises."""
        if self.store is None:
            return TransitionResult.failed(
                Failure.PERSISTENCE_UNAVAILABLE, "No save store configured"
            )
        record = self.snapshot()
        try:
            self.store.write(record)
        except SaveUnavailable as exc:
            logger.warning("Save failed: %s", exc)
            return TransitionResult.failed(Failure.PERSISTENCE_UNAVAILABLE, str(exc))
        logger.debug("Game saved to %s", self.store.path)
        return TransitionResult.ok("Game saved")

    def load(self) -> TransitionResult:
        """Overwrite the state with the stored record, repairing its shape.

        A missing, unreadable or malformed save leaves the state untouched.
        """
        if self.store is None:
            return TransitionResult.failed(
                Failure.PERSISTENCE_UNAVAILABLE, "No save store configured"
            )
        try:
            record = self.store.read()
        except SaveUnavailable as exc:
            logger.warning("Load failed: %s", exc)
            return TransitionResult.failed(Failure.PERSISTENCE_UNAVAILABLE, str(exc))
        except MalformedSave as exc:
            logger.warning("Discarding save: %s", exc)
            return TransitionResult.failed(Failure.MALFORMED_SAVE, str(exc))
        if record is None:
            return TransitionResult.failed(Failure.NO_SAVE, "No saved game")

        with self._lock:
            problems = self.state.apply_dict(record)
            if not is_valid_planet(self.state.current_planet, self.planets):
                problems.append(f"currentPlanet {self.state.current_planet} reset to 0")
                self.state.current_planet = 0
            self.recompute_multiplier()
        for problem in problems:
            logger.warning("Save repaired: %s", problem)
        logger.info("Loaded saved state")
        self._notify("load")
        return TransitionResult.ok("Loaded saved state")

    # ── Tick callbacks ───────────────────────────────────────────────

    def auto_production_tick(self) -> float:
        """One auto-clicker production step. Returns the amount added."""
        with self._lock:
            produced = self.production_per_tick()
            if produced:
                self.state.clicks += produced
                self.state.total_clicks += produced
        return produced

    def auto_rebirth_tick(self) -> bool:
        """Rebirth when auto-rebirth is on and the requirement is met."""
        with self._lock:
            if not (self.state.auto_rebirth_enabled and self.can_rebirth()):
                return False
            self._apply_rebirth()
        self._cue()
        self._notify("rebirth")
        return True

    # ── Observers ────────────────────────────────────────────────────

    def add_observer(self, callback: Observer) -> None:
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Observer) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    # ── Private helpers ──────────────────────────────────────────────

    def recompute_multiplier(self) -> None:
        with self._lock:
            self.state.multiplier = formulas.production_multiplier(
                self.state.current_planet, self.state.rebirth_mult, self.planets
            )

    def _apply_rebirth(self) -> TransitionResult:
        # caller holds the lock
        s = self.state
        s.clicks = 0.0
        s.total_clicks = 0.0
        s.rebirths += 1
        s.rebirth_mult = formulas.rebirth_multiplier(s.rebirths)
        s.upgrades = [0] * formulas.UPGRADE_SLOTS
        s.click_power = 1.0
        self.recompute_multiplier()
        logger.info("Rebirth #%d, rebirth multiplier now %s", s.rebirths, fmt(s.rebirth_mult))
        return TransitionResult.ok(f"Rebirth #{s.rebirths}")

    def _notify(self, event: str) -> None:
        for callback in list(self._observers):
            try:
                callback(event, self)
            except Exception:
                logger.warning("Observer failed on %s", event, exc_info=True)

    def _cue(self) -> bool:
        try:
            self.audio.play()
        except Exception:
            logger.debug("Audio cue failed", exc_info=True)
            return False
        return True

    def _autosave(self) -> None:
        if self.store is None:
            return
        if self.save_executor is None:
            self.save()
        else:
            self.save_executor.submit(self.save).add_done_callback(_log_save_error)


def _log_save_error(future: Future) -> None:
    if not future.cancelled() and future.exception() is not None:
        logger.error("Deferred save failed", exc_info=future.exception())
