"""Tests for runtime module."""
import math
import threading

import pytest

from planetclicker.audio import AudioCue
from planetclicker.result import Failure
from planetclicker.runtime import EconomyRuntime
from planetclicker.state import EconomyState


class _CountingAudio(AudioCue):
    def __init__(self):
        self.plays = 0

    def play(self):
        self.plays += 1


class _BrokenAudio(AudioCue):
    def play(self):
        raise RuntimeError("audio blocked")


def _rt(**fields) -> EconomyRuntime:
    return EconomyRuntime(EconomyState(**fields))


def test_initialization():
    rt = EconomyRuntime()
    assert rt.get_state() == EconomyState()
    assert rt.planet.name == "Merc"


def test_init_recomputes_multiplier():
    rt = _rt(current_planet=2, rebirth_mult=100.0, multiplier=7.0)
    assert rt.get_state().multiplier == 200.0


def test_init_repairs_planet_index():
    rt = _rt(current_planet=42)
    assert rt.get_state().current_planet == 0


# ── click ────────────────────────────────────────────────────────────


def test_click():
    rt = _rt(click_power=3.0, current_planet=1)
    assert rt.click() == pytest.approx(4.5)
    assert rt.get_state().clicks == pytest.approx(4.5)
    assert rt.get_state().total_clicks == pytest.approx(4.5)


def test_click_plays_audio():
    audio = _CountingAudio()
    rt = EconomyRuntime(audio=audio)
    rt.click()
    rt.click()
    assert audio.plays == 2


def test_audio_failure_is_ignored():
    rt = EconomyRuntime(audio=_BrokenAudio())
    assert rt.click() == 1.0
    assert rt.get_state().clicks == 1.0


# ── buy_upgrade ──────────────────────────────────────────────────────


def test_buy_upgrade():
    rt = _rt(clicks=50.0)
    result = rt.buy_upgrade(0)
    assert result
    s = rt.get_state()
    assert s.clicks == pytest.approx(40.0)
    assert s.upgrades[0] == 1
    assert s.click_power == 2.0
    assert rt.upgrade_cost(0) == pytest.approx(11.2)


def test_buy_upgrade_exact_balance():
    rt = _rt(clicks=30.0)
    assert rt.buy_upgrade(2)
    assert rt.get_state().clicks == 0.0


def test_buy_upgrade_too_expensive_is_noop():
    rt = _rt(clicks=19.0)
    before = EconomyState(clicks=19.0)
    result = rt.buy_upgrade(1)
    assert not result
    assert result.failure is Failure.INSUFFICIENT_FUNDS
    assert rt.get_state() == before


@pytest.mark.parametrize("index", [-1, 100, 250, "3", True])
def test_buy_upgrade_invalid_index(index):
    rt = _rt(clicks=1e9)
    result = rt.buy_upgrade(index)
    assert result.failure is Failure.INVALID_INDEX
    assert rt.get_state().clicks == 1e9


def test_buy_upgrade_failure_plays_no_audio():
    audio = _CountingAudio()
    rt = EconomyRuntime(audio=audio)
    rt.buy_upgrade(0)
    assert audio.plays == 0


# ── buy_auto_clicker ─────────────────────────────────────────────────


def test_buy_auto_clicker():
    rt = _rt(clicks=250.0)
    assert rt.buy_auto_clicker()
    assert rt.buy_auto_clicker()
    s = rt.get_state()
    assert s.auto_clickers == 2
    assert s.clicks == pytest.approx(250.0 - 100.0 - 112.0)
    assert rt.auto_clicker_cost() == pytest.approx(125.44)


def test_buy_auto_clicker_too_expensive():
    rt = _rt(clicks=99.0)
    result = rt.buy_auto_clicker()
    assert result.failure is Failure.INSUFFICIENT_FUNDS
    assert rt.get_state().auto_clickers == 0
    assert rt.get_state().clicks == 99.0


def test_nan_balance_affords_nothing():
    rt = _rt(clicks=math.nan)
    assert rt.buy_upgrade(0).failure is Failure.INSUFFICIENT_FUNDS
    assert rt.buy_auto_clicker().failure is Failure.INSUFFICIENT_FUNDS
    assert rt.rebirth().failure is Failure.INSUFFICIENT_FUNDS
    assert rt.get_affordable_purchases() == []
    assert not rt.can_rebirth()
    assert rt.get_state().rebirths == 0


def test_infinite_cost_is_never_affordable():
    rt = _rt(clicks=math.inf)
    rt.get_state().upgrades[0] = 10_000
    assert math.isinf(rt.upgrade_cost(0))
    assert rt.buy_upgrade(0).failure is Failure.INSUFFICIENT_FUNDS
    assert rt.get_state().upgrades[0] == 10_000


# ── rebirth ──────────────────────────────────────────────────────────


def test_rebirth_insufficient_clicks():
    rt = _rt(clicks=999.0, total_clicks=999.0)
    result = rt.rebirth()
    assert not result
    assert result.message == "Need 1.00K clicks to rebirth."
    assert rt.get_state() == EconomyState(clicks=999.0, total_clicks=999.0)


def test_rebirth():
    rt = _rt(clicks=1500.0, total_clicks=3000.0, click_power=6.0, auto_clickers=3)
    rt.get_state().upgrades[0] = 5
    assert rt.rebirth()
    s = rt.get_state()
    assert s.clicks == 0.0
    assert s.total_clicks == 0.0
    assert s.rebirths == 1
    assert s.rebirth_mult == 100.0
    assert s.upgrades == [0] * 100
    assert s.click_power == 1.0
    assert s.auto_clickers == 3
    assert s.multiplier == 100.0


def test_rebirth_uses_current_planet():
    rt = _rt(clicks=1000.0, current_planet=2)
    rt.rebirth()
    assert rt.get_state().multiplier == 200.0


def test_forced_rebirth_ignores_requirement():
    rt = EconomyRuntime()
    assert rt.rebirth(forced=True)
    assert rt.get_state().rebirths == 1


@pytest.mark.parametrize("n", [1, 2, 3, 6])
def test_consecutive_rebirths(n):
    rt = EconomyRuntime()
    for _ in range(n):
        rt.rebirth(forced=True)
    assert rt.get_state().rebirths == n
    assert rt.get_state().rebirth_mult == 10.0 ** (n + 1)


def test_rebirth_discards_multiplier_boost():
    rt = EconomyRuntime()
    rt.multiply_multiplier(5)
    rt.rebirth(forced=True)
    assert rt.get_state().multiplier == 100.0


# ── planets, multiplier, flags ───────────────────────────────────────


@pytest.mark.parametrize("index,expected", [(0, 1000.0), (1, 1500.0), (7, 50000.0)])
def test_set_planet(index, expected):
    rt = _rt(rebirth_mult=1000.0)
    assert rt.set_planet(index)
    assert rt.get_state().current_planet == index
    assert rt.get_state().multiplier == expected


def test_set_planet_invalid():
    rt = _rt(current_planet=3)
    result = rt.set_planet(8)
    assert result.failure is Failure.INVALID_INDEX
    assert rt.get_state().current_planet == 3


def test_multiply_multiplier_bypasses_derivation():
    rt = _rt(current_planet=1)
    rt.multiply_multiplier(2)
    rt.multiply_multiplier(10)
    assert rt.get_state().multiplier == 30.0
    assert rt.get_state().rebirth_mult == 1.0
    assert rt.click() == 30.0


def test_set_planet_discards_multiplier_boost():
    rt = EconomyRuntime()
    rt.multiply_multiplier(100)
    rt.set_planet(0)
    assert rt.get_state().multiplier == 1.0


@pytest.mark.parametrize("factor", [0, -1, -2.5, math.inf, -math.inf, math.nan, True, "2"])
def test_multiply_multiplier_rejects_bad_factor(factor):
    rt = _rt(current_planet=1)
    events = []
    rt.add_observer(lambda event, runtime: events.append(event))
    result = rt.multiply_multiplier(factor)
    assert result.failure is Failure.INVALID_FACTOR
    assert rt.get_state().multiplier == 1.5
    assert events == []


def test_multiply_multiplier_rejects_overflow():
    rt = EconomyRuntime()
    assert rt.multiply_multiplier(1e300)
    result = rt.multiply_multiplier(1e300)
    assert result.failure is Failure.INVALID_FACTOR
    assert rt.get_state().multiplier == 1e300


def test_multiply_multiplier_keeps_balance_non_negative():
    rt = EconomyRuntime()
    rt.multiply_multiplier(-1)
    rt.click()
    rt.multiply_multiplier(0.5)
    rt.click()
    assert rt.get_state().clicks == 1.5


def test_set_flag():
    rt = EconomyRuntime()
    assert rt.set_flag("auto_rebirth_enabled", True)
    assert rt.set_flag("autoEnabled", False)
    assert rt.get_state().auto_rebirth_enabled is True
    assert rt.get_state().auto_enabled is False


def test_set_flag_unknown():
    rt = EconomyRuntime()
    result = rt.set_flag("clicks", True)
    assert result.failure is Failure.INVALID_FLAG
    assert rt.get_state() == EconomyState()


def test_reset():
    rt = _rt(clicks=5000.0, rebirths=2, rebirth_mult=1000.0, current_planet=4)
    rt.reset()
    assert rt.get_state() == EconomyState()


# ── tick callbacks ───────────────────────────────────────────────────


def test_auto_production_tick():
    rt = _rt(auto_clickers=2, click_power=3.0, current_planet=2)
    assert rt.auto_production_tick() == 12.0
    assert rt.get_state().clicks == 12.0
    assert rt.get_state().total_clicks == 12.0


def test_auto_production_disabled():
    rt = _rt(auto_clickers=2, auto_enabled=False)
    assert rt.auto_production_tick() == 0.0
    assert rt.get_state().clicks == 0.0


def test_auto_production_without_clickers():
    rt = EconomyRuntime()
    assert rt.auto_production_tick() == 0.0


def test_auto_rebirth_tick():
    rt = _rt(clicks=1000.0)
    assert not rt.auto_rebirth_tick()  # flag off
    rt.set_flag("auto_rebirth_enabled", True)
    assert rt.auto_rebirth_tick()
    assert rt.get_state().rebirths == 1
    assert not rt.auto_rebirth_tick()  # clicks now 0


# ── queries ──────────────────────────────────────────────────────────


def test_affordable_purchases():
    rt = _rt(clicks=15.0)
    options = rt.get_affordable_purchases()
    assert [(o.kind, o.index) for o in options] == [("upgrade", 0)]

    rt = _rt(clicks=100.0)
    options = rt.get_affordable_purchases()
    assert len(options) == 11
    assert options[-1].kind == "auto"


def test_purchase_dispatch():
    rt = _rt(clicks=200.0)
    auto = rt.get_affordable_purchases()[-1]
    assert rt.purchase(auto)
    assert rt.get_state().auto_clickers == 1


# ── observers ────────────────────────────────────────────────────────


def test_observers_receive_events():
    rt = _rt(clicks=2000.0)
    events = []
    rt.add_observer(lambda event, runtime: events.append(event))
    rt.click()
    rt.buy_upgrade(0)
    rt.buy_upgrade(100)  # rejected: no event
    rt.rebirth()
    rt.set_planet(1)
    assert events == ["click", "buy_upgrade", "rebirth", "set_planet"]


def test_failing_observer_does_not_break_transition():
    rt = EconomyRuntime()

    def boom(event, runtime):
        raise ValueError("render failed")

    rt.add_observer(boom)
    rt.click()
    assert rt.get_state().clicks == 1.0


def test_remove_observer():
    rt = EconomyRuntime()
    events = []
    cb = lambda event, runtime: events.append(event)  # noqa: E731
    rt.add_observer(cb)
    rt.remove_observer(cb)
    rt.click()
    assert events == []


# ── scenario ─────────────────────────────────────────────────────────


def test_thousand_clicks_then_rebirth():
    rt = EconomyRuntime()
    for _ in range(1000):
        rt.click()
    s = rt.get_state()
    assert s.clicks == 1000.0
    assert s.total_clicks == 1000.0

    assert rt.rebirth(forced=False)
    assert s.clicks == 0.0
    assert s.total_clicks == 0.0
    assert s.rebirths == 1
    assert s.rebirth_mult == 100.0
    assert s.multiplier == 100.0


# ── threading ────────────────────────────────────────────────────────


def test_concurrent_transitions_are_serialized():
    rt = _rt(auto_clickers=1)

    def clicker():
        for _ in range(1000):
            rt.click()

    def ticker():
        for _ in range(1000):
            rt.auto_production_tick()

    threads = [threading.Thread(target=clicker) for _ in range(4)]
    threads += [threading.Thread(target=ticker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert rt.get_state().clicks == 8000.0
    assert rt.get_state().total_clicks == 8000.0


def test_auto_rebirth_notifies_outside_lock():
    rt = _rt(clicks=1000.0, auto_rebirth_enabled=True)
    blocked = []

    def observer(event, runtime):
        if event != "rebirth":
            return
        worker = threading.Thread(target=runtime.click)
        worker.start()
        worker.join(timeout=2)
        blocked.append(worker.is_alive())

    rt.add_observer(observer)
    assert rt.auto_rebirth_tick()
    assert blocked == [False]


def test_locked_yields_live_state():
    rt = _rt(clicks=7.0)
    with rt.locked() as s:
        assert s is rt.get_state()
        assert s.clicks == 7.0
