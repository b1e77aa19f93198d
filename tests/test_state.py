"""Tests for state module."""
import pytest

from planetclicker.state import EconomyState


def test_defaults():
    state = EconomyState()
    assert state.clicks == 0.0
    assert state.total_clicks == 0.0
    assert state.click_power == 1.0
    assert state.multiplier == 1.0
    assert state.rebirths == 0
    assert state.rebirth_mult == 1.0
    assert state.auto_clickers == 0
    assert state.auto_enabled is True
    assert state.auto_rebirth_enabled is False
    assert state.upgrades == [0] * 100
    assert state.current_planet == 0


def test_upgrade_lists_not_shared():
    a, b = EconomyState(), EconomyState()
    a.upgrades[0] = 3
    assert b.upgrades[0] == 0


def test_reset_in_place():
    state = EconomyState(clicks=50.0, rebirths=3, auto_clickers=2)
    state.upgrades[5] = 4
    upgrades_before = state.upgrades
    state.reset()
    assert state == EconomyState()
    assert upgrades_before[5] == 4  # old list untouched, new list assigned


def test_to_dict_uses_persisted_keys():
    state = EconomyState(clicks=12.5, auto_rebirth_enabled=True, current_planet=3)
    data = state.to_dict()
    assert data["clicks"] == 12.5
    assert data["totalClicks"] == 0.0
    assert data["autoRebirthEnabled"] is True
    assert data["currentPlanet"] == 3
    assert len(data["upgrades"]) == 100
    assert data["upgrades"] is not state.upgrades


def test_apply_dict_copies_fields():
    source = EconomyState(clicks=5.0, rebirths=2, rebirth_mult=1000.0, auto_clickers=4)
    source.upgrades[1] = 7
    target = EconomyState()
    problems = target.apply_dict(source.to_dict())
    assert problems == []
    assert target == source


def test_apply_dict_ignores_unknown_and_missing_keys():
    state = EconomyState()
    state.apply_dict({"clicks": 9, "bogus": 1, "upgrades": [0] * 100})
    assert state.clicks == 9.0
    assert state.click_power == 1.0


class TestApplyDictRepairs:
    def test_short_upgrades_replaced_with_zeros(self):
        state = EconomyState()
        problems = state.apply_dict({"clicks": 40, "upgrades": [1] * 50})
        assert state.upgrades == [0] * 100
        assert state.clicks == 40.0
        assert "upgrades repaired to zeros" in problems

    def test_missing_upgrades_replaced_with_zeros(self):
        state = EconomyState()
        state.upgrades[0] = 2
        state.apply_dict({"clicks": 1})
        assert state.upgrades == [0] * 100

    def test_invalid_upgrade_entry(self):
        state = EconomyState()
        state.apply_dict({"upgrades": [1] * 99 + ["x"]})
        assert state.upgrades == [0] * 100

    def test_long_upgrades_truncated(self):
        state = EconomyState()
        problems = state.apply_dict({"upgrades": [2] * 120})
        assert state.upgrades == [2] * 100
        assert any("truncated" in p for p in problems)

    def test_wrong_types_skipped(self):
        state = EconomyState()
        problems = state.apply_dict({
            "clicks": "lots",
            "rebirths": 1.5,
            "autoEnabled": "yes",
            "clickPower": -3,
            "autoClickers": True,
            "upgrades": [0] * 100,
        })
        assert state == EconomyState()
        assert len(problems) == 5

    def test_integral_float_counts_accepted(self):
        state = EconomyState()
        state.apply_dict({"rebirths": 2.0, "upgrades": [1.0] * 100})
        assert state.rebirths == 2
        assert isinstance(state.rebirths, int)
        assert state.upgrades == [1] * 100

    @pytest.mark.parametrize("key", ["clicks", "totalClicks", "multiplier", "rebirthMult"])
    @pytest.mark.parametrize("raw", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_numbers_skipped(self, key, raw):
        state = EconomyState()
        problems = state.apply_dict({key: raw, "upgrades": [0] * 100})
        assert state == EconomyState()
        assert len(problems) == 1

    @pytest.mark.parametrize("key", ["clickPower", "multiplier", "rebirthMult"])
    def test_zero_rejected_for_positive_fields(self, key):
        state = EconomyState()
        problems = state.apply_dict({key: 0, "upgrades": [0] * 100})
        assert state == EconomyState()
        assert problems == [f"ignored {key}=0"]

    def test_zero_balance_accepted(self):
        state = EconomyState(clicks=5.0)
        assert state.apply_dict({"clicks": 0, "upgrades": [0] * 100}) == []
        assert state.clicks == 0.0

    def test_huge_integer_skipped(self):
        state = EconomyState()
        state.apply_dict({"autoClickers": 10 ** 400, "upgrades": [0] * 100})
        assert state.auto_clickers == 0
