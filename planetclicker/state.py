from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Any

from planetclicker.formulas import UPGRADE_SLOTS

# attribute -> persisted key
_PERSISTED_KEYS: dict[str, str] = {
    "clicks": "clicks",
    "total_clicks": "totalClicks",
    "click_power": "clickPower",
    "multiplier": "multiplier",
    "rebirths": "rebirths",
    "rebirth_mult": "rebirthMult",
    "auto_clickers": "autoClickers",
    "auto_enabled": "autoEnabled",
    "auto_rebirth_enabled": "autoRebirthEnabled",
    "upgrades": "upgrades",
    "current_planet": "currentPlanet",
}

_REAL_FIELDS = ("clicks", "total_clicks", "click_power", "multiplier", "rebirth_mult")
_COUNT_FIELDS = ("rebirths", "auto_clickers", "current_planet")
_FLAG_FIELDS = ("auto_enabled", "auto_rebirth_enabled")
# must be strictly positive
_POSITIVE_FIELDS = ("click_power", "multiplier", "rebirth_mult")


def _empty_upgrades() -> list[int]:
    return [0] * UPGRADE_SLOTS


def _as_real(value: Any, positive: bool = False) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        real = float(value)
    except OverflowError:
        return None
    if not math.isfinite(real) or real < 0 or (positive and real == 0):
        return None
    return real


def _as_count(value: Any) -> int | None:
    real = _as_real(value)
    if real is None or not real.is_integer():
        return None
    return int(real)


@dataclass
class EconomyState:
    """Mutable economy snapshot for one game session."""

    clicks: float = 0.0
    total_clicks: float = 0.0
    click_power: float = 1.0
    multiplier: float = 1.0
    rebirths: int = 0
    rebirth_mult: float = 1.0
    auto_clickers: int = 0
    auto_enabled: bool = True
    auto_rebirth_enabled: bool = False
    upgrades: list[int] = field(default_factory=_empty_upgrades)
    current_planet: int = 0

    def reset(self) -> None:
        """Reinitialize every field to its default, in place."""
        defaults = EconomyState()
        for f in fields(self):
            setattr(self, f.name, getattr(defaults, f.name))

    def upgrade_count(self, index: int) -> int:
        return self.upgrades[index]

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted key names."""
        data: dict[str, Any] = {}
        for attr, key in _PERSISTED_KEYS.items():
            value = getattr(self, attr)
            data[key] = list(value) if attr == "upgrades" else value
        return data

    def apply_dict(self, data: dict[str, Any]) -> list[str]:
        """Copy known persisted fields from *data* onto this state.

        Fields of the wrong type are skipped, as are negative or non-finite
        numbers and a zero click power, multiplier or rebirth multiplier. An
        upgrade list that is missing, too short or holds invalid entries is
        replaced with zeros; a longer one is truncated. Returns a description of every repair made.
        """
        problems: list[str] = []

        for attr in _REAL_FIELDS + _COUNT_FIELDS + _FLAG_FIELDS:
            key = _PERSISTED_KEYS[attr]
            if key not in data:
                continue
            raw = data[key]
            if attr in _FLAG_FIELDS:
                value: Any = raw if isinstance(raw, bool) else None
            elif attr in _COUNT_FIELDS:
                value = _as_count(raw)
            else:
                value = _as_real(raw, positive=attr in _POSITIVE_FIELDS)
            if value is None:
                problems.append(f"ignored {key}={raw!r}")
                continue
            setattr(self, attr, value)

        raw_upgrades = data.get(_PERSISTED_KEYS["upgrades"])
        counts = None
        if isinstance(raw_upgrades, list):
            counts = [_as_count(v) for v in raw_upgrades]
        if counts is None or len(counts) < UPGRADE_SLOTS or None in counts:
            problems.append("upgrades repaired to zeros")
            self.upgrades = _empty_upgrades()
        else:
            if len(counts) > UPGRADE_SLOTS:
                problems.append(f"upgrades truncated from {len(counts)} entries")
            self.upgrades = counts[:UPGRADE_SLOTS]

        return problems
