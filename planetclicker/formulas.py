"""Pure economy formulas: prices, rebirth reward and production multiplier."""

from __future__ import annotations

import math

from planetclicker.cost_scaling import CostScaling
from planetclicker.planet import PLANETS, Planet

UPGRADE_SLOTS = 100
UPGRADE_BASE_COST = 10.0
AUTO_CLICKER_BASE_COST = 100.0
COST_GROWTH = 1.12
REBIRTH_REQUIREMENT = 1000.0

UPGRADE_SCALING = CostScaling.exponential(COST_GROWTH)
AUTO_CLICKER_SCALING = CostScaling.exponential(COST_GROWTH)


def upgrade_base_cost(index: int) -> float:
    return UPGRADE_BASE_COST * (index + 1)


def upgrade_cost(index: int, owned: int) -> float:
    """Price of the next unit in upgrade slot *index* with *owned* already bought."""
    return UPGRADE_SCALING.compute(upgrade_base_cost(index), owned)


def auto_clicker_cost(owned: int) -> float:
    return AUTO_CLICKER_SCALING.compute(AUTO_CLICKER_BASE_COST, owned)


def rebirth_multiplier(rebirths: int) -> float:
    """Multiplier granted once *rebirths* rebirths have been performed.

    Called with the post-increment count, so the first rebirth yields 100.
    """
    try:
        return 10.0 ** (rebirths + 1)
    except OverflowError:
        return math.inf


def production_multiplier(
    planet_index: int,
    rebirth_mult: float,
    planets: tuple[Planet, ...] = PLANETS,
) -> float:
    return planets[planet_index].mult * rebirth_mult
