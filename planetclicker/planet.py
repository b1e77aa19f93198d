from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Planet:
    """Static definition of a selectable planet."""

    id: int
    name: str
    color: str
    mult: float = 1.0


PLANETS: tuple[Planet, ...] = (
    Planet(0, "Merc", "#a6f0ff", 1.0),
    Planet(1, "Terra", "#99f6a9", 1.5),
    Planet(2, "Pyra", "#ffb39a", 2.0),
    Planet(3, "Azur", "#b6a9ff", 3.0),
    Planet(4, "Giga", "#ffd86b", 5.0),
    Planet(5, "Nova", "#ff9bff", 10.0),
    Planet(6, "Void", "#bfbfbf", 25.0),
    Planet(7, "Galaxy", "#a17cff", 50.0),
)


def is_valid_planet(index: object, planets: tuple[Planet, ...] = PLANETS) -> bool:
    """True if *index* is an integer position in the catalog."""
    if isinstance(index, bool) or not isinstance(index, int):
        return False
    return 0 <= index < len(planets)
