from __future__ import annotations

from dataclasses import dataclass

STORAGE_KEY = "planet_clicker_state_v1"


@dataclass
class GameConfig:
    """Top-level game configuration."""

    name: str = "Planet Clicker"
    auto_click_period: float = 0.02
    auto_rebirth_period: float = 0.05
    autosave_period: float = 2.0
    save_path: str = ".userdata/save.json"
    storage_key: str = STORAGE_KEY
    sound: bool = False

    def validate(self) -> list[str]:
        """Return a list of validation error strings (empty = valid)."""
        errors: list[str] = []
        for name in ("auto_click_period", "auto_rebirth_period", "autosave_period"):
            value = getattr(self, name)
            if value <= 0:
                errors.append(f"{name} must be positive, got {value!r}")
        if not self.storage_key:
            errors.append("storage_key must not be empty")
        return errors

    def check(self) -> None:
        errors = self.validate()
        if errors:
            raise ValueError(
                "Invalid GameConfig:\n" + "\n".join(f"  - {e}" for e in errors)
            )
