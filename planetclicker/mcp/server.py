"""MCP server wrapping EconomyRuntime for interactive AI playtesting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mcp.server.fastmcp import FastMCP

from planetclicker.config import GameConfig
from planetclicker.persistence import SaveStore
from planetclicker.result import TransitionResult
from planetclicker.runtime import EconomyRuntime
from planetclicker.scheduler import TickLoops, VirtualClock
from planetclicker.view import build_view

# Maximum seconds per wait() call
_MAX_WAIT = 600
# Maximum clicks per click() call
_MAX_CLICKS = 1000


@dataclass
class _GameHolder:
    """Holds the active runtime and the virtual clock driving its loops."""

    config: GameConfig
    runtime: EconomyRuntime
    clock: VirtualClock = field(init=False)

    def __post_init__(self) -> None:
        self.clock = _make_clock(self.runtime, self.config)


def _make_clock(runtime: EconomyRuntime, config: GameConfig) -> VirtualClock:
    return VirtualClock(TickLoops(runtime, config, autosave=False).specs())


def _result(result: TransitionResult) -> dict[str, Any]:
    if result:
        out: dict[str, Any] = {"success": True}
        if result.message:
            out["message"] = result.message
        return out
    return {
        "success": False,
        "reason": result.failure.value if result.failure else "",
        "message": result.message,
    }


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_get_game_state(holder: _GameHolder) -> dict[str, Any]:
    runtime = holder.runtime
    view = build_view(runtime)
    s = runtime.get_state()
    return {
        "clicks": round(s.clicks, 2),
        "clicks_text": view.clicks_text,
        "total_clicks": round(s.total_clicks, 2),
        "click_power": s.click_power,
        "multiplier": s.multiplier,
        "multiplier_text": view.multiplier_text,
        "auto_clickers": s.auto_clickers,
        "auto_clicker_cost": round(view.auto_clicker_cost, 2),
        "rebirths": s.rebirths,
        "rebirth_mult": s.rebirth_mult,
        "can_rebirth": view.can_rebirth,
        "planet": {"index": s.current_planet, "name": view.planet.name, "mult": view.planet.mult},
        "auto_enabled": s.auto_enabled,
        "auto_rebirth_enabled": s.auto_rebirth_enabled,
        "time_elapsed": round(holder.clock.now, 2),
    }


def _tool_get_upgrades(holder: _GameHolder, only_affordable: bool = False) -> dict[str, Any]:
    view = build_view(holder.runtime)
    upgrades = [
        {
            "index": u.index,
            "cost": round(u.cost, 2),
            "owned": u.owned,
            "affordable": u.affordable,
        }
        for u in view.upgrades
        if u.affordable or not only_affordable
    ]
    return {"upgrades": upgrades}


def _tool_get_planets(holder: _GameHolder) -> dict[str, Any]:
    return {
        "planets": [
            {"index": p.id, "name": p.name, "color": p.color, "mult": p.mult}
            for p in holder.runtime.planets
        ],
        "current": holder.runtime.get_state().current_planet,
    }


def _tool_click(holder: _GameHolder, count: int = 1) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    if count > _MAX_CLICKS:
        return {"error": f"Count cannot exceed {_MAX_CLICKS}"}

    total = 0.0
    for _ in range(count):
        total += holder.runtime.click()
    return {
        "clicks": count,
        "total_earned": round(total, 2),
        "new_balance": round(holder.runtime.get_state().clicks, 2),
    }


def _tool_buy_upgrade(holder: _GameHolder, index: int) -> dict[str, Any]:
    out = _result(holder.runtime.buy_upgrade(index))
    if out["success"]:
        out["new_count"] = holder.runtime.get_state().upgrades[index]
    return out


def _tool_buy_auto_clicker(holder: _GameHolder) -> dict[str, Any]:
    out = _result(holder.runtime.buy_auto_clicker())
    if out["success"]:
        out["new_count"] = holder.runtime.get_state().auto_clickers
    return out


def _tool_rebirth(holder: _GameHolder) -> dict[str, Any]:
    out = _result(holder.runtime.rebirth())
    if out["success"]:
        out["rebirth_mult"] = holder.runtime.get_state().rebirth_mult
    return out


def _tool_set_planet(holder: _GameHolder, index: int) -> dict[str, Any]:
    out = _result(holder.runtime.set_planet(index))
    if out["success"]:
        out["multiplier"] = holder.runtime.get_state().multiplier
    return out


def _tool_set_multiplier(holder: _GameHolder, factor: float) -> dict[str, Any]:
    out = _result(holder.runtime.multiply_multiplier(factor))
    if out["success"]:
        out["multiplier"] = holder.runtime.get_state().multiplier
    return out


def _tool_set_flag(holder: _GameHolder, name: str, value: bool) -> dict[str, Any]:
    return _result(holder.runtime.set_flag(name, value))


def _tool_wait(holder: _GameHolder, seconds: float) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} seconds per call"}

    state = holder.runtime.get_state()
    clicks_before = state.total_clicks
    rebirths_before = state.rebirths
    ticks = holder.clock.advance(seconds)

    result: dict[str, Any] = {
        "waited": seconds,
        "time_elapsed": round(holder.clock.now, 2),
        "ticks": ticks,
        "clicks": round(state.clicks, 2),
    }
    if state.rebirths != rebirths_before:
        result["new_rebirths"] = state.rebirths - rebirths_before
    else:
        result["earned"] = round(state.total_clicks - clicks_before, 2)
    return result


def _tool_save(holder: _GameHolder) -> dict[str, Any]:
    return _result(holder.runtime.save())


def _tool_load(holder: _GameHolder) -> dict[str, Any]:
    return _result(holder.runtime.load())


def _tool_reset(holder: _GameHolder, confirm: bool = False) -> dict[str, Any]:
    if not confirm:
        return {"error": "Reset erases ALL progress; call again with confirm=true"}
    holder.runtime.reset()
    holder.clock = _make_clock(holder.runtime, holder.config)
    return {"success": True, "message": "Game reset to initial state"}


# ── Server factory ──────────────────────────────────────────────────


def create_server(config: GameConfig | None = None, persistent: bool = False) -> FastMCP:
    """Create an MCP server wrapping an EconomyRuntime.

    With *persistent*, the runtime loads from and saves to config.save_path.
    """
    config = config or GameConfig()
    store = SaveStore(config.save_path, config.storage_key) if persistent else None
    runtime = EconomyRuntime(store=store)
    if store is not None:
        runtime.load()
    holder = _GameHolder(config=config, runtime=runtime)

    mcp = FastMCP(name=f"PlanetClicker: {config.name}")

    @mcp.tool()
    def get_game_state() -> dict[str, Any]:
        """Get current economy snapshot: clicks, power, multiplier, auto clickers, rebirths, planet."""
        return _tool_get_game_state(holder)

    @mcp.tool()
    def get_upgrades(only_affordable: bool = False) -> dict[str, Any]:
        """List the 100 upgrade slots with cost, owned count and affordability."""
        return _tool_get_upgrades(holder, only_affordable)

    @mcp.tool()
    def get_planets() -> dict[str, Any]:
        """List the planet catalog and the current planet."""
        return _tool_get_planets(holder)

    @mcp.tool()
    def click(count: int = 1) -> dict[str, Any]:
        """Click N times (max 1000). Returns total earned."""
        return _tool_click(holder, count)

    @mcp.tool()
    def buy_upgrade(index: int) -> dict[str, Any]:
        """Buy one unit of upgrade slot 0-99. Each unit adds 1 click power."""
        return _tool_buy_upgrade(holder, index)

    @mcp.tool()
    def buy_auto_clicker() -> dict[str, Any]:
        """Buy an auto clicker."""
        return _tool_buy_auto_clicker(holder)

    @mcp.tool()
    def rebirth() -> dict[str, Any]:
        """Rebirth: needs 1000 clicks, resets clicks and upgrades for a larger multiplier."""
        return _tool_rebirth(holder)

    @mcp.tool()
    def set_planet(index: int) -> dict[str, Any]:
        """Travel to planet 0-7."""
        return _tool_set_planet(holder, index)

    @mcp.tool()
    def set_multiplier(factor: float) -> dict[str, Any]:
        """Multiply the current multiplier by factor until the next planet change or rebirth."""
        return _tool_set_multiplier(holder, factor)

    @mcp.tool()
    def set_flag(name: str, value: bool) -> dict[str, Any]:
        """Set auto_enabled or auto_rebirth_enabled."""
        return _tool_set_flag(holder, name, value)

    @mcp.tool()
    def wait(seconds: float) -> dict[str, Any]:
        """Advance game time (max 600s), running the auto-production and auto-rebirth loops."""
        return _tool_wait(holder, seconds)

    @mcp.tool()
    def save() -> dict[str, Any]:
        """Save the game (only with a persistent server)."""
        return _tool_save(holder)

    @mcp.tool()
    def load() -> dict[str, Any]:
        """Reload the saved game (only with a persistent server)."""
        return _tool_load(holder)

    @mcp.tool()
    def reset(confirm: bool = False) -> dict[str, Any]:
        """Reset ALL progress. Requires confirm=true."""
        return _tool_reset(holder, confirm)

    return mcp
