from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from planetclicker.report import SimulationReport
    from planetclicker.view import EconomyView

_UNITS = ("K", "M", "B", "T", "Qa", "Qi", "Sx", "Sp")


def fmt(n: float) -> str:
    """Short display form of a currency amount: 999, 1.00K, 2.50M, 1.00e27."""
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "∞" if n > 0 else "-∞"
    if n < 1000:
        return str(math.floor(n))
    tier = math.floor(math.log10(abs(n)) / 3)
    if tier <= 0:
        return str(math.floor(n))
    unit = _UNITS[tier - 1] if tier <= len(_UNITS) else f"e{tier * 3}"
    return f"{n / 10 ** (tier * 3):.2f}{unit}"


def format_view(view: EconomyView, show_upgrades: int = 5) -> str:
    """Terminal rendering of the economy state."""
    lines: list[str] = []
    lines.append(f"Clicks: {view.clicks_text}   (total {view.total_clicks_text})")
    lines.append(
        f"Power: {view.click_power_text}   Multiplier: {view.multiplier_text}   "
        f"Planet: {view.planet.name} ({view.planet.mult:g}×)"
    )
    auto = "on" if view.auto_enabled else "off"
    auto_rb = "on" if view.auto_rebirth_enabled else "off"
    lines.append(
        f"Auto clickers: {view.auto_clickers} [{auto}]   "
        f"next: {fmt(view.auto_clicker_cost)}"
    )
    lines.append(
        f"Rebirths: {view.rebirths}   Rebirth mult: {view.rebirth_mult_text}   "
        f"auto-rebirth [{auto_rb}]"
        + ("   REBIRTH READY" if view.can_rebirth else "")
    )

    if show_upgrades:
        shown = sorted(view.upgrades, key=lambda u: u.cost)[:show_upgrades]
        lines.append("Cheapest upgrades:")
        for u in sorted(shown, key=lambda u: u.index):
            marker = "*" if u.affordable else " "
            lines.append(
                f" {marker} {u.label:.<14s} cost {fmt(u.cost):>8s}  owned {u.owned}"
            )
    return "\n".join(lines)


def format_text_report(report: SimulationReport) -> str:
    """Format a simulation report for console output."""
    lines: list[str] = []

    lines.append("=" * 30 + " Planet Clicker Simulation Report " + "=" * 30)
    lines.append(f"Strategy: {report.strategy_description}")
    lines.append(f"Result: {report.outcome} at {report.total_time:.1f}s")
    lines.append("")

    final = report.final
    if final is not None:
        lines.append("FINAL STATE:")
        lines.append(f"  Clicks: {fmt(final.clicks)}")
        lines.append(f"  Click power: {fmt(final.click_power)}")
        lines.append(f"  Multiplier: {final.multiplier:.2f}×")
        lines.append(f"  Auto clickers: {final.auto_clickers}")
        lines.append(f"  Rebirths: {final.rebirths}")
        lines.append("")

    lines.append("PURCHASES:")
    lines.append(f"  Total: {len(report.purchases)}")
    lines.append(f"  Rate: {report.purchases_per_minute:.1f}/min")
    lines.append(f"  Max gap: {report.max_purchase_gap:.1f}s")
    lines.append(f"  Mean gap: {report.mean_purchase_gap:.1f}s")
    lines.append("")

    if report.rebirths:
        lines.append("REBIRTHS:")
        for r in report.rebirths:
            kind = "auto" if r.forced else "manual"
            lines.append(
                f"  * #{r.rebirths:<4d} {r.time:>9.1f}s  ({kind}, run {r.run_duration:.1f}s)"
            )

    return "\n".join(lines)
