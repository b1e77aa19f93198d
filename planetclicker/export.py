from __future__ import annotations

import csv
import json
from pathlib import Path

from planetclicker.report import SimulationReport


def export_csv(report: SimulationReport, path: str | Path) -> None:
    """Export simulation data as CSV files.

    Creates three files:
      - {path}_snapshots.csv
      - {path}_purchases.csv
      - {path}_rebirths.csv
    """
    base = str(path)

    with open(f"{base}_snapshots.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "time", "clicks", "total_clicks", "click_power",
            "multiplier", "auto_clickers", "rebirths",
        ])
        for s in report.snapshots:
            writer.writerow([
                s.time, s.clicks, s.total_clicks, s.click_power,
                s.multiplier, s.auto_clickers, s.rebirths,
            ])

    with open(f"{base}_purchases.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time", "kind", "index", "cost_paid", "clicks_after"])
        for p in report.purchases:
            writer.writerow([p.time, p.kind, p.index, p.cost_paid, p.clicks_after])

    with open(f"{base}_rebirths.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time", "rebirths", "rebirth_mult", "forced", "run_duration"])
        for r in report.rebirths:
            writer.writerow([r.time, r.rebirths, r.rebirth_mult, r.forced, r.run_duration])


def export_json(report: SimulationReport, path: str | Path) -> None:
    """Export the simulation summary and events as JSON."""
    final = report.final
    data = {
        "strategy": report.strategy_description,
        "outcome": report.outcome,
        "total_time": report.total_time,
        "purchase_count": len(report.purchases),
        "purchases_per_minute": report.purchases_per_minute,
        "max_purchase_gap": report.max_purchase_gap,
        "mean_purchase_gap": report.mean_purchase_gap,
        "rebirth_times": report.rebirth_times,
        "final": None if final is None else {
            "clicks": final.clicks,
            "click_power": final.click_power,
            "multiplier": final.multiplier,
            "auto_clickers": final.auto_clickers,
            "rebirths": final.rebirths,
        },
        "purchases": [
            {
                "time": p.time,
                "kind": p.kind,
                "index": p.index,
                "cost_paid": p.cost_paid,
            }
            for p in report.purchases
        ],
    }
    with open(str(path), "w") as f:
        json.dump(data, f, indent=2)
