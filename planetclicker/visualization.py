from __future__ import annotations

from planetclicker.report import SimulationReport


def plot_simulation(
    report: SimulationReport,
    output_path: str | None = None,
) -> None:
    """Generate a 4-panel matplotlib visualization of simulation results.

    Requires matplotlib (optional dependency).
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for visualization. "
            "Install with: pip install planetclicker[viz]"
        )

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(
        f"Planet Clicker Simulation: {report.strategy_description}",
        fontsize=14,
    )

    # 1. Clicks balance over time (log scale)
    ax1 = axes[0][0]
    for attr in ("clicks", "total_clicks"):
        series = report.series(attr)
        if series:
            times, values = zip(*series)
            ax1.plot(times, [max(v, 1e-10) for v in values], label=attr)
    for t in report.rebirth_times:
        ax1.axvline(t, color="grey", alpha=0.2)
    ax1.set_yscale("log")
    ax1.set_xlabel("Time (s)")
    ax1.set_ylabel("Clicks")
    ax1.set_title("Balance")
    ax1.legend(fontsize=8)
    ax1.grid(True, alpha=0.3)

    # 2. Click power and auto clickers
    ax2 = axes[0][1]
    for attr in ("click_power", "auto_clickers"):
        series = report.series(attr)
        if series:
            times, values = zip(*series)
            ax2.plot(times, values, label=attr)
    ax2.set_xlabel("Time (s)")
    ax2.set_title("Production")
    ax2.legend(fontsize=8)
    ax2.grid(True, alpha=0.3)

    # 3. Purchase timeline
    ax3 = axes[1][0]
    if report.purchases:
        times = [p.time for p in report.purchases]
        slots = [-1 if p.kind == "auto" else p.index for p in report.purchases]
        ax3.scatter(times, slots, s=10, alpha=0.6)
        ax3.set_xlabel("Time (s)")
        ax3.set_ylabel("Upgrade slot (-1 = auto clicker)")
        ax3.set_title("Purchase Timeline")
        ax3.grid(True, alpha=0.3)

    # 4. Purchase gap histogram
    ax4 = axes[1][1]
    if report.purchase_gaps:
        ax4.hist(report.purchase_gaps, bins=min(30, len(report.purchase_gaps)), alpha=0.7)
        ax4.axvline(
            report.mean_purchase_gap,
            color="red",
            linestyle="--",
            label=f"Mean: {report.mean_purchase_gap:.1f}s",
        )
        ax4.set_xlabel("Gap (s)")
        ax4.set_ylabel("Count")
        ax4.set_title("Purchase Gap Distribution")
        ax4.legend()
        ax4.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150)
    else:
        plt.show()
