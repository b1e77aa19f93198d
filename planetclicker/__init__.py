# planetclicker: Planet Clicker incremental game economy

from planetclicker.planet import PLANETS, Planet
from planetclicker.cost_scaling import CostScaling
from planetclicker.formulas import (
    REBIRTH_REQUIREMENT,
    UPGRADE_SLOTS,
    auto_clicker_cost,
    rebirth_multiplier,
    upgrade_cost,
)
from planetclicker.formatting import fmt, format_text_report, format_view
from planetclicker.config import GameConfig
from planetclicker.result import Failure, TransitionResult
from planetclicker.state import EconomyState
from planetclicker.audio import AudioCue, SilentAudio, TerminalBell
from planetclicker.persistence import (
    MalformedSave,
    PersistenceError,
    SaveStore,
    SaveUnavailable,
)
from planetclicker.view import EconomyView, PurchaseOption, UpgradeStatus, build_view
from planetclicker.runtime import EconomyRuntime
from planetclicker.scheduler import LoopSpec, TickLoops, VirtualClock
from planetclicker.strategy import ClickProfile, GreedyCheapest, Idle, Strategy
from planetclicker.metrics import MetricsCollector
from planetclicker.report import SimulationReport, build_report
from planetclicker.simulation import Simulation

__all__ = [
    # Catalog
    "PLANETS",
    "Planet",
    # Formulas
    "CostScaling",
    "REBIRTH_REQUIREMENT",
    "UPGRADE_SLOTS",
    "auto_clicker_cost",
    "rebirth_multiplier",
    "upgrade_cost",
    # Formatting
    "fmt",
    "format_text_report",
    "format_view",
    # Config
    "GameConfig",
    # State and results
    "EconomyState",
    "Failure",
    "TransitionResult",
    # Collaborators
    "AudioCue",
    "SilentAudio",
    "TerminalBell",
    "SaveStore",
    "PersistenceError",
    "SaveUnavailable",
    "MalformedSave",
    # View
    "EconomyView",
    "PurchaseOption",
    "UpgradeStatus",
    "build_view",
    # Runtime
    "EconomyRuntime",
    "LoopSpec",
    "TickLoops",
    "VirtualClock",
    # Simulation
    "ClickProfile",
    "GreedyCheapest",
    "Idle",
    "Strategy",
    "MetricsCollector",
    "SimulationReport",
    "build_report",
    "Simulation",
]
