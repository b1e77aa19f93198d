from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor

from planetclicker.audio import SilentAudio, TerminalBell
from planetclicker.config import GameConfig
from planetclicker.formatting import fmt, format_text_report, format_view
from planetclicker.persistence import SaveStore
from planetclicker.runtime import EconomyRuntime
from planetclicker.scheduler import TickLoops
from planetclicker.simulation import Simulation
from planetclicker.strategy import ClickProfile, GreedyCheapest, Idle, Strategy
from planetclicker.view import build_view

MAX_CLICKS_PER_COMMAND = 1000

HELP = """\
Commands:
  click [n]            click n times (default 1)
  buy <n>              buy upgrade n (1-100)
  auto                 buy an auto clicker
  rebirth              rebirth (needs 1.00K clicks)
  planet <n>           travel to planet n (1-8)
  mult <x>             multiply the current multiplier by x
  toggle auto|rebirth  switch auto clickers / auto rebirth on or off
  status | upgrades    show the economy / all upgrades
  save | load | reset  manage the save file
  quit"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="planetclicker",
        description="Planet Clicker: incremental clicker game",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "--save-path", default=GameConfig.save_path, help="JSON save file"
    )
    sub = parser.add_subparsers(dest="command")

    play = sub.add_parser("play", help="Play in the terminal")
    play.add_argument("--sound", action="store_true", help="Ring the terminal bell")
    play.add_argument(
        "--auto-click-period",
        type=float,
        default=GameConfig.auto_click_period,
        help="Seconds between auto-clicker ticks",
    )
    play.add_argument(
        "--auto-rebirth-period",
        type=float,
        default=GameConfig.auto_rebirth_period,
        help="Seconds between auto-rebirth checks",
    )
    play.add_argument(
        "--autosave-period",
        type=float,
        default=GameConfig.autosave_period,
        help="Seconds between autosaves",
    )

    sub.add_parser("status", help="Show the saved game")

    reset = sub.add_parser("reset", help="Reset ALL progress in the save file")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")

    sim = sub.add_parser("simulate", help="Run a headless balance simulation")
    sim.add_argument(
        "--strategy",
        default="greedy_cheapest",
        choices=["greedy_cheapest", "idle"],
        help="Strategy to use (default: greedy_cheapest)",
    )
    sim.add_argument("--cps", type=float, default=5.0, help="Clicks per second")
    sim.add_argument("--duration", type=float, default=600, help="Simulated seconds")
    sim.add_argument(
        "--rebirth",
        default="never",
        choices=["never", "first_opportunity", "auto"],
        help="When to rebirth",
    )
    sim.add_argument("--export-csv", default=None, help="CSV export path prefix")
    sim.add_argument("--export-json", default=None, help="JSON export path")
    sim.add_argument("--plot", default=None, help="Plot output path (PNG)")

    return parser


def run_command(runtime: EconomyRuntime, line: str) -> str:
    """Apply one text command to the runtime and describe the outcome."""
    parts = line.split()
    if not parts:
        return ""
    cmd, args = parts[0].lower(), parts[1:]

    try:
        if cmd == "click":
            n = int(args[0]) if args else 1
            if not 1 <= n <= MAX_CLICKS_PER_COMMAND:
                return f"Click count must be 1-{MAX_CLICKS_PER_COMMAND}"
            total = sum(runtime.click() for _ in range(n))
            return f"+{fmt(total)} clicks"
        if cmd == "buy":
            result = runtime.buy_upgrade(int(args[0]) - 1)
            return "Bought" if result else result.message
        if cmd == "auto":
            result = runtime.buy_auto_clicker()
            return "Bought auto clicker" if result else result.message
        if cmd == "rebirth":
            return runtime.rebirth().message
        if cmd == "planet":
            result = runtime.set_planet(int(args[0]) - 1)
            return f"Welcome to {runtime.planet.name}" if result else result.message
        if cmd == "mult":
            result = runtime.multiply_multiplier(float(args[0]))
            if not result:
                return result.message
            return f"Multiplier now {runtime.get_state().multiplier:.2f}×"
        if cmd == "toggle":
            name = {"auto": "auto_enabled", "rebirth": "auto_rebirth_enabled"}.get(
                args[0] if args else ""
            )
            if name is None:
                return "Usage: toggle auto|rebirth"
            value = not getattr(runtime.get_state(), name)
            runtime.set_flag(name, value)
            return f"{args[0]} {'on' if value else 'off'}"
        if cmd in ("save", "load"):
            result = runtime.save() if cmd == "save" else runtime.load()
            return result.message
        if cmd == "status":
            return format_view(build_view(runtime))
        if cmd == "upgrades":
            return format_view(build_view(runtime), show_upgrades=100)
        if cmd == "help":
            return HELP
    except (IndexError, ValueError):
        return f"Bad arguments for {cmd!r}. Type 'help'."
    return f"Unknown command {cmd!r}. Type 'help'."


def _start_stdin_reader(loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> None:
    """Feed stdin lines into *queue*; None marks end of input."""

    def _reader() -> None:
        for line in sys.stdin:
            loop.call_soon_threadsafe(queue.put_nowait, line.rstrip("\n"))
        loop.call_soon_threadsafe(queue.put_nowait, None)

    threading.Thread(target=_reader, name="stdin-reader", daemon=True).start()


async def play(runtime: EconomyRuntime, config: GameConfig) -> None:
    """Interactive session: tick loops run while commands are read.

    Saves triggered by commands run on a worker thread so the event loop
    keeps ticking.
    """
    save_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="save")
    runtime.save_executor = save_executor
    loops = TickLoops(runtime, config)
    loops.start()
    queue: asyncio.Queue[str | None] = asyncio.Queue()
    _start_stdin_reader(asyncio.get_running_loop(), queue)

    print(format_view(build_view(runtime)))
    print("Type 'help' for commands.")
    try:
        while True:
            print("> ", end="", flush=True)
            line = await queue.get()
            if line is None or line.strip().lower() in ("quit", "exit"):
                break
            if line.strip().lower() == "reset":
                print("Reset ALL progress? [y/N] ", end="", flush=True)
                answer = await queue.get()
                if answer is not None and answer.strip().lower() in ("y", "yes"):
                    runtime.reset()
                    print(format_view(build_view(runtime)))
                continue
            output = run_command(runtime, line)
            if output:
                print(output)
    finally:
        await loops.stop()
        runtime.save_executor = None
        await asyncio.to_thread(save_executor.shutdown)
        runtime.save()


def build_strategy(name: str, cps: float, rebirth: str) -> Strategy:
    click_profile = ClickProfile(cps=cps) if cps > 0 else None
    if name == "idle":
        return Idle(click_profile=click_profile)
    rebirth_mode = "first_opportunity" if rebirth == "first_opportunity" else "never"
    return GreedyCheapest(click_profile=click_profile, rebirth_mode=rebirth_mode)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = GameConfig(save_path=args.save_path)
    store = SaveStore(config.save_path, config.storage_key)

    if args.command == "play":
        config.sound = args.sound
        config.auto_click_period = args.auto_click_period
        config.auto_rebirth_period = args.auto_rebirth_period
        config.autosave_period = args.autosave_period
        errors = config.validate()
        if errors:
            parser.error("; ".join(errors))
        audio = TerminalBell() if config.sound else SilentAudio()
        runtime = EconomyRuntime(store=store, audio=audio)
        runtime.load()
        try:
            asyncio.run(play(runtime, config))
        except KeyboardInterrupt:
            runtime.save()
        print("\nGame saved. Bye!")

    elif args.command == "status":
        runtime = EconomyRuntime(store=store)
        result = runtime.load()
        if not result:
            print(f"{result.message}; showing a new game.")
        print(format_view(build_view(runtime)))

    elif args.command == "reset":
        if not args.yes:
            print("Refusing to reset without --yes", file=sys.stderr)
            sys.exit(1)
        runtime = EconomyRuntime(store=store)
        runtime.reset()
        print(f"Progress reset in {store.path}")

    elif args.command == "simulate":
        strategy = build_strategy(args.strategy, args.cps, args.rebirth)
        sim = Simulation(
            strategy=strategy,
            duration=args.duration,
            auto_rebirth=args.rebirth == "auto",
        )
        report = sim.run()
        print(format_text_report(report))

        if args.export_csv:
            from planetclicker.export import export_csv
            export_csv(report, args.export_csv)
            print(f"\nCSV exported to {args.export_csv}_*.csv")

        if args.export_json:
            from planetclicker.export import export_json
            export_json(report, args.export_json)
            print(f"\nJSON exported to {args.export_json}")

        if args.plot:
            from planetclicker.visualization import plot_simulation
            plot_simulation(report, args.plot)
            print(f"\nPlot saved to {args.plot}")
