from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from dudeworld.cli.pygame_viewer import _env_flag_enabled, run_pygame_viewer
from dudeworld.cli.viewer import AsciiViewer, SimulationController
from dudeworld.content.io import DEFAULT_WORLD_PATH, load_simulation_json

DEFAULT_SEED = 7
DEFAULT_TICKS = 20
DEFAULT_TICK_SECONDS = 0.25
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m dudeworld.cli.play", description="dudeworld launcher.")
    parser.add_argument("--world", default=DEFAULT_WORLD_PATH, help="World JSON to load.")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Seed for the simulation RNG streams.")
    parser.add_argument("--ascii", action="store_true", help="Run in the terminal instead of opening a window.")
    parser.add_argument("--ticks", type=int, default=DEFAULT_TICKS, help="Number of steps to run in --ascii mode.")
    parser.add_argument(
        "--tick-seconds",
        type=float,
        default=DEFAULT_TICK_SECONDS,
        help="Simulated seconds per step in --ascii mode.",
    )
    parser.add_argument("--headless", action="store_true", help="Run the pygame viewer with the dummy SDL driver.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Python logging level.",
    )
    return parser


def run_ascii(*, world_path: str, seed: int, ticks: int, tick_seconds: float) -> int:
    try:
        sim = load_simulation_json(world_path, seed=seed)
    except (OSError, ValueError) as exc:
        print(f"[dudeworld.play] failed to load world {world_path}: {exc}", file=sys.stderr)
        return 1
    view = AsciiViewer()
    controller = SimulationController(sim, tick_seconds=tick_seconds)
    print(view.render(sim))
    for _ in range(ticks):
        controller.advance_ticks(1)
        print()
        print(view.render(sim))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if args.ascii:
        return run_ascii(world_path=args.world, seed=args.seed, ticks=args.ticks, tick_seconds=args.tick_seconds)
    headless = args.headless or _env_flag_enabled("DUDEWORLD_HEADLESS")
    return run_pygame_viewer(args.world, seed=args.seed, headless=headless)


if __name__ == "__main__":
    raise SystemExit(main())
