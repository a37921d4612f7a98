"""
main.py - Entry point for the cobra steering core.

Runs headless simulation episodes:
- Maze arena with wall probes (systems/arena.py)
- One cobra per archetype (ai/behaviors.py)
- Stuck detection + local avoidance (ai/stuck_detector.py, ai/avoidance_planner.py)
- Difficulty progression and slow motion (ai/difficulty_adapter.py, utils/time_scale.py)
- Per-episode stats and distance graph (ai/stats.py)

Run:  python main.py --simulate 3 --seconds 60 --plot trend.png
"""
VERSION = "1.0.0"

import argparse
import logging
import sys

logger = logging.getLogger(__name__)

# ── Project imports ───────────────────────────────────────
from ai.simulation_runner import SimulationConfig, SimulationRunner
from entities.agent import Archetype
from systems.level_config import LevelConfig, load_level_config, preset, save_level_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cobra-sim",
        description="Headless cobra steering simulation.",
    )
    parser.add_argument("--simulate", type=int, default=1, metavar="N",
                        help="number of episodes to run (default: 1)")
    parser.add_argument("--seconds", type=float, default=60.0, metavar="S",
                        help="simulated seconds per episode (default: 60)")
    parser.add_argument("--seed", type=int, default=None,
                        help="base random seed for reproducible runs")
    parser.add_argument("--plot", default=None, metavar="PATH",
                        help="save the distance-trend graph of the last episode")
    parser.add_argument("--level", type=int, default=None,
                        help="apply a built-in level preset (1-3)")
    parser.add_argument("--level-config", default=None, metavar="JSON",
                        help="load level settings from a JSON file")
    parser.add_argument("--save-level", default=None, metavar="JSON",
                        help="write the selected level settings to a JSON file and exit")
    parser.add_argument("--archetypes", default=None,
                        help="comma-separated archetypes, e.g. chase,sniper")
    parser.add_argument("--no-slowmo", action="store_true",
                        help="never trigger slow motion")
    parser.add_argument("--debug", action="store_true",
                        help="per-agent debug logging")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {VERSION}")
    return parser


def _parse_archetypes(text: str) -> tuple:
    names = [n.strip().upper() for n in text.split(",") if n.strip()]
    try:
        return tuple(Archetype[n] for n in names)
    except KeyError as exc:
        raise SystemExit(f"Unknown archetype: {exc.args[0].lower()}") from None


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    level = None
    if args.level_config:
        level = load_level_config(args.level_config)
    elif args.level is not None:
        level = preset(args.level)

    if args.save_level:
        save_level_config(level or LevelConfig(), args.save_level)
        logger.info("Level settings written to %s", args.save_level)
        return 0

    config = SimulationConfig(
        seconds=args.seconds,
        seed=args.seed,
        plot_path=args.plot,
        level=level,
        slow_motion_every=0.0 if args.no_slowmo else SimulationConfig.slow_motion_every,
    )
    if args.archetypes:
        config.archetypes = _parse_archetypes(args.archetypes)

    logger.info("Cobra steering %s: %d episode(s) of %.0fs",
                VERSION, args.simulate, args.seconds)
    SimulationRunner(args.simulate, config).run()
    return 0


# ── Run ───────────────────────────────────────────────────
if __name__ == "__main__":
    sys.exit(main())
