from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import GameConfig
from .core.random import RandomSource
from .engine.loop import EngineConfig, GameEngine
from .logging_config import configure_logging
from .save.manager import SaveManager
from .session import GameSession

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="dungeon-master",
        description="Dungeon Master - headless simulation runner",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="YAML config file (defaults to $DM_CONFIG)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for deterministic runs")
    parser.add_argument("--steps", type=int, default=600, help="Number of fixed ticks to simulate")
    parser.add_argument("--adventurers", type=int, default=0, help="Adventurers to spawn before the first tick")
    parser.add_argument("--load", type=Path, default=None, metavar="DIR", help="Resume the save found in DIR")
    parser.add_argument("--save", type=Path, default=None, metavar="DIR", help="Write a save to DIR when done")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    config = GameConfig.from_yaml(args.config) if args.config else GameConfig.from_env()
    seed = args.seed if args.seed is not None else config.seed
    session = GameSession(config, rng=RandomSource(seed))
    session.start_new_game()
    if args.load is not None and not session.load(SaveManager(data_dir=args.load)):
        print(f"No usable save in {args.load}", file=sys.stderr)
        return 1
    for _ in range(args.adventurers):
        session.spawn_adventurer()

    engine = GameEngine(session, EngineConfig.from_game_config(config))
    ticks = engine.run_steps(args.steps)
    logger.info("Simulated %d tick(s)", ticks)

    if args.save is not None:
        session.save(SaveManager(data_dir=args.save))

    print("Dungeon Master (headless)")
    print(f"ticks={ticks} dp={session.dp} reputation={session.reputation} "
          f"floors={session.dungeon.floor_count} adventurers={len(session.adventurers)} "
          f"game_over={session.game_over}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
