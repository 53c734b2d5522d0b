#!/usr/bin/env python3
"""
Tileplay Engine

Edge-matching tile game for the terminal.  Players take turns placing
tiles from their rack on a square board; matching sides score, and on
the streets tile set connected roads between squares and circles earn a
path bonus.

Requires: pip install Pillow PyYAML
"""

from __future__ import annotations

import argparse
import logging

from tileplay.cli import run_cli
from tileplay.config import load_config, normalize_config
from tileplay.game import GameState, load_snapshot

# Logging setup

logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(message)s",
)
log = logging.getLogger("tileplay")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Tileplay Engine -- edge-matching tile game",
    )
    parser.add_argument("--config", type=str, default=None,
                        help="Path to a YAML/JSON game setup file")
    parser.add_argument("--board-size", type=int, default=None,
                        help="Board width and height (default 9)")
    parser.add_argument("--tile-set", type=str, default=None,
                        help="Tile set name: streets or shapes")
    parser.add_argument("--players", nargs="+", default=None, metavar="NAME",
                        help="Player names, in seating order")
    parser.add_argument("--timer", type=int, default=None, metavar="SECONDS",
                        help="Enable the turn timer with this many seconds per turn")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for reproducible games")
    parser.add_argument("--load", type=str, default=None,
                        help="Resume from a saved JSON snapshot")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug-level logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    print("TILEPLAY ENGINE")

    setup = load_config(args.config).to_dict() if args.config else {}
    if args.board_size is not None:
        setup["boardSize"] = args.board_size
    if args.tile_set:
        setup["tileSet"] = args.tile_set
    if args.players:
        setup["players"] = [{"name": n} for n in args.players]
    if args.timer:
        setup["enableTimer"] = True
        setup["timeLimit"] = args.timer
    if args.seed is not None:
        setup["seed"] = args.seed
    config = normalize_config(setup)

    if args.load:
        state = load_snapshot(args.load, config)
        log.info("Resumed game from %s", args.load)
    else:
        state = GameState.create(config)

    run_cli(state)


if __name__ == "__main__":
    main()
