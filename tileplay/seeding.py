"""Initial board seeding.

Three strategies place permanent starter tiles before the first turn:

  * ``random``  -- scatter up to *count* tiles over shuffled positions,
  * ``center``  -- a single tile on the middle cell,
  * ``border``  -- fill the whole perimeter with matching tiles.

Border filling is a small constraint-satisfaction search.  Each perimeter
cell's domain is (random tile x rotation); constraints are edge matches
against already-seeded neighbours plus the border policy when the ruleset
enables it.  Search is chronological backtracking over a clockwise walk,
with named limits on candidates per cell, total candidate checks per
attempt and whole-walk restarts.  Running out of budget is not an error:
the deepest partial fill found is returned.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from tileplay.board import Board, Position
from tileplay.config import InitialTilesConfig
from tileplay.constants import NEIGHBOR_OFFSETS, SIDE_COUNT
from tileplay.rules import Ruleset, passes_border_policy, sides_match
from tileplay.tile import Tile
from tileplay.tilesets import TileSet

logger = logging.getLogger("tileplay.seed")

Placement = tuple[Position, Tile]


@dataclass(frozen=True)
class SeedLimits:
    random_candidates: int = 50     # tiles tried per random/center cell
    border_candidates: int = 120    # tiles tried per perimeter cell
    border_steps: int = 20_000      # candidate checks per border attempt
    border_restarts: int = 40       # whole-walk attempts


def perimeter_walk(size: int) -> list[Position]:
    """Perimeter cells clockwise from the top-left corner."""
    path = [(x, 0) for x in range(size)]
    path += [(size - 1, y) for y in range(1, size)]
    path += [(x, size - 1) for x in range(size - 2, -1, -1)]
    path += [(0, y) for y in range(size - 2, 0, -1)]
    return path


@dataclass
class _Frame:
    """Search state for one perimeter cell."""

    attempts: int = 0
    tile: Tile | None = None
    rotation: int = SIDE_COUNT


@dataclass
class _Budget:
    steps: int
    used: int = field(default=0)

    def spend(self) -> bool:
        self.used += 1
        return self.used <= self.steps


class BoardSeeder:
    """Places starter tiles according to an :class:`InitialTilesConfig`."""

    def __init__(self, ruleset: Ruleset, tile_set: TileSet,
                 rng: random.Random | None = None, limits: SeedLimits | None = None):
        self.ruleset = ruleset
        self.tile_set = tile_set
        self.rng = rng or random.Random()
        self.limits = limits or SeedLimits()

    # public API

    def place_initial_tiles(self, board: Board, config: InitialTilesConfig) -> list[Placement]:
        if config.type == "random":
            placed = self.seed_random(board, config.count)
        elif config.type == "arrangement" and config.style == "border":
            placed = self.seed_border(board)
        elif config.type == "arrangement" and config.style in ("center", "centre"):
            placed = self.seed_center(board)
        else:
            logger.warning("Unknown initial tile layout %r/%r -- no tiles placed",
                           config.type, config.style)
            return []
        logger.info("Placed %d initial tiles", len(placed))
        return placed

    def seed_random(self, board: Board, count: int) -> list[Placement]:
        positions = [(x, y) for y in range(board.size) for x in range(board.size)]
        self.rng.shuffle(positions)

        placed: dict[Position, Tile] = {}
        for pos in positions[:max(0, count)]:
            tile = self._find_candidate(board, pos, placed, self.limits.random_candidates)
            if tile is not None:
                placed[pos] = tile
            else:
                logger.debug("No seed tile fits at %s, skipping", pos)
        if len(placed) < count:
            logger.warning("Only seeded %d of %d random tiles", len(placed), count)
        return list(placed.items())

    def seed_center(self, board: Board) -> list[Placement]:
        pos = board.center
        tile = self._find_candidate(board, pos, {}, self.limits.random_candidates)
        return [(pos, tile)] if tile is not None else []

    def seed_border(self, board: Board) -> list[Placement]:
        walk = perimeter_walk(board.size)
        best: dict[Position, Tile] = {}
        for attempt in range(1, self.limits.border_restarts + 1):
            complete, deepest = self._fill_walk(board, walk)
            if complete:
                logger.debug("Border filled on attempt %d", attempt)
                return list(deepest.items())
            if len(deepest) > len(best):
                best = deepest
        logger.warning("Border seeding incomplete after %d attempts: %d of %d cells",
                       self.limits.border_restarts, len(best), len(walk))
        return list(best.items())

    # search

    def _fill_walk(self, board: Board, walk: list[Position]) -> tuple[bool, dict[Position, Tile]]:
        """One backtracking attempt.  Returns (complete, deepest placement)."""
        placed: dict[Position, Tile] = {}
        deepest: dict[Position, Tile] = {}
        budget = _Budget(self.limits.border_steps)
        frames = [_Frame()]

        while frames:
            depth = len(frames) - 1
            pos = walk[depth]
            tile = self._next_candidate(board, pos, frames[-1], placed, budget)
            if tile is None:
                if budget.used > budget.steps:
                    break
                frames.pop()
                if frames:
                    placed.pop(walk[len(frames) - 1], None)
                continue

            placed[pos] = tile
            if len(placed) > len(deepest):
                deepest = dict(placed)
            if len(placed) == len(walk):
                return True, placed
            frames.append(_Frame())

        return False, deepest

    def _next_candidate(self, board: Board, pos: Position, frame: _Frame,
                        placed: dict[Position, Tile], budget: _Budget) -> Tile | None:
        while True:
            if frame.rotation >= SIDE_COUNT:
                if frame.attempts >= self.limits.border_candidates:
                    return None
                frame.tile = self._draw()
                frame.rotation = 0
                frame.attempts += 1
            candidate = frame.tile.rotated(frame.rotation)
            frame.rotation += 1
            if not budget.spend():
                return None
            if self._fits(board, pos, candidate, placed):
                return candidate

    def _find_candidate(self, board: Board, pos: Position,
                        placed: dict[Position, Tile], attempts: int) -> Tile | None:
        if not board.in_bounds(*pos):
            return None
        for _ in range(attempts):
            tile = self._draw()
            for rotation in range(SIDE_COUNT):
                candidate = tile.rotated(rotation)
                if self._fits(board, pos, candidate, placed):
                    return candidate
        return None

    def _draw(self) -> Tile:
        tile = self.tile_set.generate_tile()
        tile.is_starter_tile = True
        return tile

    def _fits(self, board: Board, pos: Position, tile: Tile, placed: dict[Position, Tile]) -> bool:
        """Border policy (when enabled) plus matches against seeded neighbours only."""
        x, y = pos
        options = self.ruleset.options
        if options.get("enable_border_rule") and board.is_border(x, y):
            if not passes_border_policy(board, pos, tile, self.tile_set):
                return False

        sides = tile.rotated_sides
        allow_blank = options.get("allow_blank_matches", False)
        for dx, dy, edge, facing in NEIGHBOR_OFFSETS:
            neighbour = placed.get((x + dx, y + dy))
            if neighbour is None:
                continue
            if not sides_match(sides[edge], neighbour.side(facing), self.tile_set.blank, allow_blank):
                return False
        return True


def place_initial_tiles(board: Board, ruleset: Ruleset, tile_set: TileSet,
                        config: InitialTilesConfig, rng: random.Random | None = None,
                        limits: SeedLimits | None = None) -> list[Placement]:
    """Seed *board* per *config*; returns the placements without committing them."""
    return BoardSeeder(ruleset, tile_set, rng, limits).place_initial_tiles(board, config)
