"""Scoring systems.

Every system scores a move in the same steps:

  1. count matching edges against placed neighbours and map the count to
     points through the ``scores`` table (quadratic by default),
  2. add flat bonuses (center pattern, intersection, board centre),
  3. multiply the connection score, not the flat bonuses, when the tile
     touches a starter tile,
  4. optionally add a longest-path bonus (street scoring only).

The path bonus runs in exactly one mode per instance:

  * ``incremental`` -- after each move, compare the mover's longest
    source-to-sink path with their recorded best and award only the gain;
  * ``end_game`` -- nothing per move, the best path is scored once in
    :meth:`ScoringSystem.get_final_score`;
  * ``none`` -- no path scoring.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from tileplay.board import Board, Position
from tileplay.constants import (
    BLANK,
    CENTER_BONUS,
    CENTER_PATTERN_SCORES,
    INTERSECTION_BONUS,
    MATCH_SCORES,
    PATH_MODE_END_GAME,
    PATH_MODE_INCREMENTAL,
    PATH_MODES,
    PATH_POINTS_PER_TILE,
    STARTER_TILE_MULTIPLIER,
    STREET,
)
from tileplay.errors import ConfigurationError
from tileplay.pathfinding import Path, find_longest_path, format_path
from tileplay.player import Player
from tileplay.tile import Tile

logger = logging.getLogger("tileplay.scoring")


@dataclass
class ScoreBreakdown:
    """Points for one move or one player's final tally."""

    total: int = 0
    base: int = 0
    bonus: int = 0
    path: Path | None = None

    def __int__(self) -> int:
        return self.total


@dataclass
class PathRecord:
    length: int = 0
    score: int = 0
    path: Path | None = None


class ScoringSystem(ABC):
    """Base class for scoring systems.  Subclasses must score moves and
    finalise player scores."""

    name: str = ""
    description: str = ""
    default_options: dict = {}

    def __init__(self, **options):
        self.options = dict(self.default_options)
        self.options.update(options)
        self.options["scores"] = {int(k): v for k, v in self.options.get("scores", MATCH_SCORES).items()}

    def update_options(self, **options) -> None:
        self.options.update(options)

    @abstractmethod
    def calculate_score(self, board: Board, pos: Position, tile: Tile, player: Player) -> ScoreBreakdown:
        """Score *player* placing *tile* at *pos* (tile not yet on the board)."""

    @abstractmethod
    def get_final_score(self, board: Board, player: Player) -> ScoreBreakdown:
        """Final tally for *player* at game end."""

    def reset(self) -> None:
        """Forget any per-game state."""

    def restore(self, board: Board, players: list[Player]) -> None:
        """Rebuild per-game state from a restored board."""

    # shared helpers

    def sides_count_as_match(self, mine: str, theirs: str) -> bool:
        if mine == BLANK or theirs == BLANK:
            return False
        return mine == theirs

    def count_matches(self, board: Board, pos: Position, tile: Tile) -> int:
        sides = tile.rotated_sides
        return sum(
            1 for _, _, edge, facing, neighbour in board.neighbors(*pos)
            if neighbour is not None and self.sides_count_as_match(sides[edge], neighbour.side(facing))
        )

    def connection_score(self, board: Board, pos: Position, tile: Tile) -> int:
        """Match-table points, multiplied when touching a starter tile."""
        points = self.options["scores"].get(self.count_matches(board, pos, tile), 0)
        if self.is_connected_to_starter_tile(board, pos):
            points *= self.options.get("starter_tile_multiplier", STARTER_TILE_MULTIPLIER)
        return points

    @staticmethod
    def is_connected_to_starter_tile(board: Board, pos: Position) -> bool:
        return any(
            neighbour is not None and neighbour.is_starter_tile
            for *_, neighbour in board.neighbors(*pos)
        )

    @staticmethod
    def is_center_placement(board: Board, pos: Position) -> bool:
        return tuple(pos) == board.center

    def is_intersection(self, tile: Tile) -> bool:
        connector = self.options.get("connector", STREET)
        return all(side == connector for side in tile.sides)

    @staticmethod
    def running_total(player: Player) -> ScoreBreakdown:
        return ScoreBreakdown(
            total=player.score,
            base=player.score - player.bonus_score,
            bonus=player.bonus_score,
        )


class StandardScoring(ScoringSystem):
    """Score based on number of matching edges."""

    name = "Standard Scoring"
    description = "Score based on number of matching edges"
    default_options = {
        "starter_tile_multiplier": STARTER_TILE_MULTIPLIER,
        "scores": MATCH_SCORES,
    }

    def calculate_score(self, board: Board, pos: Position, tile: Tile, player: Player) -> ScoreBreakdown:
        points = self.connection_score(board, pos, tile)
        return ScoreBreakdown(total=points, base=points)

    def get_final_score(self, board: Board, player: Player) -> ScoreBreakdown:
        return self.running_total(player)


class EnhancedScoring(StandardScoring):
    """Matching edges plus centre and intersection bonuses."""

    name = "Enhanced Streets Scoring"
    description = "Advanced scoring with bonuses for special placements"
    default_options = {
        "starter_tile_multiplier": STARTER_TILE_MULTIPLIER,
        "center_bonus": CENTER_BONUS,
        "intersection_bonus": INTERSECTION_BONUS,
        "scores": MATCH_SCORES,
    }

    def flat_bonus(self, board: Board, pos: Position, tile: Tile) -> int:
        bonus = 0
        if self.is_center_placement(board, pos):
            bonus += self.options["center_bonus"]
        if self.is_intersection(tile):
            bonus += self.options["intersection_bonus"]
        return bonus

    def calculate_score(self, board: Board, pos: Position, tile: Tile, player: Player) -> ScoreBreakdown:
        points = self.connection_score(board, pos, tile) + self.flat_bonus(board, pos, tile)
        return ScoreBreakdown(total=points, base=points)


class StreetScoring(EnhancedScoring):
    """Road connections, special tiles and source-to-sink paths."""

    name = "Street Scoring"
    description = "Score based on road connections, special tiles, and paths"
    default_options = {
        "starter_tile_multiplier": STARTER_TILE_MULTIPLIER,
        "center_bonus": CENTER_BONUS,
        "intersection_bonus": INTERSECTION_BONUS,
        "center_pattern_scores": CENTER_PATTERN_SCORES,
        "path_points": PATH_POINTS_PER_TILE,
        "path_mode": PATH_MODE_INCREMENTAL,
        "connector": STREET,
        "scores": MATCH_SCORES,
    }

    def __init__(self, **options):
        super().__init__(**options)
        self.path_mode = self._resolve_path_mode(options)
        self.best_paths: dict[str, PathRecord] = {}

    @staticmethod
    def _resolve_path_mode(options: dict) -> str:
        mode = options.get("path_mode", PATH_MODE_INCREMENTAL)
        if mode not in PATH_MODES:
            raise ConfigurationError(f"unknown path scoring mode: {mode!r}")
        if options.get("end_game_path_bonus"):
            if "path_mode" in options and mode != PATH_MODE_END_GAME:
                raise ConfigurationError(
                    f"path_mode={mode!r} conflicts with end_game_path_bonus=True"
                )
            mode = PATH_MODE_END_GAME
        return mode

    def update_options(self, **options) -> None:
        if "path_mode" in options or "end_game_path_bonus" in options:
            raise ConfigurationError("path scoring mode is fixed at construction")
        super().update_options(**options)

    def sides_count_as_match(self, mine: str, theirs: str) -> bool:
        connector = self.options["connector"]
        return mine == connector and theirs == connector

    def flat_bonus(self, board: Board, pos: Position, tile: Tile) -> int:
        bonus = super().flat_bonus(board, pos, tile)
        if tile.center_pattern:
            bonus += self.options["center_pattern_scores"].get(tile.center_pattern, 0)
        return bonus

    def path_score(self, path: Path | None) -> int:
        return len(path) * self.options["path_points"] if path else 0

    def longest_path_with(self, board: Board, pos: Position, tile: Tile, player: Player) -> Path | None:
        """Longest path for *player* as if *tile* were already at *pos*."""
        previous = board.get(*pos)
        board.set(*pos, tile)
        try:
            return find_longest_path(board, player.color, self.options["connector"])
        finally:
            board.set(*pos, previous)

    def calculate_score(self, board: Board, pos: Position, tile: Tile, player: Player) -> ScoreBreakdown:
        base = self.connection_score(board, pos, tile) + self.flat_bonus(board, pos, tile)
        result = ScoreBreakdown(total=base, base=base)
        if self.path_mode != PATH_MODE_INCREMENTAL:
            return result

        longest = self.longest_path_with(board, pos, tile, player)
        if longest is None:
            return result
        result.path = longest

        record = self.best_paths.get(player.id, PathRecord())
        if len(longest) > record.length:
            current = self.path_score(longest)
            gain = current - record.score
            logger.info("New longest path for %s: %s", player.name, format_path(longest))
            logger.debug("Path improved by %d tiles, +%d points",
                         len(longest) - record.length, gain)
            self.best_paths[player.id] = PathRecord(len(longest), current, longest)
            result.bonus = gain
            result.total += gain
        return result

    def get_final_score(self, board: Board, player: Player) -> ScoreBreakdown:
        if self.path_mode != PATH_MODE_END_GAME:
            result = self.running_total(player)
            record = self.best_paths.get(player.id)
            result.path = record.path if record else None
            return result

        path = find_longest_path(board, player.color, self.options["connector"])
        bonus = self.path_score(path)
        return ScoreBreakdown(total=player.score + bonus, base=player.score, bonus=bonus, path=path)

    def reset(self) -> None:
        self.best_paths.clear()

    def restore(self, board: Board, players: list[Player]) -> None:
        # Paths only grow as tiles are added, so the longest path on the
        # board is exactly the best one a player has already been paid for.
        self.best_paths.clear()
        if self.path_mode != PATH_MODE_INCREMENTAL:
            return
        for player in players:
            path = find_longest_path(board, player.color, self.options["connector"])
            if path:
                self.best_paths[player.id] = PathRecord(len(path), self.path_score(path), path)

    def reset_player_path(self, player_id: str) -> None:
        self.best_paths.pop(player_id, None)
