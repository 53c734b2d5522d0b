"""Placement rules: legality checks and valid-move enumeration."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tileplay.board import Board, Position
from tileplay.constants import BOTTOM, LEFT, RIGHT, TOP
from tileplay.tile import Tile
from tileplay.tilesets import TileSet


def outward_edges(board: Board, x: int, y: int) -> list[int]:
    """Edge indices of (x, y) that face off the board."""
    last = board.size - 1
    edges = []
    if y == 0:
        edges.append(TOP)
    if x == last:
        edges.append(RIGHT)
    if y == last:
        edges.append(BOTTOM)
    if x == 0:
        edges.append(LEFT)
    return edges


def passes_border_policy(board: Board, pos: Position, tile: Tile, tile_set: TileSet) -> bool:
    """Every outward-facing side of a perimeter cell must be allowed by the tile set."""
    sides = tile.rotated_sides
    return all(tile_set.outward_side_allowed(sides[e]) for e in outward_edges(board, *pos))


def sides_match(a: str, b: str, blank: str | None, allow_blank: bool) -> bool:
    if allow_blank and blank is not None and (a == blank or b == blank):
        return True
    return a == b


class Ruleset(ABC):
    """Base class for rulesets.  Subclasses must validate, enumerate and
    react to placements."""

    name: str = ""
    description: str = ""
    default_options: dict = {}

    def __init__(self, **options):
        self.options = dict(self.default_options)
        self.options.update(options)

    def update_options(self, **options) -> None:
        self.options.update(options)

    @abstractmethod
    def is_valid_placement(self, board: Board, pos: Position, tile: Tile, tile_set: TileSet) -> bool:
        """True if *tile* (at its stored rotation) may go at *pos*."""

    @abstractmethod
    def get_valid_moves(self, board: Board, tile: Tile, tile_set: TileSet) -> set[Position]:
        """Every position where *tile* may legally go."""

    @abstractmethod
    def on_tile_placed(self, board: Board, pos: Position, tile: Tile) -> None:
        """Hook called after a tile has been committed."""


class BasicRuleset(Ruleset):
    """Standard tile matching rules."""

    name = "Basic Rules"
    description = "Standard tile matching rules"
    default_options = {
        "require_adjacent": True,
        "allow_blank_matches": False,
        "enable_free_play": False,
        "enable_border_rule": False,
    }

    # Tiles are never removed from the board, so "no player tile yet"
    # stays false forever once the first player tile lands.
    @staticmethod
    def is_first_move(board: Board) -> bool:
        return all(tile.is_starter_tile for _, _, tile in board.iter_tiles())

    @staticmethod
    def has_starter_tiles(board: Board) -> bool:
        return any(tile.is_starter_tile for _, _, tile in board.iter_tiles())

    def check_edge_matches(self, board: Board, pos: Position, tile: Tile, tile_set: TileSet) -> bool:
        sides = tile.rotated_sides
        allow_blank = self.options["allow_blank_matches"]
        for _, _, edge, facing, neighbour in board.neighbors(*pos):
            if neighbour is None:
                continue
            if not sides_match(sides[edge], neighbour.side(facing), tile_set.blank, allow_blank):
                return False
        return True

    def is_valid_placement(self, board: Board, pos: Position, tile: Tile, tile_set: TileSet) -> bool:
        x, y = pos
        if not board.in_bounds(x, y):
            return False
        if board.is_occupied(x, y):
            return False

        if self.options["enable_border_rule"] and board.is_border(x, y):
            if not passes_border_policy(board, pos, tile, tile_set):
                return False

        if self.options["enable_free_play"]:
            return self.check_edge_matches(board, pos, tile, tile_set)

        if self.is_first_move(board) and not self.has_starter_tiles(board):
            return True

        if self.options["require_adjacent"] and not board.has_adjacent_tile(x, y):
            return False

        return self.check_edge_matches(board, pos, tile, tile_set)

    def get_valid_moves(self, board: Board, tile: Tile, tile_set: TileSet) -> set[Position]:
        if self.is_first_move(board) and not self.has_starter_tiles(board):
            return set(board.empty_positions())
        return {
            (x, y) for x, y in board.empty_positions()
            if self.is_valid_placement(board, (x, y), tile, tile_set)
        }

    def on_tile_placed(self, board: Board, pos: Position, tile: Tile) -> None:
        return None
