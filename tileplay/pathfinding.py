"""Simple-path search over connector-linked board cells.

Nodes are occupied cells carrying the owner's colour tag.  Two orthogonal
neighbours are linked when both facing sides (after rotation) equal the
connector value, e.g. a street running across the shared edge.

The search is exhaustive: it returns every simple path between two cells,
because the caller compares lengths across all (source, sink) pairs.  The
cost is exponential in the worst case but boards are small and street
networks sparse.
"""

from __future__ import annotations

import logging

from tileplay.board import Board, Position
from tileplay.constants import SINK_PATTERN, SOURCE_PATTERN

logger = logging.getLogger("tileplay.path")

Path = list[Position]


def connected_neighbors(board: Board, pos: Position, owner_tag: str | None, connector: str) -> list[Position]:
    """Same-owner neighbours of *pos* joined to it through a connector edge."""
    tile = board.get(*pos)
    if tile is None:
        return []
    sides = tile.rotated_sides
    linked: list[Position] = []
    for nx, ny, edge, facing, neighbour in board.neighbors(*pos):
        if neighbour is None or neighbour.background_color != owner_tag:
            continue
        if sides[edge] == connector and neighbour.side(facing) == connector:
            linked.append((nx, ny))
    return linked


def find_all_simple_paths(
    board: Board,
    start: Position,
    end: Position,
    owner_tag: str | None,
    connector: str,
) -> list[Path]:
    """Every simple path from *start* to *end* through the owner's tiles."""
    first = board.get(*start)
    if first is None or first.background_color != owner_tag:
        return []

    paths: list[Path] = []
    visited: set[Position] = set()
    current: Path = [start]

    def _dfs(pos: Position) -> None:
        visited.add(pos)
        if pos == end:
            paths.append(list(current))
        else:
            for nxt in connected_neighbors(board, pos, owner_tag, connector):
                if nxt not in visited:
                    current.append(nxt)
                    _dfs(nxt)
                    current.pop()
        visited.discard(pos)

    _dfs(start)
    return paths


def find_special_tiles(board: Board, pattern: str, owner_tag: str | None) -> list[Position]:
    """Row-major positions of *owner_tag* tiles with center *pattern*."""
    return [
        (x, y) for x, y, tile in board.iter_tiles()
        if tile.center_pattern is not None
        and tile.center_pattern.lower() == pattern.lower()
        and tile.background_color == owner_tag
    ]


def find_longest_path(board: Board, owner_tag: str | None, connector: str) -> Path | None:
    """Longest source-to-sink path for *owner_tag*, or None.

    Sources are ``squares`` tiles, sinks ``circles`` tiles.  Only a
    strictly longer path replaces the current best, so ties keep the first
    path found in row-major source/sink order.
    """
    sources = find_special_tiles(board, SOURCE_PATTERN, owner_tag)
    sinks = find_special_tiles(board, SINK_PATTERN, owner_tag)
    if not sources or not sinks:
        return None

    best: Path | None = None
    for start in sources:
        for end in sinks:
            for path in find_all_simple_paths(board, start, end, owner_tag, connector):
                if best is None or len(path) > len(best):
                    best = path
    if best is not None:
        logger.debug("Longest path for %s: %s", owner_tag, format_path(best))
    return best


def format_path(path: Path | None) -> str:
    return " -> ".join(f"({x},{y})" for x, y in path) if path else ""
