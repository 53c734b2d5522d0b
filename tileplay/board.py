"""Square game board."""

from __future__ import annotations

from typing import Iterator

from tileplay.constants import DEFAULT_BOARD_SIZE, NEIGHBOR_OFFSETS
from tileplay.tile import Tile

Position = tuple[int, int]  # (x, y)


class Board:
    """N x N grid.  Cells are None (empty) or a committed Tile.

    The size is fixed for the lifetime of the board and tiles are never
    removed once placed, apart from the scoring engine's speculative
    commit which is undone before it returns.
    """

    def __init__(self, size: int = DEFAULT_BOARD_SIZE):
        if size < 1:
            raise ValueError(f"board size must be positive, got {size}")
        self.size = size
        self.cells: list[list[Tile | None]] = [
            [None] * size for _ in range(size)
        ]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def get(self, x: int, y: int) -> Tile | None:
        """Tile at (x, y), or None."""
        if self.in_bounds(x, y):
            return self.cells[y][x]
        return None

    def set(self, x: int, y: int, tile: Tile | None) -> None:
        """Place a tile or clear the cell."""
        if self.in_bounds(x, y):
            self.cells[y][x] = tile

    def is_empty(self, x: int, y: int) -> bool:
        """True if no tile at (x, y)."""
        return self.get(x, y) is None

    def is_occupied(self, x: int, y: int) -> bool:
        """True if there's a tile at (x, y)."""
        return not self.is_empty(x, y)

    def is_board_empty(self) -> bool:
        """True if no tiles on the board."""
        return all(cell is None for _, _, cell in self.iter_cells())

    def is_full(self) -> bool:
        return all(cell is not None for _, _, cell in self.iter_cells())

    def count_tiles(self) -> int:
        """Number of tiles on the board."""
        return sum(1 for _, _, cell in self.iter_cells() if cell is not None)

    def is_border(self, x: int, y: int) -> bool:
        last = self.size - 1
        return x == 0 or y == 0 or x == last or y == last

    @property
    def center(self) -> Position:
        return self.size // 2, self.size // 2

    def iter_cells(self) -> Iterator[tuple[int, int, Tile | None]]:
        """Yield (x, y, tile) in row-major order."""
        for y in range(self.size):
            for x in range(self.size):
                yield x, y, self.cells[y][x]

    def iter_tiles(self) -> Iterator[tuple[int, int, Tile]]:
        for x, y, cell in self.iter_cells():
            if cell is not None:
                yield x, y, cell

    def empty_positions(self) -> list[Position]:
        return [(x, y) for x, y, cell in self.iter_cells() if cell is None]

    def neighbors(self, x: int, y: int) -> Iterator[tuple[int, int, int, int, Tile | None]]:
        """In-bounds orthogonal neighbours as (nx, ny, own_edge, their_edge, tile)."""
        for dx, dy, edge, facing in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield nx, ny, edge, facing, self.cells[ny][nx]

    def has_adjacent_tile(self, x: int, y: int) -> bool:
        return any(tile is not None for *_, tile in self.neighbors(x, y))

    def copy(self) -> Board:
        """Shallow copy of the board."""
        b = Board(self.size)
        for y in range(self.size):
            b.cells[y] = self.cells[y][:]
        return b

    def to_list(self) -> list[list[dict | None]]:
        return [
            [cell.to_dict() if cell is not None else None for cell in row]
            for row in self.cells
        ]

    @classmethod
    def from_list(cls, rows: list[list[dict | None]]) -> Board:
        b = cls(len(rows))
        for y, row in enumerate(rows):
            if len(row) != b.size:
                raise ValueError(f"row {y} has {len(row)} cells, expected {b.size}")
            for x, cell in enumerate(row):
                b.cells[y][x] = Tile.from_dict(cell) if cell else None
        return b

    def __str__(self) -> str:
        header = "    " + " ".join(f"{x:>2}" for x in range(self.size))
        sep = "   " + "---" * self.size
        lines = [header, sep]
        for y in range(self.size):
            parts = [f"{y:>2} |"]
            for x in range(self.size):
                tile = self.cells[y][x]
                if tile is None:
                    parts.append(" . ")
                elif tile.is_starter_tile:
                    parts.append(" # ")
                elif tile.center_pattern:
                    parts.append(f" {tile.center_pattern[0].upper()} ")
                else:
                    parts.append(" o ")
            lines.append("".join(parts))
        return "\n".join(lines)
