"""Tile representation for Tileplay."""

from __future__ import annotations

import random
import string

from tileplay.constants import SIDE_COUNT

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_id(rng: random.Random | None = None) -> str:
    """Short random identifier for tiles and players."""
    rng = rng or random
    return "".join(rng.choice(_ID_ALPHABET) for _ in range(9))


def rotate_sides(sides: tuple[str, ...], rotation: int) -> tuple[str, ...]:
    """Left-rotate *sides* by *rotation* quarter turns."""
    r = rotation % SIDE_COUNT
    return tuple(sides[r:]) + tuple(sides[:r])


class Tile:
    """A placeable square with four directional sides.

    ``sides`` is stored unrotated; ``rotation`` says how many quarter
    turns have been applied.  Rotating never mutates a tile: it returns
    a copy, so the original in a player's rack is left alone.
    """

    __slots__ = (
        "id", "sides", "rotation", "center_pattern",
        "background_color", "is_starter_tile",
    )

    def __init__(
        self,
        sides,
        rotation: int = 0,
        center_pattern: str | None = None,
        background_color: str | None = None,
        is_starter_tile: bool = False,
        id: str | None = None,
    ):
        self.id = id or generate_id()
        self.sides = tuple(sides)
        self.rotation = rotation % SIDE_COUNT
        self.center_pattern = center_pattern
        self.background_color = background_color  # owner colour tag
        self.is_starter_tile = is_starter_tile

    @property
    def rotated_sides(self) -> tuple[str, ...]:
        """Effective sides with the stored rotation applied."""
        return rotate_sides(self.sides, self.rotation)

    def side(self, edge: int) -> str:
        """Effective side value at edge index *edge* (0=top .. 3=left)."""
        return self.rotated_sides[edge]

    def rotated(self, rotation: int) -> Tile:
        """Copy of this tile with its rotation set to *rotation*."""
        return self.copy(rotation=rotation)

    def copy(self, **changes) -> Tile:
        fields = {
            "sides": self.sides,
            "rotation": self.rotation,
            "center_pattern": self.center_pattern,
            "background_color": self.background_color,
            "is_starter_tile": self.is_starter_tile,
            "id": self.id,
        }
        fields.update(changes)
        return Tile(**fields)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sides": list(self.sides),
            "rotation": self.rotation,
            "centerPattern": self.center_pattern,
            "backgroundColor": self.background_color,
            "isStarterTile": self.is_starter_tile,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Tile:
        return cls(
            sides=data["sides"],
            rotation=data.get("rotation", 0),
            center_pattern=data.get("centerPattern"),
            background_color=data.get("backgroundColor"),
            is_starter_tile=bool(data.get("isStarterTile", False)),
            id=data.get("id"),
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tile):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self.id, self.sides, self.rotation))

    def __repr__(self) -> str:
        extra = f" {self.center_pattern}" if self.center_pattern else ""
        starter = " starter" if self.is_starter_tile else ""
        return f"Tile({self.id} {'/'.join(self.rotated_sides)} r{self.rotation}{extra}{starter})"
