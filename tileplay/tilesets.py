"""Tile sets: side alphabets, tile generation and drawable primitives.

A tile set owns three things:

  1. the side alphabet and the random distribution tiles are drawn from,
  2. validation of tiles against that alphabet,
  3. a pure description of how a tile looks, as a list of
     :class:`Primitive` shapes in a 300x300 design space.  The renderer in
     :mod:`tileplay.render` rasterises them; nothing here touches display
     state.

It also answers the border question for the ruleset: which side values
may face outward on a perimeter cell.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass

from tileplay.constants import (
    BLANK,
    MAX_PLAYERS,
    NON_STREET,
    PLAYER_COLORS,
    SHAPE_COLORS,
    SIDE_COUNT,
    SINK_PATTERN,
    SOURCE_PATTERN,
    STREET,
)
from tileplay.errors import ConfigurationError
from tileplay.tile import Tile, generate_id, rotate_sides


@dataclass(frozen=True)
class Primitive:
    """One drawable shape.

    ``kind`` is ``polygon``, ``rect``, ``ellipse``, ``pieslice`` or ``arc``.
    ``points`` holds polygon vertices; ``box`` holds ``(x0, y0, x1, y1)``
    for the other kinds.  ``quarter`` is how many clockwise quarter turns
    to apply about the tile centre before drawing.
    """

    kind: str
    points: tuple[tuple[float, float], ...] = ()
    box: tuple[float, float, float, float] | None = None
    start: float = 0.0
    end: float = 360.0
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float = 1.0
    quarter: int = 0

    def turned(self, quarter: int) -> Primitive:
        return Primitive(
            self.kind, self.points, self.box, self.start, self.end,
            self.fill, self.stroke, self.stroke_width, quarter,
        )


def _poly(coords: str, fill: str) -> Primitive:
    pts = tuple(tuple(float(v) for v in p.split(",")) for p in coords.split())
    return Primitive("polygon", points=pts, fill=fill)


def _rect(x: float, y: float, w: float, h: float, fill: str | None = None,
          stroke: str | None = None) -> Primitive:
    return Primitive("rect", box=(x, y, x + w, y + h), fill=fill, stroke=stroke)


def _circle(cx: float, cy: float, r: float, fill: str | None = None,
            stroke: str | None = None, stroke_width: float = 1.0) -> Primitive:
    return Primitive("ellipse", box=(cx - r, cy - r, cx + r, cy + r),
                     fill=fill, stroke=stroke, stroke_width=stroke_width)


def owner_color(owner_index: int | None, player_count: int) -> str | None:
    """Colour tag for tiles dealt to seat *owner_index*."""
    if owner_index is None:
        return None
    if player_count == 1:
        return PLAYER_COLORS[0]
    if not 0 <= owner_index < MAX_PLAYERS:
        raise ConfigurationError(f"no colour for seat {owner_index}, at most {MAX_PLAYERS} players")
    return PLAYER_COLORS[owner_index + 1]


class TileSet(ABC):
    """Base class for tile sets.  Subclasses must generate, validate and
    describe tiles."""

    name: str = ""
    description: str = ""
    default_options: dict = {}

    # Side value that links tiles into paths, or None
    connector: str | None = None
    # Wildcard side value, or None
    blank: str | None = None

    def __init__(self, rng: random.Random | None = None, **options):
        self.rng = rng or random.Random()
        self.options = dict(self.default_options)
        self.options.update(options)

    def update_options(self, **options) -> None:
        self.options.update(options)

    @property
    @abstractmethod
    def alphabet(self) -> frozenset[str]:
        """Every side value a tile of this set may carry."""

    @abstractmethod
    def generate_tile(self, owner_index: int | None = None, player_count: int = 1) -> Tile:
        """Draw a fresh random tile."""

    @abstractmethod
    def drawable(self, tile: Tile, rotation: int | None = None) -> list[Primitive]:
        """Drawable primitives for *tile*, optionally at an explicit rotation."""

    def validate_tile(self, tile: Tile) -> bool:
        """Exactly four sides, each from the alphabet."""
        sides = getattr(tile, "sides", None)
        if sides is None or len(sides) != SIDE_COUNT:
            return False
        return all(s in self.alphabet for s in sides)

    @abstractmethod
    def outward_side_allowed(self, side: str) -> bool:
        """Whether *side* may face off the board on a perimeter cell."""

    def _new_id(self) -> str:
        return generate_id(self.rng)


class StreetsTileSet(TileSet):
    """City streets: each side is either a street or not."""

    name = "Streets"
    description = "City streets with road connections"
    default_options = {
        "street_probability": 0.75,
        "enable_center_patterns": True,
        "center_pattern_frequency": 0.2,
        "pattern_weights": {SINK_PATTERN: 0.7, SOURCE_PATTERN: 0.3},
    }
    connector = STREET

    _SIDE_PATTERNS = {
        STREET: (
            _poly("150,150 200,100 200,0 100,0 100,100", "#000000"),
            _rect(147.76, 105.95, 4.49, 39.06, "#FFFFFF"),
            _rect(147.76, 55.23, 4.49, 39.06, "#FFFFFF"),
            _rect(147.76, 4.98, 4.49, 38.59, "#FFFFFF"),
            _poly("102.25,0 103.64,0 103.64,103.64 102.25,102.25", "#FFFFFF"),
            _poly("196.36,103.64 196.36,0 197.75,0 197.75,102.25", "#FFFFFF"),
        ),
        NON_STREET: (
            _poly("150,150 200,100 100,100", "#000000"),
            _poly("197.75,102.25 102.25,102.25 103.64,103.64 196.37,103.64", "#FFFFFF"),
        ),
    }

    _CENTER_PATTERNS = {
        SINK_PATTERN: (
            _circle(150, 150, 100, "#000000"),
            _circle(150, 150, 96, stroke="#FFFFFF", stroke_width=2),
        ),
        SOURCE_PATTERN: (
            _rect(25, 25, 250, 250, "#000000"),
            _rect(89.19, 89.19, 121.62, 121.62, "#000000", stroke="#FFFFFF"),
            _rect(94.91, 94.91, 110.19, 110.19, "#FFFFFF"),
        ),
    }

    @property
    def alphabet(self) -> frozenset[str]:
        return frozenset((STREET, NON_STREET))

    def generate_tile(self, owner_index: int | None = None, player_count: int = 1) -> Tile:
        p = self.options["street_probability"]
        sides = [STREET if self.rng.random() < p else NON_STREET for _ in range(SIDE_COUNT)]

        pattern = None
        if (self.options["enable_center_patterns"]
                and self.rng.random() < self.options["center_pattern_frequency"]):
            circles = self.options["pattern_weights"].get(SINK_PATTERN, 0.7)
            pattern = SINK_PATTERN if self.rng.random() < circles else SOURCE_PATTERN

        return Tile(
            sides,
            center_pattern=pattern,
            background_color=owner_color(owner_index, player_count),
            id=self._new_id(),
        )

    def drawable(self, tile: Tile, rotation: int | None = None) -> list[Primitive]:
        r = tile.rotation if rotation is None else rotation
        prims = [_rect(0, 0, 300, 300, tile.background_color or "#ffffff")]
        for edge, side in enumerate(rotate_sides(tile.sides, r)):
            prims.extend(p.turned(edge) for p in self._SIDE_PATTERNS[side])
        if tile.center_pattern in self._CENTER_PATTERNS:
            prims.extend(self._CENTER_PATTERNS[tile.center_pattern])
        if tile.is_starter_tile:
            prims.append(_circle(150, 150, 135, "#444444"))
        return prims

    def outward_side_allowed(self, side: str) -> bool:
        return side != STREET


class ShapesTileSet(TileSet):
    """Coloured geometric shapes; sides match by colour."""

    name = "Shapes"
    description = "Geometric shapes with matching edges"
    default_options = {
        "shape_count": 6,
        "enable_blank_sides": False,
        "blank_probability": 0.2,
    }
    blank = BLANK

    # Side designs, drawn against the top edge
    _DESIGNS = {
        "Purple": ("polygon", "34.2,0 89.4,0 150,61.3 210.6,0 265.8,0 150,115.8"),
        "Green": ("polygon", "68.1,0 105.5,0 105.5,44.5 194,44.5 194,0 231.8,0 231.8,81.8 68.1,81.8"),
        "Blue": ("polygon", "56.7,0 94.8,0 94.8,31.8 150,63.6 205.2,31.8 205.2,0 243.3,0 "
                            "243.3,53.9 150,107.7 56.7,53.9"),
        "Red": ("arc", (56.8, -93.2, 243.2, 93.2)),
        "Cyan": ("pieslice", (71.1, -78.8, 228.9, 78.8)),
        "Orange": ("polygon", "52.1,0 247.9,0 150,97.9"),
        "Pink": ("polygon", "71,0 229,0 229,45.6 150,91.1 71,45.6"),
        "Yellow": ("polygon", "80.8,0 219.2,0 219.2,69.2 80.8,69.2"),
    }

    @property
    def palette(self) -> list[str]:
        colours = [c for c in SHAPE_COLORS if c != BLANK]
        return colours[:self.options["shape_count"]]

    @property
    def alphabet(self) -> frozenset[str]:
        return frozenset(SHAPE_COLORS)

    def generate_tile(self, owner_index: int | None = None, player_count: int = 1) -> Tile:
        palette = self.palette
        blanks = self.options["enable_blank_sides"]
        sides = []
        for _ in range(SIDE_COUNT):
            if blanks and self.rng.random() < self.options["blank_probability"]:
                sides.append(BLANK)
            else:
                sides.append(self.rng.choice(palette))
        return Tile(sides, id=self._new_id())

    def _side_design(self, colour: str, edge: int) -> Primitive:
        kind, data = self._DESIGNS[colour]
        fill = SHAPE_COLORS[colour]
        if kind == "polygon":
            return _poly(data, fill).turned(edge)
        if kind == "arc":
            return Primitive("arc", box=data, start=0, end=180, fill=fill,
                             stroke_width=38.8, quarter=edge)
        return Primitive(kind, box=data, start=0, end=180, fill=fill, quarter=edge)

    def drawable(self, tile: Tile, rotation: int | None = None) -> list[Primitive]:
        r = tile.rotation if rotation is None else rotation
        prims = [_rect(0, 0, 300, 300, "#000000")]
        if tile.is_starter_tile:
            prims.append(_circle(150, 150, 117, "#555555"))
        for edge, side in enumerate(rotate_sides(tile.sides, r)):
            if side != BLANK:
                prims.append(self._side_design(side, edge))
        return prims

    def outward_side_allowed(self, side: str) -> bool:
        return side == BLANK
