"""Game-wide constants for Tileplay.

Everything here is loaded once and shared by reference.  Mappings are
wrapped in ``MappingProxyType`` so nothing can mutate them after import.
"""

from __future__ import annotations

from types import MappingProxyType

DEFAULT_BOARD_SIZE = 9
DEFAULT_RACK_SIZE = 5
DEFAULT_TIME_LIMIT = 60  # seconds per turn

# Edge index convention: 0=top, 1=right, 2=bottom, 3=left
TOP, RIGHT, BOTTOM, LEFT = 0, 1, 2, 3
SIDE_COUNT = 4

# (dx, dy, own edge, neighbour edge) for each orthogonal neighbour
NEIGHBOR_OFFSETS: tuple[tuple[int, int, int, int], ...] = (
    (0, -1, TOP, BOTTOM),
    (1, 0, RIGHT, LEFT),
    (0, 1, BOTTOM, TOP),
    (-1, 0, LEFT, RIGHT),
)

# Player colours
# Index 0 is used for single-player games, 1.. for multiplayer seats.

PLAYER_COLORS: tuple[str, ...] = (
    "#FFFFFF",  # white, single player
    "#df0000",  # red
    "#008bda",  # blue
    "#FFE600",  # yellow
    "#1f9100",  # green
)
MAX_PLAYERS = len(PLAYER_COLORS) - 1

# Streets tile set

STREET = "street"
NON_STREET = "non-street"
SOURCE_PATTERN = "squares"
SINK_PATTERN = "circles"

# Shapes tile set

BLANK = "Blank"

SHAPE_COLORS = MappingProxyType({
    "Blank": "#333333",
    "Purple": "#a200ff",
    "Blue": "#008bda",
    "Green": "#1f9100",
    "Red": "#df0000",
    "Cyan": "#00b0c0",
    "Orange": "#ff9018",
    "Pink": "#ff64ee",
    "Yellow": "#ffde00",
})

# Scoring defaults

MATCH_SCORES = MappingProxyType({1: 1, 2: 4, 3: 9, 4: 16})
STARTER_TILE_MULTIPLIER = 2
CENTER_BONUS = 5
INTERSECTION_BONUS = 5
CENTER_PATTERN_SCORES = MappingProxyType({SOURCE_PATTERN: 20, SINK_PATTERN: 10})
PATH_POINTS_PER_TILE = 3

# Path bonus modes
PATH_MODE_NONE = "none"
PATH_MODE_INCREMENTAL = "incremental"
PATH_MODE_END_GAME = "end_game"
PATH_MODES = frozenset({PATH_MODE_NONE, PATH_MODE_INCREMENTAL, PATH_MODE_END_GAME})

# Drawing space used by the tile-set primitives (scaled by the renderer)
DESIGN_SIZE = 300
