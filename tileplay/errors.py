"""Exception types and placement failure tags."""

from __future__ import annotations

from enum import Enum


class TileplayError(Exception):
    """Base class for all library errors."""


class ConfigurationError(TileplayError):
    """A variant or setup configuration is unusable."""


class SnapshotError(TileplayError):
    """A persisted snapshot could not be restored."""


class PlacementFailure(str, Enum):
    """Why ``GameState.place_tile`` refused a move."""

    NO_TILE_SELECTED = "No tile selected"
    POSITION_OCCUPIED = "Position already occupied"
    INVALID_PLACEMENT = "Invalid placement"
    GAME_OVER = "Game is over"
