"""Tileplay — edge-matching tile game engine."""

from tileplay.constants import DEFAULT_BOARD_SIZE, DEFAULT_RACK_SIZE, DEFAULT_TIME_LIMIT
from tileplay.errors import ConfigurationError, PlacementFailure, SnapshotError, TileplayError
from tileplay.tile import Tile
from tileplay.board import Board
from tileplay.tilesets import ShapesTileSet, StreetsTileSet, TileSet
from tileplay.rules import BasicRuleset, Ruleset
from tileplay.scoring import EnhancedScoring, ScoreBreakdown, ScoringSystem, StandardScoring, StreetScoring
from tileplay.pathfinding import find_all_simple_paths, find_longest_path
from tileplay.seeding import BoardSeeder, SeedLimits, place_initial_tiles
from tileplay.player import Player, PlayerManager, TurnTimer
from tileplay.config import GameConfig, InitialTilesConfig, load_config, normalize_config
from tileplay.registry import GameRegistry, default_registry
from tileplay.events import GameEvent
from tileplay.game import GamePhase, GameState, PlaceResult, load_snapshot, save_snapshot

__all__ = [
    "DEFAULT_BOARD_SIZE",
    "DEFAULT_RACK_SIZE",
    "DEFAULT_TIME_LIMIT",
    "BasicRuleset",
    "Board",
    "BoardSeeder",
    "ConfigurationError",
    "EnhancedScoring",
    "GameConfig",
    "GameEvent",
    "GamePhase",
    "GameRegistry",
    "GameState",
    "InitialTilesConfig",
    "PlaceResult",
    "PlacementFailure",
    "Player",
    "PlayerManager",
    "Ruleset",
    "ScoreBreakdown",
    "ScoringSystem",
    "SeedLimits",
    "ShapesTileSet",
    "SnapshotError",
    "StandardScoring",
    "StreetScoring",
    "StreetsTileSet",
    "Tile",
    "TileSet",
    "TileplayError",
    "TurnTimer",
    "default_registry",
    "find_all_simple_paths",
    "find_longest_path",
    "load_config",
    "load_snapshot",
    "normalize_config",
    "place_initial_tiles",
    "save_snapshot",
]
