"""Turn-based game state machine.

``GameState`` ties the board, players, tile set, ruleset and scoring
system together.  A game moves through three phases::

    SETUP -> IN_PROGRESS -> ENDED

Mutating entry points (``place_tile``, ``skip_turn`` and turn-timer
expiry) all take the same re-entrant lock, so a timer firing on its own
thread never interleaves with a manual move.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import random
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from tileplay.board import Board, Position
from tileplay.config import GameConfig, InitialTilesConfig, normalize_config
from tileplay.constants import MAX_PLAYERS
from tileplay.errors import PlacementFailure, SnapshotError
from tileplay.events import EventChannel, GameEvent
from tileplay.player import Player, PlayerManager
from tileplay.registry import GameRegistry, default_registry
from tileplay.rules import Ruleset
from tileplay.scoring import ScoreBreakdown, ScoringSystem
from tileplay.seeding import BoardSeeder, SeedLimits
from tileplay.tile import Tile
from tileplay.tilesets import TileSet

log = logging.getLogger("tileplay")

SNAPSHOT_KEYS = ("boardSize", "rackSize", "boardState", "players", "currentPlayerIndex", "firstMove")


class GamePhase(str, Enum):
    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


@dataclass
class PlaceResult:
    success: bool
    score: ScoreBreakdown | None = None
    reason: PlacementFailure | None = None
    game_over: bool = False

    @property
    def points(self) -> int:
        return self.score.total if self.score else 0


@dataclass
class FinalScore:
    id: str
    name: str
    score: int
    breakdown: ScoreBreakdown


class GameState:
    """One game session.  Replace the whole object to start a new game."""

    def __init__(
        self,
        config: GameConfig,
        tile_set: TileSet,
        ruleset: Ruleset,
        scoring_system: ScoringSystem,
        rng: random.Random | None = None,
        seed_limits: SeedLimits | None = None,
        timer_factory=threading.Timer,
    ):
        self.config = config
        self.board_size = config.board_size
        self.rack_size = config.rack_size
        self.tile_set = tile_set
        self.ruleset = ruleset
        self.scoring_system = scoring_system
        self.rng = rng or random.Random(config.seed)

        self.board = Board(self.board_size)
        self.selected_tile: Tile | None = None
        self.current_rotation = 0
        self.first_move = True
        self.phase = GamePhase.SETUP
        self.final_scores: list[FinalScore] | None = None

        self.events = EventChannel()
        self._lock = threading.RLock()

        self.player_manager = PlayerManager(tile_set, self.rack_size)
        self.player_manager.initialize_players(list(config.players))

        if config.initial_tiles.enabled:
            self.initialize_board(config.initial_tiles, seed_limits)

        if config.enable_timer and config.time_limit:
            self.player_manager.initialize_turn_timer(
                config.time_limit,
                on_tick=self._on_timer_tick,
                on_expire=self._on_timer_expired,
                timer_factory=timer_factory,
            )

        self.phase = GamePhase.IN_PROGRESS
        self.player_manager.restart_turn_timer()

    @classmethod
    def create(cls, config: GameConfig | dict | None = None,
               registry: GameRegistry | None = None, **kwargs) -> GameState:
        """Build a game from a (possibly raw) setup configuration."""
        if not isinstance(config, GameConfig):
            config = normalize_config(config)
        registry = registry or default_registry()
        rng = kwargs.pop("rng", None) or random.Random(config.seed)

        tile_set = registry.create_tile_set(config.tile_set, rng=rng, **config.tile_set_options)
        ruleset = registry.create_ruleset(config.ruleset, **config.ruleset_options)
        scoring_name = config.scoring or registry.scoring_name_for_tile_set(config.tile_set)
        scoring = registry.create_scoring_system(scoring_name, **config.scoring_options)
        log.info("New game: %dx%d board, %s tiles, %s rules, %s scoring, %d player(s)",
                 config.board_size, config.board_size, config.tile_set,
                 config.ruleset, scoring_name, len(config.players))
        return cls(config, tile_set, ruleset, scoring, rng=rng, **kwargs)

    # setup

    def initialize_board(self, initial: InitialTilesConfig, limits: SeedLimits | None = None) -> None:
        seeder = BoardSeeder(self.ruleset, self.tile_set, self.rng, limits)
        placed = seeder.place_initial_tiles(self.board, initial)
        for (x, y), tile in placed:
            self.board.set(x, y, tile)
            self.events.emit(GameEvent.TILE_PLACED, {"position": (x, y), "tile": tile, "score": None})
        if not placed:
            log.warning("No initial tiles were placed")

    # accessors

    @property
    def players(self) -> list[Player]:
        return self.player_manager.players

    @property
    def current_player_index(self) -> int:
        return self.player_manager.current_player_index

    def get_current_player(self) -> Player:
        return self.player_manager.get_current_player()

    @property
    def is_over(self) -> bool:
        return self.phase is GamePhase.ENDED

    def on(self, event: GameEvent, handler) -> None:
        self.events.on(event, handler)

    def off(self, event: GameEvent, handler) -> None:
        self.events.off(event, handler)

    # selection

    def select_tile(self, tile: Tile | str) -> Tile:
        """Select a tile from the current player's rack, resetting rotation."""
        tile_id = tile if isinstance(tile, str) else tile.id
        found = self.get_current_player().find_tile(tile_id)
        if found is None:
            raise ValueError(f"tile {tile_id!r} is not in the current player's rack")
        self.selected_tile = found
        self.current_rotation = 0
        self.events.emit(GameEvent.TILE_SELECTED, found)
        return found

    def selected_rotated_tile(self) -> Tile | None:
        """Copy of the selection at the current rotation (rack tile untouched)."""
        if self.selected_tile is None:
            return None
        return self.selected_tile.rotated(self.current_rotation)

    def rotate_tile(self) -> int | None:
        if self.selected_tile is None:
            return None
        self.current_rotation = (self.current_rotation + 1) % 4
        valid = self.get_valid_moves()
        self.events.emit(GameEvent.TILE_ROTATED, {
            "rotation": self.current_rotation,
            "validMoves": valid,
        })
        return self.current_rotation

    def get_valid_moves(self, tile: Tile | None = None) -> set[Position]:
        """Valid positions for *tile* as-is, or for the rotated selection."""
        tile = tile if tile is not None else self.selected_rotated_tile()
        if tile is None:
            return set()
        return self.ruleset.get_valid_moves(self.board, tile, self.tile_set)

    # moves

    def place_tile(self, position: Position) -> PlaceResult:
        """Place the selected tile.  Failures come back as a tagged result."""
        with self._lock:
            if self.phase is GamePhase.ENDED:
                return PlaceResult(False, reason=PlacementFailure.GAME_OVER, game_over=True)
            if self.selected_tile is None:
                return PlaceResult(False, reason=PlacementFailure.NO_TILE_SELECTED)

            x, y = position
            if self.board.is_occupied(x, y):
                return PlaceResult(False, reason=PlacementFailure.POSITION_OCCUPIED)

            tile = self.selected_rotated_tile()
            if not self.ruleset.is_valid_placement(self.board, (x, y), tile, self.tile_set):
                self.events.emit(GameEvent.INVALID_PLACEMENT, (x, y))
                return PlaceResult(False, reason=PlacementFailure.INVALID_PLACEMENT)

            player = self.get_current_player()
            score = self.scoring_system.calculate_score(self.board, (x, y), tile, player)

            self.board.set(x, y, tile)
            self.ruleset.on_tile_placed(self.board, (x, y), tile)
            self.player_manager.update_player_score(player.id, score.total, score.bonus)

            fresh = self.player_manager.draw_replacement(player)
            self.player_manager.replace_tile(player.id, self.selected_tile.id, fresh)
            self.selected_tile = None
            self.current_rotation = 0
            self.first_move = False

            log.debug("%s placed %r at (%d,%d) for %d", player.name, tile, x, y, score.total)
            self.events.emit(GameEvent.TILE_PLACED, {"position": (x, y), "tile": tile, "score": score})
            if score.total > 0:
                self.events.emit(GameEvent.SCORE_POPUP, {"position": (x, y), "score": score.total})
            if score.path:
                self.events.emit(GameEvent.PATH_UPDATE, {"playerId": player.id, "path": score.path})
            self.events.emit(GameEvent.SCORE_UPDATE, player)

            self._advance_turn()
            return PlaceResult(True, score=score, game_over=self.is_over)

    def skip_turn(self) -> Player:
        with self._lock:
            if self.phase is GamePhase.IN_PROGRESS:
                self._advance_turn()
            return self.get_current_player()

    def _advance_turn(self) -> None:
        player = self.player_manager.next_turn()
        self.selected_tile = None
        self.current_rotation = 0
        self.player_manager.restart_turn_timer()
        self.events.emit(GameEvent.TURN_CHANGE, player)
        if self.is_game_over():
            self.end_game()

    def _on_timer_tick(self, time_left: int) -> None:
        self.events.emit(GameEvent.TURN_TIMER_UPDATE, time_left)

    def _on_timer_expired(self, generation: int) -> None:
        with self._lock:
            if self.phase is not GamePhase.IN_PROGRESS:
                return
            timer = self.player_manager.turn_timer
            # a move between the last tick and now already ended this turn
            if timer is None or not timer.is_current(generation):
                return
            log.info("Turn timer expired for %s", self.get_current_player().name)
            self._advance_turn()

    # end of game

    def _has_placement(self, tile: Tile) -> bool:
        return any(self.get_valid_moves(tile.rotated(r)) for r in range(4))

    def is_game_over(self) -> bool:
        """Board full, or nobody holds a tile that fits anywhere in any rotation."""
        if self.board.is_full():
            return True
        return not any(
            self._has_placement(tile)
            for player in self.players
            for tile in player.tiles
        )

    def end_game(self) -> list[FinalScore]:
        with self._lock:
            if self.final_scores is not None:
                return self.final_scores
            scores = []
            for player in self.players:
                breakdown = self.scoring_system.get_final_score(self.board, player)
                scores.append(FinalScore(player.id, player.name, breakdown.total, breakdown))
            # sorted() is stable, so ties keep seating order
            self.final_scores = sorted(scores, key=lambda s: s.score, reverse=True)
            self.player_manager.stop_turn_timer()
            self.phase = GamePhase.ENDED
            log.info("Game over: %s", ", ".join(f"{s.name}={s.score}" for s in self.final_scores))
            self.events.emit(GameEvent.GAME_END, self.final_scores)
            return self.final_scores

    # persistence

    def to_snapshot(self) -> dict:
        return {
            "boardSize": self.board_size,
            "rackSize": self.rack_size,
            "boardState": self.board.to_list(),
            "players": [p.to_dict() for p in self.players],
            "currentPlayerIndex": self.current_player_index,
            "firstMove": self.first_move,
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict, config: GameConfig | dict | None = None,
                      registry: GameRegistry | None = None, **kwargs) -> GameState:
        """Rebuild a game from *config* plus a snapshot from :meth:`to_snapshot`."""
        missing = [k for k in SNAPSHOT_KEYS if k not in snapshot]
        if missing:
            raise SnapshotError(f"snapshot is missing: {', '.join(missing)}")

        if not isinstance(config, GameConfig):
            config = normalize_config(config)
        try:
            board = Board.from_list(snapshot["boardState"])
            players = [Player.from_dict(p) for p in snapshot["players"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise SnapshotError(f"malformed snapshot: {exc}") from exc
        if board.size != snapshot["boardSize"]:
            raise SnapshotError(f"boardState is {board.size} wide, boardSize says {snapshot['boardSize']}")
        if not players:
            raise SnapshotError("snapshot has no players")
        if len(players) > MAX_PLAYERS:
            raise SnapshotError(f"snapshot has {len(players)} players, at most {MAX_PLAYERS} are supported")
        index = snapshot["currentPlayerIndex"]
        if not isinstance(index, int) or not 0 <= index < len(players):
            raise SnapshotError(f"currentPlayerIndex {index!r} out of range")

        config = dataclasses.replace(
            config,
            board_size=snapshot["boardSize"],
            rack_size=snapshot["rackSize"],
            initial_tiles=InitialTilesConfig(),
            players=tuple({"name": p.name} for p in players),
        )
        state = cls.create(config, registry, **kwargs)
        state.player_manager.stop_turn_timer()
        invalid = [(x, y) for x, y, tile in board.iter_tiles() if not state.tile_set.validate_tile(tile)]
        invalid += [p.name for p in players for tile in p.tiles if not state.tile_set.validate_tile(tile)]
        if invalid:
            raise SnapshotError(f"tiles not valid for the {config.tile_set} tile set: {invalid}")
        state.board = board
        state.player_manager.players = players
        state.player_manager.current_player_index = index
        state.first_move = bool(snapshot["firstMove"])
        state.scoring_system.restore(board, players)
        state.player_manager.restart_turn_timer()
        if state.is_game_over():
            state.end_game()
        return state


def save_snapshot(state: GameState, path: str | Path) -> None:
    Path(path).write_text(json.dumps(state.to_snapshot(), indent=2), encoding="utf-8")
    log.info("Saved game to %s", path)


def load_snapshot(path: str | Path, config: GameConfig | dict | None = None,
                  registry: GameRegistry | None = None, **kwargs) -> GameState:
    try:
        snapshot = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"{path}: {exc}") from exc
    return GameState.from_snapshot(snapshot, config, registry, **kwargs)
