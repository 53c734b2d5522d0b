"""Players, turn rotation, racks and the optional turn timer."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from tileplay.tile import Tile, generate_id
from tileplay.tilesets import owner_color

logger = logging.getLogger("tileplay.player")


class Player:
    """A seat at the table: name, score, rack and colour."""

    __slots__ = ("id", "name", "score", "bonus_score", "tiles", "color")

    def __init__(self, name: str, id: str | None = None, color: str | None = None):
        self.id = id or generate_id()
        self.name = name
        self.score = 0
        self.bonus_score = 0
        self.tiles: list[Tile] = []
        self.color = color

    def add_score(self, points: int, bonus: int = 0) -> None:
        """Credit *points*; *bonus* is the part of them that came from bonuses."""
        self.score += points
        self.bonus_score += bonus

    def find_tile(self, tile_id: str) -> Tile | None:
        return next((t for t in self.tiles if t.id == tile_id), None)

    def remove_tile(self, tile_id: str) -> Tile | None:
        for i, t in enumerate(self.tiles):
            if t.id == tile_id:
                return self.tiles.pop(i)
        return None

    def add_tile(self, tile: Tile) -> None:
        self.tiles.append(tile)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "bonusScore": self.bonus_score,
            "tiles": [t.to_dict() for t in self.tiles],
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Player:
        p = cls(data["name"], id=data.get("id"), color=data.get("color"))
        p.score = int(data.get("score", 0))
        p.bonus_score = int(data.get("bonusScore", 0))
        p.tiles = [Tile.from_dict(t) for t in data.get("tiles", [])]
        return p

    def __repr__(self) -> str:
        return f"Player({self.name!r}, score={self.score}, tiles={len(self.tiles)})"


class TurnTimer:
    """Per-turn countdown.

    Ticks once per *interval* seconds on a ``threading.Timer``.  Each tick
    reports the seconds left through *on_tick*; when the count reaches
    zero *on_expire* is called with the countdown's generation and the
    timer stops.  The owner restarts it for the next turn; any start or
    stop in between makes that generation stale (see :meth:`is_current`).
    ``tick()`` advances the countdown by hand.
    """

    def __init__(
        self,
        time_limit: int,
        on_tick: Callable[[int], None] | None = None,
        on_expire: Callable[[int], None] | None = None,
        interval: float = 1.0,
        timer_factory=threading.Timer,
    ):
        self.time_limit = time_limit
        self.time_left = time_limit
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.interval = interval
        self._factory = timer_factory
        self._timer = None
        self._generation = 0
        self._active = False
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._active

    def start(self) -> None:
        """(Re)start the countdown from the full time limit."""
        with self._lock:
            self._cancel()
            self._generation += 1
            self._active = True
            self.time_left = self.time_limit
            self._schedule(self._generation)

    def stop(self) -> None:
        with self._lock:
            self._cancel()
            self._generation += 1
            self._active = False

    def is_current(self, generation: int) -> bool:
        """False once the countdown has been restarted or stopped since *generation*."""
        with self._lock:
            return generation == self._generation

    def tick(self) -> None:
        self._fire(self._generation)

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self, generation: int) -> None:
        timer = self._factory(self.interval, self._fire, args=(generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if not self._active or generation != self._generation:
                return
            self.time_left -= 1
            expired = self.time_left <= 0
            if expired:
                self._active = False
                self._timer = None
            else:
                self._schedule(generation)
            left = self.time_left

        if self.on_tick:
            self.on_tick(left)
        if expired and self.on_expire:
            self.on_expire(generation)


class PlayerManager:
    """Roster, turn order and rack replenishment."""

    def __init__(self, tile_set, rack_size: int):
        self.tile_set = tile_set
        self.rack_size = rack_size
        self.players: list[Player] = []
        self.current_player_index = 0
        self.turn_timer: TurnTimer | None = None

    def initialize_players(self, player_configs: list[dict]) -> None:
        count = len(player_configs)
        self.players = []
        for index, cfg in enumerate(player_configs):
            # path ownership is keyed on the colour dealt tiles carry
            color = owner_color(index, count)
            player = Player(cfg["name"], color=color)
            player.tiles = [
                self.tile_set.generate_tile(index, count) for _ in range(self.rack_size)
            ]
            logger.debug("Player %s (index %d) assigned color %s", player.name, index, color)
            self.players.append(player)
        self.current_player_index = 0

    def get_current_player(self) -> Player:
        return self.players[self.current_player_index]

    def next_turn(self) -> Player:
        self.current_player_index = (self.current_player_index + 1) % len(self.players)
        return self.get_current_player()

    def get_player_by_id(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def index_of(self, player: Player) -> int:
        return self.players.index(player)

    def replace_tile(self, player_id: str, old_tile_id: str, new_tile: Tile) -> None:
        player = self.get_player_by_id(player_id)
        if player is not None:
            player.remove_tile(old_tile_id)
            player.add_tile(new_tile)

    def draw_replacement(self, player: Player) -> Tile:
        return self.tile_set.generate_tile(self.index_of(player), len(self.players))

    def update_player_score(self, player_id: str, points: int, bonus: int = 0) -> Player | None:
        player = self.get_player_by_id(player_id)
        if player is not None:
            player.add_score(points, bonus)
        return player

    def initialize_turn_timer(self, time_limit: int, on_tick=None, on_expire=None,
                              timer_factory=threading.Timer) -> TurnTimer:
        self.stop_turn_timer()
        self.turn_timer = TurnTimer(time_limit, on_tick, on_expire, timer_factory=timer_factory)
        return self.turn_timer

    def restart_turn_timer(self) -> None:
        if self.turn_timer is not None:
            self.turn_timer.start()

    def stop_turn_timer(self) -> None:
        if self.turn_timer is not None:
            self.turn_timer.stop()
