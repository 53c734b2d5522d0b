"""Typed publish/subscribe channel between the engine and the UI."""

from __future__ import annotations

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger("tileplay.events")

Handler = Callable[[Any], None]


class GameEvent(str, Enum):
    TILE_SELECTED = "tileSelected"
    TILE_ROTATED = "tileRotated"
    TILE_PLACED = "tilePlaced"
    INVALID_PLACEMENT = "invalidPlacement"
    SCORE_POPUP = "scorePopup"
    SCORE_UPDATE = "scoreUpdate"
    PATH_UPDATE = "pathUpdate"
    TURN_CHANGE = "turnChange"
    TURN_TIMER_UPDATE = "turnTimerUpdate"
    GAME_END = "gameEnd"


class EventChannel:
    """Handlers are kept per event kind and called in subscription order."""

    def __init__(self):
        self._handlers: dict[GameEvent, list[Handler]] = defaultdict(list)

    def on(self, event: GameEvent, handler: Handler) -> None:
        event = GameEvent(event)
        if handler not in self._handlers[event]:
            self._handlers[event].append(handler)

    def off(self, event: GameEvent, handler: Handler) -> None:
        handlers = self._handlers.get(GameEvent(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent, data: Any = None) -> None:
        logger.debug("emit %s", event.value)
        for handler in list(self._handlers.get(event, ())):
            handler(data)
