"""Game configuration: normalisation of setup input and config files.

The setup collaborator hands over a loosely-typed mapping in camelCase
(``boardSize``, ``initialTiles`` ...).  :func:`normalize_config` fills in
defaults and turns it into a frozen :class:`GameConfig`; option blocks are
converted to snake_case keys so they can be passed straight to the tile
set, ruleset and scoring constructors.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from tileplay.constants import DEFAULT_BOARD_SIZE, DEFAULT_RACK_SIZE, DEFAULT_TIME_LIMIT, MAX_PLAYERS
from tileplay.errors import ConfigurationError

log = logging.getLogger("tileplay")

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    return _CAMEL.sub("_", name).lower()


def snake_case_keys(options: dict | None) -> dict:
    return {snake_case(k): v for k, v in (options or {}).items()}


@dataclass(frozen=True)
class InitialTilesConfig:
    type: str = "random"          # "random" or "arrangement"
    count: int = 0                # random only
    style: str = "border"         # arrangement only: "border" or "center"

    @property
    def enabled(self) -> bool:
        return self.type == "arrangement" or self.count > 0


@dataclass(frozen=True)
class GameConfig:
    board_size: int = DEFAULT_BOARD_SIZE
    rack_size: int = DEFAULT_RACK_SIZE
    tile_set: str = "streets"
    ruleset: str = "basic"
    scoring: str | None = None    # None: pick the tile set's default
    initial_tiles: InitialTilesConfig = field(default_factory=InitialTilesConfig)
    enable_timer: bool = False
    time_limit: int = DEFAULT_TIME_LIMIT
    players: tuple[Mapping[str, Any], ...] = ({"name": "Player 1"},)
    tile_set_options: Mapping[str, Any] = field(default_factory=dict)
    ruleset_options: Mapping[str, Any] = field(default_factory=dict)
    scoring_options: Mapping[str, Any] = field(default_factory=dict)
    seed: int | None = None

    def __post_init__(self):
        # option blocks and player entries are stored as read-only views
        object.__setattr__(self, "players", tuple(MappingProxyType(dict(p)) for p in self.players))
        for name in ("tile_set_options", "ruleset_options", "scoring_options"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def to_dict(self) -> dict:
        return {
            "boardSize": self.board_size,
            "rackSize": self.rack_size,
            "tileSet": self.tile_set,
            "ruleset": self.ruleset,
            "scoring": self.scoring,
            "initialTiles": {
                "type": self.initial_tiles.type,
                "count": self.initial_tiles.count,
                "style": self.initial_tiles.style,
            },
            "enableTimer": self.enable_timer,
            "timeLimit": self.time_limit,
            "players": [dict(p) for p in self.players],
            "tileSetOptions": dict(self.tile_set_options),
            "rulesetOptions": dict(self.ruleset_options),
            "scoringOptions": dict(self.scoring_options),
            "seed": self.seed,
        }


def _normalize_initial_tiles(raw: Any) -> InitialTilesConfig:
    if isinstance(raw, InitialTilesConfig):
        return raw
    if isinstance(raw, bool) or raw is None:
        return InitialTilesConfig()
    if isinstance(raw, (int, float)):
        return InitialTilesConfig(type="random", count=max(0, int(raw)))
    if isinstance(raw, dict):
        if raw.get("type") == "arrangement":
            return InitialTilesConfig(type="arrangement", style=raw.get("style") or "border")
        # anything else counts as random
        return InitialTilesConfig(type="random", count=max(0, int(raw.get("count") or 0)))
    raise ConfigurationError(f"invalid initialTiles value: {raw!r}")


def _normalize_players(raw: Any) -> tuple[dict, ...]:
    if not raw:
        return ({"name": "Player 1"},)
    players = []
    for i, p in enumerate(raw):
        if isinstance(p, str):
            players.append({"name": p})
        elif isinstance(p, dict) and p.get("name"):
            players.append(dict(p))
        else:
            players.append({"name": f"Player {i + 1}"})
    if len(players) > MAX_PLAYERS:
        raise ConfigurationError(f"at most {MAX_PLAYERS} players are supported, got {len(players)}")
    return tuple(players)


def _positive_int(value: Any, default: int, name: str) -> int:
    if value in (None, ""):
        return default
    try:
        n = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
    if n <= 0:
        raise ConfigurationError(f"{name} must be positive, got {n}")
    return n


def normalize_config(config: dict | GameConfig | None = None, **overrides) -> GameConfig:
    """Fill defaults and coerce a setup mapping into a :class:`GameConfig`."""
    if isinstance(config, GameConfig):
        config = config.to_dict()
    raw = dict(config or {})
    raw.update(overrides)

    return GameConfig(
        board_size=_positive_int(raw.get("boardSize"), DEFAULT_BOARD_SIZE, "boardSize"),
        rack_size=_positive_int(raw.get("rackSize"), DEFAULT_RACK_SIZE, "rackSize"),
        tile_set=raw.get("tileSet") or "streets",
        ruleset=raw.get("ruleset") or "basic",
        scoring=raw.get("scoring") or None,
        initial_tiles=_normalize_initial_tiles(raw.get("initialTiles")),
        enable_timer=bool(raw.get("enableTimer")),
        time_limit=_positive_int(raw.get("timeLimit"), DEFAULT_TIME_LIMIT, "timeLimit"),
        players=_normalize_players(raw.get("players")),
        tile_set_options=snake_case_keys(raw.get("tileSetOptions")),
        ruleset_options=snake_case_keys(raw.get("rulesetOptions")),
        scoring_options=snake_case_keys(raw.get("scoringOptions")),
        seed=raw.get("seed"),
    )


def load_config(path: str | Path) -> GameConfig:
    """Read a YAML (or JSON) setup file and normalise it."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing config: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at the top level")
    log.info("Loaded game config from %s", path)
    return normalize_config(data)
