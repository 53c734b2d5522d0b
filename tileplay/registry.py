"""Name-keyed registry of tile sets, rulesets and scoring systems."""

from __future__ import annotations

import inspect
import logging

from tileplay.errors import ConfigurationError
from tileplay.rules import BasicRuleset
from tileplay.scoring import EnhancedScoring, StandardScoring, StreetScoring
from tileplay.tilesets import ShapesTileSet, StreetsTileSet

log = logging.getLogger("tileplay")

TILE_SET_CAPABILITIES = ("generate_tile", "drawable", "validate_tile", "outward_side_allowed")
RULESET_CAPABILITIES = ("is_valid_placement", "get_valid_moves", "on_tile_placed")
SCORING_CAPABILITIES = ("calculate_score", "get_final_score")

DEFAULT_SCORING = "standard"


def check_capabilities(role: str, name: str, factory, required: tuple[str, ...]) -> None:
    """Reject *factory* unless it implements every operation in *required*."""
    if not callable(factory):
        raise ConfigurationError(f"{role} {name!r}: factory is not callable")
    missing = []
    for op in required:
        attr = getattr(factory, op, None)
        if attr is None or not callable(attr) or getattr(attr, "__isabstractmethod__", False):
            missing.append(op)
    if missing:
        raise ConfigurationError(
            f"{role} {name!r} does not implement: {', '.join(missing)}"
        )
    if inspect.isabstract(factory):
        raise ConfigurationError(f"{role} {name!r} is abstract")


class GameRegistry:
    """Holds variant factories by name and builds fresh instances per game."""

    def __init__(self):
        self.tile_sets: dict[str, type] = {}
        self.rulesets: dict[str, type] = {}
        self.scoring_systems: dict[str, type] = {}
        self.tile_set_scoring: dict[str, str] = {}

    # registration

    def register_tile_set(self, name: str, factory) -> None:
        check_capabilities("tile set", name, factory, TILE_SET_CAPABILITIES)
        self.tile_sets[name] = factory

    def register_ruleset(self, name: str, factory) -> None:
        check_capabilities("ruleset", name, factory, RULESET_CAPABILITIES)
        self.rulesets[name] = factory

    def register_scoring_system(self, name: str, factory, for_tile_set: str | None = None) -> None:
        check_capabilities("scoring system", name, factory, SCORING_CAPABILITIES)
        self.scoring_systems[name] = factory
        if for_tile_set:
            self.tile_set_scoring[for_tile_set] = name

    # lookup

    @staticmethod
    def _lookup(table: dict, role: str, name: str):
        try:
            return table[name]
        except KeyError:
            known = ", ".join(sorted(table)) or "none"
            raise ConfigurationError(f"unknown {role} {name!r} (known: {known})") from None

    def scoring_name_for_tile_set(self, tile_set_name: str) -> str:
        return self.tile_set_scoring.get(tile_set_name, DEFAULT_SCORING)

    def create_tile_set(self, name: str, rng=None, **options):
        return self._lookup(self.tile_sets, "tile set", name)(rng=rng, **options)

    def create_ruleset(self, name: str, **options):
        return self._lookup(self.rulesets, "ruleset", name)(**options)

    def create_scoring_system(self, name: str, **options):
        return self._lookup(self.scoring_systems, "scoring system", name)(**options)


def default_registry() -> GameRegistry:
    """Registry with every built-in variant."""
    registry = GameRegistry()
    registry.register_tile_set("streets", StreetsTileSet)
    registry.register_tile_set("shapes", ShapesTileSet)
    registry.register_ruleset("basic", BasicRuleset)
    registry.register_scoring_system("standard", StandardScoring)
    registry.register_scoring_system("enhanced", EnhancedScoring)
    registry.register_scoring_system("street", StreetScoring, for_tile_set="streets")
    log.debug("Registered %d tile sets, %d rulesets, %d scoring systems",
              len(registry.tile_sets), len(registry.rulesets), len(registry.scoring_systems))
    return registry
