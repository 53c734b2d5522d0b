"""Shared pytest fixtures for tileplay tests."""

import random

import pytest

from tileplay.board import Board
from tileplay.constants import NON_STREET, STREET
from tileplay.rules import BasicRuleset
from tileplay.tile import Tile
from tileplay.tilesets import ShapesTileSet, StreetsTileSet

S = STREET
N = NON_STREET
RED = "#df0000"


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=()):
        timer = FakeTimer(interval, function, args)
        self.timers.append(timer)
        return timer

    @property
    def latest(self):
        return self.timers[-1]

    def fire_latest(self):
        self.latest.fire()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def board():
    return Board(5)


@pytest.fixture
def streets(rng):
    return StreetsTileSet(rng=rng)


@pytest.fixture
def shapes(rng):
    return ShapesTileSet(rng=rng)


@pytest.fixture
def ruleset():
    return BasicRuleset()


@pytest.fixture
def make_tile():
    """Factory for hand-built tiles: make_tile("street", "non-street", ...)."""

    def _make(*sides, rotation=0, pattern=None, owner=None, starter=False):
        return Tile(
            list(sides),
            rotation=rotation,
            center_pattern=pattern,
            background_color=owner,
            is_starter_tile=starter,
        )

    return _make
