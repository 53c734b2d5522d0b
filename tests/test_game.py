"""Tests for the game state machine."""

import json

import pytest

from tileplay.board import Board
from tileplay.errors import PlacementFailure, SnapshotError
from tileplay.events import GameEvent
from tileplay.game import GamePhase, GameState, load_snapshot, save_snapshot
from tileplay.registry import default_registry
from tileplay.rules import BasicRuleset
from tileplay.tile import Tile


class OpenRuleset(BasicRuleset):
    """Any empty in-bounds cell is fine."""

    def is_valid_placement(self, board, pos, tile, tile_set):
        return board.in_bounds(*pos) and board.is_empty(*pos)

    def get_valid_moves(self, board, tile, tile_set):
        return set(board.empty_positions())


@pytest.fixture
def registry():
    reg = default_registry()
    reg.register_ruleset("open", OpenRuleset)
    return reg


def _game(registry=None, **setup):
    setup.setdefault("seed", 42)
    return GameState.create(setup, registry)


def _record(state, event):
    seen = []
    state.on(event, seen.append)
    return seen


class TestSetup:

    def test_create_defaults(self):
        state = _game()
        assert state.phase is GamePhase.IN_PROGRESS
        assert state.board.size == 9
        assert len(state.players) == 1
        assert len(state.get_current_player().tiles) == 5
        assert state.board.is_board_empty()

    def test_border_arrangement_seeds_perimeter(self):
        state = _game(boardSize=5, initialTiles={"type": "arrangement", "style": "border"},
                      rulesetOptions={"enableBorderRule": True})
        seeded = list(state.board.iter_tiles())
        assert seeded
        assert all(state.board.is_border(x, y) and t.is_starter_tile for x, y, t in seeded)

    def test_seeded_games_repeat(self):
        a = _game(players=["Ann", "Bo"], initialTiles=3)
        b = _game(players=["Ann", "Bo"], initialTiles=3)
        assert a.board.to_list() == b.board.to_list()
        assert [t.to_dict() for t in a.players[1].tiles] == [t.to_dict() for t in b.players[1].tiles]


class TestSelection:

    def test_select_and_rotate(self):
        state = _game()
        rotated = _record(state, GameEvent.TILE_ROTATED)
        tile = state.get_current_player().tiles[0]

        state.select_tile(tile.id)
        assert state.rotate_tile() == 1

        assert tile.rotation == 0
        assert state.selected_rotated_tile().rotation == 1
        assert rotated[0]["rotation"] == 1
        assert len(rotated[0]["validMoves"]) == 81

    def test_rotate_without_selection(self):
        assert _game().rotate_tile() is None

    def test_select_foreign_tile(self):
        with pytest.raises(ValueError):
            _game().select_tile("not-a-tile")

    def test_valid_moves_empty_without_selection(self):
        assert _game().get_valid_moves() == set()


class TestPlaceTile:

    def test_no_selection(self):
        result = _game().place_tile((4, 4))
        assert not result.success
        assert result.reason is PlacementFailure.NO_TILE_SELECTED

    def test_first_placement(self):
        state = _game(players=["Ann", "Bo"])
        placed = _record(state, GameEvent.TILE_PLACED)
        turns = _record(state, GameEvent.TURN_CHANGE)
        ann = state.get_current_player()
        tile = ann.tiles[0]

        state.select_tile(tile)
        result = state.place_tile((0, 0))

        assert result.success
        assert state.board.get(0, 0).id == tile.id
        assert ann.find_tile(tile.id) is None
        assert len(ann.tiles) == 5
        assert state.selected_tile is None
        assert not state.first_move
        assert state.get_current_player().name == "Bo"
        assert placed[0]["position"] == (0, 0)
        assert turns[0].name == "Bo"

    def test_occupied(self):
        state = _game(players=["Ann", "Bo"])
        state.select_tile(state.get_current_player().tiles[0])
        state.place_tile((0, 0))

        state.select_tile(state.get_current_player().tiles[0])
        result = state.place_tile((0, 0))
        assert result.reason is PlacementFailure.POSITION_OCCUPIED

    def test_invalid_placement_emits(self):
        state = _game(players=["Ann", "Bo"])
        invalid = _record(state, GameEvent.INVALID_PLACEMENT)
        state.select_tile(state.get_current_player().tiles[0])
        state.place_tile((0, 0))

        state.select_tile(state.get_current_player().tiles[0])
        result = state.place_tile((8, 8))

        assert result.reason is PlacementFailure.INVALID_PLACEMENT
        assert invalid == [(8, 8)]
        assert state.get_current_player().name == "Bo"

    def test_committed_tile_is_independent_of_rack(self):
        state = _game()
        original = state.get_current_player().tiles[0]
        state.select_tile(original)
        state.rotate_tile()
        state.place_tile((4, 4))

        original.rotation = 3
        assert state.board.get(4, 4).rotation == 1
        assert state.board.get(4, 4) is not original

    def test_score_credited(self, registry):
        state = _game(registry, tileSet="shapes", ruleset="open", players=["Ann", "Bo"])
        state.board.set(1, 0, Tile(("Red", "Red", "Red", "Red")))
        ann = state.get_current_player()
        tile = ann.tiles[0]
        tile.sides = ("Red", "Red", "Red", "Red")

        state.select_tile(tile)
        result = state.place_tile((0, 0))

        assert result.points == 1
        assert ann.score == 1


class TestTurns:

    def test_skip_turn(self):
        state = _game(players=["Ann", "Bo"])
        assert state.skip_turn().name == "Bo"
        assert state.skip_turn().name == "Ann"

    def test_timer_expiry_advances(self, timers):
        state = GameState.create(
            {"players": ["Ann", "Bo"], "enableTimer": True, "timeLimit": 2, "seed": 1},
            timer_factory=timers,
        )
        updates = _record(state, GameEvent.TURN_TIMER_UPDATE)

        timers.fire_latest()
        timers.fire_latest()

        assert updates == [1, 0]
        assert state.get_current_player().name == "Bo"
        assert state.player_manager.turn_timer.running

    def test_move_restarts_timer(self, timers):
        state = GameState.create(
            {"players": ["Ann", "Bo"], "enableTimer": True, "timeLimit": 3, "seed": 1},
            timer_factory=timers,
        )
        timers.fire_latest()
        state.select_tile(state.get_current_player().tiles[0])
        state.place_tile((4, 4))
        assert state.player_manager.turn_timer.time_left == 3


class TestGameEnd:

    def test_final_placement_ends_game(self, registry):
        state = _game(registry, boardSize=2, tileSet="shapes", ruleset="open",
                      players=["Ann", "Bo", "Cy", "Di"])
        for pos in ((0, 0), (1, 0), (0, 1)):
            state.board.set(*pos, Tile(("Red", "Red", "Red", "Red")))
        ann, bo, cy, di = state.players
        ann.score, bo.score, di.score = 10, 30, 10
        state.player_manager.current_player_index = 2
        ended = _record(state, GameEvent.GAME_END)

        state.select_tile(cy.tiles[0])
        result = state.place_tile((1, 1))

        assert result.success
        assert result.game_over
        assert state.phase is GamePhase.ENDED
        assert [s.name for s in state.final_scores] == ["Bo", "Ann", "Di", "Cy"]
        assert ended == [state.final_scores]

        state.select_tile(state.get_current_player().tiles[0])
        again = state.place_tile((0, 0))
        assert again.reason is PlacementFailure.GAME_OVER

    def test_no_playable_tile_ends_game(self):
        state = _game(boardSize=3, tileSet="shapes", tileSetOptions={"shapeCount": 1})
        assert not state.is_game_over()
        for x, y in state.board.empty_positions():
            if (x, y) != (1, 1):
                state.board.set(x, y, Tile(("Red", "Red", "Red", "Red")))
        # every rack tile is all purple, nothing fits against red
        assert state.is_game_over()

    def test_end_game_stops_timer(self, timers):
        state = GameState.create({"enableTimer": True, "seed": 1}, timer_factory=timers)
        state.end_game()
        assert not state.player_manager.turn_timer.running
        state.skip_turn()
        assert state.phase is GamePhase.ENDED


class TestSnapshot:

    def test_round_trip(self):
        state = _game(players=["Ann", "Bo"])
        state.select_tile(state.get_current_player().tiles[0])
        state.place_tile((4, 4))
        snap = state.to_snapshot()

        restored = GameState.from_snapshot(json.loads(json.dumps(snap)), {"players": ["x"]})

        assert restored.board.to_list() == state.board.to_list()
        assert [p.to_dict() for p in restored.players] == [p.to_dict() for p in state.players]
        assert restored.current_player_index == 1
        assert restored.first_move is False

    def test_restore_does_not_reseed(self):
        state = _game(players=["Ann"], initialTiles=4)
        snap = state.to_snapshot()
        restored = GameState.from_snapshot(snap, {"initialTiles": 4})
        assert restored.board.to_list() == snap["boardState"]

    def test_save_and_load(self, tmp_path):
        state = _game(players=["Ann", "Bo"], boardSize=6)
        path = tmp_path / "game.json"
        save_snapshot(state, path)

        restored = load_snapshot(path)
        assert restored.board_size == 6
        assert [p.name for p in restored.players] == ["Ann", "Bo"]

    def test_missing_keys(self):
        with pytest.raises(SnapshotError, match="players"):
            GameState.from_snapshot({"boardSize": 3, "rackSize": 5, "boardState": [],
                                     "currentPlayerIndex": 0, "firstMove": True})

    def test_bad_player_index(self):
        snap = _game(players=["Ann"]).to_snapshot()
        snap["currentPlayerIndex"] = 4
        with pytest.raises(SnapshotError):
            GameState.from_snapshot(snap)

    def test_size_mismatch(self):
        snap = _game().to_snapshot()
        snap["boardState"] = Board(3).to_list()
        with pytest.raises(SnapshotError):
            GameState.from_snapshot(snap)

    def test_not_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SnapshotError):
            load_snapshot(path)


class TestTimerAndMovesDoNotOverlap:

    def test_move_before_expiry_keeps_next_turn(self, timers):
        state = GameState.create(
            {"players": ["Ann", "Bo", "Cy"], "enableTimer": True, "timeLimit": 1, "seed": 1},
            timer_factory=timers,
        )
        skipped = []

        def skip_on_zero(left):
            if left == 0 and not skipped:
                skipped.append(state.skip_turn().name)

        state.on(GameEvent.TURN_TIMER_UPDATE, skip_on_zero)
        timers.fire_latest()

        assert skipped == ["Bo"]
        assert state.get_current_player().name == "Bo"
        assert state.player_manager.turn_timer.running
        assert state.player_manager.turn_timer.time_left == 1

    def test_expiry_without_move_still_advances(self, timers):
        state = GameState.create(
            {"players": ["Ann", "Bo", "Cy"], "enableTimer": True, "timeLimit": 1, "seed": 1},
            timer_factory=timers,
        )
        timers.fire_latest()
        assert state.get_current_player().name == "Bo"


class TestRestoreChecks:

    def test_tile_with_three_sides_rejected(self):
        snap = _game(boardSize=5).to_snapshot()
        snap["boardState"][2][1] = Tile(("street", "street", "street")).to_dict()
        with pytest.raises(SnapshotError, match="not valid"):
            GameState.from_snapshot(snap)

    def test_foreign_rack_tile_rejected(self):
        snap = _game(boardSize=5).to_snapshot()
        snap["players"][0]["tiles"][0] = Tile(("Red", "Red", "Red", "Red")).to_dict()
        with pytest.raises(SnapshotError):
            GameState.from_snapshot(snap)

    def test_too_many_players_rejected(self):
        snap = _game(players=["Ann"]).to_snapshot()
        snap["players"] = snap["players"] * 5
        with pytest.raises(SnapshotError, match="at most 4"):
            GameState.from_snapshot(snap)

    def test_full_board_restores_as_ended(self, timers):
        state = GameState.create({"boardSize": 2, "seed": 1})
        for x, y in state.board.empty_positions():
            state.board.set(x, y, Tile(("street",) * 4))
        snap = state.to_snapshot()

        restored = GameState.from_snapshot(snap, {"enableTimer": True}, timer_factory=timers)

        assert restored.phase is GamePhase.ENDED
        assert restored.final_scores is not None
        assert not restored.player_manager.turn_timer.running
