"""Tests for the scoring systems."""

import pytest
from conftest import N, RED, S

from tileplay.board import Board
from tileplay.constants import BLANK
from tileplay.errors import ConfigurationError
from tileplay.player import Player
from tileplay.scoring import EnhancedScoring, StandardScoring, StreetScoring


@pytest.fixture
def player():
    return Player("Ann", color=RED)


class TestStandardScoring:

    def test_match_count_is_squared(self, make_tile, player):
        board = Board(5)
        board.set(1, 1, make_tile("Red", "Blue", "Red", "Red"))
        board.set(2, 0, make_tile("Red", "Red", "Green", "Red"))
        tile = make_tile("Green", "Red", "Red", "Blue")

        score = StandardScoring().calculate_score(board, (2, 1), tile, player)
        assert score.total == 4
        assert score.bonus == 0

    def test_no_neighbors_scores_zero(self, make_tile, player):
        score = StandardScoring().calculate_score(Board(5), (0, 0), make_tile("Red", "Red", "Red", "Red"), player)
        assert score.total == 0

    def test_starter_neighbor_doubles(self, make_tile, player):
        board = Board(5)
        board.set(1, 1, make_tile("Red", "Blue", "Red", "Red", starter=True))
        tile = make_tile("Green", "Red", "Red", "Blue")
        assert StandardScoring().calculate_score(board, (2, 1), tile, player).total == 2

    def test_blank_never_scores(self, make_tile, player):
        board = Board(5)
        board.set(1, 1, make_tile("Red", BLANK, "Red", "Red"))
        tile = make_tile("Green", "Red", "Red", BLANK)
        assert StandardScoring().calculate_score(board, (2, 1), tile, player).total == 0

    def test_final_score_is_running_total(self, player):
        player.add_score(12, bonus=5)
        final = StandardScoring().get_final_score(Board(3), player)
        assert (final.total, final.base, final.bonus) == (12, 7, 5)


class TestEnhancedScoring:

    def test_center_and_intersection_bonus(self, make_tile, player):
        score = EnhancedScoring().calculate_score(Board(5), (2, 2), make_tile(S, S, S, S), player)
        assert score.total == 10

    def test_multiplier_applies_to_connection_only(self, make_tile, player):
        board = Board(5)
        board.set(2, 1, make_tile(N, N, S, N, starter=True))
        score = EnhancedScoring().calculate_score(board, (2, 2), make_tile(S, S, S, S), player)
        # 1 match doubled, plus centre 5 and intersection 5
        assert score.total == 12


class TestStreetScoring:

    def _partial_chain(self, board, make_tile):
        board.set(1, 3, make_tile(S, S, N, N, pattern="squares", owner=RED))
        for x in (2, 3, 4):
            board.set(x, 3, make_tile(N, S, N, S, owner=RED))

    def test_only_streets_count_as_matches(self, make_tile, player):
        board = Board(5)
        board.set(0, 0, make_tile(N, N, N, N))
        score = StreetScoring(path_mode="none").calculate_score(board, (1, 0), make_tile(N, N, N, N), player)
        assert score.total == 0

    def test_center_pattern_points(self, make_tile, player):
        scoring = StreetScoring(path_mode="none")
        assert scoring.calculate_score(Board(5), (0, 0), make_tile(N, N, N, N, pattern="squares"), player).total == 20
        assert scoring.calculate_score(Board(5), (0, 0), make_tile(N, N, N, N, pattern="circles"), player).total == 10

    def test_path_of_five_earns_five_times_points(self, make_tile, player):
        board = Board(7)
        self._partial_chain(board, make_tile)
        scoring = StreetScoring()
        sink = make_tile(N, N, N, S, pattern="circles", owner=RED)

        score = scoring.calculate_score(board, (5, 3), sink, player)

        assert score.bonus == 5 * 3
        # 1 street match + circles 10 + path 15
        assert score.total == 26
        assert len(score.path) == 5
        assert board.get(5, 3) is None
        assert scoring.best_paths[player.id].length == 5

    def test_shorter_route_adds_nothing(self, make_tile, player):
        board = Board(7)
        self._partial_chain(board, make_tile)
        scoring = StreetScoring()
        sink = make_tile(N, N, N, S, pattern="circles", owner=RED)
        scoring.calculate_score(board, (5, 3), sink, player)
        board.set(5, 3, sink)

        near_sink = make_tile(N, N, S, N, pattern="circles", owner=RED)
        score = scoring.calculate_score(board, (1, 2), near_sink, player)

        assert score.bonus == 0
        assert score.total == 11
        assert scoring.best_paths[player.id].score == 15

    def test_same_path_twice_not_double_credited(self, make_tile, player):
        board = Board(7)
        self._partial_chain(board, make_tile)
        scoring = StreetScoring()
        sink = make_tile(N, N, N, S, pattern="circles", owner=RED)
        scoring.calculate_score(board, (5, 3), sink, player)
        board.set(5, 3, sink)

        filler = make_tile(N, N, N, N, owner=RED)
        assert scoring.calculate_score(board, (6, 6), filler, player).bonus == 0

    def test_end_game_mode_scores_once(self, make_tile, player):
        board = Board(7)
        self._partial_chain(board, make_tile)
        scoring = StreetScoring(end_game_path_bonus=True)
        sink = make_tile(N, N, N, S, pattern="circles", owner=RED)

        score = scoring.calculate_score(board, (5, 3), sink, player)
        assert score.bonus == 0
        assert score.path is None

        board.set(5, 3, sink)
        player.add_score(score.total)
        final = scoring.get_final_score(board, player)
        assert final.bonus == 15
        assert final.total == score.total + 15

    def test_restore_rebuilds_path_records(self, make_tile, player):
        board = Board(7)
        self._partial_chain(board, make_tile)
        board.set(5, 3, make_tile(N, N, N, S, pattern="circles", owner=RED))
        scoring = StreetScoring()

        scoring.restore(board, [player])

        assert scoring.best_paths[player.id].length == 5
        filler = make_tile(N, N, N, N, owner=RED)
        assert scoring.calculate_score(board, (6, 6), filler, player).bonus == 0


class TestPathModes:

    def test_default_is_incremental(self):
        assert StreetScoring().path_mode == "incremental"

    def test_end_game_flag_selects_end_game(self):
        assert StreetScoring(end_game_path_bonus=True).path_mode == "end_game"

    def test_conflicting_modes_rejected(self):
        with pytest.raises(ConfigurationError):
            StreetScoring(path_mode="incremental", end_game_path_bonus=True)

    def test_unknown_mode_rejected(self):
        with pytest.raises(ConfigurationError):
            StreetScoring(path_mode="sometimes")

    def test_mode_cannot_change_later(self):
        scoring = StreetScoring()
        with pytest.raises(ConfigurationError):
            scoring.update_options(path_mode="end_game")
        scoring.update_options(path_points=5)
        assert scoring.options["path_points"] == 5
