"""
Tests for engine/search.py - alpha-beta, move ordering and the root driver.
"""

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

import pawnrace.engine.search as search_module
from pawnrace.game import Game
from pawnrace.move import Move, MoveType, Side, Square
from pawnrace.engine.constants import SCORE_MIN, SCORE_MAX
from pawnrace.engine.search import (
    Deadline, RootResult, Search, alphabeta, minimax,
    order_node_moves, has_tactical_extension, search_root_move
)


def sq(text):
    return Square.parse(text)


@pytest.fixture
def midgame():
    game = Game.new("d", "e")
    for text in ("c4", "f5", "g4", "b6"):
        game.apply_move(game.parse_move(text))
    return game


class TestDeadline:
    """Tests for the wall-clock deadline."""

    def test_future(self):
        deadline = Deadline.after(10.0)
        assert not deadline.expired()
        assert 9.0 < deadline.remaining() <= 10.0

    def test_past(self):
        deadline = Deadline(time.time() - 1.0)
        assert deadline.expired()
        assert deadline.remaining() == 0.0


class TestAlphaBeta:
    """Tests for the tree search."""

    @pytest.mark.parametrize("depth", [0, 1, 2, 3])
    def test_matches_minimax(self, midgame, depth):
        deadline = Deadline.after(600.0)
        for side in (Side.WHITE, Side.BLACK):
            expected = minimax(midgame, side, depth)
            score = alphabeta(midgame, side, depth, SCORE_MIN, SCORE_MAX, deadline, can_extend=False)
            assert score == expected

    def test_restores_game(self, midgame):
        before = midgame.copy()
        alphabeta(midgame, Side.WHITE, 3, SCORE_MIN, SCORE_MAX, Deadline.after(600.0))

        assert midgame.board == before.board
        assert midgame.history == before.history
        assert midgame.player is before.player

    def test_expired_returns_none(self, midgame):
        before = midgame.copy()
        score = alphabeta(midgame, Side.WHITE, 3, SCORE_MIN, SCORE_MAX, Deadline(0.0))

        assert score is None
        assert midgame.board == before.board
        assert midgame.history == before.history


class TestMoveOrdering:
    """Tests for node ordering and the horizon extension."""

    def test_node_order(self, make_game):
        game = make_game(white=["a7", "d4", "h2"], black=["e5"])
        ordered = order_node_moves(game, game.legal_moves())
        assert [str(m) for m in ordered] == ["a8", "dxe5", "h3", "h4", "d5"]

    def test_single_move_unchanged(self, make_game):
        game = make_game(white=["a7"], black=["h4"])
        moves = game.legal_moves()
        assert order_node_moves(game, moves) == moves

    def test_extension_on_promotion(self, make_game):
        game = make_game(white=["a7"], black=["h5"])
        assert has_tactical_extension(game)

    def test_extension_on_en_passant_of_passed_pawn(self, make_game):
        last = Move(Side.BLACK, sq("d7"), sq("d5"))
        game = make_game(white=["e5"], black=["d5"], history=[last])
        assert has_tactical_extension(game)

    def test_quiet_position_has_no_extension(self, make_game):
        game = make_game(white=["e2"], black=["a7"])
        assert not has_tactical_extension(game)


class TestSearchRootMove:
    """Tests for the worker task."""

    def test_scores_move(self, midgame):
        move = midgame.legal_moves()[0]
        result = search_root_move(midgame.copy(), move, Side.WHITE, 2, Deadline.after(600.0))

        assert isinstance(result, RootResult)
        assert result.move == move
        assert isinstance(result.score, int)

    def test_expired(self, midgame):
        move = midgame.legal_moves()[0]
        before = midgame.copy()
        result = search_root_move(midgame, move, Side.WHITE, 2, Deadline(0.0))

        assert result == RootResult(move, None)
        assert midgame.board == before.board


class TestChooseMove:
    """Tests for Search.choose_move."""

    def test_no_moves(self, make_game):
        game = make_game(white=["a4"], black=["a5"])
        assert Search(Side.WHITE, workers=0).choose_move(game) is None

    def test_immediate_promotion(self, make_game):
        game = make_game(white=["a7", "c2"], black=["h4", "g7"])
        before = game.copy()
        move = Search(Side.WHITE, workers=0).choose_move(game)

        assert str(move) == "a8"
        assert game.board == before.board
        assert game.history == before.history

    def test_immediate_capture_of_last_pawn(self, make_game):
        game = make_game(white=["d4", "h2"], black=["e5"])
        search = Search(Side.WHITE, workers=0)
        move = search.choose_move(game)

        assert move == Move(Side.WHITE, sq("d4"), sq("e5"), MoveType.CAPTURE)
        assert search.completed_depth == 0

    def test_stops_promotion(self, make_game):
        game = make_game(white=["a7", "h2"], black=["b8"], player=Side.BLACK)
        move = Search(Side.BLACK, time_limit=30.0, workers=0).choose_move(game, max_depth=2)
        assert str(move) == "bxa7"

    def test_depth_cap(self, midgame):
        search = Search(Side.WHITE, time_limit=60.0, workers=0)
        move = search.choose_move(midgame, max_depth=2)

        assert search.completed_depth == 2
        assert move in midgame.legal_moves()

    def test_zero_time_uses_fallback(self):
        game = Game.new("a", "a")
        search = Search(Side.WHITE, time_limit=0.0, workers=0, rng=random.Random(7))
        move = search.choose_move(game)

        assert move == random.Random(7).choice(game.legal_moves())
        assert search.completed_depth == 0

    def test_respects_time_limit(self):
        game = Game.new("e", "e")
        search = Search(Side.WHITE, time_limit=0.3, workers=0)

        start = time.time()
        move = search.choose_move(game)
        elapsed = time.time() - start

        assert move in game.legal_moves()
        assert elapsed < 2.0
        assert search.completed_depth >= 1

    def test_game_left_unchanged(self, midgame):
        before = midgame.copy()
        Search(Side.WHITE, time_limit=60.0, workers=0).choose_move(midgame, max_depth=3)

        assert midgame.board == before.board
        assert midgame.history == before.history
        assert midgame.player is before.player

    def test_root_ordering_uses_scratch_copy(self, midgame):
        class CountingGame(Game):
            applied = 0

            def apply_move(self, move):
                CountingGame.applied += 1
                super().apply_move(move)

        game = CountingGame(midgame.board.copy(), midgame.player, midgame.history)
        search = Search(Side.WHITE, workers=0)
        ordered = search.order_root_moves(game, game.legal_moves(), Deadline.after(600.0))

        assert sorted(map(str, ordered)) == sorted(map(str, game.legal_moves()))
        assert CountingGame.applied == 0

    def test_logs_completed_depths(self, midgame, caplog):
        with caplog.at_level(logging.DEBUG, logger="pawnrace.engine.search"):
            Search(Side.WHITE, time_limit=60.0, workers=0).choose_move(midgame, max_depth=2)

        assert "depth 1 best" in caplog.text
        assert "depth 2 best" in caplog.text
        assert "s left)" in caplog.text


class TestParallelSearch:
    """Tests for the pooled root search."""

    def test_threads_match_sequential(self, midgame):
        sequential = Search(Side.WHITE, time_limit=60.0, workers=0)
        expected = sequential.choose_move(midgame, max_depth=3)

        with ThreadPoolExecutor(max_workers=2) as pool:
            parallel = Search(Side.WHITE, time_limit=60.0, executor=pool)
            assert parallel.choose_move(midgame, max_depth=3) == expected
            assert parallel.completed_depth == 3

    def test_processes_match_sequential(self, midgame):
        sequential = Search(Side.BLACK, time_limit=60.0, workers=0)
        midgame.apply_move(midgame.legal_moves()[0])
        expected = sequential.choose_move(midgame, max_depth=2)

        with Search(Side.BLACK, time_limit=60.0, workers=2) as parallel:
            assert parallel.choose_move(midgame, max_depth=2) == expected
            assert parallel.executor is not None

        assert parallel._executor is None

    def test_injected_executor_not_shut_down(self, midgame):
        with ThreadPoolExecutor(max_workers=2) as pool:
            search = Search(Side.WHITE, executor=pool)
            search.choose_move(midgame, max_depth=2)
            search.close()

            assert pool.submit(sum, [1, 2]).result() == 3

    def test_worker_failure_propagates(self, midgame, monkeypatch):
        def boom(*args):
            raise RuntimeError("worker died")

        monkeypatch.setattr(search_module, "search_root_move", boom)

        with ThreadPoolExecutor(max_workers=2) as pool:
            search = Search(Side.WHITE, time_limit=60.0, executor=pool)
            with pytest.raises(RuntimeError, match="worker died"):
                search.choose_move(midgame, max_depth=2)
