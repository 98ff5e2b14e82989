"""
Tests for gap_table.py - offline gap pair scoring and the table file.
"""

import random

from pawnrace.config import Config
from pawnrace.game import Game
from pawnrace.move import Side
from pawnrace.engine.eval import evaluate
from pawnrace.gap_table import (
    score_gap_pair, build_gap_table, write_gap_table, read_gap_table, pick_gaps
)


class TestScoring:
    """Tests for scoring gap pairs."""

    def test_depth_zero_is_best_static_reply(self):
        game = Game.new("c", "f")
        best_for_white = max(
            evaluate(_after(game, move), Side.WHITE) for move in game.legal_moves()
        )
        assert score_gap_pair("c", "f", depth=0) == -best_for_white

    def test_build_table(self):
        rows = build_gap_table(depth=0, progress=False)
        keys = [key for key, _ in rows]
        scores = [score for _, score in rows]

        assert len(rows) == 64
        assert len(set(keys)) == 64
        assert all(len(k) == 2 and k.isupper() for k in keys)
        assert scores == sorted(scores, reverse=True)
        assert "AA" in keys and "HH" in keys

    def test_build_table_matches_pair_scores(self):
        rows = dict(build_gap_table(depth=0, progress=False))
        assert rows["BC"] == score_gap_pair("b", "c", depth=0)
        assert rows["HA"] == score_gap_pair("h", "a", depth=0)

    def test_default_depth(self):
        assert Config.GAP_TABLE_DEPTH == 2
        assert score_gap_pair("h", "a") == score_gap_pair("h", "a", depth=Config.GAP_TABLE_DEPTH)


class TestTableFile:
    """Tests for reading and writing the table."""

    def test_roundtrip(self, tmp_path):
        path = tmp_path / "tables" / "gaps.txt"
        rows = [("DE", 40), ("AB", 12), ("HH", -3)]
        write_gap_table(str(path), rows)

        assert path.read_text() == "DE\nAB\nHH\n"
        assert read_gap_table(str(path)) == ["DE", "AB", "HH"]

    def test_blank_lines_ignored(self, tmp_path):
        path = tmp_path / "gaps.txt"
        path.write_text("DE\n\n  AB  \n")
        assert read_gap_table(str(path)) == ["DE", "AB"]

    def test_missing_file(self, tmp_path):
        assert read_gap_table(str(tmp_path / "missing.txt")) == []


class TestPickGaps:
    """Tests for choosing Black's proposal."""

    def test_default_when_empty(self):
        assert pick_gaps([]) == Config.DEFAULT_GAPS

    def test_top_entry(self):
        assert pick_gaps(["DE", "AB", "HH"], top=1) == "DE"

    def test_choice_within_top(self):
        keys = [f"{a}{b}" for a in "ABCDEFGH" for b in "ABCDEFGH"]
        rng = random.Random(11)
        for _ in range(20):
            assert pick_gaps(keys, rng, top=5) in keys[:5]

    def test_seeded(self):
        keys = ["DE", "AB", "HH", "CF"]
        assert pick_gaps(keys, random.Random(3)) == pick_gaps(keys, random.Random(3))


def _after(game, move):
    branch = game.copy()
    branch.apply_move(move)
    return branch
