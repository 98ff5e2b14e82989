"""
Shared fixtures for building hand-made positions.
"""

import pytest

from pawnrace.board import Board
from pawnrace.game import Game
from pawnrace.move import Side, Square


def build_game(white=(), black=(), player=Side.WHITE, history=None) -> Game:
    """Game with pawns on the given squares, e.g. white=['a7'], black=['h4']."""
    board = Board.empty()
    for square in white:
        board.place(Square.parse(square), Side.WHITE)
    for square in black:
        board.place(Square.parse(square), Side.BLACK)
    return Game(board, player, history)


@pytest.fixture
def make_game():
    return build_game
