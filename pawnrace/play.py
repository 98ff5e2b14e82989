"""
Interactive Pawn Race driver.

Protocol (one item per line):
- If the engine plays Black it first proposes a gap pair from the gap table
- The gap pair (White's gap, then Black's gap) is read from the input
- The sides then alternate: opponent moves are read, engine moves are written
- When the game ends 'Congratulations W!', 'Congratulations B!' or 'Stalemate!'
  is written

Board diagrams and the side to move go to a separate diagnostic stream so
they never interfere with the move protocol.
"""

import logging
import random
import sys
from typing import Optional, TextIO

from pawnrace.config import Config
from pawnrace.game import Game
from pawnrace.move import Side
from pawnrace.engine.search import Search
from pawnrace.gap_table import read_gap_table, pick_gaps

logger = logging.getLogger(__name__)


class InvalidMoveError(ValueError):
    """Opponent sent text that is not a legal move in the current position."""


def _read_line(stream: TextIO) -> str:
    line = stream.readline()
    if not line:
        raise EOFError("Input ended before the game finished")
    return line.strip()


def _say(stream: TextIO, text: str):
    print(text, file=stream, flush=True)


def play_game(
    colour: str,
    input_stream: TextIO = sys.stdin,
    output_stream: TextIO = sys.stdout,
    diag_stream: TextIO = sys.stderr,
    search: Optional[Search] = None,
    rng: Optional[random.Random] = None,
    gap_table_path: str = Config.GAP_TABLE_PATH,
) -> Optional[Side]:
    """
    Play one game against an opponent on the given streams.

    Args:
        colour: 'w'/'W' for the engine to play White, anything else for Black
        input_stream: Gap pair and opponent moves
        output_stream: Proposed gaps, engine moves and the result
        diag_stream: Board diagrams with the side to move
        search: Engine to use (created, and closed afterwards, if None)
        rng: Random source for the gap pair choice
        gap_table_path: Table to choose Black's gap proposal from

    Returns:
        The winning side, or None for a stalemate
    """
    engine_side = Side.WHITE if colour in ("w", "W") else Side.BLACK
    owns_search = search is None
    if owns_search:
        search = Search(engine_side)

    try:
        if engine_side is Side.BLACK:
            _say(output_stream, pick_gaps(read_gap_table(gap_table_path), rng))

        gaps = _read_line(input_stream)
        if len(gaps) < 2:
            raise ValueError(f"Invalid gap pair: {gaps!r}")
        game = Game.new(gaps[0], gaps[1])
        logger.info("Engine plays %s, gaps %s", engine_side, gaps[:2].upper())
        _say(diag_stream, str(game))

        if engine_side is Side.WHITE:
            _engine_turn(game, search, output_stream, diag_stream)

        while not game.is_over():
            text = _read_line(input_stream)
            move = game.parse_move(text)
            if move is None:
                raise InvalidMoveError(f"Invalid move: {text}")
            game.apply_move(move)
            _say(diag_stream, str(game))

            if not game.is_over():
                _engine_turn(game, search, output_stream, diag_stream)

        winner = game.winner()
        if winner is None:
            _say(output_stream, "Stalemate!")
        else:
            _say(output_stream, f"Congratulations {winner}!")
        return winner
    finally:
        if owns_search:
            search.close()


def _engine_turn(game: Game, search: Search, output_stream: TextIO, diag_stream: TextIO):
    move = search.choose_move(game)
    if move is None:
        return
    game.apply_move(move)
    _say(output_stream, str(move))
    _say(diag_stream, str(game))
