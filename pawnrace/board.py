"""
Pawn Race Board.

The board is an 8x8 numpy grid indexed [rank, file] holding WHITE (1),
BLACK (-1) or EMPTY (0). It knows nothing about turn order: callers pass the
previous move explicitly when en passant legality matters.

Rules:
- Pawns push one square forward onto an empty square, or two from the start rank
- Pawns capture one square diagonally forward
- En passant is allowed only on the ply right after an opposing double push
"""

from typing import List, Optional, Union

import numpy as np

from pawnrace.config import Config
from pawnrace.move import Move, MoveType, Side, Square, File, BOARD_SIZE


EMPTY = 0


class Board:
    """
    Occupancy grid with move validation and reversible application.

    apply() and unapply() never validate; generate or parse moves through
    is_legal() first.
    """

    def __init__(self, white_gap: Union[File, str], black_gap: Union[File, str]):
        """
        Set up the starting rows.

        Args:
            white_gap: File left empty on White's row
            black_gap: File left empty on Black's row
        """
        white_gap = _as_file(white_gap)
        black_gap = _as_file(black_gap)

        self.grid = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int8)
        self.grid[Config.WHITE_START_RANK, :] = int(Side.WHITE)
        self.grid[Config.WHITE_START_RANK, white_gap.index] = EMPTY
        self.grid[Config.BLACK_START_RANK, :] = int(Side.BLACK)
        self.grid[Config.BLACK_START_RANK, black_gap.index] = EMPTY

    @classmethod
    def empty(cls) -> "Board":
        """Create a board with no pawns, for hand-built positions."""
        board = cls.__new__(cls)
        board.grid = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int8)
        return board

    def copy(self) -> "Board":
        """Create an independent copy of the grid."""
        board = Board.__new__(Board)
        board.grid = self.grid.copy()
        return board

    def place(self, square: Square, side: Side) -> "Board":
        self.grid[square.rank.index, square.file.index] = int(side)
        return self

    def occupant_at(self, square: Square) -> Optional[Side]:
        """Return the side on a square, or None if it is empty."""
        value = self.grid[square.rank.index, square.file.index]
        return Side(int(value)) if value != EMPTY else None

    def code_at(self, file: int, rank: int) -> int:
        """Raw occupancy code (1, -1 or 0) at file and rank indices."""
        return int(self.grid[rank, file])

    def squares_of(self, side: Side) -> List[Square]:
        """All squares held by a side, rank ascending then file ascending."""
        ranks, files = np.nonzero(self.grid == int(side))
        return [Square.at(int(f), int(r)) for r, f in zip(ranks, files)]

    def count(self, side: Side) -> int:
        return int(np.count_nonzero(self.grid == int(side)))

    def is_legal(self, move: Move, last_move: Optional[Move] = None) -> bool:
        """
        Check a move against the current position.

        Args:
            move: Candidate move
            last_move: The move played on the previous ply, if any (en passant)

        Returns:
            True if the move is legal. Never raises.
        """
        from_file, from_rank = move.src.file.index, move.src.rank.index
        to_file, to_rank = move.dst.file.index, move.dst.rank.index

        if self.code_at(from_file, from_rank) != move.piece:
            return False

        d = move.piece.direction
        start = move.piece.start_rank

        if move.kind is MoveType.PEACEFUL:
            if from_file != to_file:
                return False
            # Single step
            if from_rank + d == to_rank and self.code_at(to_file, to_rank) == EMPTY:
                return True
            # Double step from the start rank
            return (
                from_rank == start
                and to_rank == start + 2 * d
                and self.code_at(from_file, from_rank + d) == EMPTY
                and self.code_at(to_file, to_rank) == EMPTY
            )

        if move.kind is MoveType.CAPTURE:
            return (
                self.code_at(to_file, to_rank) == move.piece.opposite
                and from_rank + d == to_rank
                and abs(from_file - to_file) == 1
            )

        # En passant
        if last_move is None or last_move.kind is not MoveType.PEACEFUL:
            return False
        if last_move.piece is not move.piece.opposite:
            return False

        last_start = last_move.piece.start_rank
        if last_move.src.rank.index != last_start:
            return False
        if last_move.dst.rank.index != last_start + 2 * last_move.piece.direction:
            return False

        # Standing beside the double-stepped pawn, moving in behind it
        return (
            from_rank == last_move.dst.rank.index
            and from_rank + d == to_rank
            and abs(from_file - to_file) == 1
            and to_file == last_move.dst.file.index
        )

    def apply(self, move: Move) -> "Board":
        """Play a move in place. Does NOT check legality."""
        self.grid[move.src.rank.index, move.src.file.index] = EMPTY
        self.grid[move.dst.rank.index, move.dst.file.index] = int(move.piece)

        if move.kind is MoveType.EN_PASSANT:
            self.grid[move.dst.rank.index - move.piece.direction, move.dst.file.index] = EMPTY

        return self

    def unapply(self, move: Move) -> "Board":
        """Exactly reverse apply() for a move just played on this board."""
        self.grid[move.src.rank.index, move.src.file.index] = int(move.piece)

        if move.kind is MoveType.PEACEFUL:
            self.grid[move.dst.rank.index, move.dst.file.index] = EMPTY
        elif move.kind is MoveType.CAPTURE:
            self.grid[move.dst.rank.index, move.dst.file.index] = int(move.piece.opposite)
        else:
            self.grid[move.dst.rank.index, move.dst.file.index] = EMPTY
            self.grid[move.dst.rank.index - move.piece.direction, move.dst.file.index] = int(move.piece.opposite)

        return self

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self.grid, other.grid))

    __hash__ = None

    def __str__(self) -> str:
        """Diagram from rank 8 down to rank 1, files labelled on both sides."""
        symbols = {Side.WHITE: "W", Side.BLACK: "B", EMPTY: "."}
        files_line = "    " + " ".join(c.upper() for c in Config.FILE_LETTERS)
        lines = [files_line, ""]
        for rank in range(BOARD_SIZE - 1, -1, -1):
            cells = " ".join(symbols[int(self.grid[rank, f])] for f in range(BOARD_SIZE))
            lines.append(f"{rank + 1}   {cells}    {rank + 1}")
        lines.append("")
        lines.append(files_line)
        return "\n".join(lines)


def _as_file(gap: Union[File, str]) -> File:
    return gap if isinstance(gap, File) else File.from_char(gap)
