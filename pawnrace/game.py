"""
Pawn Race Game Logic.

This module provides:
- Turn sequencing on top of Board with a move history for undo and en passant
- Legal move generation (pushes, double pushes, captures, en passant)
- Termination and winner detection
- Parsing of the two move notations: 'd4' and 'cxd5'

Pawn Race Rules:
- Each side starts with seven pawns on its second row, one file left empty (the gap)
- White moves first, towards rank 8; Black moves towards rank 1
- First pawn to reach the far rank wins, as does capturing every opposing pawn
- A side to move with no legal moves is a draw (stalemate)
"""

from typing import List, Optional, Union

from pawnrace.board import Board
from pawnrace.move import File, Move, MoveType, Rank, Side, Square, BOARD_SIZE


class Game:
    """
    Board plus side to move plus history.

    Branches of a search tree must work on copy(): a Game is mutated in place
    by apply_move() / unapply_move().
    """

    def __init__(self, board: Board, player: Side = Side.WHITE, history: Optional[List[Move]] = None):
        """
        Args:
            board: Position to play on (owned by the game from now on)
            player: Side to move
            history: Moves already played, oldest first
        """
        self.board = board
        self.player = player
        self.history: List[Move] = list(history) if history else []

    @classmethod
    def new(cls, white_gap: Union[File, str], black_gap: Union[File, str]) -> "Game":
        """Standard starting position, White to move."""
        return cls(Board(white_gap, black_gap), Side.WHITE)

    def copy(self) -> "Game":
        """Create a deep copy sharing no mutable state."""
        return Game(self.board.copy(), self.player, self.history)

    @property
    def last_move(self) -> Optional[Move]:
        return self.history[-1] if self.history else None

    def apply_move(self, move: Move):
        """Play a move. The caller guarantees it is legal."""
        self.history.append(move)
        self.board.apply(move)
        self.player = self.player.opposite

    def unapply_move(self):
        """Take back the most recent move, if any."""
        if self.history:
            self.player = self.player.opposite
            self.board.unapply(self.history.pop())

    # =========================================================================
    # Move Generation
    # =========================================================================

    def legal_moves(self, side: Optional[Side] = None) -> List[Move]:
        """
        Return all legal moves for a side (default: side to move).

        Per pawn, in board scan order: single push, double push, left capture,
        right capture, left en passant, right en passant.
        """
        side = self.player if side is None else side
        last = self.last_move
        moves = []

        for square in self.board.squares_of(side):
            candidates = [self._forward(square, 1, side)]
            if square.rank.index == side.start_rank:
                candidates.append(self._forward(square, 2, side))
            candidates.append(self._diagonal(square, -1, side, MoveType.CAPTURE))
            candidates.append(self._diagonal(square, 1, side, MoveType.CAPTURE))
            candidates.append(self._diagonal(square, -1, side, MoveType.EN_PASSANT))
            candidates.append(self._diagonal(square, 1, side, MoveType.EN_PASSANT))

            for move in candidates:
                if move is not None and self.board.is_legal(move, last):
                    moves.append(move)

        return moves

    @staticmethod
    def _forward(square: Square, step: int, side: Side) -> Optional[Move]:
        dst = square.offset(0, step * side.direction)
        if dst is None:
            return None
        return Move(side, square, dst, MoveType.PEACEFUL)

    @staticmethod
    def _diagonal(square: Square, dfile: int, side: Side, kind: MoveType) -> Optional[Move]:
        dst = square.offset(dfile, side.direction)
        if dst is None:
            return None
        return Move(side, square, dst, kind)

    # =========================================================================
    # Termination
    # =========================================================================

    def _has_promoted(self, side: Side) -> bool:
        return bool((self.board.grid[side.promotion_rank, :] == int(side)).any())

    def is_over(self) -> bool:
        """Promotion, a side without pawns, or no legal move for the side to move."""
        if self._has_promoted(Side.WHITE) or self._has_promoted(Side.BLACK):
            return True
        if self.board.count(Side.WHITE) == 0 or self.board.count(Side.BLACK) == 0:
            return True
        return len(self.legal_moves(self.player)) == 0

    def winner(self) -> Optional[Side]:
        """
        Return the winning side, or None for a stalemate or unfinished game.
        """
        if self.board.count(Side.BLACK) == 0:
            return Side.WHITE
        if self.board.count(Side.WHITE) == 0:
            return Side.BLACK

        if self._has_promoted(Side.WHITE):
            return Side.WHITE
        if self._has_promoted(Side.BLACK):
            return Side.BLACK

        return None

    # =========================================================================
    # Notation
    # =========================================================================

    def parse_move(self, text: str) -> Optional[Move]:
        """
        Resolve move text for the side to move.

        Accepts 'e4' (push to e4, one or two squares) and 'dxe5' (capture or
        en passant onto e5). Returns None if the text does not describe a legal
        move.
        """
        if not isinstance(text, str):
            return None
        text = text.strip().lower()

        try:
            if len(text) == 2:
                return self._parse_peaceful(text)
            if len(text) == 4 and text[1] == "x":
                return self._parse_capture(text)
        except ValueError:
            return None
        return None

    def _parse_peaceful(self, text: str) -> Optional[Move]:
        dst = Square.parse(text)
        last = self.last_move

        for step in (1, 2):
            src = dst.offset(0, -step * self.player.direction)
            if src is None:
                continue
            move = Move(self.player, src, dst, MoveType.PEACEFUL)
            if self.board.is_legal(move, last):
                return move

        return None

    def _parse_capture(self, text: str) -> Optional[Move]:
        src_file = File.from_char(text[0])
        dst = Square.parse(text[2:])
        last = self.last_move

        src_rank = dst.rank.index - self.player.direction
        if not 0 <= src_rank < BOARD_SIZE:
            return None
        src = Square(src_file, Rank(src_rank))

        for kind in (MoveType.CAPTURE, MoveType.EN_PASSANT):
            move = Move(self.player, src, dst, kind)
            if self.board.is_legal(move, last):
                return move

        return None

    def __str__(self) -> str:
        turn = "White" if self.player is Side.WHITE else "Black"
        return f"{self.board}\nTurn: {turn}"
