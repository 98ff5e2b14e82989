"""
Coordinates and moves for Pawn Race.

This module provides:
- Side: the two players, each carrying its direction, start and promotion rank
- File / Rank / Square: range-checked board coordinates with algebraic notation
- MoveType and Move: an immutable description of a single ply
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from pawnrace.config import Config


BOARD_SIZE = Config.BOARD_SIZE
FILE_LETTERS = Config.FILE_LETTERS


class Side(IntEnum):
    """
    A player. The value doubles as the forward rank direction and as the
    occupancy code stored in the board grid.
    """

    WHITE = 1
    BLACK = -1

    @property
    def direction(self) -> int:
        return int(self)

    @property
    def opposite(self) -> "Side":
        return _OPPOSITE[self]

    @property
    def start_rank(self) -> int:
        return Config.WHITE_START_RANK if self is Side.WHITE else Config.BLACK_START_RANK

    @property
    def promotion_rank(self) -> int:
        return BOARD_SIZE - 1 if self is Side.WHITE else 0

    def __str__(self) -> str:
        return "W" if self is Side.WHITE else "B"


_OPPOSITE = {Side.WHITE: Side.BLACK, Side.BLACK: Side.WHITE}


@dataclass(frozen=True, order=True)
class File:
    """Column index in [0, 7], written as a letter a-h."""

    index: int

    def __post_init__(self):
        if not 0 <= self.index < BOARD_SIZE:
            raise ValueError(f"Invalid file index: {self.index}")

    @classmethod
    def from_char(cls, c: str) -> "File":
        if not isinstance(c, str) or len(c) != 1 or c.lower() not in FILE_LETTERS:
            raise ValueError(f"Invalid file: {c!r}")
        return cls(FILE_LETTERS.index(c.lower()))

    def __str__(self) -> str:
        return FILE_LETTERS[self.index]


@dataclass(frozen=True, order=True)
class Rank:
    """Row index in [0, 7], written as a digit 1-8."""

    index: int

    def __post_init__(self):
        if not 0 <= self.index < BOARD_SIZE:
            raise ValueError(f"Invalid rank index: {self.index}")

    @classmethod
    def from_char(cls, c: str) -> "Rank":
        if not isinstance(c, str) or len(c) != 1 or c not in "12345678":
            raise ValueError(f"Invalid rank char: {c!r}")
        return cls(int(c) - 1)

    def __str__(self) -> str:
        return str(self.index + 1)


@dataclass(frozen=True)
class Square:
    """A (file, rank) pair; the unit of board indexing and notation."""

    file: File
    rank: Rank

    @classmethod
    def at(cls, file: int, rank: int) -> "Square":
        """Build a square from raw indices (raises ValueError off the board)."""
        return cls(File(file), Rank(rank))

    @classmethod
    def parse(cls, text: str) -> "Square":
        """Parse algebraic notation such as 'd5'."""
        if len(text) != 2:
            raise ValueError(f"Invalid square: {text!r}")
        return cls(File.from_char(text[0]), Rank.from_char(text[1]))

    @staticmethod
    def on_board(file: int, rank: int) -> bool:
        return 0 <= file < BOARD_SIZE and 0 <= rank < BOARD_SIZE

    def offset(self, dfile: int, drank: int) -> Optional["Square"]:
        """Square shifted by (dfile, drank), or None if that leaves the board."""
        f = self.file.index + dfile
        r = self.rank.index + drank
        if not Square.on_board(f, r):
            return None
        return Square.at(f, r)

    def __str__(self) -> str:
        return f"{self.file}{self.rank}"


class MoveType(Enum):
    PEACEFUL = "peaceful"
    CAPTURE = "capture"
    EN_PASSANT = "en_passant"


@dataclass(frozen=True)
class Move:
    """
    A single ply.

    Attributes:
        piece: Side making the move
        src: Origin square
        dst: Destination square
        kind: PEACEFUL, CAPTURE or EN_PASSANT
    """

    piece: Side
    src: Square
    dst: Square
    kind: MoveType = MoveType.PEACEFUL

    @property
    def is_capture(self) -> bool:
        """True for captures and en passant."""
        return self.kind is not MoveType.PEACEFUL

    def __str__(self) -> str:
        if self.kind is MoveType.PEACEFUL:
            return str(self.dst)
        return f"{self.src.file}x{self.dst}"
