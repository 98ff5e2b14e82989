from pawnrace.board import Board, EMPTY
from pawnrace.game import Game
from pawnrace.move import Move, MoveType, Side, Square, BOARD_SIZE
from .constants import (
    SCORE_WIN, SCORE_LOSS, SCORE_DRAW, TEMPO_BONUS,
    ADVANCE_WEIGHT, PASSED_WEIGHT, DEFENDED_BONUS,
    ISOLATED_PENALTY, IMMOBILE_PENALTY, BACKWARD_PENALTY
)


def evaluate(game: Game, side: Side) -> int:
    """
    Evaluate the position from `side`'s perspective.
    Returns score relative to `side` (positive means `side` is better).
    """
    if game.is_over():
        winner = game.winner()
        if winner is side:
            return SCORE_WIN
        if winner is side.opposite:
            return SCORE_LOSS
        return SCORE_DRAW

    board = game.board
    opp = side.opposite

    score = 0
    for square in board.squares_of(side):
        score += score_pawn(board, square, side)
    for square in board.squares_of(opp):
        score -= score_pawn(board, square, opp)

    score += TEMPO_BONUS if game.player is side else -TEMPO_BONUS
    return score


def score_pawn(board: Board, square: Square, side: Side) -> int:
    """Positional value of a single pawn for its owner."""
    rank = square.rank.index
    distance = BOARD_SIZE - 1 - rank if side is Side.WHITE else rank

    # 1 on the start rank, 7 on the promotion rank
    advanced = BOARD_SIZE - 1 - distance

    score = ADVANCE_WEIGHT * advanced * advanced

    if is_passed_pawn(board, square, side):
        score += PASSED_WEIGHT * advanced * advanced
    if is_defended(board, square, side):
        score += DEFENDED_BONUS
    if is_isolated(board, square, side):
        score -= ISOLATED_PENALTY
    if is_immobile(board, square, side):
        score -= IMMOBILE_PENALTY
    if is_backward(board, square, side):
        score -= BACKWARD_PENALTY

    return score


# =============================================================================
# Pawn Structure
# =============================================================================

def is_passed_pawn(board: Board, square: Square, side: Side) -> bool:
    """No opposing pawn ahead on this file or either neighbouring file."""
    if board.occupant_at(square) is not side:
        return False

    d = side.direction
    file = square.file.index
    opp = side.opposite

    rank = square.rank.index + d
    while 0 <= rank < BOARD_SIZE:
        for f in (file - 1, file, file + 1):
            if 0 <= f < BOARD_SIZE and board.code_at(f, rank) == opp:
                return False
        rank += d

    return True


def is_defended(board: Board, square: Square, side: Side) -> bool:
    """A friendly pawn sits diagonally behind."""
    back = square.rank.index - side.direction
    if not 0 <= back < BOARD_SIZE:
        return False

    file = square.file.index
    return any(
        0 <= f < BOARD_SIZE and board.code_at(f, back) == side
        for f in (file - 1, file + 1)
    )


def is_isolated(board: Board, square: Square, side: Side) -> bool:
    """No friendly pawn anywhere on a neighbouring file."""
    file = square.file.index
    for f in (file - 1, file + 1):
        if not 0 <= f < BOARD_SIZE:
            continue
        if any(board.code_at(f, r) == side for r in range(BOARD_SIZE)):
            return False
    return True


def is_immobile(board: Board, square: Square, side: Side) -> bool:
    """Blocked straight ahead with nothing to capture."""
    front = square.rank.index + side.direction
    if not 0 <= front < BOARD_SIZE:
        return False

    file = square.file.index
    if board.code_at(file, front) == EMPTY:
        return False

    opp = side.opposite
    can_capture = any(
        0 <= f < BOARD_SIZE and board.code_at(f, front) == opp
        for f in (file - 1, file + 1)
    )
    return not can_capture


def is_backward(board: Board, square: Square, side: Side) -> bool:
    """
    An opposing pawn blocks the file ahead and no friendly pawn on a
    neighbouring file stands level with or ahead of this one.
    """
    if is_passed_pawn(board, square, side):
        return False

    d = side.direction
    file = square.file.index
    rank = square.rank.index
    opp = side.opposite

    r = rank + d
    blocked = False
    while 0 <= r < BOARD_SIZE:
        code = board.code_at(file, r)
        if code == side:
            return False
        if code == opp:
            blocked = True
            break
        r += d
    if not blocked:
        return False

    for f in (file - 1, file + 1):
        if not 0 <= f < BOARD_SIZE:
            continue
        rr = rank
        while 0 <= rr < BOARD_SIZE:
            if board.code_at(f, rr) == side:
                return False
            rr += d

    return True


# =============================================================================
# Move Classification
# =============================================================================

def is_promotion_move(move: Move) -> bool:
    return move.dst.rank.index == move.piece.promotion_rank


def captured_square(move: Move) -> Square:
    """Square of the pawn removed by a capture or en passant."""
    if move.kind is MoveType.EN_PASSANT:
        return Square.at(move.dst.file.index, move.dst.rank.index - move.piece.direction)
    return move.dst
