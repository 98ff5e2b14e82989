"""
Pawn Race move search.

Iterative deepening alpha-beta under a wall-clock deadline:
- Immediate winning moves are played without searching
- Root moves are ordered by a one-ply static evaluation, previous best first
- Deeper iterations fan the root moves out to a process pool, each task
  searching its own copy of the game with a full window
- Horizon nodes with a promotion or a capture of a passed pawn get one extra ply

Timeouts are not exceptions: every search routine returns None once the
deadline has passed and callers hand that None straight back up to the
depth loop, which keeps the result of the last completed depth.
"""

import logging
import random
import time
from concurrent.futures import Executor, ProcessPoolExecutor
from typing import List, NamedTuple, Optional

from pawnrace.config import Config
from pawnrace.game import Game
from pawnrace.move import Move, Side
from .constants import (
    SCORE_MAX, SCORE_MIN, SCORE_WIN, SCORE_LOSS,
    PRIORITY_PROMOTION, PRIORITY_CAPTURE, PRIORITY_PASSED_ADVANCE, PRIORITY_QUIET
)
from .eval import evaluate, is_passed_pawn, is_promotion_move, captured_square

logger = logging.getLogger(__name__)


class Deadline:
    """Absolute wall-clock time after which searching stops."""

    __slots__ = ["at"]

    def __init__(self, at: float):
        self.at = at

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.time() + seconds)

    def expired(self) -> bool:
        return time.time() >= self.at

    def remaining(self) -> float:
        return max(0.0, self.at - time.time())


class RootResult(NamedTuple):
    """Outcome of searching one root move. score is None if time ran out."""

    move: Move
    score: Optional[int]


# =============================================================================
# Tree Search
# =============================================================================

def alphabeta(
    game: Game,
    side: Side,
    depth: int,
    alpha: int,
    beta: int,
    deadline: Deadline,
    can_extend: bool = True,
) -> Optional[int]:
    """
    Minimax with alpha-beta pruning; `side` maximises, its opponent minimises.

    Returns the score from `side`'s perspective, or None if the deadline
    passed. The game is restored before returning in both cases.
    """
    if deadline.expired():
        return None

    if game.is_over():
        return evaluate(game, side)

    if depth <= 0:
        if can_extend and has_tactical_extension(game):
            # One more ply, no further extensions down this line
            return alphabeta(game, side, 1, alpha, beta, deadline, False)
        return evaluate(game, side)

    to_move = game.player
    moves = game.legal_moves(to_move)
    if not moves:
        return evaluate(game, side)

    maximising = to_move is side
    best = SCORE_MIN if maximising else SCORE_MAX

    for move in order_node_moves(game, moves):
        if deadline.expired():
            return None

        game.apply_move(move)
        score = alphabeta(game, side, depth - 1, alpha, beta, deadline, can_extend)
        game.unapply_move()

        if score is None:
            return None

        if maximising:
            best = max(best, score)
            alpha = max(alpha, score)
        else:
            best = min(best, score)
            beta = min(beta, score)

        if alpha >= beta:
            break

    return best


def minimax(game: Game, side: Side, depth: int) -> int:
    """Plain depth-limited minimax, no pruning and no time control."""
    if depth <= 0 or game.is_over():
        return evaluate(game, side)

    moves = game.legal_moves(game.player)
    if not moves:
        return evaluate(game, side)

    maximising = game.player is side
    scores = []
    for move in moves:
        game.apply_move(move)
        scores.append(minimax(game, side, depth - 1))
        game.unapply_move()

    return max(scores) if maximising else min(scores)


def order_node_moves(game: Game, moves: List[Move]) -> List[Move]:
    """Promotions, then captures, then passed pawn advances, then the rest."""
    if len(moves) <= 1:
        return moves

    board = game.board

    def priority(move: Move) -> int:
        if is_promotion_move(move):
            return PRIORITY_PROMOTION
        if move.is_capture:
            return PRIORITY_CAPTURE
        if is_passed_pawn(board, move.src, move.piece):
            return PRIORITY_PASSED_ADVANCE
        return PRIORITY_QUIET

    return sorted(moves, key=priority)


def has_tactical_extension(game: Game) -> bool:
    """Side to move can promote or capture a passed opposing pawn."""
    side = game.player
    opp = side.opposite
    board = game.board

    for move in game.legal_moves(side):
        if is_promotion_move(move):
            return True
        if move.is_capture:
            target = captured_square(move)
            if board.occupant_at(target) is opp and is_passed_pawn(board, target, opp):
                return True

    return False


def search_root_move(game: Game, move: Move, side: Side, depth: int, deadline: Deadline) -> RootResult:
    """
    Worker task: score one root move with a full window.

    Runs in a pool process, so it only touches its own copy of the game.
    """
    if deadline.expired():
        return RootResult(move, None)

    game.apply_move(move)
    score = alphabeta(game, side, depth - 1, SCORE_LOSS, SCORE_WIN, deadline)
    return RootResult(move, score)


# =============================================================================
# Move Selection
# =============================================================================

class Search:
    """
    Time-bounded move selector for one side.

    Args:
        side: Side the engine plays (its scores are maximised)
        time_limit: Seconds allowed per choose_move() call
        workers: Size of the owned process pool; 0 disables parallel search
        executor: Externally managed executor to use instead of an owned pool
        rng: Random source for the fallback move
    """

    def __init__(
        self,
        side: Side,
        time_limit: float = Config.TIME_LIMIT_S,
        workers: int = Config.SEARCH_WORKERS,
        executor: Optional[Executor] = None,
        rng: Optional[random.Random] = None,
    ):
        self.side = side
        self.time_limit = time_limit
        self.workers = workers
        self.rng = rng or random.Random()

        self._executor = executor
        self._owns_executor = False

        self.completed_depth = 0

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def executor(self) -> Optional[Executor]:
        """The worker pool, created on first use."""
        if self._executor is None and self.workers > 0:
            self._executor = ProcessPoolExecutor(max_workers=self.workers)
            self._owns_executor = True
            logger.debug("Started search pool with %d workers", self.workers)
        return self._executor

    def close(self):
        """Shut down the owned pool, if one was started."""
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)
        if self._owns_executor:
            self._executor = None
            self._owns_executor = False

    def __enter__(self) -> "Search":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # =========================================================================
    # Public API
    # =========================================================================

    def choose_move(self, game: Game, max_depth: Optional[int] = None) -> Optional[Move]:
        """
        Pick a move for self.side.

        Args:
            game: Current game; left unchanged
            max_depth: Optional cap on the iterative deepening depth

        Returns:
            Best move of the deepest completed iteration, or None if the side
            has no legal moves.
        """
        moves = game.legal_moves(self.side)
        if not moves:
            return None

        # Immediate win: no search needed
        for move in moves:
            game.apply_move(move)
            won = game.is_over() and game.winner() is self.side
            game.unapply_move()
            if won:
                self.completed_depth = 0
                return move

        start_time = time.time()
        deadline = Deadline(start_time + self.time_limit)

        best_move = self.rng.choice(moves)  # fallback if depth 1 cannot finish
        self.completed_depth = 0
        depth = 1

        while max_depth is None or depth <= max_depth:
            preferred = best_move if depth > 1 else None
            result = self.search_root(game, moves, depth, deadline, preferred)
            if result is None:
                logger.info(
                    "%s: time up at depth %d, using move from depth %d",
                    self.side, depth, self.completed_depth
                )
                break

            best_move = result.move
            self.completed_depth = depth
            logger.debug(
                "%s: depth %d best %s score %d (%.3fs, %.3fs left)",
                self.side, depth, best_move, result.score,
                time.time() - start_time, deadline.remaining()
            )

            if deadline.expired():
                break
            depth += 1

        return best_move

    def order_root_moves(
        self,
        game: Game,
        moves: List[Move],
        deadline: Deadline,
        preferred: Optional[Move] = None,
    ) -> Optional[List[Move]]:
        """
        Sort root moves by one-ply static evaluation, best first, with the
        preferred move in front. Returns None if the deadline passes.
        """
        if len(moves) <= 1:
            return list(moves)

        scratch = game.copy()
        scored = []
        for move in moves:
            if deadline.expired():
                return None
            scratch.apply_move(move)
            score = evaluate(scratch, self.side)
            scratch.unapply_move()
            scored.append((score, move))

        scored.sort(key=lambda x: x[0], reverse=True)
        ordered = [move for _, move in scored]

        if preferred is not None and preferred in ordered:
            ordered.remove(preferred)
            ordered.insert(0, preferred)

        return ordered

    def search_root(
        self,
        game: Game,
        moves: List[Move],
        depth: int,
        deadline: Deadline,
        preferred: Optional[Move] = None,
    ) -> Optional[RootResult]:
        """
        Search every root move to `depth`. Returns the best (move, score), or
        None if the deadline passed before the depth completed.
        """
        ordered = self.order_root_moves(game, moves, deadline, preferred)
        if ordered is None:
            return None

        if depth == 1 or len(ordered) < Config.MIN_PARALLEL_MOVES or self.executor is None:
            return self._search_root_sequential(game, ordered, depth, deadline)

        return self._search_root_parallel(game, ordered, depth, deadline)

    def _search_root_sequential(
        self, game: Game, ordered: List[Move], depth: int, deadline: Deadline
    ) -> Optional[RootResult]:
        best_move = ordered[0]
        best_score = SCORE_MIN
        alpha = SCORE_MIN

        for move in ordered:
            if deadline.expired():
                return None

            branch = game.copy()
            branch.apply_move(move)
            score = alphabeta(branch, self.side, depth - 1, alpha, SCORE_MAX, deadline)
            if score is None:
                return None

            if score > best_score:
                best_score = score
                best_move = move
            alpha = max(alpha, score)

        return RootResult(best_move, best_score)

    def _search_root_parallel(
        self, game: Game, ordered: List[Move], depth: int, deadline: Deadline
    ) -> Optional[RootResult]:
        # Tasks share no bounds, so each one gets the full window
        futures = [
            self.executor.submit(search_root_move, game.copy(), move, self.side, depth, deadline)
            for move in ordered
        ]

        best: Optional[RootResult] = None
        try:
            for future in futures:
                # Failures other than the timeout result propagate from here
                result = future.result()
                if result.score is None:
                    return None
                if best is None or result.score > best.score:
                    best = result
        finally:
            for future in futures:
                future.cancel()

        return best
