"""
Offline gap table generator.

For every (white gap, black gap) pair:
- White is assumed to pick the first move that is worst for Black
- From each White first move a depth-limited minimax is run, Black maximising
- The pair is scored by Black's result against White's best first move

The table lists all 64 pairs as two uppercase letters (White gap, then Black
gap), best for Black first. When playing Black, the driver picks one of the
top entries at random.
"""

import logging
import os
import random
from typing import List, Optional, Tuple

from tqdm import tqdm

from pawnrace.config import Config
from pawnrace.game import Game
from pawnrace.move import Side
from pawnrace.engine.constants import SCORE_MAX
from pawnrace.engine.eval import evaluate
from pawnrace.engine.search import minimax

logger = logging.getLogger(__name__)


def score_gap_pair(white_gap: str, black_gap: str, depth: int = Config.GAP_TABLE_DEPTH) -> int:
    """
    Score a gap pair from Black's perspective.

    The search is unpruned, so the default depth is kept at 2 plies. A depth
    of 4 ranks pairs more accurately but is far slower over all 64 pairs; pass
    it explicitly (or `main.py gaptable --depth 4`) when regenerating offline.

    Args:
        white_gap: File letter of White's gap
        black_gap: File letter of Black's gap
        depth: Plies searched after each of White's first moves

    Returns:
        Black's score after White's least favourable (for Black) first move
    """
    game = Game.new(white_gap, black_gap)

    white_moves = game.legal_moves(Side.WHITE)
    if not white_moves:
        return evaluate(game, Side.BLACK)

    worst_for_black = SCORE_MAX
    for move in white_moves:
        branch = game.copy()
        branch.apply_move(move)
        worst_for_black = min(worst_for_black, minimax(branch, Side.BLACK, depth))

    return worst_for_black


def build_gap_table(depth: int = Config.GAP_TABLE_DEPTH, progress: bool = True) -> List[Tuple[str, int]]:
    """Score all 64 gap pairs, best for Black first."""
    letters = Config.FILE_LETTERS
    pairs = [(w, b) for w in letters for b in letters]

    rows = []
    for white_gap, black_gap in tqdm(pairs, desc="Gap pairs", disable=not progress):
        key = f"{white_gap.upper()}{black_gap.upper()}"
        score = score_gap_pair(white_gap, black_gap, depth)
        logger.debug("%s: %d", key, score)
        rows.append((key, score))

    rows.sort(key=lambda x: x[1], reverse=True)
    return rows


def write_gap_table(path: str, rows: List[Tuple[str, int]]):
    """Write one key per line."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, 'w') as f:
        for key, _ in rows:
            f.write(f"{key}\n")


def read_gap_table(path: str = Config.GAP_TABLE_PATH) -> List[str]:
    """Load the keys of a gap table. Missing file yields an empty list."""
    if not os.path.exists(path):
        logger.warning("No gap table at %s", path)
        return []
    with open(path, 'r') as f:
        return [line.strip() for line in f if line.strip()]


def pick_gaps(keys: List[str], rng: Optional[random.Random] = None, top: int = Config.GAP_TABLE_TOP) -> str:
    """Choose a gap pair at random among the best `top` entries."""
    if not keys:
        return Config.DEFAULT_GAPS
    rng = rng or random.Random()
    return rng.choice(keys[:top])
