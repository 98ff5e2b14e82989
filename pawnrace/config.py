"""
Centralized Configuration for Pawn Race.

All tunables for the rules engine, the search and the drivers are defined here.
Other modules should import from this file rather than hardcoding values.
"""

import os


def _default_workers() -> int:
    # Half the cores, minus the calling thread and one for runner overhead
    allowed = (os.cpu_count() or 1) // 2 - 1
    return max(allowed - 1, 0)


class Config:
    # ==========================================================================
    # Board
    # ==========================================================================
    BOARD_SIZE = 8              # 8x8 board
    WHITE_START_RANK = 1        # Rank index of the white pawn row
    BLACK_START_RANK = 6        # Rank index of the black pawn row
    FILE_LETTERS = "abcdefgh"

    # ==========================================================================
    # Search
    # ==========================================================================
    TIME_LIMIT_S = 4.95                 # Wall-clock budget per move decision
    SEARCH_WORKERS = _default_workers() # Root-level worker processes (0 = none)
    MIN_PARALLEL_MOVES = 3              # Fewer root moves are searched sequentially

    # ==========================================================================
    # Evaluation Weights
    # ==========================================================================
    TEMPO_BONUS = 5             # Side to move bonus
    ADVANCE_WEIGHT = 12         # × advanced²
    PASSED_WEIGHT = 20          # × advanced², passed pawns only
    DEFENDED_BONUS = 25         # Friendly pawn diagonally behind
    ISOLATED_PENALTY = 15       # No friendly pawn on an adjacent file
    IMMOBILE_PENALTY = 10       # Blocked ahead and nothing to capture
    BACKWARD_PENALTY = 8        # Blocked file with no adjacent support

    # ==========================================================================
    # Gap Table
    # ==========================================================================
    GAP_TABLE_DEPTH = 2         # Plies searched after White's first move
    GAP_TABLE_TOP = 10          # Black picks randomly among the best N pairs
    DEFAULT_GAPS = "BC"         # Fallback when no table is available

    # ==========================================================================
    # Paths
    # ==========================================================================
    GAP_TABLE_PATH = os.environ.get("PAWNRACE_GAP_TABLE", "gap_table.txt")

