"""
Constants for the Pawn Race search engine.
"""

from pawnrace.config import Config

# Scores
SCORE_MAX = 2**31 - 1       # Largest representable score
SCORE_MIN = -(2**31)        # Guard value, never returned by evaluate()
SCORE_WIN = SCORE_MAX
SCORE_LOSS = SCORE_MIN + 1
SCORE_DRAW = 0

# Evaluation weights
TEMPO_BONUS = Config.TEMPO_BONUS
ADVANCE_WEIGHT = Config.ADVANCE_WEIGHT
PASSED_WEIGHT = Config.PASSED_WEIGHT
DEFENDED_BONUS = Config.DEFENDED_BONUS
ISOLATED_PENALTY = Config.ISOLATED_PENALTY
IMMOBILE_PENALTY = Config.IMMOBILE_PENALTY
BACKWARD_PENALTY = Config.BACKWARD_PENALTY

# Node move ordering (lower is searched first)
PRIORITY_PROMOTION = 0
PRIORITY_CAPTURE = 1
PRIORITY_PASSED_ADVANCE = 2
PRIORITY_QUIET = 3
