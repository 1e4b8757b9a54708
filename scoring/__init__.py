from .achievements import HolePlay, detect, detect_for_hole, detect_round
from .discrepancy import find_discrepancies, format_discrepancy_notes, round_discrepancies
from .handicap import allocate_strokes, strokes_for_hole
from .leaderboard import (
    final_standings,
    hidden_positions,
    is_loosely_sealed,
    is_strictly_sealed,
    rank,
    seal_state,
)
from .lifecycle import RoundLifecycle, RoundState, SaveResult, round_state
from .stableford import HoleResult, rescore_round, round_net_total, score_hole

__all__ = [
    "HolePlay",
    "detect",
    "detect_for_hole",
    "detect_round",
    "find_discrepancies",
    "format_discrepancy_notes",
    "round_discrepancies",
    "allocate_strokes",
    "strokes_for_hole",
    "final_standings",
    "hidden_positions",
    "is_loosely_sealed",
    "is_strictly_sealed",
    "rank",
    "seal_state",
    "RoundLifecycle",
    "RoundState",
    "SaveResult",
    "round_state",
    "HoleResult",
    "rescore_round",
    "round_net_total",
    "score_hole",
]
