from pydantic import BaseModel, Field
from typing import Dict, Optional


class DayTotal(BaseModel):
    """Totals from the one round used for a given day."""
    round_id: Optional[str] = None
    gross: int = 0
    points: int = 0
    net: int = 0
    holes_played: int = 0
    submitted: bool = False


class PlayerStanding(BaseModel):
    """One leaderboard row."""
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    handicap: int = 0
    position: Optional[int] = None  # None until the player has a hole on the card
    holes_played: int = 0
    total_gross: int = 0
    total_points: int = 0
    total_net: int = 0
    score_to_par: Optional[int] = None
    rounds_used: int = 0
    day_totals: Dict[int, DayTotal] = Field(default_factory=dict)

    @property
    def in_progress(self) -> bool:
        return self.holes_played > 0


class SealState(BaseModel):
    """Final-day completion signals.

    loose: some final-day card has its last hole scored (finalises contests).
    strict: every final-day card is complete (reveals the top of the board).
    """
    loose: bool = False
    strict: bool = False
