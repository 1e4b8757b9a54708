from enum import Enum
from pydantic import Field, field_validator
from typing import Optional

from .base import BaseGolfModel


class ScoringMode(str, Enum):
    STROKES = "strokes"    # lowest total gross wins
    HANDICAP = "handicap"  # highest Stableford points wins
    NET = "net"            # lowest total net wins


class Tournament(BaseGolfModel):
    """Tournament-wide configuration read by the leaderboard."""
    id: Optional[str] = None
    name: Optional[str] = None
    scoring_mode: ScoringMode = ScoringMode.HANDICAP
    number_of_days: int = Field(2, ge=1, le=7)
    has_practice_day: bool = False
    blur_top_standings: bool = False

    @field_validator('scoring_mode', mode='before')
    @classmethod
    def accept_legacy_mode(cls, v):
        if v == "net-score":
            return ScoringMode.NET
        return v

    @property
    def final_day(self) -> int:
        return self.number_of_days
