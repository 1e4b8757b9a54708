from datetime import datetime
from pydantic import Field, field_validator
from typing import Dict, List, Optional

from .base import BaseGolfModel
from .discrepancy import Discrepancy
from .hole_score import HoleScore


class Round(BaseGolfModel):
    """One player's scorecard for one group (and therefore one day)."""
    id: Optional[str] = None
    tournament_id: Optional[str] = None
    player_id: str
    group_id: str
    day: int = Field(1, ge=0)
    hole_scores: List[HoleScore] = Field(default_factory=list)
    handicap_used: int = Field(0, ge=0, le=54)
    submitted: bool = False

    # Independently tracked scorecard, keyed by hole number
    reference_scores: Optional[Dict[int, int]] = None
    discrepancies: List[Discrepancy] = Field(default_factory=list)
    discrepancy_flagged: bool = False
    discrepancy_notes: Optional[str] = None

    version: int = Field(0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('reference_scores')
    @classmethod
    def validate_reference_scores(cls, v):
        if v is None:
            return v
        for hole_number, strokes in v.items():
            if not 1 <= hole_number <= 18:
                raise ValueError(f"Hole number {hole_number} must be 1-18")
            if strokes < 0:
                raise ValueError(f"Reference strokes for hole {hole_number} cannot be negative")
        return v

    def get_hole_score(self, hole_number: int) -> Optional[HoleScore]:
        """Get score for a specific hole."""
        for hs in self.hole_scores:
            if hs.hole_number == hole_number:
                return hs
        return None

    def entered_holes(self) -> List[HoleScore]:
        return [hs for hs in self.hole_scores if hs.is_entered()]

    def holes_played(self) -> int:
        return len(self.entered_holes())

    def missing_holes(self) -> List[int]:
        """Hole numbers with nothing entered yet, in hole order."""
        return sorted(hs.hole_number for hs in self.hole_scores if not hs.is_entered())

    def calculate_total_gross(self) -> int:
        """Sum of counted strokes (picked-up holes count their adjusted score)."""
        total = 0
        for hs in self.hole_scores:
            if hs.adjusted_gross is not None:
                total += hs.adjusted_gross
            elif hs.strokes is not None:
                total += hs.strokes
        return total

    def calculate_total_points(self) -> int:
        return sum(hs.points for hs in self.hole_scores if hs.is_entered())

    def official_strokes(self) -> Dict[int, Optional[int]]:
        """hole_number -> recorded strokes (None for unset/picked up)."""
        return {hs.hole_number: hs.strokes for hs in self.hole_scores}

    @property
    def completed(self) -> bool:
        """Every hole on the card has been entered."""
        return bool(self.hole_scores) and all(hs.is_entered() for hs in self.hole_scores)

    @property
    def total_gross(self) -> int:
        return self.calculate_total_gross()

    @property
    def total_points(self) -> int:
        return self.calculate_total_points()
