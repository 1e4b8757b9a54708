"""API-specific request and response models."""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from models import Achievement, Discrepancy, HoleScore, PlayerStanding, Round, SealState, ScoringMode
from scoring.lifecycle import RoundState


class HoleEntryRequest(BaseModel):
    strokes: Optional[int] = Field(None, ge=1, le=20)
    picked_up: bool = False


class HoleEntriesRequest(BaseModel):
    hole_scores: List[HoleScore]


class ReferenceScoresRequest(BaseModel):
    scores: Dict[int, int]


class SubmitRequest(BaseModel):
    confirm_discrepancies: bool = False


class HandicapOverrideRequest(BaseModel):
    handicap: int = Field(..., ge=0, le=54)


class RoundResponse(BaseModel):
    """A card with its derived totals and lifecycle state."""
    round: Optional[Round] = None
    state: RoundState
    total_gross: int = 0
    total_points: int = 0
    holes_played: int = 0
    completed: bool = False
    missing_holes: List[int] = Field(default_factory=list)


class SaveResponse(RoundResponse):
    achievements: List[Achievement] = Field(default_factory=list)


class MissingScoresResponse(BaseModel):
    message: str
    missing_holes: List[int]


class DiscrepancyResponse(BaseModel):
    message: str
    discrepancies: List[Discrepancy]


class LeaderboardResponse(BaseModel):
    scoring_mode: ScoringMode
    scope: str
    seal: SealState
    hidden_positions: List[int] = Field(default_factory=list)
    standings: List[PlayerStanding]


class FinalStandingsResponse(BaseModel):
    sealed: bool
    standings: Optional[List[PlayerStanding]] = None
