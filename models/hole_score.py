from enum import Enum
from pydantic import Field, field_validator, model_validator
from typing import Optional

from .base import BaseGolfModel


class HoleState(str, Enum):
    UNSET = "unset"
    PICKED_UP = "picked_up"
    STROKES = "strokes"


class HoleScore(BaseGolfModel):
    """A player's score on a single hole.

    A hole is either unset, picked up, or played with a stroke count.
    `points`, `net_score` and `adjusted_gross` are derived by the scorer
    and overwritten on every save.
    """
    hole_number: int = Field(..., ge=1, le=18)
    strokes: Optional[int] = Field(None, ge=1, le=20)
    picked_up: bool = False
    points: int = Field(0, ge=0, le=4)
    net_score: Optional[int] = None
    adjusted_gross: Optional[int] = Field(None, ge=0)

    @field_validator('strokes', mode='before')
    @classmethod
    def zero_strokes_is_unset(cls, v):
        # Legacy rows store 0 for "not entered"
        if v == 0:
            return None
        return v

    @model_validator(mode='after')
    def validate_state(self):
        if self.picked_up and self.strokes is not None:
            raise ValueError(
                f"Hole {self.hole_number} cannot be both picked up and scored ({self.strokes})"
            )
        return self

    @property
    def state(self) -> HoleState:
        if self.picked_up:
            return HoleState.PICKED_UP
        if self.strokes is not None:
            return HoleState.STROKES
        return HoleState.UNSET

    def is_entered(self) -> bool:
        """True for played and picked-up holes."""
        return self.state is not HoleState.UNSET

    def to_par(self, par: int) -> Optional[int]:
        """Gross score relative to par, None unless strokes were recorded."""
        if self.strokes is None:
            return None
        return self.strokes - par

    def same_entry(self, other: Optional["HoleScore"]) -> bool:
        """Compare only the user-entered part of two hole scores."""
        if other is None:
            return self.state is HoleState.UNSET
        return self.strokes == other.strokes and self.picked_up == other.picked_up
