from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional


class AchievementKind(str, Enum):
    HOLE_IN_ONE = "hole-in-one"
    EAGLE = "eagle"
    BIRDIE = "birdie"
    PAR_STREAK = "par-streak"
    BIRDIE_STREAK = "birdie-streak"


class Achievement(BaseModel):
    """An in-round event worth announcing to the tournament feed."""
    kind: AchievementKind
    hole_number: int = Field(..., ge=1, le=18)
    strokes: int = Field(..., ge=1)
    par: int = Field(..., ge=3, le=6)
    streak_length: Optional[int] = Field(None, ge=2)
    title: str
    description: str
    icon: Optional[str] = None

    def caption(self, player_name: str) -> str:
        """Feed text, e.g. 'Sam just earned "Eagle Eye" on hole 7!'"""
        text = f'{player_name} just earned "{self.title}" on hole {self.hole_number}!'
        if self.icon:
            text += f" {self.icon}"
        return f"{text} {self.description}"
