from .base import BaseGolfModel
from .achievement import Achievement, AchievementKind
from .course import Course
from .discrepancy import Discrepancy
from .group import Group
from .hole import Hole
from .hole_score import HoleScore, HoleState
from .player import Player
from .round import Round
from .session import SessionContext
from .standing import DayTotal, PlayerStanding, SealState
from .tournament import ScoringMode, Tournament

__all__ = [
    "BaseGolfModel",
    "Achievement",
    "AchievementKind",
    "Course",
    "DayTotal",
    "Discrepancy",
    "Group",
    "Hole",
    "HoleScore",
    "HoleState",
    "Player",
    "PlayerStanding",
    "Round",
    "ScoringMode",
    "SealState",
    "SessionContext",
    "Tournament",
]
