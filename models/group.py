from pydantic import Field
from typing import List, Optional

from .base import BaseGolfModel


class Group(BaseGolfModel):
    """A pairing of players on one course for one tournament day."""
    id: Optional[str] = None
    tournament_id: Optional[str] = None
    name: Optional[str] = None
    course_id: Optional[str] = None
    day: int = Field(1, ge=0)  # 0 = practice day
    player_ids: List[str] = Field(default_factory=list)
    starting_hole: Optional[int] = Field(None, ge=1, le=18)
    tee_time: Optional[str] = None

    def has_player(self, player_id: Optional[str]) -> bool:
        return player_id is not None and player_id in self.player_ids

    def play_order(self, hole_numbers: List[int]) -> List[int]:
        """Hole numbers in the order this group plays them (shotgun starts wrap)."""
        ordered = sorted(hole_numbers)
        if not self.starting_hole or self.starting_hole not in ordered:
            return ordered
        start = ordered.index(self.starting_hole)
        return ordered[start:] + ordered[:start]
