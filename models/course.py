from pydantic import Field, model_validator
from typing import List, Optional

from .base import BaseGolfModel
from .hole import Hole


class Course(BaseGolfModel):
    """Golf course played by one or more tournament groups."""
    id: Optional[str] = None
    tournament_id: Optional[str] = None
    name: Optional[str] = None
    holes: List[Hole] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_hole_layout(self):
        numbers = [h.number for h in self.holes]
        if len(set(numbers)) != len(numbers):
            raise ValueError("Hole numbers must be unique within a course")

        total = len(self.holes)
        indices = [h.stroke_index for h in self.holes if h.stroke_index is not None]
        if len(set(indices)) != len(indices):
            raise ValueError("Stroke indices must be unique within a course")
        for si in indices:
            if si > total:
                raise ValueError(f"Stroke index {si} outside 1-{total}")
        return self

    @property
    def hole_count(self) -> int:
        return len(self.holes)

    @property
    def par(self) -> Optional[int]:
        """Total par, None when the course has no holes."""
        if not self.holes:
            return None
        return sum(h.par for h in self.holes)

    @property
    def last_hole_number(self) -> Optional[int]:
        if not self.holes:
            return None
        return max(h.number for h in self.holes)

    def get_hole(self, number: int) -> Optional[Hole]:
        """Get a hole by its number."""
        for hole in self.holes:
            if hole.number == number:
                return hole
        return None

    def hole_numbers(self) -> List[int]:
        return sorted(h.number for h in self.holes)
