from decimal import Decimal, ROUND_HALF_UP
from pydantic import Field, field_validator
from typing import Optional

from .base import BaseGolfModel


class Player(BaseGolfModel):
    """A golfer registered in a tournament."""
    id: Optional[str] = None
    tournament_id: Optional[str] = None
    name: Optional[str] = None
    handicap: int = Field(0, ge=0, le=54)
    is_spectator: bool = False

    @field_validator('handicap', mode='before')
    @classmethod
    def round_fractional_handicap(cls, v):
        # Half up: 12.5 plays off 13
        if isinstance(v, float):
            return int(Decimal(str(v)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
        return v
