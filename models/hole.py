from pydantic import Field
from typing import Optional

from .base import BaseGolfModel


class Hole(BaseGolfModel):
    """Represents a single hole on a tournament course."""
    number: int = Field(..., ge=1, le=18)
    par: int = Field(..., ge=3, le=6)
    stroke_index: Optional[int] = Field(None, ge=1, le=18)  # 1 = hardest
