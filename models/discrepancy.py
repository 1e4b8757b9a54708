from pydantic import BaseModel, Field


class Discrepancy(BaseModel):
    """One hole where the official and reference scorecards disagree."""
    hole: int = Field(..., ge=1, le=18)
    official: int
    reference: int

    def describe(self) -> str:
        return f"Hole {self.hole}: official {self.official}, reference {self.reference}"
