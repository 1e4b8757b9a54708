from typing import List, Optional

from models import Discrepancy


class ScoringError(Exception):
    """Base for all scoring engine errors."""


class MissingScoresError(ScoringError):
    """Submission attempted before every hole was entered."""

    def __init__(self, missing_holes: List[int]):
        self.missing_holes = list(missing_holes)
        holes = ", ".join(str(h) for h in self.missing_holes)
        super().__init__(f"Missing scores for holes: {holes}")


class DiscrepancyWarning(ScoringError):
    """Official and reference scorecards disagree; submission needs confirmation."""

    def __init__(self, discrepancies: List[Discrepancy]):
        self.discrepancies = list(discrepancies)
        holes = ", ".join(str(d.hole) for d in self.discrepancies)
        super().__init__(f"Scores differ from the reference card on holes: {holes}")


class RoundLockedError(ScoringError):
    """Player-side mutation of a submitted round."""


class PermissionDeniedError(ScoringError):
    """Caller lacks the capability for this action."""


class RoundNotFoundError(ScoringError):
    """No round exists for the requested id or (group, player)."""

    def __init__(self, message: str, round_id: Optional[str] = None):
        self.round_id = round_id
        super().__init__(message)


class InvalidHoleError(ScoringError):
    """Score entered for a hole the course does not have."""
