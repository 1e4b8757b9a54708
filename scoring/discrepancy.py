"""Comparison of an official scorecard with an independently kept one."""

from typing import List, Mapping, Optional

from models import Discrepancy, Round


def find_discrepancies(
    official: Mapping[int, Optional[int]],
    reference: Optional[Mapping[int, int]],
) -> List[Discrepancy]:
    """
    Holes where both cards have a score and the scores differ.

    Holes missing from either side (or recorded as 0) are not compared.
    Returns an empty list when there is no reference card.
    """
    if not reference:
        return []

    found = []
    for hole in sorted(official):
        official_strokes = official[hole]
        reference_strokes = reference.get(hole)
        if not official_strokes or not reference_strokes:
            continue
        if official_strokes != reference_strokes:
            found.append(
                Discrepancy(hole=hole, official=official_strokes, reference=reference_strokes)
            )
    return found


def round_discrepancies(round_: Round) -> List[Discrepancy]:
    return find_discrepancies(round_.official_strokes(), round_.reference_scores)


def format_discrepancy_notes(discrepancies: List[Discrepancy]) -> Optional[str]:
    """Admin-facing summary, e.g. 'Hole 5: official 5, reference 4'."""
    if not discrepancies:
        return None
    return "; ".join(d.describe() for d in discrepancies)
