"""Allocation of a player's handicap strokes across a course's holes."""

from typing import Dict, Optional

from models import Course


def strokes_for_hole(
    handicap_index: int, stroke_index: Optional[int], total_holes: int
) -> int:
    """
    Handicap strokes received on one hole.

    Every hole gets handicap // total_holes strokes; the remainder goes one
    each to the hardest holes (stroke index 1, 2, ...). A 20 handicap on
    18 holes gets 2 strokes on SI 1-2 and 1 stroke everywhere else.

    A missing or zero stroke index (bad course data) receives nothing.
    """
    if not stroke_index or total_holes <= 0:
        return 0
    base, extra = divmod(handicap_index, total_holes)
    return base + (1 if stroke_index <= extra else 0)


def allocate_strokes(handicap_index: int, course: Course) -> Dict[int, int]:
    """hole_number -> handicap strokes for every hole on the course."""
    total = course.hole_count
    return {
        hole.number: strokes_for_hole(handicap_index, hole.stroke_index, total)
        for hole in course.holes
    }
