"""Stableford points and net scores, per hole and per round."""

from dataclasses import dataclass
from typing import Optional

from models import Course, HoleScore, HoleState, Round
from scoring.handicap import strokes_for_hole

# net strokes relative to par -> points; anything worse than +1 scores 0
STABLEFORD_POINTS = {
    -1: 3,
    0: 2,
    1: 1,
}


@dataclass(frozen=True)
class HoleResult:
    points: int
    net_score: int


def stableford_points(net_strokes: int, par: int) -> int:
    diff = net_strokes - par
    if diff <= -2:
        return 4
    return STABLEFORD_POINTS.get(diff, 0)


def score_hole(gross_strokes: int, par: int, handicap_strokes: int) -> HoleResult:
    """
    Points and net score for one hole.

    gross_strokes == 0 means the hole has not been played: it scores
    nothing and callers must leave it out of holes-played counts.
    The per-hole net score is clamped at zero for display.
    """
    if gross_strokes <= 0:
        return HoleResult(points=0, net_score=0)
    return HoleResult(
        points=stableford_points(gross_strokes - handicap_strokes, par),
        net_score=max(0, gross_strokes - handicap_strokes),
    )


def net_double_bogey(par: int, handicap_strokes: int) -> int:
    """Gross score counted for a picked-up hole."""
    return par + handicap_strokes + 2


def counted_gross(hole_score: HoleScore, par: int, handicap_strokes: int) -> int:
    """Strokes a hole contributes to gross totals (0 while unset)."""
    state = hole_score.state
    if state is HoleState.STROKES:
        return hole_score.strokes
    if state is HoleState.PICKED_UP:
        return net_double_bogey(par, handicap_strokes)
    return 0


def rescore_hole(
    hole_score: HoleScore,
    par: int,
    handicap_strokes: int,
) -> HoleScore:
    """Return a copy of hole_score with points/net/adjusted gross recomputed."""
    state = hole_score.state
    if state is HoleState.UNSET:
        points, net, adjusted = 0, None, None
    elif state is HoleState.PICKED_UP:
        adjusted = net_double_bogey(par, handicap_strokes)
        points, net = 0, adjusted - handicap_strokes
    else:
        result = score_hole(hole_score.strokes, par, handicap_strokes)
        points, net, adjusted = result.points, result.net_score, hole_score.strokes

    return HoleScore(
        hole_number=hole_score.hole_number,
        strokes=hole_score.strokes,
        picked_up=hole_score.picked_up,
        points=points,
        net_score=net,
        adjusted_gross=adjusted,
    )


def rescore_round(round_: Round, course: Course, handicap: Optional[int] = None) -> Round:
    """
    Recompute every hole on the card against the course.

    The card is normalised to one HoleScore per course hole, in hole
    order; scores for holes the course does not have are dropped.
    """
    handicap_index = round_.handicap_used if handicap is None else handicap
    total = course.hole_count
    rescored = []
    for hole in sorted(course.holes, key=lambda h: h.number):
        existing = round_.get_hole_score(hole.number) or HoleScore(hole_number=hole.number)
        hcp_strokes = strokes_for_hole(handicap_index, hole.stroke_index, total)
        rescored.append(rescore_hole(existing, hole.par, hcp_strokes))

    return round_.model_copy(
        update={"hole_scores": rescored, "handicap_used": handicap_index}
    )


def round_net_total(round_: Round, course: Optional[Course]) -> int:
    """
    Unclamped net total over entered holes, recomputed from the course.

    Unlike the per-hole display value this can go below zero; without a
    course the stored per-hole net scores are summed instead.
    """
    total = 0
    for hs in round_.hole_scores:
        if not hs.is_entered():
            continue
        hole = course.get_hole(hs.hole_number) if course else None
        if hole is None:
            total += hs.net_score or 0
            continue
        hcp = strokes_for_hole(round_.handicap_used, hole.stroke_index, course.hole_count)
        total += counted_gross(hs, hole.par, hcp) - hcp
    return total
