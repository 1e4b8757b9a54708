import pytest

from models import Course, Hole, HoleScore, HoleState, Round
from scoring.discrepancy import find_discrepancies, format_discrepancy_notes, round_discrepancies
from scoring.handicap import allocate_strokes, strokes_for_hole
from scoring.stableford import (
    counted_gross,
    net_double_bogey,
    rescore_hole,
    rescore_round,
    round_net_total,
    score_hole,
    stableford_points,
)


def _course(holes=18, par=4):
    return Course(
        id="c1",
        name="Links",
        holes=[Hole(number=i, par=par, stroke_index=i) for i in range(1, holes + 1)],
    )


# ================================================================
# handicap.py
# ================================================================

@pytest.mark.parametrize("handicap", [0, 1, 9, 17, 18, 20, 36, 40, 54])
@pytest.mark.parametrize("total_holes", [9, 18])
def test_allocated_strokes_sum_to_handicap(handicap, total_holes):
    total = sum(
        strokes_for_hole(handicap, si, total_holes) for si in range(1, total_holes + 1)
    )
    assert total == handicap


def test_handicap_20_on_18_holes():
    assert strokes_for_hole(20, 1, 18) == 2
    assert strokes_for_hole(20, 2, 18) == 2
    assert strokes_for_hole(20, 3, 18) == 1
    assert strokes_for_hole(20, 18, 18) == 1


def test_missing_stroke_index_gets_no_strokes():
    assert strokes_for_hole(18, None, 18) == 0
    assert strokes_for_hole(18, 0, 18) == 0


def test_allocate_strokes_for_course():
    alloc = allocate_strokes(10, _course())
    assert alloc[1] == 1
    assert alloc[10] == 1
    assert alloc[11] == 0
    assert sum(alloc.values()) == 10


# ================================================================
# stableford.py
# ================================================================

def test_stableford_points_table():
    assert stableford_points(2, 4) == 4     # eagle or better
    assert stableford_points(1, 4) == 4
    assert stableford_points(3, 4) == 3     # birdie
    assert stableford_points(4, 4) == 2     # par
    assert stableford_points(5, 4) == 1     # bogey
    assert stableford_points(6, 4) == 0
    assert stableford_points(9, 4) == 0


def test_score_hole_applies_handicap_strokes():
    result = score_hole(5, 4, 1)
    assert result.points == 2
    assert result.net_score == 4


def test_score_hole_unplayed_scores_nothing():
    result = score_hole(0, 4, 2)
    assert result.points == 0
    assert result.net_score == 0


def test_score_hole_net_clamped_at_zero():
    assert score_hole(1, 3, 3).net_score == 0


@pytest.mark.parametrize("par", [3, 4, 5])
@pytest.mark.parametrize("handicap_strokes", [0, 1, 2])
def test_points_never_increase_with_strokes(par, handicap_strokes):
    points = [score_hole(s, par, handicap_strokes).points for s in range(1, 15)]
    assert all(a >= b for a, b in zip(points, points[1:]))


def test_picked_up_hole_scores_net_double_bogey():
    hs = rescore_hole(HoleScore(hole_number=1, picked_up=True), par=4, handicap_strokes=1)
    assert hs.points == 0
    assert hs.adjusted_gross == net_double_bogey(4, 1) == 7
    assert hs.net_score == 6
    assert hs.state is HoleState.PICKED_UP


def test_counted_gross_by_state():
    assert counted_gross(HoleScore(hole_number=1, strokes=5), 4, 1) == 5
    assert counted_gross(HoleScore(hole_number=1, picked_up=True), 4, 1) == 7
    assert counted_gross(HoleScore(hole_number=1), 4, 1) == 0


def test_rescore_round_normalises_card_to_course():
    course = _course(holes=3)
    r = Round(
        player_id="p1",
        group_id="g1",
        handicap_used=3,
        hole_scores=[
            HoleScore(hole_number=2, strokes=5),
            HoleScore(hole_number=1, strokes=4),
        ],
    )
    card = rescore_round(r, course)

    assert [hs.hole_number for hs in card.hole_scores] == [1, 2, 3]
    assert card.get_hole_score(1).points == 3     # net 3 on par 4
    assert card.get_hole_score(2).points == 2
    assert card.get_hole_score(3).state is HoleState.UNSET
    assert card.total_points == 5
    assert card.total_gross == 9
    assert not card.completed
    # input is not mutated
    assert r.hole_scores[0].points == 0


def test_rescore_round_with_handicap_override():
    course = _course(holes=2)
    r = Round(
        player_id="p1",
        group_id="g1",
        handicap_used=0,
        hole_scores=[HoleScore(hole_number=1, strokes=5), HoleScore(hole_number=2, strokes=5)],
    )
    assert rescore_round(r, course).total_points == 2
    overridden = rescore_round(r, course, handicap=2)
    assert overridden.handicap_used == 2
    assert overridden.total_points == 4


def test_rescore_is_idempotent():
    course = _course(holes=4)
    r = Round(
        player_id="p1",
        group_id="g1",
        handicap_used=5,
        hole_scores=[HoleScore(hole_number=i, strokes=i + 3) for i in range(1, 5)],
    )
    once = rescore_round(r, course)
    twice = rescore_round(once, course)
    assert once.hole_scores == twice.hole_scores
    assert once.total_points == twice.total_points


def test_round_net_total_is_not_clamped():
    # Two handicap strokes on a par 3: an ace is net -1
    course = Course(holes=[Hole(number=1, par=3, stroke_index=1)])
    r = Round(
        player_id="p1",
        group_id="g1",
        handicap_used=2,
        hole_scores=[HoleScore(hole_number=1, strokes=1)],
    )
    card = rescore_round(r, course)
    assert card.get_hole_score(1).net_score == 0
    assert round_net_total(card, course) == -1


def test_round_net_total_without_course_uses_stored_net():
    r = Round(
        player_id="p1",
        group_id="g1",
        hole_scores=[
            HoleScore(hole_number=1, strokes=5, net_score=4),
            HoleScore(hole_number=2, net_score=9),      # unset, ignored
        ],
    )
    assert round_net_total(r, None) == 4


# ================================================================
# discrepancy.py
# ================================================================

def test_single_discrepancy():
    found = find_discrepancies({5: 5, 6: 4}, {5: 4})
    assert len(found) == 1
    assert found[0].model_dump() == {"hole": 5, "official": 5, "reference": 4}


def test_no_reference_card():
    assert find_discrepancies({1: 4}, None) == []
    assert find_discrepancies({1: 4}, {}) == []


def test_missing_or_zero_holes_not_compared():
    found = find_discrepancies({1: 4, 2: None, 3: 5}, {1: 0, 2: 6, 4: 3})
    assert found == []


def test_round_discrepancies_and_notes():
    r = Round(
        player_id="p1",
        group_id="g1",
        hole_scores=[
            HoleScore(hole_number=5, strokes=5),
            HoleScore(hole_number=9, strokes=3),
        ],
        reference_scores={5: 4, 9: 4},
    )
    found = round_discrepancies(r)
    assert [d.hole for d in found] == [5, 9]
    assert format_discrepancy_notes(found) == (
        "Hole 5: official 5, reference 4; Hole 9: official 3, reference 4"
    )
    assert format_discrepancy_notes([]) is None
