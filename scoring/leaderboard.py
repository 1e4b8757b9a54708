"""
Tournament leaderboard: a read-only projection over every persisted round.

Safe to re-run on any cadence while rounds are being saved. Nulls from
a half-written row read as defaults. Rows that still fail validation
are logged and skipped, so the affected player shows zero holes played
instead of breaking the whole ranking.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

from pydantic import ValidationError

from models import (
    Course,
    DayTotal,
    Group,
    Player,
    PlayerStanding,
    Round,
    ScoringMode,
    SealState,
    Tournament,
)
from scoring.stableford import rescore_round, round_net_total

logger = logging.getLogger(__name__)

Scope = Union[str, int]

ALL_DAYS = "all"
PRACTICE = "practice"
BLURRED_POSITIONS = 5

_EPOCH = datetime.min


_DERIVED_HOLE_FIELDS = ("points", "net_score", "adjusted_gross")


def _fill_mid_save_gaps(row: Mapping) -> Dict[str, Any]:
    """Read nulls from a round caught mid-save as defaults. Derived hole fields are rescored."""
    filled = {k: v for k, v in row.items() if v is not None}
    holes = filled.get("hole_scores")
    if isinstance(holes, list):
        filled["hole_scores"] = [
            {k: v for k, v in hs.items() if v is not None and k not in _DERIVED_HOLE_FIELDS}
            if isinstance(hs, Mapping) else hs
            for hs in holes
        ]
    return filled


def _coerce_rounds(rounds: Iterable[Any]) -> List[Round]:
    valid: List[Round] = []
    for row in rounds:
        if isinstance(row, Round):
            valid.append(row)
            continue
        try:
            if isinstance(row, Mapping):
                row = _fill_mid_save_gaps(row)
            valid.append(Round.model_validate(row))
        except (ValidationError, TypeError) as e:
            row_id = row.get("id") if isinstance(row, Mapping) else None
            logger.warning(f"Skipping malformed round {row_id}: {e}")
    return valid


def _scope_days(groups: Iterable[Group], scope: Scope) -> Set[int]:
    days = {g.day for g in groups}
    if scope == ALL_DAYS:
        return {d for d in days if d >= 1}
    if scope == PRACTICE:
        return {0}
    return {int(scope)}


def _last_touched(round_: Round) -> datetime:
    stamp = round_.updated_at or round_.created_at
    if stamp is None:
        return _EPOCH
    return stamp.replace(tzinfo=None)


def select_round_for_day(day_rounds: List[Round]) -> Optional[Round]:
    """Pick the representative card: submitted first, then most recently updated."""
    if not day_rounds:
        return None
    submitted = [r for r in day_rounds if r.submitted]
    candidates = submitted or day_rounds
    return sorted(candidates, key=_last_touched, reverse=True)[0]


def _day_total(round_: Round, course: Optional[Course]) -> DayTotal:
    if course is not None and course.holes:
        card = rescore_round(round_, course)
    else:
        card = round_
    return DayTotal(
        round_id=round_.id,
        gross=card.calculate_total_gross(),
        points=card.calculate_total_points(),
        net=round_net_total(card, course),
        holes_played=card.holes_played(),
        submitted=round_.submitted,
    )


def _par_played(round_: Round, course: Optional[Course]) -> Optional[int]:
    if course is None:
        return None
    par = 0
    for hs in round_.entered_holes():
        hole = course.get_hole(hs.hole_number)
        if hole is None:
            return None
        par += hole.par
    return par


def _standing_for_player(
    player: Player,
    rounds: List[Round],
    groups_by_id: Dict[str, Group],
    courses_by_id: Dict[str, Course],
    days: Set[int],
) -> PlayerStanding:
    standing = PlayerStanding(
        player_id=player.id, player_name=player.name, handicap=player.handicap
    )

    by_day: Dict[int, List[Round]] = {}
    for round_ in rounds:
        group = groups_by_id.get(round_.group_id)
        if group is None or group.day not in days:
            continue
        by_day.setdefault(group.day, []).append(round_)

    to_par = 0
    to_par_known = True
    for day in sorted(by_day):
        chosen = select_round_for_day(by_day[day])
        group = groups_by_id[chosen.group_id]
        course = courses_by_id.get(group.course_id) if group.course_id else None

        try:
            total = _day_total(chosen, course)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Round {chosen.id} for player {player.id} counted as unplayed: {e}")
            total = DayTotal(round_id=chosen.id)

        standing.day_totals[day] = total
        standing.rounds_used += 1
        standing.holes_played += total.holes_played
        standing.total_gross += total.gross
        standing.total_points += total.points
        standing.total_net += total.net

        par = _par_played(chosen, course)
        if par is None:
            to_par_known = False
        else:
            to_par += total.gross - par

    if standing.holes_played and to_par_known:
        standing.score_to_par = to_par
    return standing


def _sort_key(mode: ScoringMode):
    if mode == ScoringMode.STROKES:
        return lambda s: s.total_gross
    if mode == ScoringMode.NET:
        return lambda s: s.total_net
    return lambda s: (-s.total_points, -s.holes_played)


def rank(
    rounds: Iterable[Any],
    players: Iterable[Player],
    groups: Iterable[Group],
    scope: Scope = ALL_DAYS,
    mode: ScoringMode = ScoringMode.HANDICAP,
    courses: Optional[Iterable[Course]] = None,
) -> List[PlayerStanding]:
    """
    Rank players for a scope under a scoring mode.

    scope is "all" (every competition day, practice excluded), "practice"
    or a day number. One round per player per day is used. Players with
    nothing on the card follow everyone else in registration order.
    """
    groups = list(groups)
    groups_by_id = {g.id: g for g in groups if g.id}
    courses_by_id = {c.id: c for c in (courses or []) if c.id}
    days = _scope_days(groups, scope)

    rounds_by_player: Dict[str, List[Round]] = {}
    for round_ in _coerce_rounds(rounds):
        rounds_by_player.setdefault(round_.player_id, []).append(round_)

    standings = [
        _standing_for_player(
            player,
            rounds_by_player.get(player.id, []),
            groups_by_id,
            courses_by_id,
            days,
        )
        for player in players
    ]

    played = [s for s in standings if s.holes_played > 0]
    unplayed = [s for s in standings if s.holes_played == 0]
    played.sort(key=_sort_key(ScoringMode(mode)))

    for position, standing in enumerate(played, start=1):
        standing.position = position
    return played + unplayed


# ================================================================
# Seal signals
# ================================================================

def _final_day_groups(groups: Iterable[Group], tournament: Tournament) -> List[Group]:
    return [g for g in groups if g.day == tournament.final_day]


def _last_hole(group: Group, courses_by_id: Dict[str, Course]) -> int:
    course = courses_by_id.get(group.course_id) if group.course_id else None
    if course is not None and course.last_hole_number:
        return course.last_hole_number
    return 18


def is_loosely_sealed(
    rounds: Iterable[Any],
    groups: Iterable[Group],
    tournament: Tournament,
    courses: Optional[Iterable[Course]] = None,
) -> bool:
    """Any final-day card has its last hole entered. Gates contest winners."""
    courses_by_id = {c.id: c for c in (courses or []) if c.id}
    final_groups = {g.id: g for g in _final_day_groups(groups, tournament)}
    for round_ in _coerce_rounds(rounds):
        group = final_groups.get(round_.group_id)
        if group is None:
            continue
        last = round_.get_hole_score(_last_hole(group, courses_by_id))
        if last is not None and last.is_entered():
            return True
    return False


def is_strictly_sealed(
    rounds: Iterable[Any],
    groups: Iterable[Group],
    tournament: Tournament,
) -> bool:
    """Every player in every final-day group has a complete card. Gates the reveal."""
    final_groups = _final_day_groups(groups, tournament)
    if not final_groups:
        return False

    rounds = _coerce_rounds(rounds)
    for group in final_groups:
        group_rounds = [r for r in rounds if r.group_id == group.id]
        expected = set(group.player_ids) or {r.player_id for r in group_rounds}
        if not expected:
            return False
        for player_id in expected:
            cards = [r for r in group_rounds if r.player_id == player_id]
            chosen = select_round_for_day(cards)
            if chosen is None or not chosen.completed:
                return False
    return True


def seal_state(
    rounds: Iterable[Any],
    groups: Iterable[Group],
    tournament: Tournament,
    courses: Optional[Iterable[Course]] = None,
) -> SealState:
    rounds = list(rounds)
    groups = list(groups)
    return SealState(
        loose=is_loosely_sealed(rounds, groups, tournament, courses),
        strict=is_strictly_sealed(rounds, groups, tournament),
    )


def hidden_positions(
    standings: List[PlayerStanding],
    seal: SealState,
    tournament: Tournament,
    is_admin: bool = False,
) -> Set[int]:
    """Positions to blur for this viewer until the final day is fully in."""
    if is_admin or not tournament.blur_top_standings or seal.strict:
        return set()
    return {
        s.position for s in standings
        if s.position is not None and s.position <= BLURRED_POSITIONS
    }


def final_standings(
    rounds: Iterable[Any],
    players: Iterable[Player],
    groups: Iterable[Group],
    tournament: Tournament,
    courses: Optional[Iterable[Course]] = None,
) -> Optional[List[PlayerStanding]]:
    """Overall ranking for contest payouts, or None until the loose seal."""
    rounds = list(rounds)
    groups = list(groups)
    courses = list(courses or [])
    if not is_loosely_sealed(rounds, groups, tournament, courses):
        return None
    return rank(rounds, players, groups, ALL_DAYS, tournament.scoring_mode, courses)
