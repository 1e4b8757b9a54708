"""Conversion between asyncpg database rows and Pydantic domain models.

Centralizes all mapping logic between the normalized DB schema
and the nested Pydantic models.
"""

import json
from typing import Any, Dict, List, Optional
from uuid import UUID

from models import Course, Discrepancy, Group, Hole, HoleScore, Player, Round, Tournament


def _str_id(value) -> Optional[str]:
    return str(value) if value else None


def _jsonb(value) -> Any:
    """JSONB comes back as text unless a codec is registered on the pool."""
    if isinstance(value, str):
        return json.loads(value)
    return value


# ================================================================
# Row -> Model (reads)
# ================================================================

def tournament_from_row(row) -> Tournament:
    """golf.tournaments row -> Tournament model."""
    return Tournament(
        id=str(row["id"]),
        name=row["name"],
        scoring_mode=row["scoring_type"],
        number_of_days=row["number_of_days"],
        has_practice_day=row["has_play_around_day"],
        blur_top_standings=row["blur_top5"],
    )


def player_from_row(row) -> Player:
    """golf.players row -> Player model (handicap rounded to an integer)."""
    handicap = row["handicap"]
    return Player(
        id=str(row["id"]),
        tournament_id=_str_id(row["tournament_id"]),
        name=row["name"],
        handicap=float(handicap) if handicap is not None else 0,
        is_spectator=row["is_spectator"],
    )


def hole_from_row(row) -> Hole:
    """golf.holes row -> Hole model."""
    return Hole(
        number=row["hole_number"],
        par=row["par"],
        stroke_index=row["stroke_index"],
    )


def course_from_rows(course_row, hole_rows: list) -> Course:
    """golf.courses row + golf.holes rows -> Course."""
    holes = sorted(
        [hole_from_row(r) for r in hole_rows],
        key=lambda h: h.number,
    )
    return Course(
        id=str(course_row["id"]),
        tournament_id=_str_id(course_row["tournament_id"]),
        name=course_row["name"],
        holes=holes,
    )


def group_from_row(row) -> Group:
    """golf.groups row -> Group model."""
    return Group(
        id=str(row["id"]),
        tournament_id=_str_id(row["tournament_id"]),
        course_id=_str_id(row["course_id"]),
        name=row["name"],
        day=row["day"],
        player_ids=[str(p) for p in (row["player_ids"] or [])],
        starting_hole=row["starting_hole"],
        tee_time=row["tee_time"],
    )


def hole_score_from_row(row) -> HoleScore:
    """golf.hole_scores row -> HoleScore model."""
    return HoleScore(
        hole_number=row["hole_number"],
        strokes=row["strokes"],
        picked_up=row["picked_up"] or False,
        points=row["points"] or 0,
        net_score=row["net_score"],
        adjusted_gross=row["adjusted_gross"],
    )


def reference_scores_from_json(value) -> Optional[Dict[int, int]]:
    data = _jsonb(value)
    if not data:
        return None
    # Keys come back as strings from JSONB; convert to int
    return {int(k): int(v) for k, v in data.items()}


def round_from_rows(round_row, hole_score_rows: list) -> Round:
    """Assemble a Round from a golf.rounds row and its hole score rows.

    The stored totals and completed flag are ignored; the model derives
    them from the hole scores.
    """
    hole_scores = sorted(
        [hole_score_from_row(r) for r in hole_score_rows],
        key=lambda hs: hs.hole_number,
    )
    discrepancies = [Discrepancy(**d) for d in (_jsonb(round_row["discrepancies"]) or [])]
    return Round(
        id=str(round_row["id"]),
        tournament_id=_str_id(round_row["tournament_id"]),
        player_id=str(round_row["player_id"]),
        group_id=str(round_row["group_id"]),
        day=round_row["day"],
        hole_scores=hole_scores,
        handicap_used=round_row["handicap_used"] or 0,
        submitted=round_row["submitted"],
        reference_scores=reference_scores_from_json(round_row["reference_scores"]),
        discrepancies=discrepancies,
        discrepancy_flagged=round_row["discrepancy_flagged"],
        discrepancy_notes=round_row["discrepancy_notes"],
        version=round_row["version"],
        created_at=round_row["created_at"],
        updated_at=round_row["updated_at"],
    )


# ================================================================
# Model -> Row (writes)
# ================================================================

def round_to_row(round_: Round) -> Dict[str, Any]:
    """Round -> dict for golf.rounds INSERT/UPDATE."""
    reference = None
    if round_.reference_scores:
        reference = json.dumps({str(k): v for k, v in sorted(round_.reference_scores.items())})
    return {
        "tournament_id": UUID(round_.tournament_id) if round_.tournament_id else None,
        "player_id": UUID(round_.player_id),
        "group_id": UUID(round_.group_id),
        "day": round_.day,
        "handicap_used": round_.handicap_used,
        "submitted": round_.submitted,
        "completed": round_.completed,
        "total_gross": round_.calculate_total_gross(),
        "total_points": round_.calculate_total_points(),
        "holes_played": round_.holes_played(),
        "reference_scores": reference,
        "discrepancies": json.dumps([d.model_dump() for d in round_.discrepancies]),
        "discrepancy_flagged": round_.discrepancy_flagged,
        "discrepancy_notes": round_.discrepancy_notes,
    }


def hole_score_to_row(hs: HoleScore, round_id: UUID) -> tuple:
    """HoleScore -> tuple for golf.hole_scores INSERT (for executemany)."""
    return (
        round_id, hs.hole_number, hs.strokes, hs.picked_up,
        hs.points, hs.net_score, hs.adjusted_gross,
    )


def hole_scores_to_rows(hole_scores: List[HoleScore], round_id: UUID) -> List[tuple]:
    return [hole_score_to_row(hs, round_id) for hs in hole_scores]
