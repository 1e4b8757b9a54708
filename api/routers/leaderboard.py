"""Leaderboard, seal state and final standings for a tournament."""

import logging
from dataclasses import dataclass
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from api.dependencies import get_db, get_session
from api.schemas import FinalStandingsResponse, LeaderboardResponse
from database.db_manager import DatabaseManager
from database.exceptions import DatabaseError
from models import Course, Group, Player, Round, ScoringMode, SessionContext, Tournament
from scoring.leaderboard import final_standings, hidden_positions, rank, seal_state

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass
class TournamentSnapshot:
    tournament: Tournament
    players: List[Player]
    groups: List[Group]
    courses: List[Course]
    rounds: List[Round]


async def load_snapshot(db: DatabaseManager, tournament_id: str) -> TournamentSnapshot:
    try:
        tournament = await db.tournaments.get_tournament(tournament_id)
        if tournament is None:
            raise HTTPException(404, f"Tournament {tournament_id} not found")
        return TournamentSnapshot(
            tournament=tournament,
            players=await db.players.get_players_for_tournament(tournament_id),
            groups=await db.groups.get_groups_for_tournament(tournament_id),
            courses=await db.courses.get_courses_for_tournament(tournament_id),
            rounds=await db.rounds.get_rounds_for_tournament(tournament_id),
        )
    except DatabaseError as e:
        logger.error(f"Could not load tournament {tournament_id}: {e}")
        raise HTTPException(503, "Leaderboard is temporarily unavailable")


def parse_scope(scope: str):
    if scope in ("all", "practice"):
        return scope
    try:
        return int(scope)
    except ValueError:
        raise HTTPException(400, f"Unknown scope '{scope}' (use all, practice or a day number)")


@router.get("/{tournament_id}/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    tournament_id: str,
    scope: str = Query("all"),
    mode: Optional[ScoringMode] = Query(None),
    session: SessionContext = Depends(get_session),
    db: DatabaseManager = Depends(get_db),
):
    """Ranked standings. Top positions come back flagged as hidden until the final day is in."""
    snap = await load_snapshot(db, tournament_id)
    mode = mode or snap.tournament.scoring_mode
    standings = rank(snap.rounds, snap.players, snap.groups, parse_scope(scope), mode, snap.courses)
    seal = seal_state(snap.rounds, snap.groups, snap.tournament, snap.courses)
    hidden = hidden_positions(standings, seal, snap.tournament, is_admin=session.is_admin)
    return LeaderboardResponse(
        scoring_mode=mode,
        scope=scope,
        seal=seal,
        hidden_positions=sorted(hidden),
        standings=standings,
    )


@router.get("/{tournament_id}/seal")
async def get_seal(tournament_id: str, db: DatabaseManager = Depends(get_db)):
    snap = await load_snapshot(db, tournament_id)
    return seal_state(snap.rounds, snap.groups, snap.tournament, snap.courses)


@router.get("/{tournament_id}/final-standings", response_model=FinalStandingsResponse)
async def get_final_standings(tournament_id: str, db: DatabaseManager = Depends(get_db)):
    snap = await load_snapshot(db, tournament_id)
    standings = final_standings(
        snap.rounds, snap.players, snap.groups, snap.tournament, snap.courses
    )
    return FinalStandingsResponse(sealed=standings is not None, standings=standings)
