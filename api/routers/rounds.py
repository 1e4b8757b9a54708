"""Score entry, submission and admin round endpoints."""

import logging
from fastapi import APIRouter, Depends, HTTPException
from typing import Optional

from api.dependencies import get_lifecycle, get_session
from api.schemas import (
    DiscrepancyResponse,
    HandicapOverrideRequest,
    HoleEntriesRequest,
    HoleEntryRequest,
    MissingScoresResponse,
    ReferenceScoresRequest,
    RoundResponse,
    SaveResponse,
    SubmitRequest,
)
from database.exceptions import DatabaseError, DuplicateError, NotFoundError, StaleWriteError
from models import Round, SessionContext
from scoring.exceptions import (
    DiscrepancyWarning,
    InvalidHoleError,
    MissingScoresError,
    PermissionDeniedError,
    RoundLockedError,
    RoundNotFoundError,
    ScoringError,
)
from scoring.lifecycle import RoundLifecycle, SaveResult, round_state

logger = logging.getLogger(__name__)

router = APIRouter()


def summarize_round(r: Optional[Round]) -> RoundResponse:
    """Project a Round into the response with its derived state."""
    if r is None:
        return RoundResponse(state=round_state(None))
    return RoundResponse(
        round=r,
        state=round_state(r),
        total_gross=r.total_gross,
        total_points=r.total_points,
        holes_played=r.holes_played(),
        completed=r.completed,
        missing_holes=r.missing_holes(),
    )


def summarize_save(result: SaveResult) -> SaveResponse:
    base = summarize_round(result.round)
    return SaveResponse(**base.model_dump(), achievements=result.achievements)


def to_http_error(e: Exception) -> HTTPException:
    """Map engine and persistence errors onto HTTP responses."""
    if isinstance(e, MissingScoresError):
        body = MissingScoresResponse(message=str(e), missing_holes=e.missing_holes)
        return HTTPException(400, body.model_dump())
    if isinstance(e, DiscrepancyWarning):
        body = DiscrepancyResponse(message=str(e), discrepancies=e.discrepancies)
        return HTTPException(409, body.model_dump())
    if isinstance(e, InvalidHoleError):
        return HTTPException(400, str(e))
    if isinstance(e, PermissionDeniedError):
        return HTTPException(403, str(e))
    if isinstance(e, (RoundNotFoundError, NotFoundError)):
        return HTTPException(404, str(e))
    if isinstance(e, RoundLockedError):
        return HTTPException(409, str(e))
    if isinstance(e, (StaleWriteError, DuplicateError)):
        return HTTPException(409, f"Round was changed elsewhere, reload and try again ({e})")
    logger.error(f"Round request failed: {e}", exc_info=e)
    return HTTPException(503, "Could not save your scores, please try again")


ENGINE_ERRORS = (
    MissingScoresError,
    DiscrepancyWarning,
    InvalidHoleError,
    PermissionDeniedError,
    RoundNotFoundError,
    RoundLockedError,
    ScoringError,
    DatabaseError,
)


@router.get("/group/{group_id}/player/{player_id}", response_model=RoundResponse)
async def get_round(
    group_id: str,
    player_id: str,
    lifecycle: RoundLifecycle = Depends(get_lifecycle),
):
    try:
        return summarize_round(await lifecycle.get_round(group_id, player_id))
    except ENGINE_ERRORS as e:
        raise to_http_error(e)


@router.put(
    "/group/{group_id}/player/{player_id}/holes/{hole_number}",
    response_model=SaveResponse,
)
async def save_hole(
    group_id: str,
    player_id: str,
    hole_number: int,
    req: HoleEntryRequest,
    session: SessionContext = Depends(get_session),
    lifecycle: RoundLifecycle = Depends(get_lifecycle),
):
    """Enter or change one hole. Send neither strokes nor picked_up to clear it."""
    try:
        result = await lifecycle.save_hole(
            session, group_id, player_id, hole_number,
            strokes=req.strokes, picked_up=req.picked_up,
        )
        return summarize_save(result)
    except ENGINE_ERRORS as e:
        raise to_http_error(e)


@router.put("/group/{group_id}/player/{player_id}/holes", response_model=SaveResponse)
async def save_holes(
    group_id: str,
    player_id: str,
    req: HoleEntriesRequest,
    session: SessionContext = Depends(get_session),
    lifecycle: RoundLifecycle = Depends(get_lifecycle),
):
    """Save every hole on the card at once (used when leaving score entry)."""
    try:
        result = await lifecycle.save_holes(session, group_id, player_id, req.hole_scores)
        return summarize_save(result)
    except ENGINE_ERRORS as e:
        raise to_http_error(e)


@router.put("/group/{group_id}/player/{player_id}/reference", response_model=RoundResponse)
async def record_reference_scores(
    group_id: str,
    player_id: str,
    req: ReferenceScoresRequest,
    session: SessionContext = Depends(get_session),
    lifecycle: RoundLifecycle = Depends(get_lifecycle),
):
    try:
        updated = await lifecycle.record_reference_scores(session, group_id, player_id, req.scores)
        return summarize_round(updated)
    except ENGINE_ERRORS as e:
        raise to_http_error(e)


@router.post("/group/{group_id}/player/{player_id}/submit", response_model=RoundResponse)
async def submit_round(
    group_id: str,
    player_id: str,
    req: SubmitRequest,
    session: SessionContext = Depends(get_session),
    lifecycle: RoundLifecycle = Depends(get_lifecycle),
):
    """Lock the card. 409 with the differing holes until discrepancies are confirmed."""
    try:
        submitted = await lifecycle.submit(
            session, group_id, player_id,
            confirm_discrepancies=req.confirm_discrepancies,
        )
        return summarize_round(submitted)
    except ENGINE_ERRORS as e:
        raise to_http_error(e)


@router.post("/{round_id}/unlock", response_model=RoundResponse)
async def unlock_round(
    round_id: str,
    session: SessionContext = Depends(get_session),
    lifecycle: RoundLifecycle = Depends(get_lifecycle),
):
    try:
        return summarize_round(await lifecycle.unlock(session, round_id))
    except ENGINE_ERRORS as e:
        raise to_http_error(e)


@router.put("/{round_id}/handicap", response_model=RoundResponse)
async def override_handicap(
    round_id: str,
    req: HandicapOverrideRequest,
    session: SessionContext = Depends(get_session),
    lifecycle: RoundLifecycle = Depends(get_lifecycle),
):
    try:
        updated = await lifecycle.override_handicap(session, round_id, req.handicap)
        return summarize_round(updated)
    except ENGINE_ERRORS as e:
        raise to_http_error(e)
