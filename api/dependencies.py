from fastapi import Header, Request
from typing import Optional

from database.db_manager import DatabaseManager
from models import SessionContext
from scoring.lifecycle import RoundLifecycle


def get_db(request: Request) -> DatabaseManager:
    """FastAPI dependency that provides the DatabaseManager."""
    return request.app.state.db_manager


def get_lifecycle(request: Request) -> RoundLifecycle:
    """FastAPI dependency that provides the shared RoundLifecycle."""
    return request.app.state.lifecycle


def get_session(
    x_player_id: Optional[str] = Header(None),
    x_tournament_id: Optional[str] = Header(None),
    x_admin: bool = Header(False),
) -> SessionContext:
    """Session context set by the upstream auth layer."""
    return SessionContext(
        player_id=x_player_id,
        tournament_id=x_tournament_id,
        is_admin=x_admin,
    )
