"""Read access to golf.tournaments."""

import asyncpg
from typing import Optional
from uuid import UUID

from models import Tournament
from database.converters import tournament_from_row


class TournamentRepositoryDB:
    """Async reads for tournament configuration."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def get_tournament(self, tournament_id: str) -> Optional[Tournament]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM golf.tournaments WHERE id = $1", UUID(tournament_id)
            )
            return tournament_from_row(row) if row else None
