"""Read access to golf.players."""

import asyncpg
from typing import List, Optional
from uuid import UUID

from models import Player
from database.converters import player_from_row


class PlayerRepositoryDB:
    """Async reads for tournament players."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def get_player(self, player_id: str) -> Optional[Player]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM golf.players WHERE id = $1", UUID(player_id)
            )
            return player_from_row(row) if row else None

    async def get_players_for_tournament(
        self, tournament_id: str, *, include_spectators: bool = False
    ) -> List[Player]:
        """Players in registration order."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM golf.players WHERE tournament_id = $1",
                UUID(tournament_id),
            )
            players = [player_from_row(r) for r in rows]
            if include_spectators:
                return players
            return [p for p in players if not p.is_spectator]
