"""Read access to golf.groups."""

import asyncpg
from typing import List, Optional
from uuid import UUID

from models import Group
from database.converters import group_from_row


class GroupRepositoryDB:
    """Async reads for group pairings."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def get_group(self, group_id: str) -> Optional[Group]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM golf.groups WHERE id = $1", UUID(group_id)
            )
            return group_from_row(row) if row else None

    async def get_groups_for_tournament(self, tournament_id: str) -> List[Group]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT * FROM golf.groups
                   WHERE tournament_id = $1 ORDER BY day, tee_time NULLS LAST""",
                UUID(tournament_id),
            )
            return [group_from_row(r) for r in rows]
