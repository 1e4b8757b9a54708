"""Social feed posts and notifications for in-round achievements."""

import asyncpg
from typing import Optional
from uuid import UUID

from models import Achievement

SYSTEM_POSTER = "Tournament Bot"


class FeedRepositoryDB:
    """Writes achievement posts to social.posts and fans out notifications."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def post_achievement(
        self,
        achievement: Achievement,
        player_name: str,
        tournament_id: Optional[str],
        player_id: Optional[str] = None,
    ) -> Optional[str]:
        """Create a feed post and notify the other players. Returns the post ID.

        A post with the same caption for the same player is not repeated.
        """
        if not tournament_id:
            return None
        caption = achievement.caption(player_name)
        tid = UUID(tournament_id)
        pid = UUID(player_id) if player_id else None

        async with self._pool.acquire() as conn:
            async with conn.transaction():
                existing = await conn.fetchval(
                    """SELECT id FROM social.posts
                       WHERE tournament_id = $1 AND player_id IS NOT DISTINCT FROM $2
                         AND caption = $3""",
                    tid, pid, caption,
                )
                if existing:
                    return str(existing)

                post_id = await conn.fetchval(
                    """INSERT INTO social.posts (tournament_id, player_id, user_name, caption)
                       VALUES ($1, $2, $3, $4) RETURNING id""",
                    tid, pid, SYSTEM_POSTER, caption,
                )
                await conn.execute(
                    """INSERT INTO social.notifications
                       (tournament_id, player_id, type, title, message)
                       SELECT $1, p.id, $3, $4, $5
                       FROM golf.players p
                       WHERE p.tournament_id = $1 AND p.id IS DISTINCT FROM $2""",
                    tid, pid, achievement.kind.value, achievement.title, caption,
                )
                return str(post_id)
