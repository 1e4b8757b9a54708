"""CRUD operations for golf.rounds and golf.hole_scores."""

import asyncpg
from typing import List, Optional
from uuid import UUID

from models import Round
from database.converters import hole_scores_to_rows, round_from_rows, round_to_row
from database.exceptions import (
    DatabaseError,
    DuplicateError,
    IntegrityError,
    NotFoundError,
    StaleWriteError,
)

UPSERT_HOLE_SCORES = """
    INSERT INTO golf.hole_scores
        (round_id, hole_number, strokes, picked_up, points, net_score, adjusted_gross)
    VALUES ($1, $2, $3, $4, $5, $6, $7)
    ON CONFLICT (round_id, hole_number)
    DO UPDATE SET strokes = EXCLUDED.strokes,
                  picked_up = EXCLUDED.picked_up,
                  points = EXCLUDED.points,
                  net_score = EXCLUDED.net_score,
                  adjusted_gross = EXCLUDED.adjusted_gross
"""


class RoundRepositoryDB:
    """Async CRUD for rounds and their hole scores.

    Reads are not transactional across calls; callers recompute totals
    from the hole scores instead of trusting the stored aggregates.
    """

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    # ================================================================
    # Private helpers
    # ================================================================

    async def _assemble_round(self, conn, round_row) -> Round:
        """Build a full Round model from a round row."""
        score_rows = await conn.fetch(
            """SELECT * FROM golf.hole_scores
               WHERE round_id = $1 ORDER BY hole_number""",
            round_row["id"],
        )
        return round_from_rows(round_row, score_rows)

    async def _assemble_many(self, conn, round_rows) -> List[Round]:
        """Build Rounds for many rows with one hole_scores query (avoid N+1)."""
        if not round_rows:
            return []
        ids = [r["id"] for r in round_rows]
        score_rows = await conn.fetch(
            """SELECT * FROM golf.hole_scores
               WHERE round_id = ANY($1::uuid[]) ORDER BY hole_number""",
            ids,
        )
        by_round = {}
        for sr in score_rows:
            by_round.setdefault(sr["round_id"], []).append(sr)
        return [round_from_rows(r, by_round.get(r["id"], [])) for r in round_rows]

    # ================================================================
    # Read
    # ================================================================

    async def get_round(self, round_id: str) -> Optional[Round]:
        """Get a round with its hole scores."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM golf.rounds WHERE id = $1", UUID(round_id)
            )
            if not row:
                return None
            return await self._assemble_round(conn, row)

    async def get_round_for_player(self, group_id: str, player_id: str) -> Optional[Round]:
        """The (single) round for a player in a group."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                """SELECT * FROM golf.rounds
                   WHERE group_id = $1 AND player_id = $2""",
                UUID(group_id), UUID(player_id),
            )
            if not row:
                return None
            return await self._assemble_round(conn, row)

    async def get_rounds_for_group(self, group_id: str) -> List[Round]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM golf.rounds WHERE group_id = $1 ORDER BY created_at",
                UUID(group_id),
            )
            return await self._assemble_many(conn, rows)

    async def get_rounds_for_tournament(self, tournament_id: str) -> List[Round]:
        """Every round in every group of a tournament, ordered by day."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT r.* FROM golf.rounds r
                   JOIN golf.groups g ON g.id = r.group_id
                   WHERE g.tournament_id = $1
                   ORDER BY g.day, r.created_at""",
                UUID(tournament_id),
            )
            return await self._assemble_many(conn, rows)

    async def get_rounds_for_day(self, tournament_id: str, day: int) -> List[Round]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT r.* FROM golf.rounds r
                   JOIN golf.groups g ON g.id = r.group_id
                   WHERE g.tournament_id = $1 AND g.day = $2
                   ORDER BY r.created_at""",
                UUID(tournament_id), day,
            )
            return await self._assemble_many(conn, rows)

    # ================================================================
    # Create / Update
    # ================================================================

    async def save_round(self, round_: Round) -> Round:
        """Create the round if it has no id yet, otherwise update it."""
        if round_.id is None:
            return await self.create_round(round_)
        return await self.update_round(round_)

    async def create_round(self, round_: Round) -> Round:
        """Insert a round with all hole scores in a transaction."""
        data = round_to_row(round_)
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    round_row = await conn.fetchrow(
                        """INSERT INTO golf.rounds
                           (tournament_id, player_id, group_id, day, handicap_used,
                            submitted, completed, total_gross, total_points, holes_played,
                            reference_scores, discrepancies, discrepancy_flagged,
                            discrepancy_notes)
                           VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10,
                                   $11::jsonb, $12::jsonb, $13, $14)
                           RETURNING *""",
                        data["tournament_id"], data["player_id"], data["group_id"],
                        data["day"], data["handicap_used"], data["submitted"],
                        data["completed"], data["total_gross"], data["total_points"],
                        data["holes_played"], data["reference_scores"],
                        data["discrepancies"], data["discrepancy_flagged"],
                        data["discrepancy_notes"],
                    )
                    new_round_id = round_row["id"]
                    if round_.hole_scores:
                        await conn.executemany(
                            UPSERT_HOLE_SCORES,
                            hole_scores_to_rows(round_.hole_scores, new_round_id),
                        )
        except asyncpg.UniqueViolationError as e:
            raise DuplicateError(
                f"Player {round_.player_id} already has a round in group {round_.group_id}"
            ) from e
        except asyncpg.ForeignKeyViolationError as e:
            raise IntegrityError(str(e)) from e
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise DatabaseError(f"Could not save round: {e}") from e

        # Read back on a fresh connection once the transaction has committed
        return await self.get_round(str(new_round_id))

    async def update_round(self, round_: Round) -> Round:
        """Write the whole card if nobody else has written since it was read.

        Raises StaleWriteError when the stored version moved on.
        """
        data = round_to_row(round_)
        round_id = UUID(round_.id)
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    row = await conn.fetchrow(
                        """UPDATE golf.rounds
                           SET handicap_used = $3, submitted = $4, completed = $5,
                               total_gross = $6, total_points = $7, holes_played = $8,
                               reference_scores = $9::jsonb, discrepancies = $10::jsonb,
                               discrepancy_flagged = $11, discrepancy_notes = $12,
                               version = version + 1, updated_at = now()
                           WHERE id = $1 AND version = $2
                           RETURNING id""",
                        round_id, round_.version,
                        data["handicap_used"], data["submitted"], data["completed"],
                        data["total_gross"], data["total_points"], data["holes_played"],
                        data["reference_scores"], data["discrepancies"],
                        data["discrepancy_flagged"], data["discrepancy_notes"],
                    )
                    if not row:
                        exists = await conn.fetchval(
                            "SELECT version FROM golf.rounds WHERE id = $1", round_id
                        )
                        if exists is None:
                            raise NotFoundError(f"Round {round_.id} not found")
                        raise StaleWriteError(
                            f"Round {round_.id} changed (version {exists}, expected {round_.version})"
                        )
                    if round_.hole_scores:
                        await conn.executemany(
                            UPSERT_HOLE_SCORES,
                            hole_scores_to_rows(round_.hole_scores, round_id),
                        )
        except asyncpg.ForeignKeyViolationError as e:
            raise IntegrityError(str(e)) from e
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise DatabaseError(f"Could not save round: {e}") from e

        return await self.get_round(round_.id)

    # ================================================================
    # Delete
    # ================================================================

    async def delete_round(self, round_id: str) -> bool:
        """Delete round and its hole_scores (CASCADE). Returns True if deleted."""
        async with self._pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM golf.rounds WHERE id = $1", UUID(round_id)
            )
            return result == "DELETE 1"
