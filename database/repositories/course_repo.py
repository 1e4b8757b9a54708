"""Read access to golf.courses and golf.holes."""

import asyncpg
from typing import List, Optional
from uuid import UUID

from models import Course
from database.converters import course_from_rows


class CourseRepositoryDB:
    """Async reads for courses and their holes."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    async def _assemble(self, conn, course_row) -> Course:
        """Build a full Course model from a course row + holes."""
        hole_rows = await conn.fetch(
            "SELECT * FROM golf.holes WHERE course_id = $1 ORDER BY hole_number",
            course_row["id"],
        )
        return course_from_rows(course_row, hole_rows)

    async def get_course(self, course_id: str) -> Optional[Course]:
        """Get a fully-populated Course by ID."""
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM golf.courses WHERE id = $1",
                UUID(course_id),
            )
            if not row:
                return None
            return await self._assemble(conn, row)

    async def get_courses_for_tournament(self, tournament_id: str) -> List[Course]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM golf.courses WHERE tournament_id = $1 ORDER BY name",
                UUID(tournament_id),
            )
            if not rows:
                return []
            hole_rows = await conn.fetch(
                """SELECT * FROM golf.holes
                   WHERE course_id = ANY($1::uuid[]) ORDER BY hole_number""",
                [r["id"] for r in rows],
            )
            by_course = {}
            for hr in hole_rows:
                by_course.setdefault(hr["course_id"], []).append(hr)
            return [course_from_rows(r, by_course.get(r["id"], [])) for r in rows]
