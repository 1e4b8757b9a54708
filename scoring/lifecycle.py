"""
Round lifecycle: draft entry, completion, submission (lock) and admin unlock.

State is derived from the stored card rather than kept as a separate
field:

    NOT_STARTED -> DRAFT -> COMPLETE -> SUBMITTED

A card holding only reference scores is still NOT_STARTED; the first
hole entry moves it to DRAFT.
    SUBMITTED -> DRAFT only through `unlock` (admin)

Every write goes through the round repository's version check, so a
stale editor gets StaleWriteError instead of overwriting a submission.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Set

from models import Achievement, Course, Group, HoleScore, Round, SessionContext
from database.exceptions import NotFoundError
from scoring.achievements import detect_for_hole
from scoring.discrepancy import format_discrepancy_notes, round_discrepancies
from scoring.exceptions import (
    DiscrepancyWarning,
    InvalidHoleError,
    MissingScoresError,
    PermissionDeniedError,
    RoundLockedError,
    RoundNotFoundError,
    ScoringError,
)
from scoring.stableford import rescore_round

logger = logging.getLogger(__name__)


class RoundState(str, Enum):
    NOT_STARTED = "not_started"
    DRAFT = "draft"
    COMPLETE = "complete"
    SUBMITTED = "submitted"


def round_state(round_: Optional[Round]) -> RoundState:
    if round_ is None:
        return RoundState.NOT_STARTED
    if round_.submitted:
        return RoundState.SUBMITTED
    # A row holding only a reference card has not been played yet
    if round_.holes_played() == 0:
        return RoundState.NOT_STARTED
    if round_.completed:
        return RoundState.COMPLETE
    return RoundState.DRAFT


@dataclass
class SaveResult:
    round: Round
    achievements: List[Achievement] = field(default_factory=list)
    created: bool = False

    @property
    def state(self) -> RoundState:
        return round_state(self.round)


class RoundLifecycle:
    """Score entry and submission for one player's card in one group.

    `store` is the persistence collaborator: anything exposing `rounds`,
    `groups`, `courses` and `players` repositories (see DatabaseManager).
    `publisher` receives achievements fire-and-forget; failures are
    logged and never affect the round save.
    """

    def __init__(self, store, publisher=None):
        self._store = store
        self._publisher = publisher
        self._pending: Set[asyncio.Task] = set()

    # ================================================================
    # Private helpers
    # ================================================================

    async def _load_group(self, group_id: str) -> Group:
        group = await self._store.groups.get_group(group_id)
        if group is None:
            raise NotFoundError(f"Group {group_id} not found")
        return group

    async def _load_course(self, group: Group) -> Course:
        course = await self._store.courses.get_course(group.course_id) if group.course_id else None
        if course is None:
            raise NotFoundError(f"Course for group {group.id} not found")
        return course

    def _authorize(self, session: SessionContext, group: Group, player_id: str) -> None:
        if not group.has_player(player_id):
            raise PermissionDeniedError(f"Player {player_id} is not in group {group.id}")
        if session.is_admin:
            return
        if session.tournament_id and group.tournament_id and session.tournament_id != group.tournament_id:
            raise PermissionDeniedError("Group belongs to another tournament")
        if not group.has_player(session.player_id):
            raise PermissionDeniedError(f"Only players in group {group.id} can score it")

    @staticmethod
    def _require_admin(session: SessionContext, action: str) -> None:
        if not session.is_admin:
            raise PermissionDeniedError(f"Only an admin can {action}")

    @staticmethod
    def _check_unlocked(session: SessionContext, round_: Optional[Round]) -> None:
        if round_ is not None and round_.submitted and not session.is_admin:
            raise RoundLockedError(f"Round {round_.id} is submitted and locked")

    async def _new_round(self, group: Group, player_id: str) -> Round:
        player = await self._store.players.get_player(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found")
        # Handicap is snapshotted here and never re-read from the player
        return Round(
            tournament_id=group.tournament_id,
            player_id=player_id,
            group_id=group.id,
            day=group.day,
            handicap_used=player.handicap,
        )

    async def _load_round(self, round_id: str) -> Round:
        round_ = await self._store.rounds.get_round(round_id)
        if round_ is None:
            raise RoundNotFoundError(f"Round {round_id} not found", round_id=round_id)
        return round_

    # ================================================================
    # Achievement side channel
    # ================================================================

    def _publish(self, achievements: List[Achievement], round_: Round) -> None:
        if self._publisher is None:
            return
        for achievement in achievements:
            task = asyncio.create_task(self._post(achievement, round_))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _post(self, achievement: Achievement, round_: Round) -> None:
        try:
            player = await self._store.players.get_player(round_.player_id)
            name = player.name if player and player.name else "A player"
            await self._publisher.post_achievement(
                achievement, name, round_.tournament_id, round_.player_id
            )
        except Exception:
            logger.error(
                f"Posting {achievement.kind.value} for round {round_.id} failed",
                exc_info=True,
            )

    async def drain(self) -> None:
        """Wait for in-flight achievement posts."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ================================================================
    # Read
    # ================================================================

    async def get_round(self, group_id: str, player_id: str) -> Optional[Round]:
        return await self._store.rounds.get_round_for_player(group_id, player_id)

    async def get_state(self, group_id: str, player_id: str) -> RoundState:
        return round_state(await self.get_round(group_id, player_id))

    # ================================================================
    # Score entry
    # ================================================================

    async def save_hole(
        self,
        session: SessionContext,
        group_id: str,
        player_id: str,
        hole_number: int,
        strokes: Optional[int] = None,
        picked_up: bool = False,
    ) -> SaveResult:
        """Enter, change, pick up or clear (strokes=None) one hole."""
        entry = HoleScore(hole_number=hole_number, strokes=strokes, picked_up=picked_up)
        return await self.save_holes(session, group_id, player_id, [entry])

    async def save_holes(
        self,
        session: SessionContext,
        group_id: str,
        player_id: str,
        entries: Iterable[HoleScore],
    ) -> SaveResult:
        """Persist several hole entries in one write (e.g. before leaving the card).

        A hole named twice keeps its last entry.
        """
        entries = list({e.hole_number: e for e in entries}.values())
        group = await self._load_group(group_id)
        self._authorize(session, group, player_id)
        course = await self._load_course(group)

        for entry in entries:
            if course.get_hole(entry.hole_number) is None:
                raise InvalidHoleError(
                    f"Hole {entry.hole_number} is not on course {course.name or course.id}"
                )

        existing = await self._store.rounds.get_round_for_player(group_id, player_id)
        self._check_unlocked(session, existing)

        base = existing or await self._new_round(group, player_id)
        changed = [e for e in entries if not e.same_entry(base.get_hole_score(e.hole_number))]
        if not changed:
            # Re-saving an unchanged value writes nothing and fires nothing
            return SaveResult(round=base)

        by_number = {hs.hole_number: hs for hs in base.hole_scores}
        for entry in changed:
            by_number[entry.hole_number] = entry
        merged = base.model_copy(update={"hole_scores": list(by_number.values())})
        card = rescore_round(merged, course)

        was_complete = existing is not None and existing.completed
        saved = await self._store.rounds.save_round(card)

        if round_state(existing) is RoundState.NOT_STARTED:
            logger.info(f"Started round {saved.id} for player {player_id} in group {group_id}")
        if saved.completed and not was_complete:
            logger.info(f"Round {saved.id} complete: {saved.total_gross} gross, {saved.total_points} pts")

        achievements: List[Achievement] = []
        for entry in changed:
            if entry.strokes is not None:
                achievements.extend(detect_for_hole(saved, course, entry.hole_number, group))
        self._publish(achievements, saved)

        return SaveResult(round=saved, achievements=achievements, created=existing is None)

    async def record_reference_scores(
        self,
        session: SessionContext,
        group_id: str,
        player_id: str,
        scores: Mapping[int, int],
    ) -> Round:
        """Merge an independently kept card into the round. Zero removes a hole."""
        group = await self._load_group(group_id)
        self._authorize(session, group, player_id)
        course = await self._load_course(group)

        for hole_number in scores:
            if course.get_hole(hole_number) is None:
                raise InvalidHoleError(f"Hole {hole_number} is not on course {course.name or course.id}")

        existing = await self._store.rounds.get_round_for_player(group_id, player_id)
        self._check_unlocked(session, existing)
        base = existing or await self._new_round(group, player_id)

        reference = dict(base.reference_scores or {})
        for hole_number, strokes in scores.items():
            if strokes and strokes > 0:
                reference[hole_number] = strokes
            else:
                reference.pop(hole_number, None)

        card = rescore_round(base, course)
        error = card.update_field("reference_scores", reference or None)
        if error:
            raise InvalidHoleError(f"Reference card rejected: {error}")
        return await self._store.rounds.save_round(card)

    # ================================================================
    # Submission
    # ================================================================

    async def submit(
        self,
        session: SessionContext,
        group_id: str,
        player_id: str,
        confirm_discrepancies: bool = False,
    ) -> Round:
        """
        Lock the card.

        Raises MissingScoresError while any hole is unset, and
        DiscrepancyWarning when a reference card disagrees and the
        caller has not confirmed. Confirmed discrepancies are recorded
        on the round for admin review; the official scores stand.
        """
        group = await self._load_group(group_id)
        self._authorize(session, group, player_id)
        course = await self._load_course(group)

        existing = await self._store.rounds.get_round_for_player(group_id, player_id)
        if existing is None:
            raise MissingScoresError(course.hole_numbers())
        self._check_unlocked(session, existing)
        if existing.submitted:
            return existing

        card = rescore_round(existing, course)
        missing = card.missing_holes()
        if missing:
            raise MissingScoresError(missing)

        discrepancies = round_discrepancies(card)
        if discrepancies and not confirm_discrepancies:
            raise DiscrepancyWarning(discrepancies)

        errors = card.update_fields({
            "discrepancies": discrepancies,
            "discrepancy_flagged": bool(discrepancies),
            "discrepancy_notes": format_discrepancy_notes(discrepancies),
            "submitted": True,
        })
        if errors:
            raise ScoringError(f"Round {card.id} could not be locked: {errors}")

        saved = await self._store.rounds.save_round(card)
        if discrepancies:
            logger.warning(
                f"Round {saved.id} submitted with {len(discrepancies)} discrepancies: "
                f"{saved.discrepancy_notes}"
            )
        logger.info(f"Round {saved.id} submitted: {saved.total_gross} gross, {saved.total_points} pts")
        return saved

    # ================================================================
    # Admin
    # ================================================================

    async def unlock(self, session: SessionContext, round_id: str) -> Round:
        """Reopen a submitted card for editing."""
        self._require_admin(session, "unlock a round")
        round_ = await self._load_round(round_id)
        if not round_.submitted:
            return round_
        round_.submitted = False
        saved = await self._store.rounds.save_round(round_)
        logger.info(f"Round {round_id} unlocked by admin {session.player_id}")
        return saved

    async def override_handicap(self, session: SessionContext, round_id: str, handicap: int) -> Round:
        """Replace the round's handicap snapshot and re-score every hole."""
        self._require_admin(session, "override a round handicap")
        round_ = await self._load_round(round_id)
        group = await self._load_group(round_.group_id)
        course = await self._load_course(group)

        card = rescore_round(round_, course, handicap=handicap)
        saved = await self._store.rounds.save_round(card)
        logger.info(f"Round {round_id} handicap set to {handicap} ({saved.total_points} pts)")
        return saved
