import logging
import pytest
from datetime import datetime
from unittest.mock import AsyncMock

from database.exceptions import NotFoundError
from models import AchievementKind, Course, Group, Hole, HoleScore, Player, SessionContext
from scoring.exceptions import (
    DiscrepancyWarning,
    InvalidHoleError,
    MissingScoresError,
    PermissionDeniedError,
    RoundLockedError,
    RoundNotFoundError,
)
from scoring.lifecycle import RoundLifecycle, RoundState


# ================================================================
# In-memory store
# ================================================================

class InMemoryRounds:
    def __init__(self):
        self.rows = {}
        self.writes = 0

    async def get_round(self, round_id):
        r = self.rows.get(round_id)
        return r.model_copy(deep=True) if r else None

    async def get_round_for_player(self, group_id, player_id):
        for r in self.rows.values():
            if r.group_id == group_id and r.player_id == player_id:
                return r.model_copy(deep=True)
        return None

    async def save_round(self, round_):
        self.writes += 1
        stored = round_.model_copy(deep=True)
        if stored.id is None:
            stored.id = f"r{len(self.rows) + 1}"
            stored.created_at = datetime(2024, 5, 1)
        stored.version += 1
        stored.updated_at = datetime(2024, 5, 1, 12, self.writes)
        self.rows[stored.id] = stored
        return stored.model_copy(deep=True)


class InMemoryLookup:
    def __init__(self, items, method):
        self._items = {i.id: i for i in items}
        setattr(self, method, self._get)

    async def _get(self, item_id):
        return self._items.get(item_id)


class InMemoryStore:
    def __init__(self, course, groups, players):
        self.rounds = InMemoryRounds()
        self.courses = InMemoryLookup([course], "get_course")
        self.groups = InMemoryLookup(groups, "get_group")
        self.players = InMemoryLookup(players, "get_player")


# ================================================================
# Fixtures
# ================================================================

@pytest.fixture
def store():
    course = Course(
        id="c1",
        tournament_id="t1",
        holes=[Hole(number=i, par=4, stroke_index=i) for i in range(1, 19)],
    )
    groups = [
        Group(id="g1", tournament_id="t1", course_id="c1", day=1, player_ids=["p1", "p2"]),
        Group(id="g2", tournament_id="t1", course_id="c1", day=2, player_ids=["p3"]),
    ]
    players = [
        Player(id="p1", tournament_id="t1", name="Sam", handicap=18),
        Player(id="p2", tournament_id="t1", name="Alex", handicap=0),
        Player(id="p3", tournament_id="t1", name="Jo", handicap=10),
    ]
    return InMemoryStore(course, groups, players)


@pytest.fixture
def publisher():
    pub = AsyncMock()
    pub.post_achievement.return_value = "post-1"
    return pub


@pytest.fixture
def lifecycle(store, publisher):
    return RoundLifecycle(store, publisher=publisher)


@pytest.fixture
def player():
    return SessionContext(player_id="p1", tournament_id="t1")


@pytest.fixture
def admin():
    return SessionContext(player_id="admin", tournament_id="t1", is_admin=True)


async def _fill(lifecycle, session, holes, strokes=4, player_id="p1"):
    entries = [HoleScore(hole_number=n, strokes=strokes) for n in holes]
    return await lifecycle.save_holes(session, "g1", player_id, entries)


# ================================================================
# Score entry
# ================================================================

@pytest.mark.asyncio
async def test_first_save_creates_round_with_handicap_snapshot(lifecycle, player, store):
    result = await lifecycle.save_hole(player, "g1", "p1", 1, strokes=4)

    assert result.created
    assert result.state is RoundState.DRAFT
    r = result.round
    assert r.id == "r1"
    assert r.handicap_used == 18
    assert r.day == 1
    assert len(r.hole_scores) == 18
    assert r.get_hole_score(1).points == 3      # net birdie with one stroke
    assert r.holes_played() == 1
    assert store.rounds.writes == 1


@pytest.mark.asyncio
async def test_scorer_can_enter_for_group_mate(lifecycle, player):
    result = await lifecycle.save_hole(player, "g1", "p2", 1, strokes=5)
    assert result.round.player_id == "p2"
    assert result.round.handicap_used == 0


@pytest.mark.asyncio
async def test_unchanged_resave_writes_nothing(lifecycle, player, publisher, store):
    first = await lifecycle.save_hole(player, "g1", "p1", 3, strokes=3)
    await lifecycle.drain()
    second = await lifecycle.save_hole(player, "g1", "p1", 3, strokes=3)
    await lifecycle.drain()

    assert [a.kind for a in first.achievements] == [AchievementKind.BIRDIE]
    assert second.achievements == []
    assert second.round.total_points == first.round.total_points
    assert store.rounds.writes == 1
    assert publisher.post_achievement.await_count == 1


@pytest.mark.asyncio
async def test_repeated_hole_in_batch_fires_once(lifecycle, player, publisher, store):
    entries = [
        HoleScore(hole_number=5, strokes=6),
        HoleScore(hole_number=5, strokes=3),
        HoleScore(hole_number=5, strokes=3),
    ]
    result = await lifecycle.save_holes(player, "g1", "p1", entries)
    await lifecycle.drain()

    assert result.round.get_hole_score(5).strokes == 3
    assert [a.kind for a in result.achievements] == [AchievementKind.BIRDIE]
    assert publisher.post_achievement.await_count == 1
    assert store.rounds.writes == 1


@pytest.mark.asyncio
async def test_achievement_posted_with_player_name(lifecycle, player, publisher):
    await lifecycle.save_hole(player, "g1", "p1", 7, strokes=1)
    await lifecycle.drain()

    publisher.post_achievement.assert_awaited_once()
    achievement, name, tournament_id, player_id = publisher.post_achievement.await_args.args
    assert achievement.kind is AchievementKind.HOLE_IN_ONE
    assert name == "Sam"
    assert tournament_id == "t1"
    assert player_id == "p1"


@pytest.mark.asyncio
async def test_publisher_failure_does_not_affect_save(lifecycle, player, publisher, store, caplog):
    publisher.post_achievement.side_effect = RuntimeError("feed down")
    with caplog.at_level(logging.ERROR):
        result = await lifecycle.save_hole(player, "g1", "p1", 2, strokes=3)
        await lifecycle.drain()

    assert result.round.get_hole_score(2).strokes == 3
    assert store.rounds.writes == 1
    assert "Posting birdie" in caplog.text


@pytest.mark.asyncio
async def test_par_streak_fires_on_third_hole_only(lifecycle, player):
    await lifecycle.save_hole(player, "g1", "p1", 4, strokes=4)
    fifth = await lifecycle.save_hole(player, "g1", "p1", 5, strokes=4)
    sixth = await lifecycle.save_hole(player, "g1", "p1", 6, strokes=4)

    assert fifth.achievements == []
    assert [a.kind for a in sixth.achievements] == [AchievementKind.PAR_STREAK]
    assert sixth.achievements[0].streak_length == 3


@pytest.mark.asyncio
async def test_clear_hole(lifecycle, player):
    await lifecycle.save_hole(player, "g1", "p1", 1, strokes=5)
    cleared = await lifecycle.save_hole(player, "g1", "p1", 1)
    assert cleared.round.holes_played() == 0
    assert cleared.round.total_gross == 0


@pytest.mark.asyncio
async def test_picked_up_hole_counts_as_entered(lifecycle, player):
    result = await lifecycle.save_hole(player, "g1", "p1", 1, picked_up=True)
    hs = result.round.get_hole_score(1)
    assert hs.is_entered()
    assert hs.points == 0
    assert hs.adjusted_gross == 7                # par 4 + 1 stroke + 2
    assert result.achievements == []


@pytest.mark.asyncio
async def test_batch_save_single_write(lifecycle, player, store):
    result = await _fill(lifecycle, player, range(1, 19))
    assert store.rounds.writes == 1
    assert result.round.completed
    assert result.state is RoundState.COMPLETE
    assert result.round.total_gross == 72
    assert result.round.total_points == 54


def _nine_hole(store):
    store.courses = InMemoryLookup(
        [Course(id="c1", holes=[Hole(number=i, par=4) for i in range(1, 10)])], "get_course"
    )


@pytest.mark.asyncio
async def test_hole_not_on_course(lifecycle, player, store):
    _nine_hole(store)
    with pytest.raises(InvalidHoleError):
        await lifecycle.save_hole(player, "g1", "p1", 12, strokes=4)
    assert store.rounds.writes == 0



@pytest.mark.asyncio
async def test_missing_group(lifecycle, player):
    with pytest.raises(NotFoundError):
        await lifecycle.save_hole(player, "nope", "p1", 1, strokes=4)


# ================================================================
# Authorization
# ================================================================

@pytest.mark.asyncio
async def test_non_member_cannot_score(lifecycle):
    outsider = SessionContext(player_id="p3", tournament_id="t1")
    with pytest.raises(PermissionDeniedError):
        await lifecycle.save_hole(outsider, "g1", "p1", 1, strokes=4)


@pytest.mark.asyncio
async def test_other_tournament_cannot_score(lifecycle):
    session = SessionContext(player_id="p1", tournament_id="t2")
    with pytest.raises(PermissionDeniedError):
        await lifecycle.save_hole(session, "g1", "p1", 1, strokes=4)


@pytest.mark.asyncio
async def test_target_player_must_be_in_group(lifecycle, admin):
    with pytest.raises(PermissionDeniedError):
        await lifecycle.save_hole(admin, "g1", "p3", 1, strokes=4)


@pytest.mark.asyncio
async def test_admin_scores_any_group(lifecycle, admin):
    result = await lifecycle.save_hole(admin, "g2", "p3", 1, strokes=4)
    assert result.round.handicap_used == 10


# ================================================================
# Submission
# ================================================================

@pytest.mark.asyncio
async def test_submit_rejects_incomplete_card(lifecycle, player, store):
    await _fill(lifecycle, player, range(1, 18))

    with pytest.raises(MissingScoresError) as exc:
        await lifecycle.submit(player, "g1", "p1")
    assert exc.value.missing_holes == [18]
    assert not (await lifecycle.get_round("g1", "p1")).submitted


@pytest.mark.asyncio
async def test_submit_without_round_lists_every_hole(lifecycle, player):
    with pytest.raises(MissingScoresError) as exc:
        await lifecycle.submit(player, "g1", "p1")
    assert exc.value.missing_holes == list(range(1, 19))


@pytest.mark.asyncio
async def test_submit_locks_round(lifecycle, player):
    await _fill(lifecycle, player, range(1, 19))
    submitted = await lifecycle.submit(player, "g1", "p1")

    assert submitted.submitted
    assert not submitted.discrepancy_flagged
    assert await lifecycle.get_state("g1", "p1") is RoundState.SUBMITTED


@pytest.mark.asyncio
async def test_discrepancy_needs_confirmation(lifecycle, player):
    await _fill(lifecycle, player, range(1, 19))
    await lifecycle.save_hole(player, "g1", "p1", 5, strokes=5)
    await lifecycle.record_reference_scores(player, "g1", "p1", {5: 4})

    with pytest.raises(DiscrepancyWarning) as exc:
        await lifecycle.submit(player, "g1", "p1")
    assert [d.model_dump() for d in exc.value.discrepancies] == [
        {"hole": 5, "official": 5, "reference": 4}
    ]
    assert not (await lifecycle.get_round("g1", "p1")).submitted

    confirmed = await lifecycle.submit(player, "g1", "p1", confirm_discrepancies=True)
    assert confirmed.submitted
    assert confirmed.discrepancy_flagged
    assert confirmed.discrepancy_notes == "Hole 5: official 5, reference 4"
    assert confirmed.get_hole_score(5).strokes == 5


@pytest.mark.asyncio
async def test_reference_scores_merge_and_zero_removes(lifecycle, player):
    await lifecycle.record_reference_scores(player, "g1", "p1", {1: 4, 2: 5})
    updated = await lifecycle.record_reference_scores(player, "g1", "p1", {2: 0, 3: 3})
    assert updated.reference_scores == {1: 4, 3: 3}


@pytest.mark.asyncio
async def test_reference_card_alone_does_not_start_round(lifecycle, player):
    await lifecycle.record_reference_scores(player, "g1", "p1", {1: 4})
    assert await lifecycle.get_state("g1", "p1") is RoundState.NOT_STARTED

    result = await lifecycle.save_hole(player, "g1", "p1", 1, strokes=4)
    assert result.state is RoundState.DRAFT
    assert result.round.reference_scores == {1: 4}


@pytest.mark.asyncio
async def test_reference_hole_not_on_course(lifecycle, player, store):
    _nine_hole(store)
    with pytest.raises(InvalidHoleError):
        await lifecycle.record_reference_scores(player, "g1", "p1", {12: 4})


@pytest.mark.asyncio
async def test_submitted_round_locked_for_players(lifecycle, player, store):
    await _fill(lifecycle, player, range(1, 19))
    await lifecycle.submit(player, "g1", "p1")
    writes = store.rounds.writes

    with pytest.raises(RoundLockedError):
        await lifecycle.save_hole(player, "g1", "p1", 1, strokes=6)
    with pytest.raises(RoundLockedError):
        await lifecycle.record_reference_scores(player, "g1", "p1", {1: 4})
    assert store.rounds.writes == writes


@pytest.mark.asyncio
async def test_admin_edits_submitted_round(lifecycle, player, admin):
    await _fill(lifecycle, player, range(1, 19))
    await lifecycle.submit(player, "g1", "p1")

    result = await lifecycle.save_hole(admin, "g1", "p1", 1, strokes=6)
    assert result.round.submitted
    assert result.round.get_hole_score(1).strokes == 6


# ================================================================
# Admin
# ================================================================

@pytest.mark.asyncio
async def test_unlock_requires_admin(lifecycle, player, admin):
    await _fill(lifecycle, player, range(1, 19))
    submitted = await lifecycle.submit(player, "g1", "p1")

    with pytest.raises(PermissionDeniedError):
        await lifecycle.unlock(player, submitted.id)

    unlocked = await lifecycle.unlock(admin, submitted.id)
    assert not unlocked.submitted
    assert unlocked.completed
    assert await lifecycle.get_state("g1", "p1") is RoundState.COMPLETE

    # Editable by the player again
    await lifecycle.save_hole(player, "g1", "p1", 1, strokes=5)


@pytest.mark.asyncio
async def test_unlock_unknown_round(lifecycle, admin):
    with pytest.raises(RoundNotFoundError):
        await lifecycle.unlock(admin, "missing")


@pytest.mark.asyncio
async def test_override_handicap_rescores(lifecycle, player, admin):
    result = await _fill(lifecycle, player, range(1, 19), strokes=5)
    assert result.round.total_points == 36          # net par everywhere

    with pytest.raises(PermissionDeniedError):
        await lifecycle.override_handicap(player, result.round.id, 0)

    updated = await lifecycle.override_handicap(admin, result.round.id, 0)
    assert updated.handicap_used == 0
    assert updated.total_points == 18               # bogey everywhere


@pytest.mark.asyncio
async def test_state_before_first_save(lifecycle):
    assert await lifecycle.get_state("g1", "p1") is RoundState.NOT_STARTED
