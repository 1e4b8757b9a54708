import asyncpg

from database.repositories import (
    CourseRepositoryDB,
    FeedRepositoryDB,
    GroupRepositoryDB,
    PlayerRepositoryDB,
    RoundRepositoryDB,
    TournamentRepositoryDB,
)


class DatabaseManager:
    """
    Persistence collaborator handed to the scoring engine.

    Owns one repository per aggregate, all sharing the same pool:

        store = DatabaseManager(db.pool)
        lifecycle = RoundLifecycle(store, publisher=store.feed)
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool
        self.tournaments = TournamentRepositoryDB(pool)
        self.players = PlayerRepositoryDB(pool)
        self.courses = CourseRepositoryDB(pool)
        self.groups = GroupRepositoryDB(pool)
        self.rounds = RoundRepositoryDB(pool)
        self.feed = FeedRepositoryDB(pool)
