from database.connection import DatabasePool, db
from database.db_manager import DatabaseManager
from database.repositories import (
    CourseRepositoryDB,
    FeedRepositoryDB,
    GroupRepositoryDB,
    PlayerRepositoryDB,
    RoundRepositoryDB,
    TournamentRepositoryDB,
)
from database.exceptions import (
    DatabaseError,
    DuplicateError,
    IntegrityError,
    NotFoundError,
    StaleWriteError,
)

__all__ = [
    "DatabasePool",
    "db",
    "DatabaseManager",
    "CourseRepositoryDB",
    "FeedRepositoryDB",
    "GroupRepositoryDB",
    "PlayerRepositoryDB",
    "RoundRepositoryDB",
    "TournamentRepositoryDB",
    "DatabaseError",
    "DuplicateError",
    "IntegrityError",
    "NotFoundError",
    "StaleWriteError",
]
