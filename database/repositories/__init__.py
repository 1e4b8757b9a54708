from .course_repo import CourseRepositoryDB
from .feed_repo import FeedRepositoryDB
from .group_repo import GroupRepositoryDB
from .player_repo import PlayerRepositoryDB
from .round_repo import RoundRepositoryDB
from .tournament_repo import TournamentRepositoryDB

__all__ = [
    "CourseRepositoryDB",
    "FeedRepositoryDB",
    "GroupRepositoryDB",
    "PlayerRepositoryDB",
    "RoundRepositoryDB",
    "TournamentRepositoryDB",
]
