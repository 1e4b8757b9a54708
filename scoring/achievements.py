"""Per-save detection of aces, eagles, birdies and par/birdie streaks."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from models import Achievement, AchievementKind, Course, Group, Round

STREAK_WINDOW = 5
MIN_PAR_STREAK = 3
MIN_BIRDIE_STREAK = 2

ACHIEVEMENTS: Dict[AchievementKind, Dict[str, str]] = {
    AchievementKind.HOLE_IN_ONE: {
        "title": "Hole in One!",
        "description": "Scored a hole in one",
        "icon": "🎯",
    },
    AchievementKind.EAGLE: {
        "title": "Eagle Eye",
        "description": "Scored an eagle (2 under par)",
        "icon": "🦅",
    },
    AchievementKind.BIRDIE: {
        "title": "Birdie Hunter",
        "description": "Scored a birdie (1 under par)",
        "icon": "🐦",
    },
    AchievementKind.PAR_STREAK: {
        "title": "Mr Consistent",
        "description": "{n} pars in a row",
        "icon": "⭐",
    },
    AchievementKind.BIRDIE_STREAK: {
        "title": "On Fire",
        "description": "{n} birdies in a row",
        "icon": "🔥",
    },
}


@dataclass(frozen=True)
class HolePlay:
    """A hole as seen by the detector. strokes is None when not played."""
    hole_number: int
    strokes: Optional[int]
    par: int

    @property
    def to_par(self) -> Optional[int]:
        if self.strokes is None:
            return None
        return self.strokes - self.par


def _achievement(kind: AchievementKind, hole: HolePlay, streak: Optional[int] = None) -> Achievement:
    info = ACHIEVEMENTS[kind]
    return Achievement(
        kind=kind,
        hole_number=hole.hole_number,
        strokes=hole.strokes,
        par=hole.par,
        streak_length=streak,
        title=info["title"],
        description=info["description"].format(n=streak),
        icon=info["icon"],
    )


def _run_length(latest: HolePlay, prior_holes: Sequence[HolePlay], to_par: int) -> int:
    """Contiguous run of `to_par` scores ending at latest, within the streak window."""
    window = list(prior_holes)[-(STREAK_WINDOW - 1):]
    run = 1
    for hole in reversed(window):
        if hole.to_par != to_par:
            break
        run += 1
    return run


def detect(latest: HolePlay, prior_holes: Sequence[HolePlay]) -> List[Achievement]:
    """
    Achievements earned by the hole just saved.

    prior_holes are the holes before `latest` in play order; a hole
    that was not played breaks any streak. Pure and repeatable: the
    same input always yields the same list.
    """
    if latest.strokes is None:
        return []

    found: List[Achievement] = []
    diff = latest.to_par

    if latest.strokes == 1:
        found.append(_achievement(AchievementKind.HOLE_IN_ONE, latest))
    elif diff <= -2:
        found.append(_achievement(AchievementKind.EAGLE, latest))
    elif diff == -1:
        found.append(_achievement(AchievementKind.BIRDIE, latest))

    if diff == 0:
        run = _run_length(latest, prior_holes, 0)
        if run >= MIN_PAR_STREAK:
            found.append(_achievement(AchievementKind.PAR_STREAK, latest, run))
    elif diff == -1:
        run = _run_length(latest, prior_holes, -1)
        if run >= MIN_BIRDIE_STREAK:
            found.append(_achievement(AchievementKind.BIRDIE_STREAK, latest, run))

    return found


def play_sequence(round_: Round, course: Course, group: Optional[Group] = None) -> List[HolePlay]:
    """The card as HolePlay entries in the group's play order."""
    numbers = course.hole_numbers()
    if group is not None:
        numbers = group.play_order(numbers)

    plays = []
    for number in numbers:
        hole = course.get_hole(number)
        hs = round_.get_hole_score(number)
        plays.append(HolePlay(number, hs.strokes if hs else None, hole.par))
    return plays


def detect_for_hole(
    round_: Round, course: Course, hole_number: int, group: Optional[Group] = None
) -> List[Achievement]:
    """Run the detector for one hole of a scored card."""
    plays = play_sequence(round_, course, group)
    for i, play in enumerate(plays):
        if play.hole_number == hole_number:
            return detect(play, plays[:i])
    return []


def detect_round(round_: Round, course: Course, group: Optional[Group] = None) -> List[Achievement]:
    """Replay a whole card hole by hole, e.g. to backfill the feed."""
    plays = play_sequence(round_, course, group)
    found = []
    for i, play in enumerate(plays):
        found.extend(detect(play, plays[:i]))
    return found
