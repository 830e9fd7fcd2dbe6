"""Point, streak, level and achievement rules.

These functions mutate a :class:`LadderProgress` in memory only; callers
persist the result with :func:`habitladder.progress.store.save_progress`.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from habitladder.db.models import LadderProgress, utcnow

POINTS_PER_LEVEL = 100
GOAL_LEVEL_THRESHOLDS = [0, 50, 150, 300, 500, 750, 1000]
DEFAULT_GOAL_POINTS = 10
INTENSITY_POINTS = {"easy": 5, "medium": 10, "hard": 20}

# (min streak, multiplier), checked top-down
GOAL_STREAK_BONUSES = [(7, 1.5), (3, 1.2)]

ACHIEVEMENTS: dict[str, dict[str, str]] = {
    "week_warrior": {
        "title": "Week Warrior",
        "description": "Complete a habit for 7 days straight",
        "icon": "\U0001f525",
        "type": "streak",
    },
    "month_master": {
        "title": "Month Master",
        "description": "Complete a habit for 30 days straight",
        "icon": "\U0001f451",
        "type": "streak",
    },
    "point_collector": {
        "title": "Point Collector",
        "description": "Earn 500 total points",
        "icon": "\U0001f48e",
        "type": "points",
    },
    "ladder_climber": {
        "title": "Ladder Climber",
        "description": "Reach level 5",
        "icon": "\U0001fa9c",
        "type": "milestone",
    },
}


def point_value_for(intensity: str) -> int:
    """Points a habit, goal or activity of this intensity is worth."""
    return INTENSITY_POINTS.get(intensity, DEFAULT_GOAL_POINTS)


def level_for_points(total_points: int) -> int:
    return max(0, total_points) // POINTS_PER_LEVEL


def goal_level_for_points(total_points: int, current_level: int) -> int:
    """Highest threshold index reached; never lowers the current level."""
    reached = 0
    for index, threshold in enumerate(GOAL_LEVEL_THRESHOLDS):
        if total_points >= threshold:
            reached = index
    return max(current_level, reached)


def streak_multiplier(streak: int) -> float:
    for min_streak, multiplier in GOAL_STREAK_BONUSES:
        if streak >= min_streak:
            return multiplier
    return 1.0


def bonus_points(base_points: int, streak: int) -> int:
    """Apply the goal streak bonus, rounding half up."""
    return int(math.floor(base_points * streak_multiplier(streak) + 0.5))


def _earned(progress: LadderProgress, streak: int) -> list[str]:
    earned = []
    if streak >= 7:
        earned.append("week_warrior")
    if streak >= 30:
        earned.append("month_master")
    if progress.total_points >= 500:
        earned.append("point_collector")
    if progress.current_level >= 5:
        earned.append("ladder_climber")
    return earned


def unlock_achievements(
    progress: LadderProgress, streak: int, now: datetime | None = None
) -> list[dict[str, Any]]:
    """Append newly earned achievements; already-unlocked ids are skipped.

    The list is reassigned, never edited in place, so the JSON column is
    flagged dirty and existing entries are left untouched.
    """
    now = now or utcnow()
    have = {a.get("id") for a in progress.achievements or []}
    unlocked = []
    for achievement_id in _earned(progress, streak):
        if achievement_id in have:
            continue
        unlocked.append({"id": achievement_id, **ACHIEVEMENTS[achievement_id], "unlocked_at": now.isoformat()})
    if unlocked:
        progress.achievements = [*(progress.achievements or []), *unlocked]
    return unlocked


def apply_habit_completion(progress: LadderProgress, points: int, streak: int) -> list[dict[str, Any]]:
    """Credit a habit completion. Returns the achievements it unlocked."""
    progress.total_points += points
    progress.weekly_points += points
    progress.current_streak = max(progress.current_streak, streak)
    progress.longest_streak = max(progress.longest_streak, streak)
    progress.current_level = level_for_points(progress.total_points)
    return unlock_achievements(progress, streak)


def revert_habit_completion(progress: LadderProgress, points: int) -> None:
    """Take back a habit completion's points. Streaks are left as they are."""
    progress.total_points = max(0, progress.total_points - points)
    progress.weekly_points = max(0, progress.weekly_points - points)
    progress.current_level = level_for_points(progress.total_points)


def apply_goal_completion(
    progress: LadderProgress, base_points: int, completed_yesterday: bool
) -> tuple[int, int, list[dict[str, Any]]]:
    """Credit a goal completion.

    Returns:
        Tuple of (awarded points, streak, unlocked achievements).
    """
    streak = progress.current_streak + 1 if completed_yesterday else 1
    progress.current_streak = streak
    progress.longest_streak = max(progress.longest_streak, streak)

    points = bonus_points(base_points, streak)
    progress.total_points += points
    progress.weekly_points += points
    progress.current_level = goal_level_for_points(progress.total_points, progress.current_level)
    unlocked = unlock_achievements(progress, streak)
    return points, streak, unlocked


def apply_activity_completion(progress: LadderProgress, points: int) -> list[dict[str, Any]]:
    """Credit an activity completion. Activities carry no streak of their own."""
    return apply_habit_completion(progress, points, 0)
