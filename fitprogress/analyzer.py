"""
Workout progress analyzer.

Provides functions for aggregating a month of workout sessions into
progress metrics, plus the small helpers the progress and nutrition
views need. Every function reads its input and returns plain values.
"""

import logging
import math
from datetime import datetime, date, timedelta
from typing import Iterable, List, Optional, Set

from .models import (
    DAYS_OF_WEEK,
    Meal,
    NutritionTotals,
    ProgressStats,
    WeekdayCount,
    WorkoutSession,
    weekday_index,
)


logger = logging.getLogger(__name__)


# rough estimate: 300 calories per 30 minutes of training
CALORIES_PER_BLOCK = 300
MINUTES_PER_BLOCK = 30

STREAK_LOOKBACK_DAYS = 30
RECENT_SESSION_LIMIT = 5
DEFAULT_CALORIE_GOAL = 2000


def local_date(timestamp: datetime) -> date:
    """Calendar date of a timestamp in local time. Naive values are local."""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone()
    return timestamp.date()


def _today(now: Optional[datetime]) -> date:
    return local_date(now if now is not None else datetime.now())


def month_window(
    sessions: Optional[Iterable[WorkoutSession]], now: Optional[datetime] = None
) -> List[WorkoutSession]:
    """Sessions started between the first of now's month and today."""
    today = _today(now)
    month_start = today.replace(day=1)
    return [
        s for s in sessions or [] if month_start <= local_date(s.started_at) <= today
    ]


def completed_sessions(
    sessions: Optional[Iterable[WorkoutSession]],
) -> List[WorkoutSession]:
    """Filter down to sessions that were finished."""
    return [s for s in sessions or [] if s.is_completed]


def count_completed(
    sessions: Optional[Iterable[WorkoutSession]], now: Optional[datetime] = None
) -> int:
    """Number of completed sessions this month."""
    return len(completed_sessions(month_window(sessions, now)))


def estimate_calories(
    sessions: Optional[Iterable[WorkoutSession]], now: Optional[datetime] = None
) -> int:
    """
    Estimate calories burned by this month's completed sessions.

    Uses a flat 300 calories per 30 minutes of recorded duration,
    rounded half up to a whole number.
    """
    total_seconds = sum(
        s.duration_seconds or 0 for s in completed_sessions(month_window(sessions, now))
    )
    # single division so exact halves stay exact
    calories = total_seconds * CALORIES_PER_BLOCK / (MINUTES_PER_BLOCK * 60)
    return int(math.floor(calories + 0.5))


def workout_dates(sessions: Optional[Iterable[WorkoutSession]]) -> Set[date]:
    """Distinct local start dates of completed sessions."""
    return {local_date(s.started_at) for s in completed_sessions(sessions)}


def count_active_days(
    sessions: Optional[Iterable[WorkoutSession]], now: Optional[datetime] = None
) -> int:
    """Number of distinct days this month with a completed session."""
    return len(workout_dates(month_window(sessions, now)))


def calculate_streak(
    sessions: Optional[Iterable[WorkoutSession]],
    now: Optional[datetime] = None,
    grace_today: bool = False,
) -> int:
    """
    Count consecutive workout days walking backward from today.

    The walk covers at most STREAK_LOOKBACK_DAYS days and stops at the
    first day without a completed session, so a day with no workout yet
    today gives a streak of 0. With grace_today a missing today is
    skipped and counting starts from yesterday instead.
    """
    dates = workout_dates(month_window(sessions, now))
    if not dates:
        return 0

    streak = 0
    check_date = _today(now)

    for i in range(STREAK_LOOKBACK_DAYS):
        if check_date in dates:
            streak += 1
        elif i == 0 and grace_today:
            logger.debug("No workout today yet, counting from yesterday")
        else:
            break
        check_date -= timedelta(days=1)

    return streak


def week_start(now: Optional[datetime] = None) -> date:
    """Most recent Sunday, today included."""
    today = _today(now)
    return today - timedelta(days=weekday_index(today))


def weekly_workout_data(
    sessions: Optional[Iterable[WorkoutSession]], now: Optional[datetime] = None
) -> List[WeekdayCount]:
    """Completed sessions this week bucketed by day, Sunday first."""
    week_data = [WeekdayCount(day=day) for day in DAYS_OF_WEEK]
    start = week_start(now)

    for session in completed_sessions(sessions):
        session_date = local_date(session.started_at)
        if session_date >= start:
            week_data[weekday_index(session_date)].workouts += 1

    return week_data


def calculate_progress_stats(
    sessions: Optional[Iterable[WorkoutSession]],
    now: Optional[datetime] = None,
    grace_today: bool = False,
) -> ProgressStats:
    """Calculate all progress metrics from one snapshot of sessions."""
    if now is None:
        now = datetime.now()
    snapshot = list(sessions or [])

    stats = ProgressStats(
        month_start=_today(now).replace(day=1),
        workouts_this_month=count_completed(snapshot, now),
        calories_burned=estimate_calories(snapshot, now),
        active_days=count_active_days(snapshot, now),
        current_streak=calculate_streak(snapshot, now, grace_today=grace_today),
        weekly=weekly_workout_data(snapshot, now),
    )
    logger.debug(f"Calculated progress stats from {len(snapshot)} sessions")
    return stats


def recent_sessions(
    sessions: Optional[Iterable[WorkoutSession]], limit: int = RECENT_SESSION_LIMIT
) -> List[WorkoutSession]:
    """Latest sessions by start time, newest first."""
    ordered = sorted(sessions or [], key=lambda s: s.started_at, reverse=True)
    return ordered[:limit]


def format_duration(total_seconds: int) -> str:
    """Format seconds as HH:MM:SS, the way the workout timer shows it."""
    if total_seconds < 0:
        raise ValueError("Duration cannot be negative")

    hours, remainder = divmod(int(total_seconds), 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def elapsed_seconds(started_at: datetime, now: Optional[datetime] = None) -> int:
    """Whole seconds a timer started at started_at has been running."""
    if now is None:
        now = datetime.now(started_at.tzinfo)
    return max(int((now - started_at).total_seconds()), 0)


def calculate_nutrition_totals(
    meals: Optional[Iterable[Meal]], goal: int = DEFAULT_CALORIE_GOAL
) -> NutritionTotals:
    """Sum the macros of a day's meals."""
    meals = list(meals or [])
    return NutritionTotals(
        calories=sum(m.calories for m in meals),
        protein=sum(m.protein for m in meals),
        carbs=sum(m.carbs for m in meals),
        fats=sum(m.fats for m in meals),
        goal=goal,
    )
