"""Supabase REST client for workout sessions and meals."""

import json
import logging
from datetime import datetime, date, time, timedelta, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import requests

from .config import SupabaseConfig
from .models import Meal, NutritionAnalysis, Workout, WorkoutSession, weekday_index


logger = logging.getLogger(__name__)


def month_start(now: Optional[datetime] = None) -> datetime:
    """
    Local midnight on the first of now's month, as an aware datetime.

    The offset is looked up for the 1st itself, so a DST change since
    then does not shift the boundary.
    """
    if now is None:
        now = datetime.now()
    elif now.tzinfo is not None:
        now = now.astimezone()
    return datetime(now.year, now.month, 1).astimezone()


def local_day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Aware local midnights that start and end a calendar day."""
    start = datetime.combine(day, time.min).astimezone()
    end = datetime.combine(day + timedelta(days=1), time.min).astimezone()
    return start, end


class SupabaseClient:
    """Client for the PostgREST tables behind a Supabase project."""

    def __init__(self, config: SupabaseConfig):
        """
        Initialize Supabase client with configuration.
        """
        self._config = config

    def _get_headers(self, **extra: str) -> dict:
        """Build API key and authorization headers."""
        headers = {
            "apikey": self._config.anon_key,
            "Authorization": f"Bearer {self._config.bearer_token}",
        }
        headers.update(extra)
        return headers

    def _table_url(self, table: str) -> str:
        return f"{self._config.rest_base}/{table}"

    def fetch_session_rows(self, user_id: str, since: datetime) -> List[dict]:
        """
        Fetch raw workout_sessions rows started on or after `since`.
        """
        response = requests.get(
            self._table_url("workout_sessions"),
            headers=self._get_headers(),
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "started_at": f"gte.{since.isoformat()}",
                "order": "started_at.asc",
            },
            timeout=30,
        )
        response.raise_for_status()
        return response.json()

    def fetch_workout_sessions(
        self, user_id: str, since: Optional[datetime] = None
    ) -> Iterator[WorkoutSession]:
        """
        Fetch a user's sessions for the month, oldest first.

        Rows that fail to parse are logged and skipped.
        """
        if since is None:
            since = month_start()

        logger.info(f"Fetching workout sessions since {since.date().isoformat()}")
        for row in self.fetch_session_rows(user_id, since):
            try:
                yield WorkoutSession.from_row(row)
            except (KeyError, ValueError) as e:
                logger.warning(f"Failed to parse workout session: {e}")

    def fetch_meals(self, user_id: str, day: Optional[date] = None) -> List[Meal]:
        """
        Fetch meals logged on a given day, newest first.
        """
        if day is None:
            day = date.today()

        start, end = local_day_bounds(day)

        response = requests.get(
            self._table_url("meals"),
            headers=self._get_headers(),
            params=[
                ("select", "*"),
                ("user_id", f"eq.{user_id}"),
                ("logged_at", f"gte.{start.isoformat()}"),
                ("logged_at", f"lt.{end.isoformat()}"),
                ("order", "logged_at.desc"),
            ],
            timeout=30,
        )
        response.raise_for_status()

        meals = []
        for row in response.json():
            try:
                meals.append(Meal.from_row(row))
            except (KeyError, ValueError) as e:
                logger.warning(f"Failed to parse meal: {e}")
        return meals

    def fetch_today_workout(self, day: Optional[date] = None) -> Optional[Workout]:
        """
        Fetch the workout scheduled for a day's weekday, Sunday being 0.

        Returns None when nothing is scheduled.
        """
        if day is None:
            day = date.today()

        response = requests.get(
            self._table_url("workouts"),
            headers=self._get_headers(),
            params={"select": "*", "day_of_week": f"eq.{weekday_index(day)}"},
            timeout=30,
        )
        response.raise_for_status()

        rows = response.json()
        if not rows:
            logger.info(f"No workout scheduled for {day.strftime('%A')}")
            return None
        if len(rows) > 1:
            logger.warning(f"{len(rows)} workouts scheduled for {day}, using first")
        return Workout.from_row(rows[0])

    def start_session(self, user_id: str, workout_id: str) -> WorkoutSession:
        """
        Insert a new session for today's workout and return it.
        """
        response = requests.post(
            self._table_url("workout_sessions"),
            headers=self._get_headers(Prefer="return=representation"),
            json={"user_id": user_id, "workout_id": workout_id},
            timeout=30,
        )
        response.raise_for_status()
        session = WorkoutSession.from_row(response.json()[0])
        logger.info(f"Started workout session {session.id}")
        return session

    def complete_session(
        self,
        session_id: str,
        duration_seconds: int,
        completed_at: Optional[datetime] = None,
    ) -> None:
        """
        Mark a session completed with its timer duration.
        """
        if duration_seconds < 0:
            raise ValueError("Duration cannot be negative")
        if completed_at is None:
            completed_at = datetime.now(timezone.utc)

        response = requests.patch(
            self._table_url("workout_sessions"),
            headers=self._get_headers(),
            params={"id": f"eq.{session_id}"},
            json={
                "completed_at": completed_at.isoformat(),
                "duration_seconds": duration_seconds,
            },
            timeout=30,
        )
        response.raise_for_status()
        logger.info(f"Completed workout session {session_id}")

    def save_meal(
        self, user_id: str, meal_name: str, analysis: NutritionAnalysis
    ) -> None:
        """
        Log an analysed meal.
        """
        response = requests.post(
            self._table_url("meals"),
            headers=self._get_headers(),
            json={
                "user_id": user_id,
                "meal_name": meal_name,
                "calories": analysis.calories,
                "protein": analysis.protein,
                "carbs": analysis.carbs,
                "fats": analysis.fat,
            },
            timeout=30,
        )
        response.raise_for_status()
        logger.info(f"Saved meal: {meal_name}")

    def delete_meal(self, meal_id: str) -> None:
        """
        Delete a logged meal.
        """
        response = requests.delete(
            self._table_url("meals"),
            headers=self._get_headers(),
            params={"id": f"eq.{meal_id}"},
            timeout=30,
        )
        response.raise_for_status()
        logger.info(f"Deleted meal {meal_id}")


def save_sessions_to_json(sessions: List[WorkoutSession], filepath: Path) -> None:
    """Save sessions to JSON file."""
    data = [session.to_row() for session in sessions]

    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    logger.info(f"Saved {len(data)} sessions to {filepath}")


def load_sessions_from_json(filepath: Path) -> List[WorkoutSession]:
    """Load sessions previously saved with save_sessions_to_json."""
    with open(filepath) as f:
        data = json.load(f)

    sessions = []
    for row in data:
        try:
            sessions.append(WorkoutSession.from_row(row))
        except (KeyError, ValueError) as e:
            logger.warning(f"Skipping cached session: {e}")

    logger.info(f"Loaded {len(sessions)} sessions from {filepath}")
    return sessions
