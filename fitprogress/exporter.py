"""
Progress data exporter.

Exports progress metrics to JSON files that the charting layer
reads directly.
"""

import json
import logging
from pathlib import Path
from typing import List, Any, Optional
from dataclasses import asdict
from datetime import date, datetime

from .models import Meal, WorkoutSession
from .analyzer import (
    calculate_progress_stats,
    calculate_nutrition_totals,
    format_duration,
    local_date,
    recent_sessions,
)


logger = logging.getLogger(__name__)


class DateEncoder(json.JSONEncoder):
    """JSON encoder that handles date and datetime objects."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (date, datetime)):
            return obj.isoformat()
        return super().default(obj)


class ProgressExporter:
    """Exports progress data to chart-ready JSON files."""

    def __init__(self, data_dir: Path):
        """Initialize exporter with its output directory."""
        self._data_dir = data_dir

    def _ensure_dirs(self) -> None:
        """Create output directory if it doesn't exist."""
        self._data_dir.mkdir(parents=True, exist_ok=True)

    def _write_json(self, filename: str, data: Any) -> None:
        """Write data to JSON file."""
        filepath = self._data_dir / filename
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2, cls=DateEncoder)
        logger.info(f"Exported {filename}")

    def export_progress_stats(
        self,
        sessions: List[WorkoutSession],
        now: Optional[datetime] = None,
        grace_today: bool = False,
    ) -> None:
        """Export the monthly metrics and weekly series."""
        stats = calculate_progress_stats(sessions, now, grace_today=grace_today)

        data = {
            "month_start": stats.month_start,
            "workouts_this_month": stats.workouts_this_month,
            "calories_burned": stats.calories_burned,
            "active_days": stats.active_days,
            "current_streak": stats.current_streak,
            "week_total": stats.week_total,
        }

        self._write_json("progress_stats.json", data)
        self._write_json("weekly_workouts.json", [asdict(d) for d in stats.weekly])

    def export_recent_workouts(
        self, sessions: List[WorkoutSession], limit: int = 5
    ) -> None:
        """Export the latest sessions for the activity list."""
        data = [
            {
                "id": session.id,
                "date": local_date(session.started_at),
                "status": "completed" if session.is_completed else "started",
                "duration": (
                    format_duration(session.duration_seconds)
                    if session.duration_seconds is not None
                    else None
                ),
                "duration_minutes": (
                    round(session.duration_minutes)
                    if session.duration_seconds is not None
                    else None
                ),
            }
            for session in recent_sessions(sessions, limit)
        ]

        self._write_json("recent_workouts.json", data)

    def export_nutrition_today(self, meals: List[Meal], goal: int = 2000) -> None:
        """Export today's meal totals and the meals themselves."""
        totals = calculate_nutrition_totals(meals, goal)

        data = {
            "totals": asdict(totals),
            "goal_percent": round(totals.goal_percent, 1),
            "meals": [asdict(m) for m in meals],
        }

        self._write_json("nutrition_today.json", data)

    def export_all(
        self,
        sessions: List[WorkoutSession],
        meals: Optional[List[Meal]] = None,
        now: Optional[datetime] = None,
        grace_today: bool = False,
    ) -> None:
        """Export all progress data."""
        self._ensure_dirs()

        logger.info("Exporting workout data...")
        self.export_progress_stats(sessions, now, grace_today=grace_today)
        self.export_recent_workouts(sessions, limit=5)

        if meals is not None:
            logger.info("Exporting nutrition data...")
            self.export_nutrition_today(meals)

        logger.info(f"Export complete. Data written to {self._data_dir}")
