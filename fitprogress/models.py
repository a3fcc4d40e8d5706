"""Data models for fitness progress analysis."""

from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Optional, List


DAYS_OF_WEEK = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def weekday_index(day: date) -> int:
    """Day of week with Sunday as 0, the numbering used by day_of_week."""
    # date.weekday() is Monday-based
    return (day.weekday() + 1) % 7


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as returned by Supabase."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class WorkoutSession:
    """One recorded attempt at a scheduled workout."""

    id: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    workout_id: Optional[str] = None

    def __post_init__(self):
        if self.completed_at is not None and self.completed_at < self.started_at:
            raise ValueError(f"Session {self.id} completed before it started")
        if self.duration_seconds is not None and self.duration_seconds < 0:
            raise ValueError(f"Session {self.id} has a negative duration")

    @property
    def is_completed(self) -> bool:
        """A session is complete once completed_at is set."""
        return self.completed_at is not None

    @property
    def duration_minutes(self) -> float:
        """Recorded duration in minutes, zero when not recorded."""
        return (self.duration_seconds or 0) / 60

    @classmethod
    def from_row(cls, row: dict) -> "WorkoutSession":
        """
        Create WorkoutSession from a workout_sessions table row.
        """
        completed = row.get("completed_at")
        duration = row.get("duration_seconds")
        return cls(
            id=str(row["id"]),
            started_at=parse_timestamp(row["started_at"]),
            completed_at=parse_timestamp(completed) if completed else None,
            duration_seconds=int(duration) if duration is not None else None,
            workout_id=row.get("workout_id"),
        )

    def to_row(self) -> dict:
        """Serialize back to the table's column layout."""
        return {
            "id": self.id,
            "workout_id": self.workout_id,
            "started_at": self.started_at.isoformat(),
            "completed_at": (
                self.completed_at.isoformat() if self.completed_at else None
            ),
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class Exercise:
    """One exercise in a scheduled workout."""

    name: str
    sets: int
    reps: str
    rest: str

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        """Create Exercise from an entry of the workout's exercises array."""
        return cls(
            name=data["name"],
            sets=int(data.get("sets") or 0),
            reps=str(data.get("reps", "")),
            rest=str(data.get("rest", "")),
        )


@dataclass
class Workout:
    """A workout scheduled for one day of the week."""

    id: str
    name: str
    day_of_week: int
    duration: str = ""
    difficulty: str = ""
    exercises: List[Exercise] = field(default_factory=list)

    @property
    def exercise_count(self) -> int:
        """Count of exercises in this workout."""
        return len(self.exercises)

    @property
    def day_name(self) -> str:
        """Short name of the scheduled day."""
        return DAYS_OF_WEEK[self.day_of_week % 7]

    @classmethod
    def from_row(cls, row: dict) -> "Workout":
        """
        Create Workout from a workouts table row.
        """
        return cls(
            id=str(row["id"]),
            name=row["name"],
            day_of_week=int(row["day_of_week"]),
            duration=row.get("duration") or "",
            difficulty=row.get("difficulty") or "",
            exercises=[Exercise.from_dict(e) for e in row.get("exercises") or []],
        )


@dataclass
class WeekdayCount:
    """Completed workouts on one day of the current week."""

    day: str
    workouts: int = 0


@dataclass
class ProgressStats:
    """Aggregated progress metrics for one month."""

    month_start: date
    workouts_this_month: int
    calories_burned: int
    active_days: int
    current_streak: int
    weekly: List[WeekdayCount] = field(default_factory=list)

    @property
    def week_total(self) -> int:
        """Completed workouts so far this week."""
        return sum(d.workouts for d in self.weekly)


@dataclass
class Meal:
    """A logged meal from the meals table."""

    id: str
    meal_name: str
    calories: float
    protein: float
    carbs: float
    fats: float
    logged_at: datetime

    @classmethod
    def from_row(cls, row: dict) -> "Meal":
        """Create Meal from a meals table row."""
        return cls(
            id=str(row["id"]),
            meal_name=row["meal_name"],
            calories=row.get("calories") or 0,
            protein=row.get("protein") or 0,
            carbs=row.get("carbs") or 0,
            fats=row.get("fats") or 0,
            logged_at=parse_timestamp(row["logged_at"]),
        )


@dataclass
class NutritionAnalysis:
    """Macro estimate and suggestions for a described meal."""

    calories: float
    protein: float
    carbs: float
    fat: float
    suggestions: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "NutritionAnalysis":
        """
        Create NutritionAnalysis from the gateway's JSON object.

        Raises KeyError when a macro is missing and ValueError when it
        is not numeric.
        """
        return cls(
            calories=float(data["calories"]),
            protein=float(data["protein"]),
            carbs=float(data["carbs"]),
            fat=float(data["fat"]),
            suggestions=[str(s) for s in data.get("suggestions") or []],
        )


@dataclass
class NutritionTotals:
    """Summed macros for one day against a calorie goal."""

    calories: float
    protein: float
    carbs: float
    fats: float
    goal: int = 2000

    @property
    def goal_percent(self) -> float:
        """Share of the calorie goal reached, capped at 100."""
        if self.goal <= 0:
            return 100.0
        return min(self.calories / self.goal * 100, 100.0)
