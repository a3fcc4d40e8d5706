"""
Tests for the progress analyzer.

All tests pin "now" to Wednesday 2024-05-15 18:00 local time.
"""

import pytest
from datetime import date, datetime, timedelta, timezone

from fitprogress.models import Meal, WorkoutSession
from fitprogress.analyzer import (
    calculate_nutrition_totals,
    calculate_progress_stats,
    calculate_streak,
    count_active_days,
    count_completed,
    elapsed_seconds,
    estimate_calories,
    format_duration,
    local_date,
    month_window,
    recent_sessions,
    week_start,
    weekly_workout_data,
)


NOW = datetime(2024, 5, 15, 18, 0)


def make_session(
    days_ago: int,
    completed: bool = True,
    duration: int = 1800,
    hour: int = 7,
    session_id: str = None,
) -> WorkoutSession:
    """Build a session started `days_ago` days before NOW."""
    started = (NOW - timedelta(days=days_ago)).replace(hour=hour, minute=0)
    return WorkoutSession(
        id=session_id or f"s-{days_ago}-{hour}",
        started_at=started,
        completed_at=started + timedelta(seconds=duration) if completed else None,
        duration_seconds=duration if completed else None,
    )


class TestEmptyInput:
    """Tests for empty and missing session lists."""

    def test_all_metrics_zero(self):
        """Test empty list yields zero metrics and seven zero buckets."""
        stats = calculate_progress_stats([], NOW)

        assert stats.workouts_this_month == 0
        assert stats.calories_burned == 0
        assert stats.active_days == 0
        assert stats.current_streak == 0
        assert [d.workouts for d in stats.weekly] == [0] * 7
        assert stats.week_total == 0

    def test_none_input(self):
        """Test None is treated like an empty list."""
        stats = calculate_progress_stats(None, NOW)

        assert stats.workouts_this_month == 0
        assert len(stats.weekly) == 7
        assert stats.month_start == date(2024, 5, 1)


class TestMonthlyCount:
    """Tests for the monthly completed count."""

    def test_counts_completed_only(self):
        """Test only sessions with completed_at are counted."""
        sessions = [
            make_session(1),
            make_session(2, completed=False),
            make_session(3),
        ]
        assert count_completed(sessions, NOW) == 2

    def test_ignores_duration(self):
        """Test sessions count regardless of duration_seconds."""
        started = datetime(2024, 5, 10, 7, 0)
        sessions = [
            WorkoutSession(id="a", started_at=started, completed_at=started),
            make_session(4, duration=0),
            make_session(6, duration=5400),
        ]
        assert count_completed(sessions, NOW) == 3

    def test_excludes_previous_month(self):
        """Test sessions before the first of the month are ignored."""
        sessions = [make_session(1), make_session(20)]
        assert count_completed(sessions, NOW) == 1
        assert len(month_window(sessions, NOW)) == 1


class TestCalories:
    """Tests for the calorie estimate."""

    def test_half_hour_is_300(self):
        """Test 30 minutes is 300 calories."""
        assert estimate_calories([make_session(1, duration=1800)], NOW) == 300

    def test_quarter_hour_is_150(self):
        """Test 15 minutes is 150 calories."""
        assert estimate_calories([make_session(1, duration=900)], NOW) == 150

    def test_sums_sessions(self):
        """Test durations are summed before converting."""
        sessions = [make_session(1, duration=1800), make_session(2, duration=2700)]
        assert estimate_calories(sessions, NOW) == 750

    def test_rounds_to_nearest(self):
        """Test fractional calories are rounded."""
        # 61 s -> 10.1666 calories
        assert estimate_calories([make_session(1, duration=61)], NOW) == 10
        # 63 s -> 10.5 calories, half rounds up
        assert estimate_calories([make_session(1, duration=63)], NOW) == 11

    def test_incomplete_sessions_ignored(self):
        """Test unfinished sessions add no calories."""
        sessions = [make_session(1, completed=False), make_session(2)]
        assert estimate_calories(sessions, NOW) == 300


class TestActiveDays:
    """Tests for the active-day count."""

    def test_same_day_counted_once(self):
        """Test two sessions on one date contribute one active day."""
        sessions = [make_session(2, hour=7), make_session(2, hour=18)]
        assert count_active_days(sessions, NOW) == 1

    def test_distinct_days(self):
        """Test sessions on different days are counted separately."""
        sessions = [make_session(0), make_session(2), make_session(5)]
        assert count_active_days(sessions, NOW) == 3

    def test_incomplete_day_not_active(self):
        """Test a day with only an unfinished session is not active."""
        sessions = [make_session(1, completed=False), make_session(3)]
        assert count_active_days(sessions, NOW) == 1


class TestStreak:
    """Tests for the current streak."""

    def test_three_consecutive_days(self):
        """Test workouts today and the two previous days give 3."""
        sessions = [make_session(2), make_session(1), make_session(0)]
        assert calculate_streak(sessions, NOW) == 3

    def test_gap_yesterday_and_today(self):
        """Test a workout only two days ago gives 0."""
        assert calculate_streak([make_session(2)], NOW) == 0

    def test_no_workout_today_breaks_streak(self):
        """Test a missing today gives 0 even after a run of days."""
        sessions = [make_session(3), make_session(2), make_session(1)]
        assert calculate_streak(sessions, NOW) == 0

    def test_grace_today_counts_from_yesterday(self):
        """Test grace_today tolerates a missing today."""
        sessions = [make_session(3), make_session(2), make_session(1)]
        assert calculate_streak(sessions, NOW, grace_today=True) == 3

    def test_grace_today_still_needs_yesterday(self):
        """Test grace_today does not bridge a second missing day."""
        assert calculate_streak([make_session(2)], NOW, grace_today=True) == 0

    def test_grace_today_with_workout_today(self):
        """Test grace_today does not change a streak that includes today."""
        sessions = [make_session(1), make_session(0)]
        assert calculate_streak(sessions, NOW, grace_today=True) == 2

    def test_stops_at_gap(self):
        """Test counting stops at the first missing day."""
        sessions = [make_session(4), make_session(1), make_session(0)]
        assert calculate_streak(sessions, NOW) == 2

    def test_incomplete_session_does_not_count(self):
        """Test an unfinished session today does not start a streak."""
        sessions = [make_session(1), make_session(0, completed=False)]
        assert calculate_streak(sessions, NOW) == 0

    def test_multiple_sessions_per_day(self):
        """Test extra sessions on one day add nothing."""
        sessions = [make_session(0, hour=7), make_session(0, hour=17)]
        assert calculate_streak(sessions, NOW) == 1

    def test_lookback_capped_at_30_days(self):
        """Test the walk inspects at most 30 days."""
        now = datetime(2024, 1, 31, 20, 0)
        sessions = [
            WorkoutSession(
                id=f"d{day}",
                started_at=datetime(2024, 1, day, 7, 0),
                completed_at=datetime(2024, 1, day, 8, 0),
                duration_seconds=3600,
            )
            for day in range(1, 32)
        ]
        assert calculate_streak(sessions, now) == 30

    def test_input_not_mutated(self):
        """Test the session list is left untouched."""
        sessions = [make_session(1), make_session(0)]
        before = list(sessions)
        calculate_progress_stats(sessions, NOW)
        assert sessions == before


class TestWeeklyData:
    """Tests for the weekly day-of-week series."""

    def test_week_starts_sunday(self):
        """Test the week begins on the most recent Sunday."""
        assert week_start(NOW) == date(2024, 5, 12)
        assert week_start(datetime(2024, 5, 12, 9, 0)) == date(2024, 5, 12)

    def test_wednesday_bucket(self):
        """Test a Wednesday workout lands only in the Wednesday bucket."""
        weekly = weekly_workout_data([make_session(0)], NOW)

        assert [d.day for d in weekly] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert [d.workouts for d in weekly] == [0, 0, 0, 1, 0, 0, 0]

    def test_excludes_before_sunday(self):
        """Test sessions before this week's Sunday are excluded."""
        # day 4 is Saturday 2024-05-11
        sessions = [make_session(4), make_session(3), make_session(1)]
        weekly = weekly_workout_data(sessions, NOW)

        assert [d.workouts for d in weekly] == [1, 0, 1, 0, 0, 0, 0]

    def test_counts_each_session(self):
        """Test two sessions on one day both count in the bucket."""
        sessions = [make_session(1, hour=6), make_session(1, hour=19)]
        weekly = weekly_workout_data(sessions, NOW)

        assert weekly[2].workouts == 2

    def test_skips_incomplete(self):
        """Test unfinished sessions are not charted."""
        weekly = weekly_workout_data([make_session(0, completed=False)], NOW)
        assert sum(d.workouts for d in weekly) == 0


class TestLocalTime:
    """Tests for UTC timestamps read in a pinned local zone."""

    UTC_NOW = datetime(2024, 5, 15, 19, 0, tzinfo=timezone.utc)

    @staticmethod
    def utc_session(session_id: str, *when: int) -> WorkoutSession:
        started = datetime(*when, tzinfo=timezone.utc)
        return WorkoutSession(
            id=session_id,
            started_at=started,
            completed_at=started + timedelta(minutes=30),
            duration_seconds=1800,
        )

    def test_local_date_of_early_utc_hour(self, local_tz):
        """Test 03:00 UTC falls on the previous day in Los Angeles."""
        local_tz("America/Los_Angeles")

        assert local_date(datetime(2024, 5, 15, 3, 0, tzinfo=timezone.utc)) == date(
            2024, 5, 14
        )

    def test_streak_spans_utc_midnight(self, local_tz):
        """Test sessions on one UTC day count as two local days."""
        local_tz("America/Los_Angeles")
        sessions = [
            self.utc_session("evening", 2024, 5, 15, 3, 0),
            self.utc_session("morning", 2024, 5, 15, 17, 0),
        ]

        assert calculate_streak(sessions, self.UTC_NOW) == 2

    def test_active_days_merge_across_utc_dates(self, local_tz):
        """Test sessions on two UTC dates can share one local day."""
        local_tz("America/Los_Angeles")
        sessions = [
            self.utc_session("a", 2024, 5, 14, 18, 0),
            self.utc_session("b", 2024, 5, 15, 3, 0),
        ]

        assert count_active_days(sessions, self.UTC_NOW) == 1

    def test_weekly_bucket_uses_local_weekday(self, local_tz):
        """Test a Monday 03:00 UTC session lands in the Sunday bucket."""
        local_tz("America/Los_Angeles")
        sessions = [self.utc_session("sunday", 2024, 5, 13, 3, 0)]

        weekly = weekly_workout_data(sessions, self.UTC_NOW)

        assert [d.workouts for d in weekly] == [1, 0, 0, 0, 0, 0, 0]

    def test_utc_zone_keeps_utc_dates(self, local_tz):
        """Test the same sessions stay on their UTC dates when local is UTC."""
        local_tz("UTC")
        sessions = [
            self.utc_session("evening", 2024, 5, 15, 3, 0),
            self.utc_session("morning", 2024, 5, 15, 17, 0),
        ]

        assert calculate_streak(sessions, self.UTC_NOW) == 1


class TestProgressStats:
    """Tests for the combined metrics."""

    def test_month_snapshot(self):
        """Test all metrics come from the same sessions."""
        sessions = [
            make_session(20),  # previous month
            make_session(5, duration=3600),
            make_session(2, duration=900),
            make_session(1, completed=False),
            make_session(0, hour=6, duration=1800),
            make_session(0, hour=19, duration=1800),
        ]
        stats = calculate_progress_stats(sessions, NOW)

        assert stats.workouts_this_month == 4
        assert stats.calories_burned == 1350
        assert stats.active_days == 3
        assert stats.current_streak == 1
        assert stats.week_total == 3


class TestRecentSessions:
    """Tests for the recent-session list."""

    def test_newest_first(self):
        """Test the latest sessions come first and the list is capped."""
        sessions = [make_session(d) for d in range(7, -1, -1)]
        recent = recent_sessions(sessions)

        assert len(recent) == 5
        assert [s.id for s in recent] == ["s-0-7", "s-1-7", "s-2-7", "s-3-7", "s-4-7"]

    def test_includes_incomplete(self):
        """Test started-only sessions are listed too."""
        recent = recent_sessions([make_session(0, completed=False)])
        assert len(recent) == 1
        assert not recent[0].is_completed

    def test_empty(self):
        """Test empty input gives an empty list."""
        assert recent_sessions(None) == []


class TestFormatDuration:
    """Tests for timer formatting."""

    def test_format(self):
        """Test seconds are rendered as HH:MM:SS."""
        assert format_duration(0) == "00:00:00"
        assert format_duration(59) == "00:00:59"
        assert format_duration(1800) == "00:30:00"
        assert format_duration(3725) == "01:02:05"

    def test_negative(self):
        """Test negative durations are rejected."""
        with pytest.raises(ValueError):
            format_duration(-1)

    def test_elapsed_seconds(self):
        """Test timer elapsed time, never negative."""
        started = datetime(2024, 5, 15, 7, 0, tzinfo=timezone.utc)

        later = started + timedelta(minutes=42, seconds=5)

        assert elapsed_seconds(started, later) == 2525
        assert elapsed_seconds(started, started - timedelta(seconds=10)) == 0


class TestNutritionTotals:
    """Tests for the daily nutrition totals."""

    def test_sums_meals(self):
        """Test macros are summed across meals."""
        meals = [
            Meal("1", "oats", 350, 12, 60, 6, datetime(2024, 5, 15, 8, 0)),
            Meal("2", "chicken salad", 520, 45, 20, 25, datetime(2024, 5, 15, 13, 0)),
        ]
        totals = calculate_nutrition_totals(meals)

        assert totals.calories == 870
        assert totals.protein == 57
        assert totals.carbs == 80
        assert totals.fats == 31
        assert totals.goal == 2000
        assert totals.goal_percent == pytest.approx(43.5)

    def test_goal_percent_capped(self):
        """Test progress toward the goal stops at 100."""
        meals = [Meal("1", "feast", 2500, 100, 300, 90, datetime(2024, 5, 15, 19, 0))]
        assert calculate_nutrition_totals(meals).goal_percent == 100.0

    def test_empty(self):
        """Test no meals gives zero totals."""
        totals = calculate_nutrition_totals([])
        assert totals.calories == 0
        assert totals.goal_percent == 0.0
