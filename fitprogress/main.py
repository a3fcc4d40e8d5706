"""
Main entry point for fitness progress analysis.

Provides CLI interface for fetching sessions from Supabase, running
analysis, generating charts, exporting chart data, tracking today's
workout and analysing meals.
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

import requests

from .config import AppConfig
from .models import Meal, Workout, WorkoutSession
from .supabase_client import (
    SupabaseClient,
    load_sessions_from_json,
    month_start,
    save_sessions_to_json,
)
from .nutrition import NutritionClient, NutritionError
from .analyzer import (
    calculate_progress_stats,
    calculate_nutrition_totals,
    elapsed_seconds,
    format_duration,
    local_date,
    recent_sessions,
)
from .exporter import ProgressExporter
from .visualizations import plot_weekly_workouts, plot_monthly_summary, plot_macro_split


logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def cache_is_stale(cache_path: Path) -> bool:
    """True when the cache was written before the current month began."""
    return cache_path.stat().st_mtime < month_start().timestamp()


def load_workout_sessions(
    config: AppConfig, cache_path: Optional[Path] = None, force_refresh: bool = False
) -> List[WorkoutSession]:
    """
    Load this month's workout sessions, using cache if available.

    A cache written in an earlier month is refetched when Supabase is
    configured, and used with a warning otherwise.

    Parameters:
        config: Application configuration.
        cache_path: Path to cache file.
        force_refresh: Fetch from Supabase even if cache exists.

    Returns:
        List of workout sessions, oldest first.
    """
    if cache_path is None:
        cache_path = config.paths.data_dir / "workout_sessions.json"

    if cache_path.exists() and not force_refresh:
        if not cache_is_stale(cache_path):
            logger.info(f"Loading cached sessions from {cache_path}")
            return load_sessions_from_json(cache_path)
        if config.supabase is None:
            logger.warning(
                f"Cache {cache_path} predates this month; metrics may be out of date"
            )
            return load_sessions_from_json(cache_path)
        logger.info("Cached sessions are from an earlier month, refetching")

    if config.supabase is None:
        logger.error("Supabase not configured. Set SUPABASE_* in .env first.")
        return []

    logger.info("Fetching workout sessions from Supabase...")
    client = SupabaseClient(config.supabase)
    sessions = list(
        client.fetch_workout_sessions(config.supabase.user_id, month_start())
    )

    save_sessions_to_json(sessions, cache_path)
    return sessions


def load_today_meals(config: AppConfig) -> Optional[List[Meal]]:
    """Fetch today's meals, or None when Supabase is not configured."""
    if config.supabase is None:
        return None

    client = SupabaseClient(config.supabase)
    return client.fetch_meals(config.supabase.user_id)


def print_summary(sessions: List[WorkoutSession], grace_today: bool = False) -> None:
    """
    Print progress summary for the month.

    Parameters:
        sessions: This month's workout sessions.
        grace_today: Tolerate no workout yet today when counting the streak.
    """
    stats = calculate_progress_stats(sessions, grace_today=grace_today)

    print("\n" + "=" * 60)
    print("PROGRESS SUMMARY")
    print("=" * 60)

    streak_unit = "day" if stats.current_streak == 1 else "days"
    print(f"\n📅 {stats.month_start.strftime('%B %Y')}")
    print(f"   Workouts this month: {stats.workouts_this_month}")
    print(f"   Calories burned: {stats.calories_burned:,} (estimated)")
    print(f"   Active days: {stats.active_days}")
    print(f"   Current streak: {stats.current_streak} {streak_unit}")
    print(
        "   " + ("Keep it going!" if stats.current_streak > 0 else "Start today!")
    )

    print("\n📊 THIS WEEK")
    for day in stats.weekly:
        print(f"   {day.day}: {'#' * day.workouts} {day.workouts}")
    print(f"   Total: {stats.week_total}")

    recent = recent_sessions(sessions)
    if recent:
        print("\n🏋️  RECENT WORKOUTS")
        for session in recent:
            status = "Completed" if session.is_completed else "Started"
            day = local_date(session.started_at)
            line = f"   {day.strftime('%a, %b %d')}  {status}"
            if session.duration_seconds is not None:
                line += f"  {format_duration(session.duration_seconds)}"
            print(line)
    else:
        print("\n   No workouts yet this month. Start your first workout today!")

    print("\n" + "=" * 60)


def print_workout(workout: Workout) -> None:
    """Print a scheduled workout and its exercises."""
    print(f"\n💪 {workout.name} ({workout.day_name})")
    details = [d for d in (workout.duration, workout.difficulty) if d]
    if details:
        print(f"   {' | '.join(details)}")
    print(f"   {workout.exercise_count} exercises")
    for exercise in workout.exercises:
        print(
            f"     - {exercise.name}: {exercise.sets} x {exercise.reps}"
            f" (rest {exercise.rest})"
        )


def cmd_fetch(args: argparse.Namespace, config: AppConfig) -> None:
    """Fetch sessions from Supabase."""
    sessions = load_workout_sessions(config, force_refresh=True)
    logger.info(f"Fetched and cached {len(sessions)} sessions")


def cmd_analyze(args: argparse.Namespace, config: AppConfig) -> None:
    """Analyze sessions and show summary."""
    sessions = load_workout_sessions(config)
    print_summary(sessions, grace_today=args.grace_today)


def cmd_visualize(args: argparse.Namespace, config: AppConfig) -> None:
    """Generate charts."""
    sessions = load_workout_sessions(config)
    stats = calculate_progress_stats(sessions, grace_today=args.grace_today)

    output_dir = config.paths.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    show = not args.no_show

    logger.info("Generating progress charts...")
    plot_weekly_workouts(stats.weekly, output_dir / "weekly_workouts.png", show)
    plot_monthly_summary(stats, output_dir / "monthly_summary.png", show)

    meals = load_today_meals(config)
    if meals:
        plot_macro_split(
            calculate_nutrition_totals(meals), output_dir / "macros_today.png", show
        )


def cmd_export(args: argparse.Namespace, config: AppConfig) -> None:
    """Export chart data to the export directory or a custom one."""
    sessions = load_workout_sessions(config)

    if args.output:
        output_dir = Path(args.output)
        logger.info(f"Exporting to custom directory: {output_dir}")
    else:
        output_dir = config.paths.export_dir
        logger.info(f"Exporting to: {output_dir}")

    exporter = ProgressExporter(output_dir)
    exporter.export_all(
        sessions, load_today_meals(config), grace_today=args.grace_today
    )


def start_workout(
    client: SupabaseClient, config: AppConfig, workout_id: Optional[str] = None
) -> Optional[WorkoutSession]:
    """
    Start a session for today's workout, or for workout_id when given.

    The new session is kept in the data directory until completed.
    """
    if workout_id is None:
        workout = client.fetch_today_workout()
        if workout is None:
            logger.error("No workout scheduled for today. Pass --workout-id.")
            return None
        print_workout(workout)
        workout_id = workout.id

    session = client.start_session(config.supabase.user_id, workout_id)
    save_sessions_to_json([session], config.paths.data_dir / "active_session.json")
    print(f"\n⏱️  Started session {session.id}")
    return session


def complete_workout(
    client: SupabaseClient,
    config: AppConfig,
    session_id: Optional[str] = None,
    duration: Optional[int] = None,
) -> Optional[int]:
    """
    Complete a session and return the recorded duration in seconds.

    Without session_id the active session is completed, timed from its
    start unless duration is given.
    """
    active_path = config.paths.data_dir / "active_session.json"
    from_active = session_id is None

    if from_active:
        active = load_sessions_from_json(active_path) if active_path.exists() else []
        if not active:
            logger.error("No active session. Run 'workout start' first.")
            return None
        session_id = active[0].id
        if duration is None:
            duration = elapsed_seconds(active[0].started_at)
    elif duration is None:
        logger.error("--duration is required when completing a session by id")
        return None

    client.complete_session(session_id, duration)
    if from_active:
        active_path.unlink()

    print(f"\n✅ Workout complete! Duration: {format_duration(duration)}")
    return duration


def cmd_workout(args: argparse.Namespace, config: AppConfig) -> None:
    """Show, start or complete today's workout."""
    if config.supabase is None:
        logger.error("Supabase not configured. Set SUPABASE_* in .env first.")
        return

    client = SupabaseClient(config.supabase)

    if args.action == "today":
        workout = client.fetch_today_workout()
        if workout is None:
            print("\n😴 Rest day: no workout scheduled for today")
        else:
            print_workout(workout)
    elif args.action == "start":
        start_workout(client, config, args.workout_id)
    else:
        complete_workout(client, config, args.session_id, args.duration)


def cmd_nutrition(args: argparse.Namespace, config: AppConfig) -> None:
    """Analyze a meal description with the AI gateway."""
    if config.gateway is None:
        print("Set LOVABLE_API_KEY in .env first")
        return

    client = NutritionClient(config.gateway)
    try:
        analysis = client.analyze_meal(args.meal)
    except (NutritionError, ValueError) as e:
        logger.error(f"Failed to analyze meal: {e}")
        sys.exit(1)

    print(f"\n🍽️  {args.meal}")
    print(f"   Calories: {analysis.calories:.0f}")
    print(f"   Protein: {analysis.protein:.0f}g")
    print(f"   Carbs: {analysis.carbs:.0f}g")
    print(f"   Fat: {analysis.fat:.0f}g")
    if analysis.suggestions:
        print("\n   Suggestions:")
        for suggestion in analysis.suggestions:
            print(f"     - {suggestion}")

    if args.save:
        if config.supabase is None:
            logger.error("Supabase not configured, meal not saved.")
            return
        SupabaseClient(config.supabase).save_meal(
            config.supabase.user_id, args.meal, analysis
        )


def cmd_delete_meal(args: argparse.Namespace, config: AppConfig) -> None:
    """Delete a logged meal."""
    if config.supabase is None:
        logger.error("Supabase not configured. Set SUPABASE_* in .env first.")
        return

    SupabaseClient(config.supabase).delete_meal(args.meal_id)


def cmd_all(args: argparse.Namespace, config: AppConfig) -> None:
    """Run full pipeline: fetch, analyze, export."""
    logger.info("Running full pipeline...")

    sessions = load_workout_sessions(config, force_refresh=True)
    print_summary(sessions, grace_today=args.grace_today)

    exporter = ProgressExporter(config.paths.export_dir)
    exporter.export_all(
        sessions, load_today_meals(config), grace_today=args.grace_today
    )

    logger.info("Pipeline complete!")


def add_grace_today(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--grace-today",
        action="store_true",
        help="Keep the streak alive when there is no workout yet today",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Workout progress analysis and meal tracking"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # fetch command
    subparsers.add_parser("fetch", help="Fetch this month's sessions")

    # analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Show progress summary")
    add_grace_today(analyze_parser)

    # visualize command
    viz_parser = subparsers.add_parser("visualize", help="Generate charts")
    viz_parser.add_argument(
        "--no-show", action="store_true", help="Save plots without displaying"
    )
    add_grace_today(viz_parser)

    # export command
    export_parser = subparsers.add_parser("export", help="Export chart data")
    export_parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Custom output directory (default: export dir)",
    )
    add_grace_today(export_parser)

    # workout command
    workout_parser = subparsers.add_parser("workout", help="Track today's workout")
    workout_parser.add_argument(
        "action", choices=["today", "start", "complete"], help="What to do"
    )
    workout_parser.add_argument(
        "session_id", nargs="?", help="Session to complete (default: active session)"
    )
    workout_parser.add_argument(
        "--workout-id", type=str, help="Workout to start (default: today's)"
    )
    workout_parser.add_argument(
        "--duration", type=int, help="Duration in seconds (default: time since start)"
    )

    # nutrition command
    nutrition_parser = subparsers.add_parser("nutrition", help="Analyze a meal")
    nutrition_parser.add_argument("meal", help="Description of the meal")
    nutrition_parser.add_argument(
        "--save", action="store_true", help="Log the analysed meal to Supabase"
    )

    # delete-meal command
    delete_parser = subparsers.add_parser("delete-meal", help="Delete a logged meal")
    delete_parser.add_argument("meal_id", help="Id of the meal to delete")

    # all command
    all_parser = subparsers.add_parser("all", help="Run full pipeline")
    add_grace_today(all_parser)

    return parser


def main() -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    config = AppConfig.load()

    commands = {
        "fetch": cmd_fetch,
        "analyze": cmd_analyze,
        "visualize": cmd_visualize,
        "export": cmd_export,
        "workout": cmd_workout,
        "nutrition": cmd_nutrition,
        "delete-meal": cmd_delete_meal,
        "all": cmd_all,
    }

    try:
        commands[args.command](args, config)
    except requests.RequestException as e:
        logger.error(f"Request failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
