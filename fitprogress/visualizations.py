"""
Progress data visualization.

Provides functions for charting the weekly workout series, the
monthly summary and the day's macro split with matplotlib.
"""

import logging
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np

from .models import ProgressStats, WeekdayCount, NutritionTotals


logger = logging.getLogger(__name__)

# plot styling
plt.style.use("seaborn-v0_8-whitegrid")
COLORS = {
    "primary": "#2563eb",
    "secondary": "#64748b",
    "accent": "#f59e0b",
    "success": "#10b981",
    "destructive": "#ef4444",
}


def _finish(output_path: Optional[Path], show: bool) -> None:
    """Save and/or display the current figure."""
    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        logger.info(f"Saved plot to {output_path}")

    if show:
        plt.show()
    else:
        plt.close()


def plot_weekly_workouts(
    weekly: List[WeekdayCount],
    output_path: Optional[Path] = None,
    show: bool = True,
) -> None:
    """
    Bar chart of this week's completed workouts, Sunday first.

    Parameters:
        weekly: Seven day-of-week counters.
        output_path: Optional path to save the figure.
        show: Whether to display the plot.
    """
    if not weekly:
        logger.warning("No weekly data to plot")
        return

    fig, ax = plt.subplots(figsize=(10, 6))

    x = np.arange(len(weekly))
    counts = [d.workouts for d in weekly]
    total = sum(counts)

    ax.bar(x, counts, color=COLORS["accent"], alpha=0.9)

    ax.set_xticks(x)
    ax.set_xticklabels([d.day for d in weekly])
    ax.yaxis.get_major_locator().set_params(integer=True)
    ax.set_ylabel("Workouts", fontsize=11)
    ax.set_title("This Week's Activity", fontsize=14, fontweight="bold")

    plural = "" if total == 1 else "s"
    ax.text(
        0.01,
        0.97,
        f"{total} workout{plural} completed",
        transform=ax.transAxes,
        va="top",
        fontsize=10,
        color=COLORS["secondary"],
    )

    ax.grid(True, alpha=0.3, axis="y")
    _finish(output_path, show)


def plot_monthly_summary(
    stats: ProgressStats,
    output_path: Optional[Path] = None,
    show: bool = True,
) -> None:
    """
    Side-by-side panels with the month's headline numbers.

    Parameters:
        stats: Progress metrics for the month.
        output_path: Optional path to save the figure.
        show: Whether to display the plot.
    """
    panels = [
        ("Total Workouts", f"{stats.workouts_this_month}", COLORS["primary"]),
        ("Calories Burned", f"{stats.calories_burned:,}", COLORS["accent"]),
        ("Active Days", f"{stats.active_days}", COLORS["success"]),
        ("Current Streak", f"{stats.current_streak}", COLORS["secondary"]),
    ]

    fig, axes = plt.subplots(1, len(panels), figsize=(14, 3))

    for ax, (label, value, color) in zip(axes, panels):
        ax.text(0.5, 0.6, value, ha="center", va="center", fontsize=28,
                fontweight="bold", color=color)
        ax.text(0.5, 0.2, label, ha="center", va="center", fontsize=11)
        ax.set_axis_off()

    fig.suptitle(
        f"Monthly Summary ({stats.month_start.strftime('%B %Y')})",
        fontsize=14,
        fontweight="bold",
    )
    _finish(output_path, show)


def plot_macro_split(
    totals: NutritionTotals,
    output_path: Optional[Path] = None,
    show: bool = True,
) -> None:
    """
    Pie chart of the day's protein, carbs and fat in grams.
    """
    sizes = [totals.protein, totals.carbs, totals.fats]

    if not any(sizes):
        logger.warning("No macro data to plot")
        return

    fig, ax = plt.subplots(figsize=(8, 8))

    colors = [COLORS["primary"], COLORS["accent"], COLORS["destructive"]]
    ax.pie(
        sizes,
        labels=["Protein", "Carbs", "Fat"],
        autopct="%1.1f%%",
        colors=colors,
        startangle=90,
    )
    ax.set_title(
        f"Today's Macros ({totals.calories:.0f} / {totals.goal} kcal)",
        fontsize=14,
        fontweight="bold",
    )
    _finish(output_path, show)
