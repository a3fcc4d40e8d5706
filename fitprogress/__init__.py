"""
Fitness progress analytics package.

This package provides tools for fetching workout sessions and meals
from Supabase, aggregating them into progress metrics, charting the
results and analysing meals through the AI gateway.
"""

__version__ = "0.1.0"
