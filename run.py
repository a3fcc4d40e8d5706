#!/usr/bin/env python
"""
Fitness progress CLI runner.

Usage:
    python run.py fetch              # fetch this month's sessions
    python run.py analyze            # show progress summary
    python run.py visualize          # generate charts
    python run.py export             # export chart data
    python run.py workout start      # start today's workout
    python run.py workout complete   # finish the active workout
    python run.py nutrition "meal"   # analyze a meal
    python run.py delete-meal ID     # delete a logged meal
    python run.py all                # full pipeline
"""

from fitprogress.main import main

if __name__ == "__main__":
    main()
