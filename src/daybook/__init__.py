"""Daybook: log time and expenses per day and review where they went."""

__version__ = "0.1.0"
