"""Disciplinator — hourly activity debt tracking with pluggable reminders."""

__version__ = "0.1.0"
