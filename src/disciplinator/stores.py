"""In-process stores for per-subject settings and activity overrides.

Durable persistence belongs to the deployment; these stores keep the same
lookups the evaluation service needs, keyed the way a database would key
them (subject, or subject + date + hour).
"""

from __future__ import annotations

import threading
from datetime import date

from disciplinator.config import Settings
from disciplinator.models import ActivityOverride, SubjectSettings


def default_subject_settings(settings: Settings) -> SubjectSettings:
    """Subject settings seeded from the server-wide defaults."""
    return SubjectSettings(
        hourly_activity_goal=settings.hourly_activity_goal,
        hourly_activity_limit=settings.hourly_activity_limit,
        hourly_debt_limit=settings.hourly_debt_limit,
        day_starts_at=settings.day_starts_at,
        day_ends_at=settings.day_ends_at,
        day_length=settings.day_length,
        enforce_debt_limit=settings.enforce_debt_limit,
    )


class SettingsStore:
    """Subject → :class:`SubjectSettings`, falling back to a default."""

    def __init__(self, default: SubjectSettings | None = None) -> None:
        self._default = default or SubjectSettings()
        self._by_subject: dict[str, SubjectSettings] = {}
        self._lock = threading.Lock()

    def get(self, subject: str) -> SubjectSettings:
        with self._lock:
            return self._by_subject.get(subject, self._default)

    def set(self, subject: str, value: SubjectSettings) -> None:
        with self._lock:
            self._by_subject[subject] = value


class OverrideStore:
    """``(subject, date, hour)`` → :class:`ActivityOverride`."""

    def __init__(self) -> None:
        self._rows: dict[tuple[str, date], dict[int, ActivityOverride]] = {}
        self._lock = threading.Lock()

    def list(self, subject: str, day: date) -> list[ActivityOverride]:
        with self._lock:
            rows = self._rows.get((subject, day), {})
            return [rows[h] for h in sorted(rows)]

    def set(self, subject: str, day: date, override: ActivityOverride) -> None:
        with self._lock:
            self._rows.setdefault((subject, day), {})[override.hour] = override

    def clear(self, subject: str, day: date) -> int:
        """Remove all overrides for the day.  Return how many were removed."""
        with self._lock:
            return len(self._rows.pop((subject, day), {}))
