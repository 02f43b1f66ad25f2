"""Sleep-window normalisation — seed the day log and disable sleeping hours.

An hour is *tracking disabled* when it lies inside a reported sleep
interval, inside the synthetic morning interval used when no sleep was
reported, or inside the evening wind-down that starts once the subject's
day is over.  Disabled hours are credited with at least the hourly goal so
they neither accrue nor relieve debt.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import time

import structlog

from disciplinator.models import (
    ActivityOverride,
    EvaluatorConfig,
    HourlyActivity,
    HourRecord,
    SleepInterval,
)

logger = structlog.get_logger(__name__)

MIDNIGHT = time(0, 0, 0)
END_OF_DAY = time(23, 59, 59)

_SECONDS_PER_DAY = 24 * 60 * 60


def _to_seconds(t: time) -> int:
    return t.hour * 3600 + t.minute * 60 + t.second


def _from_seconds(seconds: int) -> time:
    seconds %= _SECONDS_PER_DAY
    return time(seconds // 3600, seconds % 3600 // 60, seconds % 60)


def seed_hours(samples: Sequence[HourlyActivity]) -> list[HourRecord]:
    """Create one fresh :class:`HourRecord` per raw sample."""
    return [
        HourRecord(
            hour=s.hour,
            complete=s.complete,
            active_minutes=s.active_minutes,
            accounted_minutes=s.active_minutes,
        )
        for s in samples
    ]


def infer_day_end(intervals: Sequence[SleepInterval], config: EvaluatorConfig) -> time | None:
    """Estimate when the subject's day ends from the reported sleep.

    The day lasts ``day_length_hours`` after the first wake-up, extended by
    the duration of every later interval (naps).  Clock arithmetic wraps at
    midnight like a wall clock; a result that wrapped to before the interval
    end it was computed from is clamped to ``23:59:59``.

    Returns ``None`` when there are no intervals.
    """
    day_end: time | None = None
    for interval in intervals:
        if day_end is None:
            shifted = _to_seconds(interval.end) + config.day_length_hours * 3600
        else:
            shifted = _to_seconds(day_end) + _to_seconds(interval.end) - _to_seconds(interval.start)

        candidate = _from_seconds(shifted)
        if _to_seconds(candidate) < _to_seconds(interval.end):
            candidate = END_OF_DAY
        day_end = candidate
    return day_end


def hour_is_disabled(hour: int, interval: SleepInterval, config: EvaluatorConfig) -> bool:
    """Return ``True`` if *hour* is (mostly) covered by *interval*.

    The hour in which the interval ends counts as covered only when less
    than ``minimum_active_minutes`` of it remain after the interval.
    """
    if interval.start.hour <= hour < interval.end.hour:
        return True
    return hour == interval.end.hour and interval.end.minute > 60 - config.minimum_active_minutes


def effective_intervals(
    intervals: Sequence[SleepInterval], config: EvaluatorConfig
) -> list[SleepInterval]:
    """Reported intervals plus the synthetic morning and evening ones."""
    result = list(intervals)
    if not result:
        # No sleep reported: assume sleeping until the configured day start.
        result.append(SleepInterval(start=MIDNIGHT, end=config.day_begins_at))

    day_end = infer_day_end(result, config)
    logger.debug("sleep_normalizer.day_end", inferred=str(day_end), configured=str(config.day_ends_at))

    wind_down = config.day_ends_at if day_end is None else max(day_end, config.day_ends_at)
    result.append(SleepInterval(start=wind_down, end=END_OF_DAY))
    return result


def normalize_sleep_windows(
    samples: Sequence[HourlyActivity],
    intervals: Sequence[SleepInterval],
    overrides: Sequence[ActivityOverride],
    config: EvaluatorConfig,
) -> list[HourRecord]:
    """Produce the day log with ``tracking_disabled`` and accounted minutes set."""
    hours = seed_hours(samples)
    windows = effective_intervals(intervals, config)

    for record in hours:
        if any(hour_is_disabled(record.hour, w, config) for w in windows):
            record.tracking_disabled = True

    by_hour = {record.hour: record for record in hours}
    for override in overrides:
        record = by_hour.get(override.hour)
        if record is None:
            logger.warning("sleep_normalizer.override_without_hour", hour=override.hour)
            continue
        record.tracking_disabled = not override.is_active

    for record in hours:
        if record.tracking_disabled:
            record.accounted_minutes = max(record.active_minutes, config.minimum_active_minutes)

    return hours
