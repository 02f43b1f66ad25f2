"""Threshold clamping and the hourly debt recurrence."""

from __future__ import annotations

from disciplinator.models import EvaluatorConfig, HourRecord


def clamp_thresholds(hours: list[HourRecord], config: EvaluatorConfig) -> list[HourRecord]:
    """Cap accounted minutes and debt at their configured ceilings.

    Runs before :func:`accumulate_debt`, so the debt cap only touches debt
    that already exists on the records (none, for a fresh day log).  Use
    ``EvaluatorConfig.enforce_debt_limit`` to cap the accumulated debt.
    """
    for h in hours:
        h.accounted_minutes = min(h.accounted_minutes, config.max_accounted_minutes)
        h.debt = min(h.debt, config.debt_limit)
    return hours


def accumulate_debt(hours: list[HourRecord], config: EvaluatorConfig) -> list[HourRecord]:
    """Populate ``debt`` hour by hour.

    ``debt[0] = max(0, goal - accounted[0])`` and, for later hours,
    ``debt[i] = max(0, required[i] + debt[i-1] - accounted[i])`` where
    ``required[i]`` is the goal for complete hours and ``0`` for the hour in
    progress.  Surplus activity never goes negative, so it cannot be banked
    against future hours.
    """
    previous = 0
    for i, h in enumerate(hours):
        if i == 0:
            owed = config.minimum_active_minutes
        else:
            required = config.minimum_active_minutes if h.complete else 0
            owed = required + previous

        h.debt = max(0, owed - h.accounted_minutes)
        if config.enforce_debt_limit:
            h.debt = min(h.debt, config.debt_limit)
        previous = h.debt
    return hours


def current_debt(hours: list[HourRecord]) -> int:
    return hours[-1].debt if hours else 0
