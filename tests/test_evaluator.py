"""Tests for the full evaluation pipeline."""

from datetime import time

from structlog.testing import capture_logs

from conftest import make_samples
from disciplinator.engine.evaluator import DebtEvaluator
from disciplinator.models import ActivityData, ActivityOverride, SleepInterval, Trigger


def test_idle_day_collects_debt(config):
    data = ActivityData(hourly_activity=make_samples([0] * 10, first_hour=8))

    summary = DebtEvaluator(config, data).current_summary()

    assert [h.debt for h in summary.day_log] == [5, 10, 15, 20, 25, 30, 35, 40, 45, 50]
    assert summary.status.type is Trigger.DEBT_COLLECTION
    assert summary.status.record.hour == 17
    assert summary.status.record.debt == 50


def test_debt_paused_when_hour_is_capped(config):
    active = [0] * 5 + [15]
    data = ActivityData(hourly_activity=make_samples(active, first_hour=8, last_complete=False))

    status = DebtEvaluator(config, data).current_summary().status

    assert status.type is Trigger.DEBT_COLLECTION_PAUSED
    assert status.record.debt == 10


def test_active_day_is_normal(config):
    data = ActivityData(hourly_activity=make_samples([6, 9, 5, 12], first_hour=9))
    assert DebtEvaluator(config, data).current_summary().status.type is Trigger.NORMAL


def test_sleep_and_overrides_flow_through(config):
    data = ActivityData(
        hourly_activity=make_samples([0] * 12),
        sleep_intervals=[SleepInterval(start=time(0, 0), end=time(9, 0))],
    )
    overrides = [ActivityOverride(hour=10, is_active=False)]

    day_log = DebtEvaluator(config, data, overrides).day_log()

    assert all(h.tracking_disabled for h in day_log[:9])
    assert not day_log[9].tracking_disabled
    assert day_log[10].tracking_disabled
    # Hours 0..8 credited, hour 9 owes the goal, hour 10 credited, hour 11 owes again.
    assert [h.debt for h in day_log[8:]] == [0, 5, 5, 10]


def test_empty_data_falls_back_to_normal(config):
    with capture_logs() as logs:
        summary = DebtEvaluator(config, ActivityData()).current_summary()

    assert summary.status.type is Trigger.NORMAL
    assert summary.status.record.tracking_disabled
    assert summary.day_log == []
    assert any(e["event"] == "debt_evaluator.no_hour_data" for e in logs)


def test_repeated_evaluation_is_stable(config):
    data = ActivityData(hourly_activity=make_samples([0, 3, 7], first_hour=8))
    evaluator = DebtEvaluator(config, data)
    assert evaluator.current_summary() == evaluator.current_summary()


def test_fallback_summary():
    summary = DebtEvaluator.fallback_summary()
    assert summary.status.type is Trigger.NORMAL
    assert summary.day_log == []
