"""Tests for threshold clamping and the hourly debt recurrence."""

from itertools import product

from disciplinator.engine.debt import accumulate_debt, clamp_thresholds, current_debt
from disciplinator.models import HourRecord


def _records(accounted: list[int], *, last_complete: bool = True) -> list[HourRecord]:
    hours = [
        HourRecord(hour=i, complete=True, active_minutes=m, accounted_minutes=m)
        for i, m in enumerate(accounted)
    ]
    if hours and not last_complete:
        hours[-1].complete = False
    return hours


class TestClampThresholds:
    def test_caps_accounted_minutes(self, config):
        hours = clamp_thresholds(_records([3, 40]), config)
        assert [h.accounted_minutes for h in hours] == [3, 15]
        assert hours[1].active_minutes == 40

    def test_caps_existing_debt(self, config):
        hours = [HourRecord(hour=0, debt=100)]
        assert clamp_thresholds(hours, config)[0].debt == 15


class TestAccumulateDebt:
    def test_empty_day(self, config):
        assert accumulate_debt([], config) == []
        assert current_debt([]) == 0

    def test_idle_hours_accrue(self, config):
        hours = accumulate_debt(_records([0] * 10), config)
        assert [h.debt for h in hours] == [5, 10, 15, 20, 25, 30, 35, 40, 45, 50]

    def test_first_hour_always_requires_goal(self, config):
        hours = accumulate_debt(_records([2], last_complete=False), config)
        assert hours[0].debt == 3

    def test_hour_in_progress_requires_nothing_new(self, config):
        hours = accumulate_debt(_records([0, 0], last_complete=False), config)
        assert [h.debt for h in hours] == [5, 5]

    def test_overperformance_discharges_prior_debt(self, config):
        # Prior debt 3, then a capped hour of 10 minutes with a goal of 5.
        hours = _records([2, 100])
        config = config.model_copy(update={"max_accounted_minutes": 10})

        hours = accumulate_debt(clamp_thresholds(hours, config), config)

        assert hours[1].accounted_minutes == 10
        assert hours[1].debt == 0

    def test_surplus_is_not_banked(self, config):
        hours = accumulate_debt(_records([15, 0]), config)
        assert [h.debt for h in hours] == [0, 5]

    def test_debt_limit_is_not_enforced_by_default(self, config):
        hours = accumulate_debt(_records([0] * 5), config)
        assert current_debt(hours) == 25

    def test_debt_limit_enforced_when_enabled(self, config):
        config = config.model_copy(update={"enforce_debt_limit": True})
        hours = accumulate_debt(_records([0] * 5), config)
        assert [h.debt for h in hours] == [5, 10, 15, 15, 15]

    def test_capped_debt_carries_forward(self, config):
        config = config.model_copy(update={"enforce_debt_limit": True})
        hours = accumulate_debt(_records([0, 0, 0, 0, 12]), config)
        assert hours[-1].debt == 15 + 5 - 12

    def test_non_negative_and_bounded(self, config):
        for pattern in product([0, 2, 5, 9, 15], repeat=4):
            for last_complete in (True, False):
                hours = accumulate_debt(_records(list(pattern), last_complete=last_complete), config)
                previous = 0
                for i, h in enumerate(hours):
                    required = 5 if (i == 0 or h.complete) else 0
                    assert h.debt >= 0
                    assert h.debt <= required + previous
                    assert h.debt >= required + previous - h.accounted_minutes
                    previous = h.debt
