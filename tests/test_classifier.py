"""Tests for state classification."""

import pytest

from disciplinator.engine.classifier import classify, fallback_record
from disciplinator.models import HourRecord, Trigger


@pytest.mark.parametrize(
    ("debt", "accounted", "expected"),
    [
        (0, 0, Trigger.NORMAL),
        (0, 15, Trigger.NORMAL),
        (4, 0, Trigger.DEBT_COLLECTION),
        (4, 14, Trigger.DEBT_COLLECTION),
        (4, 15, Trigger.DEBT_COLLECTION_PAUSED),
    ],
)
def test_classify(debt, accounted, expected):
    hour = HourRecord(hour=10, debt=debt, active_minutes=accounted, accounted_minutes=accounted)
    assert classify(hour, 15).type is expected


def test_classify_is_pure():
    hour = HourRecord(hour=10, debt=3, accounted_minutes=1)
    first = classify(hour, 15)
    second = classify(hour, 15)
    assert first == second


def test_status_keeps_its_own_record():
    hour = HourRecord(hour=10, debt=3, accounted_minutes=1)
    status = classify(hour, 15)
    hour.debt = 0
    assert status.record.debt == 3


def test_fallback_record_is_normal():
    record = fallback_record()
    assert record.tracking_disabled
    assert record.complete
    assert classify(record, 15).type is Trigger.NORMAL
