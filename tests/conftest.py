"""Shared pytest fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from datetime import time

import pytest

from disciplinator.driver.source import StateSource
from disciplinator.driver.targets import ALL_TRIGGERS, DispatchTarget
from disciplinator.models import (
    EvaluatorConfig,
    HourlyActivity,
    HourRecord,
    Status,
    Trigger,
)


def make_samples(
    active: Sequence[int],
    *,
    first_hour: int = 0,
    last_complete: bool = True,
) -> list[HourlyActivity]:
    """Consecutive hourly samples starting at *first_hour*."""
    samples = [
        HourlyActivity(hour=first_hour + i, complete=True, active_minutes=minutes)
        for i, minutes in enumerate(active)
    ]
    if samples and not last_complete:
        samples[-1].complete = False
    return samples


def make_status(kind: Trigger, *, debt: int = 0, accounted: int = 0, hour: int = 12) -> Status:
    return Status(
        type=kind,
        record=HourRecord(hour=hour, complete=True, active_minutes=accounted, accounted_minutes=accounted, debt=debt),
    )


class ScriptedStateSource(StateSource):
    """Return queued statuses in order; queued exceptions are raised."""

    def __init__(self, script: Iterable[Status | Exception]) -> None:
        self._script = list(script)
        self._last: Status | None = None
        self.calls = 0

    async def fetch_status(self) -> Status:
        self.calls += 1
        item = self._script.pop(0) if self._script else self._last
        if item is None:
            raise RuntimeError("script exhausted")
        if isinstance(item, Exception):
            raise item
        self._last = item
        return item


class RecordingTarget(DispatchTarget):
    """Dispatch target remembering every invocation."""

    def __init__(
        self,
        name: str,
        triggers: Iterable[Trigger] = ALL_TRIGGERS,
        *,
        result: bool = True,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.name = name
        self.triggers = frozenset(triggers)
        self.calls: list[tuple[Trigger, HourRecord]] = []
        self._result = result
        self._error = error
        self._delay = delay

    async def invoke(self, trigger: Trigger, record: HourRecord) -> bool:
        self.calls.append((trigger, record))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._result


@pytest.fixture
def config() -> EvaluatorConfig:
    return EvaluatorConfig(
        minimum_active_minutes=5,
        max_accounted_minutes=15,
        debt_limit=15,
        day_begins_at=time(8, 0),
        day_ends_at=time(22, 0),
        day_length_hours=14,
    )


@pytest.fixture
def normal() -> Status:
    return make_status(Trigger.NORMAL)


@pytest.fixture
def collecting() -> Status:
    return make_status(Trigger.DEBT_COLLECTION, debt=10, accounted=2)


@pytest.fixture
def paused() -> Status:
    return make_status(Trigger.DEBT_COLLECTION_PAUSED, debt=10, accounted=15)
