"""Tests for the evaluation service."""

from datetime import date, datetime

import pytest
from structlog.testing import capture_logs

from conftest import make_samples
from disciplinator.cache import SummaryCache
from disciplinator.models import ActivityData, ActivityOverride, SubjectSettings, Trigger
from disciplinator.service import EvaluationService
from disciplinator.sources.base import ActivitySource, UpstreamDataError
from disciplinator.sources.files import InMemoryActivitySource
from disciplinator.stores import OverrideStore, SettingsStore

DAY = date(2024, 5, 1)
AT = datetime(2024, 5, 1, 14, 30)


class BrokenSource(ActivitySource):
    name = "broken"

    def __init__(self) -> None:
        self.fetch_count = 0

    async def fetch(self, subject, day):
        self.fetch_count += 1
        raise UpstreamDataError("garbage")


@pytest.fixture
def source():
    source = InMemoryActivitySource()
    source.set("P001", DAY, ActivityData(hourly_activity=make_samples([0] * 6, first_hour=8)))
    return source


@pytest.fixture
def service(source):
    return EvaluationService(source, SettingsStore(), OverrideStore(), SummaryCache())


@pytest.mark.asyncio
async def test_summary_evaluates_subject_day(service):
    summary = await service.summary("P001", AT)
    assert summary.status.type is Trigger.DEBT_COLLECTION
    assert summary.status.record.debt == 30
    assert len(summary.day_log) == 6


@pytest.mark.asyncio
async def test_summary_is_cached(service, source):
    first = await service.summary("P001", AT)
    second = await service.summary("P001", AT)
    assert first == second
    assert source.fetch_count == 1


@pytest.mark.asyncio
async def test_cached_summary_is_not_reused_for_another_day(service, source):
    source.set("P001", date(2024, 5, 2), ActivityData(hourly_activity=make_samples([10, 10], first_hour=8)))

    first = await service.summary("P001", AT)
    second = await service.summary("P001", datetime(2024, 5, 2, 9, 30))
    again = await service.summary("P001", datetime(2024, 5, 2, 9, 45))

    assert first.status.record.debt == 30
    assert second.status.type is Trigger.NORMAL
    assert second.status.record.debt == 0
    assert again == second
    assert source.fetch_count == 2


@pytest.mark.asyncio
async def test_status_shares_the_cache(service, source):
    await service.summary("P001", AT)
    status = await service.status("P001", AT)
    assert status.type is Trigger.DEBT_COLLECTION
    assert source.fetch_count == 1


@pytest.mark.asyncio
async def test_unknown_subject_gets_fallback(service):
    status = await service.status("P404", AT)
    assert status.type is Trigger.NORMAL
    assert status.record.tracking_disabled


@pytest.mark.asyncio
async def test_subject_settings_apply(service):
    service.settings_store.set("P001", SubjectSettings(hourly_activity_goal=10))
    summary = await service.summary("P001", AT)
    assert summary.status.record.debt == 60


@pytest.mark.asyncio
async def test_overrides_apply_after_invalidation(service):
    await service.summary("P001", AT)
    service.override_store.set("P001", DAY, ActivityOverride(hour=13, is_active=False))
    service.invalidate("P001")

    summary = await service.summary("P001", AT)

    assert summary.day_log[-1].tracking_disabled
    assert summary.status.record.debt == 25


@pytest.mark.asyncio
async def test_upstream_error_falls_back_uncached():
    source = BrokenSource()
    service = EvaluationService(source, SettingsStore(), OverrideStore(), SummaryCache())

    with capture_logs() as logs:
        summary = await service.summary("P001", AT)
        await service.summary("P001", AT)

    assert summary.status.type is Trigger.NORMAL
    assert summary.day_log == []
    assert source.fetch_count == 2
    assert len(service.cache) == 0
    assert any(e["event"] == "evaluation.upstream_data_error" for e in logs)


@pytest.mark.asyncio
async def test_transport_errors_propagate():
    class Unreachable(InMemoryActivitySource):
        async def fetch(self, subject, day):
            raise ConnectionError("down")

    service = EvaluationService(Unreachable(), SettingsStore(), OverrideStore(), SummaryCache())
    with pytest.raises(ConnectionError):
        await service.summary("P001", AT)
