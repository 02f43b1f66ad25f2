"""Evaluation service — settings + source + overrides → cached summary."""

from __future__ import annotations

from datetime import datetime

import structlog

from disciplinator.cache import SummaryCache
from disciplinator.engine.evaluator import DebtEvaluator
from disciplinator.models import Status, Summary
from disciplinator.sources.base import ActivitySource, UpstreamDataError
from disciplinator.stores import OverrideStore, SettingsStore

logger = structlog.get_logger(__name__)


class EvaluationService:
    """Entry point for request handlers and in-process drivers.

    Integration::

        service = EvaluationService(source, SettingsStore(), OverrideStore(), SummaryCache())
        summary = await service.summary("P001")
    """

    def __init__(
        self,
        source: ActivitySource,
        settings_store: SettingsStore,
        override_store: OverrideStore,
        cache: SummaryCache,
    ) -> None:
        self._source = source
        self._settings = settings_store
        self._overrides = override_store
        self._cache = cache

    @property
    def settings_store(self) -> SettingsStore:
        return self._settings

    @property
    def override_store(self) -> OverrideStore:
        return self._overrides

    @property
    def cache(self) -> SummaryCache:
        return self._cache

    async def summary(self, subject: str, at: datetime | None = None) -> Summary:
        """Return the subject's current summary.

        Upstream data errors degrade to the safe default summary, which is
        not cached so the next request retries the source.  A cached
        summary is reused only for the day it was evaluated for.
        """
        at = at or datetime.now()
        try:
            return await self._cache.get_or_compute(
                subject, lambda: self.evaluate(subject, at), day=at.date()
            )
        except UpstreamDataError as exc:
            logger.error("evaluation.upstream_data_error", subject=subject, error=str(exc))
            return DebtEvaluator.fallback_summary()

    async def status(self, subject: str, at: datetime | None = None) -> Status:
        return (await self.summary(subject, at)).status

    async def evaluate(self, subject: str, at: datetime | None = None) -> Summary:
        """Evaluate without consulting the cache."""
        day = (at or datetime.now()).date()
        config = self._settings.get(subject).evaluator_config()
        data = await self._source.fetch(subject, day)
        overrides = self._overrides.list(subject, day)

        summary = DebtEvaluator(config, data, overrides).current_summary()
        logger.info(
            "evaluation.complete",
            subject=subject,
            date=day.isoformat(),
            status=summary.status.type.value,
            debt=summary.status.record.debt,
        )
        return summary

    def invalidate(self, subject: str) -> None:
        self._cache.invalidate(subject)

    async def close(self) -> None:
        await self._source.close()
