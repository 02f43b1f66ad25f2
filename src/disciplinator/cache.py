"""Short-lived per-subject memoisation of evaluated summaries."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable
from datetime import UTC, date, datetime, timedelta

import structlog

from disciplinator.models import Summary

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SummaryCache:
    """Map subject id → ``(summary, day, computed_at)`` with a read-time TTL check.

    There is one entry per subject and no background eviction: a stale
    entry simply reads as a miss until it is overwritten.  An entry also
    reads as a miss when it was evaluated for a different day than the one
    asked for.

    :meth:`get_or_compute` serialises evaluate-and-store per subject with an
    :class:`asyncio.Lock`, so concurrent requests for one subject evaluate
    once while other subjects proceed independently.  :meth:`invalidate`
    releases an idle subject's lock along with its entry.
    """

    def __init__(self, ttl: timedelta = timedelta(minutes=1), *, clock: Clock = _utcnow) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[Summary, date | None, datetime]] = {}
        self._guard = threading.Lock()
        self._key_locks: dict[str, asyncio.Lock] = {}

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def get(self, subject: str, day: date | None = None) -> Summary | None:
        """Return the cached summary if it is younger than the TTL.

        With *day*, an entry evaluated for another day is a miss.
        """
        with self._guard:
            entry = self._entries.get(subject)
        if entry is None:
            return None
        summary, evaluated_day, computed_at = entry
        if day is not None and evaluated_day != day:
            return None
        if self._clock() - computed_at < self._ttl:
            return summary.model_copy(deep=True)
        return None

    def put(self, subject: str, summary: Summary, day: date | None = None) -> None:
        with self._guard:
            self._entries[subject] = (summary.model_copy(deep=True), day, self._clock())

    def invalidate(self, subject: str) -> bool:
        """Drop the entry for *subject*.  Return ``True`` if one existed."""
        with self._guard:
            lock = self._key_locks.get(subject)
            if lock is not None and not lock.locked():
                del self._key_locks[subject]
            return self._entries.pop(subject, None) is not None

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    async def get_or_compute(
        self,
        subject: str,
        compute: Callable[[], Awaitable[Summary]],
        day: date | None = None,
    ) -> Summary:
        """Return a fresh cached summary for *day*, or evaluate and store a new one."""
        async with self._lock_for(subject):
            cached = self.get(subject, day)
            if cached is not None:
                logger.debug("summary_cache.hit", subject=subject)
                return cached

            logger.debug("summary_cache.miss", subject=subject)
            summary = await compute()
            self.put(subject, summary, day)
            return summary

    def _lock_for(self, subject: str) -> asyncio.Lock:
        with self._guard:
            lock = self._key_locks.get(subject)
            if lock is None:
                lock = self._key_locks[subject] = asyncio.Lock()
            return lock
