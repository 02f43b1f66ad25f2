"""Offline activity sources: JSON files on disk and an in-memory map."""

from __future__ import annotations

import asyncio
from datetime import date
from pathlib import Path

import structlog
from pydantic import ValidationError

from disciplinator.models import ActivityData
from disciplinator.sources.base import ActivitySource, UpstreamDataError

logger = structlog.get_logger(__name__)


class FileActivitySource(ActivitySource):
    """Read ``<data_dir>/<subject>/<YYYY-MM-DD>.json`` documents.

    Each file holds one :class:`ActivityData` object.  A missing file means
    nothing was recorded yet and yields empty data.
    """

    name = "file"

    def __init__(self, data_dir: Path | str) -> None:
        self._data_dir = Path(data_dir)

    def path_for(self, subject: str, day: date) -> Path:
        return self._data_dir / subject / f"{day.isoformat()}.json"

    async def fetch(self, subject: str, day: date) -> ActivityData:
        path = self.path_for(subject, day)
        if not path.exists():
            logger.info("file_source.no_data", subject=subject, path=str(path))
            return ActivityData()

        raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        try:
            return ActivityData.model_validate_json(raw)
        except ValidationError as exc:
            raise UpstreamDataError(f"invalid activity data in {path}: {exc}") from exc


class InMemoryActivitySource(ActivitySource):
    """Dict-backed source for embedding and tests."""

    name = "memory"

    def __init__(self) -> None:
        self._data: dict[tuple[str, date], ActivityData] = {}
        self.fetch_count = 0

    def set(self, subject: str, day: date, data: ActivityData) -> None:
        self._data[(subject, day)] = data

    async def fetch(self, subject: str, day: date) -> ActivityData:
        self.fetch_count += 1
        return self._data.get((subject, day), ActivityData())
