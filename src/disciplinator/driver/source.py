"""Where the driver reads the current :class:`Status` from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from disciplinator.models import Status, Summary


class StateSource(ABC):
    """Anything that can answer "what is the current status?"."""

    @abstractmethod
    async def fetch_status(self) -> Status:
        """Return the current status or raise on failure."""

    async def close(self) -> None:
        """Release any resources held by the source."""


def parse_status(body: Any) -> Status:
    """Accept either a full ``Summary`` document or a bare ``Status``."""
    if isinstance(body, dict) and "status" in body:
        return Summary.model_validate(body).status
    return Status.model_validate(body)


class HttpStateSource(StateSource):
    """GET the status from the headmaster service (split-process deployment)."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    async def fetch_status(self) -> Status:
        resp = await self._client.get(self._url)
        resp.raise_for_status()
        return parse_status(resp.json())

    async def close(self) -> None:
        await self._client.aclose()


class CallableStateSource(StateSource):
    """Wrap an async callable, e.g. ``lambda: service.status("P001")``."""

    def __init__(self, fn: Callable[[], Awaitable[Status]]) -> None:
        self._fn = fn

    async def fetch_status(self) -> Status:
        return await self._fn()
