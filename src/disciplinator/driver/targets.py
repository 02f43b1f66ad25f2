"""Dispatch targets — executable plugins, log and webhook delivery.

Architecture
~~~~~~~~~~~~
* **DispatchTarget** — abstract action invoked on a state change.
* **ExecutableTarget** — spawns an external program (plugin).
* **LogTarget / WebhookTarget** — in-process alternatives.

Adding a new target
~~~~~~~~~~~~~~~~~~~
1. Subclass ``DispatchTarget``.
2. Implement ``async invoke(trigger, record) -> bool``.
3. Set ``name`` and the ``triggers`` it reacts to.
4. Register via ``PluginRegistry.add(...)``.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

import httpx
import structlog

from disciplinator.models import HourRecord, Trigger

logger = structlog.get_logger(__name__)

ALL_TRIGGERS: frozenset[Trigger] = frozenset(Trigger)


def invocation_args(trigger: Trigger, record: HourRecord) -> list[str]:
    """Positional arguments handed to every plugin: state, accounted minutes, debt."""
    return [trigger.value, str(record.accounted_minutes), str(record.debt)]


# ── Abstract target ───────────────────────────────────────────


class DispatchTarget(ABC):
    """Contract for actions fired by the state driver.

    ``timeout`` overrides the driver-wide per-action timeout when set.
    """

    name: str = "base"
    triggers: frozenset[Trigger] = ALL_TRIGGERS
    timeout: float | None = None

    def handles(self, trigger: Trigger) -> bool:
        return trigger in self.triggers

    @abstractmethod
    async def invoke(self, trigger: Trigger, record: HourRecord) -> bool:
        """Run the action.  Return ``True`` on success."""


# ── Concrete targets ──────────────────────────────────────────


class ExecutableTarget(DispatchTarget):
    """Launch an executable with :func:`invocation_args`.

    Exit code 0 is success.  A launch failure raises (``OSError``) and is
    reported by the driver; a cancelled invocation kills the child process.
    """

    def __init__(
        self,
        path: Path | str,
        triggers: Iterable[Trigger] = ALL_TRIGGERS,
        *,
        name: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.path = Path(path)
        self.triggers = frozenset(triggers)
        self.name = name or self.path.name
        self.timeout = timeout

    async def invoke(self, trigger: Trigger, record: HourRecord) -> bool:
        proc = await asyncio.create_subprocess_exec(str(self.path), *invocation_args(trigger, record))
        try:
            returncode = await proc.wait()
        except asyncio.CancelledError:
            proc.kill()
            await proc.wait()
            raise

        if returncode != 0:
            logger.error("plugin.exit_failure", plugin=str(self.path), returncode=returncode)
            return False
        logger.info("plugin.finished", plugin=str(self.path))
        return True


class LogTarget(DispatchTarget):
    """Write state changes to the structured log."""

    name = "log"

    def __init__(self, triggers: Iterable[Trigger] = ALL_TRIGGERS) -> None:
        self.triggers = frozenset(triggers)

    async def invoke(self, trigger: Trigger, record: HourRecord) -> bool:
        logger.info(
            "dispatch.log",
            trigger=trigger.value,
            hour=record.hour,
            accounted_minutes=record.accounted_minutes,
            debt=record.debt,
        )
        return True


class WebhookTarget(DispatchTarget):
    """POST the state change as JSON to an external webhook URL."""

    name = "webhook"

    def __init__(
        self,
        url: str,
        triggers: Iterable[Trigger] = ALL_TRIGGERS,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self.triggers = frozenset(triggers)
        self._http_timeout = timeout
        self._transport = transport

    async def invoke(self, trigger: Trigger, record: HourRecord) -> bool:
        payload = {
            "trigger": trigger.value,
            "accounted_minutes": record.accounted_minutes,
            "debt": record.debt,
            "record": record.model_dump(mode="json"),
        }
        try:
            async with httpx.AsyncClient(timeout=self._http_timeout, transport=self._transport) as client:
                resp = await client.post(self._url, json=payload)
                resp.raise_for_status()
            logger.info("dispatch.webhook_sent", url=self._url, trigger=trigger.value)
            return True
        except httpx.HTTPError as exc:
            logger.error("dispatch.webhook_failed", url=self._url, error=str(exc))
            return False
