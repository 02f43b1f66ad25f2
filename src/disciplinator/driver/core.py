"""State driver — poll the evaluated status and fire plugins on changes.

Architecture
~~~~~~~~~~~~
Every ``period`` seconds the ``StateDriver``:

1. Fetches the current :class:`Status` from its :class:`StateSource`.
2. Applies the debounce rule (:func:`should_dispatch`) against the
   previously dispatched status.
3. Invokes every target registered for the status' trigger, concurrently,
   each bounded by a timeout.

Ticks never overlap: a tick, dispatch included, finishes before the driver
sleeps.  A failing state source abandons the tick without touching the
previous status; a failing target is logged and never affects its siblings.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import structlog

from disciplinator.driver.plugins import PluginDirectoryError, PluginRegistry
from disciplinator.driver.source import StateSource
from disciplinator.driver.targets import DispatchTarget
from disciplinator.models import Status, Trigger

logger = structlog.get_logger(__name__)


@dataclass
class DriverState:
    """Mutable state owned by one polling loop."""

    previous_status: Status | None = None


def should_dispatch(previous: Status | None, current: Status) -> bool:
    """Debounce rule.

    Resting states (``Normal``, ``DebtCollectionPaused``) fire once on
    entry; ``DebtCollection`` fires on every poll.
    """
    if previous is None or not previous.same_variant(current):
        return True
    return current.is_debt_collection


@dataclass(frozen=True, slots=True)
class TickResult:
    """Outcome of a single poll."""

    status: Status | None
    dispatched: bool = False
    sent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def trigger(self) -> Trigger | None:
        return self.status.trigger if self.status is not None else None

    @property
    def all_ok(self) -> bool:
        return self.error is None and not self.failed


class StateDriver:
    """Sequential polling loop with debounced, failure-isolated dispatch.

    Integration::

        driver = StateDriver(HttpStateSource(url), PluginRegistry("./plugins"))
        await driver.start()
        ...
        await driver.stop()
    """

    def __init__(
        self,
        source: StateSource,
        registry: PluginRegistry,
        *,
        period: float = 60.0,
        action_timeout: float = 30.0,
        reload_plugins: bool = False,
        state: DriverState | None = None,
    ) -> None:
        self._source = source
        self._registry = registry
        self._period = period
        self._action_timeout = action_timeout
        self._reload_plugins = reload_plugins
        self._state = state or DriverState()
        self._running = False
        self._task: asyncio.Task | None = None

        self._stats: dict[str, Any] = {
            "last_poll": None,
            "total_polls": 0,
            "failed_polls": 0,
            "dispatches": 0,
            "failed_actions": 0,
        }

    # ── Lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        """Start the polling loop as a background task."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "driver.started",
            period_seconds=self._period,
            targets=self._registry.describe(),
        )

    async def stop(self) -> None:
        """Stop the loop; an in-flight tick is cancelled."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("driver.stopped")

    async def run(self) -> None:
        """Run the loop in the foreground until cancelled."""
        self._running = True
        await self._run_loop()

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def stats(self) -> dict[str, Any]:
        return dict(self._stats)

    @property
    def is_running(self) -> bool:
        return self._running

    # ── Main loop ─────────────────────────────────────────────

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await self.poll_once()
            except Exception:
                logger.exception("driver.run_error")

            await asyncio.sleep(self._period)

    async def poll_once(self) -> TickResult:
        """Fetch, decide, dispatch.  Never raises for source or target failures."""
        self._stats["total_polls"] += 1
        self._stats["last_poll"] = datetime.now(UTC).isoformat()
        logger.debug("driver.tick_started")

        try:
            status = await self._source.fetch_status()
        except Exception as exc:
            self._stats["failed_polls"] += 1
            logger.error("driver.tick_failed", error=str(exc), error_type=type(exc).__name__)
            return TickResult(status=None, error=str(exc))

        if not should_dispatch(self._state.previous_status, status):
            logger.info("driver.status_unchanged", status=status.type.value)
            return TickResult(status=status)

        logger.info(
            "driver.status_changed",
            status=status.type.value,
            previous=(
                self._state.previous_status.type.value
                if self._state.previous_status is not None
                else None
            ),
            debt=status.record.debt,
            accounted_minutes=status.record.accounted_minutes,
        )
        self._state.previous_status = status

        if self._reload_plugins:
            self._reload_registry()

        sent, failed = await self.dispatch(status)
        return TickResult(status=status, dispatched=True, sent=sent, failed=failed)

    # ── Dispatch ──────────────────────────────────────────────

    async def dispatch(self, status: Status) -> tuple[list[str], list[str]]:
        """Invoke every target for the status' trigger and wait for all of them.

        Returns ``(sent, failed)`` target names.
        """
        targets = self._registry.targets_for(status.trigger)
        if not targets:
            logger.debug("driver.no_targets", trigger=status.trigger.value)
            return [], []

        outcomes = await asyncio.gather(*(self._invoke(t, status) for t in targets))

        sent = [t.name for t, ok in zip(targets, outcomes) if ok]
        failed = [t.name for t, ok in zip(targets, outcomes) if not ok]
        self._stats["dispatches"] += 1
        self._stats["failed_actions"] += len(failed)
        if failed:
            logger.warning("driver.partial_failure", trigger=status.trigger.value, failed=failed)
        return sent, failed

    async def _invoke(self, target: DispatchTarget, status: Status) -> bool:
        timeout = target.timeout or self._action_timeout
        logger.info("driver.triggering", target=target.name, trigger=status.trigger.value)
        try:
            return await asyncio.wait_for(target.invoke(status.trigger, status.record), timeout)
        except TimeoutError:
            logger.error("driver.action_timeout", target=target.name, timeout_seconds=timeout)
        except Exception:
            logger.exception("driver.action_error", target=target.name)
        return False

    def _reload_registry(self) -> None:
        try:
            self._registry.reload()
        except PluginDirectoryError as exc:
            logger.warning("driver.plugin_reload_failed", error=str(exc))
