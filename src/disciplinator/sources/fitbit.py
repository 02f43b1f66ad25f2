"""Fitbit Web API activity source.

Hourly activity is derived from the intraday calories log at 1-minute
resolution: Fitbit tags every minute with an activity ``level`` (0 =
sedentary, 1 = lightly, 2 = fairly, 3 = very active).  Active minutes of an
hour are the minutes with a level above zero.

Sleep intervals come from the v1.2 sleep log and are clipped to the
requested date.

See: https://dev.fitbit.com/build/reference/web-api/
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime
from typing import Any

import httpx
import structlog

from disciplinator.engine.normalizer import END_OF_DAY, MIDNIGHT
from disciplinator.models import ActivityData, HourlyActivity, SleepInterval
from disciplinator.sources.base import ActivitySource, UpstreamDataError

logger = structlog.get_logger(__name__)

_CALORIES_INTRADAY = "/1/user/-/activities/calories/date/{date}/1d/1min.json"
_SLEEP_LOG = "/1.2/user/-/sleep/date/{date}.json"

# Older API versions report the dataset under the activity-log key.
_INTRADAY_KEYS = ("activities-calories-intraday", "activities-log-calories-intraday")


class FitbitActivitySource(ActivitySource):
    """Fetch hourly activity and sleep intervals from the Fitbit Web API.

    Usage::

        source = FitbitActivitySource(access_token="...")
        data = await source.fetch("P001", date.today())
        await source.close()

    Token acquisition and refresh are handled outside this class; pass a
    ready ``httpx.AsyncClient`` to control transport and auth entirely.
    """

    name = "fitbit"

    def __init__(
        self,
        access_token: str = "",
        *,
        base_url: str = "https://api.fitbit.com",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if client is None:
            if not access_token:
                raise ValueError("FitbitActivitySource needs an access_token or a client.")
            client = httpx.AsyncClient(
                base_url=base_url,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=timeout,
            )
        self._client = client

    # ── Internal request wrapper ──────────────────────────────

    async def _request(self, url: str) -> dict[str, Any]:
        """GET a Fitbit endpoint, waiting out one rate-limit response."""
        resp = await self._client.get(url)

        if resp.status_code == 429:
            reset = int(resp.headers.get("fitbit-rate-limit-reset", "60"))
            logger.warning("fitbit.rate_limited", retry_after=reset)
            await asyncio.sleep(reset)
            resp = await self._client.get(url)

        resp.raise_for_status()
        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamDataError(f"invalid JSON from {url}: {exc}") from exc
        if not isinstance(body, dict):
            raise UpstreamDataError(f"expected a JSON object from {url}")
        return body

    # ── Fetch ─────────────────────────────────────────────────

    async def fetch(self, subject: str, day: date) -> ActivityData:
        iso = day.isoformat()
        hourly = parse_hourly_activity(await self._request(_CALORIES_INTRADAY.format(date=iso)))
        sleep = parse_sleep_intervals(await self._request(_SLEEP_LOG.format(date=iso)), day)
        logger.info(
            "fitbit.fetched",
            subject=subject,
            date=iso,
            hours=len(hourly),
            sleep_intervals=len(sleep),
        )
        return ActivityData(hourly_activity=hourly, sleep_intervals=sleep)

    async def close(self) -> None:
        await self._client.aclose()


# ── Parsers ───────────────────────────────────────────────────


def parse_hourly_activity(payload: dict[str, Any]) -> list[HourlyActivity]:
    """Aggregate the minute-level calories dataset into hourly samples.

    Every hour except the last one reported is marked complete.
    """
    dataset = None
    for key in _INTRADAY_KEYS:
        section = payload.get(key)
        if isinstance(section, dict):
            dataset = section.get("dataset")
            break
    if not isinstance(dataset, list):
        raise UpstreamDataError("intraday calories payload has no dataset")

    active: dict[int, int] = {}
    sedentary: dict[int, int] = {}
    for entry in dataset:
        try:
            hour = datetime.strptime(entry["time"], "%H:%M:%S").hour
            level = int(entry["level"])
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamDataError(f"malformed intraday entry {entry!r}") from exc

        active.setdefault(hour, 0)
        sedentary.setdefault(hour, 0)
        if level == 0:
            sedentary[hour] += 1
        elif level in (1, 2, 3):
            active[hour] += 1
        else:
            raise UpstreamDataError(f"unexpected activity level {level}")

    hours = sorted(active)
    return [
        HourlyActivity(
            hour=h,
            complete=i < len(hours) - 1,
            active_minutes=active[h],
            sedentary_minutes=sedentary[h],
        )
        for i, h in enumerate(hours)
    ]


def parse_sleep_intervals(payload: dict[str, Any], day: date) -> list[SleepInterval]:
    """Extract sleep periods, clipping ones that cross into another day."""
    logs = payload.get("sleep")
    if not isinstance(logs, list):
        raise UpstreamDataError("sleep payload has no 'sleep' list")

    intervals: list[SleepInterval] = []
    for log in logs:
        try:
            start = datetime.fromisoformat(log["startTime"])
            end = datetime.fromisoformat(log["endTime"])
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamDataError("sleep entry lacks valid 'startTime'/'endTime'") from exc

        intervals.append(
            SleepInterval(
                start=start.time() if start.date() == day else MIDNIGHT,
                end=end.time() if end.date() == day else END_OF_DAY,
            )
        )
    return intervals
