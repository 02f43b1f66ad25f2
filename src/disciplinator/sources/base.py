"""Abstract base class for all activity sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from disciplinator.models import ActivityData


class UpstreamDataError(Exception):
    """The activity source returned data that cannot be evaluated."""


class ActivitySource(ABC):
    """Contract that every wearable data source must implement.

    A source turns whatever the provider reports for one subject and date
    into normalised :class:`ActivityData`: hourly samples ordered by hour and
    sleep intervals clipped to that date.
    """

    name: str = "base"

    @abstractmethod
    async def fetch(self, subject: str, day: date) -> ActivityData:
        """Fetch hourly activity and sleep intervals for *subject* on *day*.

        Raises :class:`UpstreamDataError` when the provider's payload is
        malformed.  Transport errors propagate unchanged.
        """

    async def close(self) -> None:
        """Release any resources held by the source."""
