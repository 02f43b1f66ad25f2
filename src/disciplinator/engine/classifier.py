"""Map the latest hour of the day log to a :class:`Status`."""

from __future__ import annotations

from disciplinator.models import HourRecord, Status, Trigger


def classify(hour: HourRecord, max_accounted_minutes: int) -> Status:
    """Classify *hour* into one of the three operating states.

    * no debt → ``Normal``
    * debt, and the hour can still take more credit → ``DebtCollection``
    * debt, but the hourly ceiling is already reached → ``DebtCollectionPaused``
    """
    if hour.debt == 0:
        kind = Trigger.NORMAL
    elif hour.accounted_minutes < max_accounted_minutes:
        kind = Trigger.DEBT_COLLECTION
    else:
        kind = Trigger.DEBT_COLLECTION_PAUSED
    return Status(type=kind, record=hour.model_copy())


def fallback_record() -> HourRecord:
    """Terminal record used when no hourly data is available."""
    return HourRecord(complete=True, tracking_disabled=True)
