"""Response models shared across API route modules."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from disciplinator.models import ActivityOverride


class OverridesResponse(BaseModel):
    subject: str
    day: date
    overrides: list[ActivityOverride]


class ClearedResponse(BaseModel):
    removed: int
