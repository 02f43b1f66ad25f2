"""Shared Pydantic models used across the engine, the service and the driver."""

from __future__ import annotations

from datetime import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ── Enums ─────────────────────────────────────────────────────


class Trigger(str, Enum):
    """Routing key for dispatch, one per :class:`Status` variant."""

    NORMAL = "Normal"
    DEBT_COLLECTION = "DebtCollection"
    DEBT_COLLECTION_PAUSED = "DebtCollectionPaused"


# ── Upstream data ─────────────────────────────────────────────


class HourlyActivity(BaseModel):
    """Raw per-hour sample as reported by the activity source."""

    hour: int = Field(ge=0, le=23)
    complete: bool = False  # hour fully elapsed
    active_minutes: int = Field(0, ge=0)
    sedentary_minutes: int = Field(0, ge=0)


class SleepInterval(BaseModel):
    """A reported period of inactivity (sleep) within the evaluated date."""

    start: time
    end: time


class ActivityOverride(BaseModel):
    """Manual correction forcing tracking on (``is_active``) or off for an hour."""

    hour: int = Field(ge=0, le=23)
    is_active: bool


class ActivityData(BaseModel):
    """Everything one evaluation consumes from the activity source."""

    hourly_activity: list[HourlyActivity] = Field(default_factory=list)
    sleep_intervals: list[SleepInterval] = Field(default_factory=list)


# ── Evaluation ────────────────────────────────────────────────


class HourRecord(BaseModel):
    """One hour of the day log.

    Created fresh per evaluation and mutated in place by the engine stages.
    """

    hour: int = Field(0, ge=0, le=23)
    complete: bool = False
    active_minutes: int = Field(0, ge=0)
    accounted_minutes: int = Field(0, ge=0)
    tracking_disabled: bool = False
    debt: int = Field(0, ge=0)


class EvaluatorConfig(BaseModel):
    """Thresholds for a single evaluation.  Immutable once built."""

    model_config = ConfigDict(frozen=True)

    minimum_active_minutes: int = Field(gt=0, le=60)
    max_accounted_minutes: int = Field(ge=0)
    debt_limit: int = Field(ge=0)
    day_begins_at: time
    day_ends_at: time
    day_length_hours: int = Field(ge=0)
    enforce_debt_limit: bool = False

    @model_validator(mode="after")
    def _check_day_bounds(self) -> EvaluatorConfig:
        if self.day_begins_at > self.day_ends_at:
            raise ValueError("day_begins_at must not be later than day_ends_at")
        return self

    @classmethod
    def from_goal(
        cls,
        goal: int,
        *,
        day_begins_at: time,
        day_ends_at: time,
        activity_limit: int | None = None,
        debt_limit: int | None = None,
        day_length: int | None = None,
        enforce_debt_limit: bool = False,
    ) -> EvaluatorConfig:
        """Build a config from an hourly goal, filling the usual defaults.

        The accounted-minutes ceiling and the debt limit default to three
        times the goal; the day length defaults to the span between the day
        start and end hours.
        """
        return cls(
            minimum_active_minutes=goal,
            max_accounted_minutes=activity_limit if activity_limit is not None else goal * 3,
            debt_limit=debt_limit if debt_limit is not None else goal * 3,
            day_begins_at=day_begins_at,
            day_ends_at=day_ends_at,
            day_length_hours=(
                day_length if day_length is not None else day_ends_at.hour - day_begins_at.hour
            ),
            enforce_debt_limit=enforce_debt_limit,
        )


class Status(BaseModel):
    """Tagged evaluation result: the variant (``type``) plus the latest hour."""

    model_config = ConfigDict(frozen=True)

    type: Trigger
    record: HourRecord

    @property
    def trigger(self) -> Trigger:
        return self.type

    @property
    def is_debt_collection(self) -> bool:
        return self.type is Trigger.DEBT_COLLECTION

    def same_variant(self, other: Status) -> bool:
        return self.type is other.type


class Summary(BaseModel):
    """Current status plus the full day log of one evaluation."""

    model_config = ConfigDict(frozen=True)

    status: Status
    day_log: list[HourRecord] = Field(default_factory=list)


# ── Per-subject settings ──────────────────────────────────────


class SubjectSettings(BaseModel):
    """Goal settings a subject can change through the API.

    Ranges match the server-wide defaults in :mod:`disciplinator.config`.
    """

    hourly_activity_goal: int = Field(5, ge=5, le=60)
    hourly_activity_limit: int | None = Field(None, ge=5, le=60)
    hourly_debt_limit: int | None = Field(None, ge=5, le=3600)
    day_starts_at: time = time(8, 0)
    day_ends_at: time = time(22, 0)
    day_length: int | None = Field(None, ge=0, le=24)
    enforce_debt_limit: bool = False

    @model_validator(mode="after")
    def _check_day_bounds(self) -> SubjectSettings:
        if self.day_starts_at > self.day_ends_at:
            raise ValueError("day_starts_at must not be later than day_ends_at")
        return self

    def evaluator_config(self) -> EvaluatorConfig:
        return EvaluatorConfig.from_goal(
            self.hourly_activity_goal,
            day_begins_at=self.day_starts_at,
            day_ends_at=self.day_ends_at,
            activity_limit=self.hourly_activity_limit,
            debt_limit=self.hourly_debt_limit,
            day_length=self.day_length,
            enforce_debt_limit=self.enforce_debt_limit,
        )
