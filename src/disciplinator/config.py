"""Centralised application settings loaded from environment / .env file."""

from __future__ import annotations

from datetime import time
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """All runtime configuration for the headmaster service and the driver.

    Values are read from environment variables first, then from a *.env* file
    located at the project root.  Every variable lives in the flat
    ``DISCIPLINATOR_`` namespace (stripped automatically by
    *pydantic-settings*).

    Out-of-range values are rejected here, at load time, so the evaluation
    engine never sees an invalid configuration.
    """

    model_config = SettingsConfigDict(
        env_prefix="DISCIPLINATOR_",
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Default subject goals ─────────────────────────────────
    hourly_activity_goal: int = Field(5, ge=5, le=60)
    hourly_activity_limit: int | None = Field(None, ge=5, le=60)
    hourly_debt_limit: int | None = Field(None, ge=5, le=3600)
    day_starts_at: time = time(8, 0)  # used when there's no sleep data
    day_ends_at: time = time(22, 0)  # evening wind-down, used regardless of sleep data
    day_length: int | None = Field(None, ge=0, le=24)  # hours, used with sleep data
    enforce_debt_limit: bool = False

    # ── API server ────────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # ── Activity source ───────────────────────────────────────
    activity_source: Literal["file", "fitbit"] = "file"
    activity_data_dir: Path = _PROJECT_ROOT / "data"

    # ── Fitbit Web API ────────────────────────────────────────
    fitbit_access_token: str = ""
    fitbit_api_base_url: str = "https://api.fitbit.com"
    fitbit_request_timeout: float = 30.0

    # ── Summary cache ─────────────────────────────────────────
    summary_cache_ttl_seconds: int = Field(60, ge=0)

    # ── Driver ────────────────────────────────────────────────
    driver_state_url: str = "http://localhost:8080/status/default"
    driver_period_seconds: float = Field(60.0, gt=0)
    driver_plugins_dir: Path = Path("./plugins")
    driver_action_timeout_seconds: float = Field(30.0, gt=0)
    driver_reload_plugins: bool = False
    driver_log_transitions: bool = False  # also dispatch every change to the structured log
    driver_webhook_url: str = ""  # POST state changes here when set

    # ── Logging ───────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @model_validator(mode="after")
    def _check_day_bounds(self) -> Settings:
        if self.day_starts_at > self.day_ends_at:
            raise ValueError(
                f"day_starts_at ({self.day_starts_at}) must not be later than "
                f"day_ends_at ({self.day_ends_at})"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()
