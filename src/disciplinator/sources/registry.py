"""Source registry — build the configured activity source by name."""

from __future__ import annotations

from collections.abc import Callable

from disciplinator.config import Settings
from disciplinator.sources.base import ActivitySource
from disciplinator.sources.files import FileActivitySource
from disciplinator.sources.fitbit import FitbitActivitySource

SourceFactory = Callable[[Settings], ActivitySource]

# ── Registry ──────────────────────────────────────────────────

_REGISTRY: dict[str, SourceFactory] = {
    "file": lambda s: FileActivitySource(s.activity_data_dir),
    "fitbit": lambda s: FitbitActivitySource(
        s.fitbit_access_token,
        base_url=s.fitbit_api_base_url,
        timeout=s.fitbit_request_timeout,
    ),
}


def register_source(name: str, factory: SourceFactory) -> None:
    """Register a factory building a source from application settings."""
    _REGISTRY[name] = factory


def get_source(name: str, settings: Settings) -> ActivitySource:
    """Instantiate the source registered under *name*.

    Raises :class:`ValueError` if no source is registered.
    """
    factory = _REGISTRY.get(name)
    if factory is None:
        raise ValueError(
            f"No activity source registered for {name!r}. "
            f"Available: {sorted(_REGISTRY)}"
        )
    return factory(settings)


def available_sources() -> list[str]:
    return sorted(_REGISTRY)
