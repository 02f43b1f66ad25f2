"""Activity sources — where hourly samples and sleep intervals come from."""

from disciplinator.sources.base import ActivitySource, UpstreamDataError
from disciplinator.sources.files import FileActivitySource, InMemoryActivitySource
from disciplinator.sources.fitbit import FitbitActivitySource
from disciplinator.sources.registry import available_sources, get_source, register_source

__all__ = [
    "ActivitySource",
    "FileActivitySource",
    "FitbitActivitySource",
    "InMemoryActivitySource",
    "UpstreamDataError",
    "available_sources",
    "get_source",
    "register_source",
]
