"""State driver sub-package — polling, debounce and plugin dispatch."""

from disciplinator.driver.core import DriverState, StateDriver, TickResult, should_dispatch
from disciplinator.driver.plugins import (
    PluginDirectoryError,
    PluginManifest,
    PluginRegistry,
    create_registry,
    discover_plugins,
)
from disciplinator.driver.source import CallableStateSource, HttpStateSource, StateSource
from disciplinator.driver.targets import (
    DispatchTarget,
    ExecutableTarget,
    LogTarget,
    WebhookTarget,
)

__all__ = [
    "CallableStateSource",
    "DispatchTarget",
    "DriverState",
    "ExecutableTarget",
    "HttpStateSource",
    "LogTarget",
    "PluginDirectoryError",
    "PluginManifest",
    "PluginRegistry",
    "StateDriver",
    "StateSource",
    "TickResult",
    "WebhookTarget",
    "create_registry",
    "discover_plugins",
    "should_dispatch",
]
