"""Plugin discovery — TOML manifests paired with like-named executables.

A plugin directory looks like::

    plugins/
        notify.sh          # the executable
        notify.sh.toml     # its manifest

and a manifest like::

    triggers = ["DebtCollection", "DebtCollectionPaused"]
    enabled = true       # optional, default true
    name = "notify"      # optional, default: executable file name
    timeout = 10         # optional, seconds

Broken, disabled or orphaned manifests are skipped with a warning so one bad
plugin never keeps the driver from starting.
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import structlog

from disciplinator.config import Settings
from disciplinator.driver.targets import DispatchTarget, ExecutableTarget, LogTarget, WebhookTarget
from disciplinator.models import Trigger

logger = structlog.get_logger(__name__)

MANIFEST_SUFFIX = ".toml"


class PluginDirectoryError(Exception):
    """The plugin directory is missing or unreadable."""


class PluginManifestError(ValueError):
    """A manifest is syntactically valid TOML but semantically wrong."""


@dataclass(frozen=True)
class PluginManifest:
    name: str
    executable: Path
    manifest_path: Path
    triggers: frozenset[Trigger]
    enabled: bool = True
    timeout: float | None = None

    @classmethod
    def from_path(cls, path: Path) -> PluginManifest:
        data = tomllib.loads(path.read_text(encoding="utf-8"))

        raw_triggers = data.get("triggers")
        if not isinstance(raw_triggers, list) or not raw_triggers:
            raise PluginManifestError(f"'triggers' must be a non-empty list in {path}")
        try:
            triggers = frozenset(Trigger(t) for t in raw_triggers)
        except ValueError as exc:
            raise PluginManifestError(f"unknown trigger in {path}: {exc}") from exc

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise PluginManifestError(f"'enabled' must be a boolean in {path}")

        timeout = data.get("timeout")
        if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
            raise PluginManifestError(f"'timeout' must be a positive number in {path}")

        executable = path.with_suffix("")
        return cls(
            name=str(data.get("name") or executable.name),
            executable=executable,
            manifest_path=path,
            triggers=triggers,
            enabled=enabled,
            timeout=float(timeout) if timeout is not None else None,
        )

    def to_target(self) -> ExecutableTarget:
        return ExecutableTarget(self.executable, self.triggers, name=self.name, timeout=self.timeout)


def discover_plugins(directory: Path | str) -> list[PluginManifest]:
    """Return the enabled, well-formed plugins found in *directory*.

    Raises :class:`PluginDirectoryError` if the directory does not exist.
    """
    directory = Path(directory)
    logger.debug("plugins.discovering", directory=str(directory))
    if not directory.is_dir():
        raise PluginDirectoryError(f"plugins directory {directory} not found")

    try:
        manifest_paths = sorted(p for p in directory.iterdir() if p.suffix == MANIFEST_SUFFIX)
    except OSError as exc:
        raise PluginDirectoryError(f"failed to read plugins directory {directory}: {exc}") from exc

    plugins: list[PluginManifest] = []
    for path in manifest_paths:
        try:
            manifest = PluginManifest.from_path(path)
        except (OSError, tomllib.TOMLDecodeError, PluginManifestError) as exc:
            logger.warning("plugins.manifest_invalid", manifest=str(path), error=str(exc))
            continue

        if not manifest.enabled:
            logger.warning("plugins.disabled", manifest=str(path))
            continue

        if not manifest.executable.exists():
            logger.warning(
                "plugins.executable_missing",
                manifest=str(path),
                executable=str(manifest.executable),
            )
            continue

        plugins.append(manifest)

    logger.info("plugins.discovered", directory=str(directory), count=len(plugins))
    return plugins


class PluginRegistry:
    """The driver's view of dispatch targets, grouped by trigger.

    Targets come from two places: executables discovered in ``directory``
    (refreshed by :meth:`reload`) and targets added in code with :meth:`add`.
    """

    def __init__(
        self,
        directory: Path | str | None = None,
        *,
        targets: Iterable[DispatchTarget] = (),
    ) -> None:
        self._directory = Path(directory) if directory is not None else None
        self._static: list[DispatchTarget] = list(targets)
        self._discovered: list[DispatchTarget] = []
        if self._directory is not None:
            self.reload()

    @property
    def directory(self) -> Path | None:
        return self._directory

    def reload(self) -> None:
        """Rediscover plugins.  A no-op without a directory."""
        if self._directory is None:
            return
        self._discovered = [m.to_target() for m in discover_plugins(self._directory)]

    def add(self, target: DispatchTarget) -> None:
        self._static.append(target)

    @property
    def targets(self) -> list[DispatchTarget]:
        return [*self._discovered, *self._static]

    def targets_for(self, trigger: Trigger) -> list[DispatchTarget]:
        return [t for t in self.targets if t.handles(trigger)]

    def describe(self) -> dict[str, list[str]]:
        """Trigger name → target names (for logs and debugging)."""
        return {t.value: [target.name for target in self.targets_for(t)] for t in Trigger}


def create_registry(settings: Settings, directory: Path | str | None = None) -> PluginRegistry:
    """Build a :class:`PluginRegistry` wired from application settings.

    * Executable plugins are discovered in *directory* (default:
      ``settings.driver_plugins_dir``).
    * **LogTarget** is added when ``settings.driver_log_transitions`` is set.
    * **WebhookTarget** is added when ``settings.driver_webhook_url`` is non-empty.

    Raises :class:`PluginDirectoryError` if the plugin directory is missing.
    """
    targets: list[DispatchTarget] = []
    if settings.driver_log_transitions:
        targets.append(LogTarget())
    if settings.driver_webhook_url:
        targets.append(WebhookTarget(settings.driver_webhook_url))

    return PluginRegistry(directory or settings.driver_plugins_dir, targets=targets)
