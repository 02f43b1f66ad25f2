"""Application entrypoint — run the headmaster service, the driver, or a one-off evaluation."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

import structlog
import uvicorn
from pydantic import TypeAdapter, ValidationError

from disciplinator.config import get_settings
from disciplinator.driver.core import StateDriver
from disciplinator.driver.plugins import PluginDirectoryError, create_registry
from disciplinator.driver.source import HttpStateSource
from disciplinator.engine.evaluator import DebtEvaluator
from disciplinator.logger import setup_logging
from disciplinator.models import ActivityData, ActivityOverride, EvaluatorConfig
from disciplinator.stores import default_subject_settings

logger = structlog.get_logger(__name__)

_OVERRIDES = TypeAdapter(list[ActivityOverride])


def _drive(url: str, period: float, plugins_dir: Path) -> int:
    settings = get_settings()
    try:
        registry = create_registry(settings, plugins_dir)
    except PluginDirectoryError as exc:
        logger.error("driver.plugins_unavailable", error=str(exc))
        return 1

    source = HttpStateSource(url)
    driver = StateDriver(
        source,
        registry,
        period=period,
        action_timeout=settings.driver_action_timeout_seconds,
        reload_plugins=settings.driver_reload_plugins,
    )

    async def _run() -> None:
        try:
            await driver.run()
        finally:
            await source.close()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        logger.info("driver.interrupted")
    return 0


def _evaluate(args: argparse.Namespace) -> int:
    settings = get_settings()
    defaults = default_subject_settings(settings)
    try:
        data = ActivityData.model_validate_json(Path(args.data).read_text(encoding="utf-8"))
        overrides = (
            _OVERRIDES.validate_json(Path(args.overrides).read_text(encoding="utf-8"))
            if args.overrides
            else []
        )
        config = EvaluatorConfig.from_goal(
            args.goal or defaults.hourly_activity_goal,
            day_begins_at=defaults.day_starts_at,
            day_ends_at=defaults.day_ends_at,
            activity_limit=args.limit or defaults.hourly_activity_limit,
            debt_limit=args.debt_limit or defaults.hourly_debt_limit,
            day_length=defaults.day_length,
            enforce_debt_limit=args.enforce_debt_limit or defaults.enforce_debt_limit,
        )
    except (OSError, ValidationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    summary = DebtEvaluator(config, data, overrides).current_summary()
    print(json.dumps(summary.model_dump(mode="json"), indent=2))
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="disciplinator",
        description="Hourly activity debt tracking with pluggable reminders.",
    )
    sub = parser.add_subparsers(dest="command")

    # ── serve ─────────────────────────────────────────────────
    serve_parser = sub.add_parser("serve", help="Start the headmaster API server.")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.add_argument("--reload", action="store_true")

    # ── drive ─────────────────────────────────────────────────
    drive_parser = sub.add_parser(
        "drive", help="Poll the headmaster and launch plugins on state changes."
    )
    drive_parser.add_argument("url", nargs="?", default=None, help="Status URL to poll.")
    drive_parser.add_argument("-p", "--period", type=float, default=None, help="Seconds between polls.")
    drive_parser.add_argument("-d", "--plugins-dir", type=Path, default=None)

    # ── evaluate ──────────────────────────────────────────────
    eval_parser = sub.add_parser("evaluate", help="Evaluate an ActivityData JSON file offline.")
    eval_parser.add_argument("data", help="Path to an ActivityData JSON document.")
    eval_parser.add_argument("--overrides", default=None, help="Path to a JSON list of overrides.")
    eval_parser.add_argument("--goal", type=int, default=None, help="Hourly active-minutes goal.")
    eval_parser.add_argument("--limit", type=int, default=None, help="Max accounted minutes per hour.")
    eval_parser.add_argument("--debt-limit", type=int, default=None)
    eval_parser.add_argument("--enforce-debt-limit", action="store_true")

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    if args.command == "serve":
        uvicorn.run(
            "disciplinator.api.server:app",
            host=args.host or settings.api_host,
            port=args.port or settings.api_port,
            reload=args.reload,
        )
    elif args.command == "drive":
        sys.exit(
            _drive(
                args.url or settings.driver_state_url,
                args.period or settings.driver_period_seconds,
                args.plugins_dir or settings.driver_plugins_dir,
            )
        )
    elif args.command == "evaluate":
        sys.exit(_evaluate(args))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
