"""Debt evaluator — runs the four engine stages over one day of data.

Pipeline
~~~~~~~~
1. :func:`~disciplinator.engine.normalizer.normalize_sleep_windows`
2. :func:`~disciplinator.engine.debt.clamp_thresholds`
3. :func:`~disciplinator.engine.debt.accumulate_debt`
4. :func:`~disciplinator.engine.classifier.classify` on the last hour

The evaluator holds no state between calls: every call to
:meth:`DebtEvaluator.current_summary` builds a fresh day log.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from disciplinator.engine.classifier import classify, fallback_record
from disciplinator.engine.debt import accumulate_debt, clamp_thresholds, current_debt
from disciplinator.engine.normalizer import normalize_sleep_windows
from disciplinator.models import (
    ActivityData,
    ActivityOverride,
    EvaluatorConfig,
    HourRecord,
    Summary,
)

logger = structlog.get_logger(__name__)


class DebtEvaluator:
    """Evaluate the activity debt of a single subject for a single date.

    Usage::

        evaluator = DebtEvaluator(config, data, overrides)
        summary = evaluator.current_summary()
    """

    def __init__(
        self,
        config: EvaluatorConfig,
        data: ActivityData,
        overrides: Sequence[ActivityOverride] = (),
    ) -> None:
        self._config = config
        self._data = data
        self._overrides = list(overrides)

    @property
    def config(self) -> EvaluatorConfig:
        return self._config

    def day_log(self) -> list[HourRecord]:
        """Run the normalise → clamp → accumulate stages."""
        hours = normalize_sleep_windows(
            self._data.hourly_activity,
            self._data.sleep_intervals,
            self._overrides,
            self._config,
        )
        logger.debug("debt_evaluator.normalized_by_sleep", hours=_dump(hours))
        hours = clamp_thresholds(hours, self._config)
        logger.debug("debt_evaluator.normalized_by_threshold", hours=_dump(hours))
        hours = accumulate_debt(hours, self._config)
        logger.debug("debt_evaluator.hourly_debt", hours=_dump(hours))
        return hours

    def current_hour_and_day_log(self) -> tuple[HourRecord, list[HourRecord]]:
        hours = self.day_log()
        logger.info("debt_evaluator.current_debt", debt=current_debt(hours), hours=len(hours))

        if hours:
            return hours[-1], hours

        logger.error("debt_evaluator.no_hour_data")
        return fallback_record(), hours

    def current_summary(self) -> Summary:
        hour, day_log = self.current_hour_and_day_log()
        status = classify(hour, self._config.max_accounted_minutes)
        return Summary(status=status, day_log=[h.model_copy() for h in day_log])

    @staticmethod
    def fallback_summary() -> Summary:
        """Safe default used when upstream data cannot be evaluated."""
        return Summary(status=classify(fallback_record(), 0), day_log=[])


def _dump(hours: list[HourRecord]) -> list[dict[str, int | bool]]:
    return [h.model_dump() for h in hours]
