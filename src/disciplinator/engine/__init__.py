"""Debt evaluation engine — hourly activity in, operating state out.

Stages (leaf first):

* ``normalizer`` — sleep windows, manual overrides, disabled-hour credit
* ``debt`` — threshold clamp and the clamped rolling debt recurrence
* ``classifier`` — latest hour → ``Normal`` / ``DebtCollection`` /
  ``DebtCollectionPaused``
* ``evaluator`` — composes the stages into a :class:`Summary`
"""

from disciplinator.engine.classifier import classify, fallback_record
from disciplinator.engine.debt import accumulate_debt, clamp_thresholds
from disciplinator.engine.evaluator import DebtEvaluator
from disciplinator.engine.normalizer import infer_day_end, normalize_sleep_windows

__all__ = [
    "DebtEvaluator",
    "accumulate_debt",
    "clamp_thresholds",
    "classify",
    "fallback_record",
    "infer_day_end",
    "normalize_sleep_windows",
]
