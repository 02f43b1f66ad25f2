"""Per-subject goal settings and manual activity overrides."""

from __future__ import annotations

from datetime import date

import structlog
from fastapi import APIRouter, Depends

from disciplinator.api.deps import get_service
from disciplinator.api.schemas import ClearedResponse, OverridesResponse
from disciplinator.models import ActivityOverride, SubjectSettings
from disciplinator.service import EvaluationService

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["settings"])


@router.get("/settings/{subject}", response_model=SubjectSettings)
async def get_subject_settings(subject: str, service: EvaluationService = Depends(get_service)):
    return service.settings_store.get(subject)


@router.put("/settings/{subject}", response_model=SubjectSettings)
async def update_subject_settings(
    subject: str,
    body: SubjectSettings,
    service: EvaluationService = Depends(get_service),
):
    """Replace the subject's settings.  Invalid ranges are rejected with 422."""
    service.settings_store.set(subject, body)
    service.invalidate(subject)
    logger.info("settings.updated", subject=subject)
    return body


@router.get("/overrides/{subject}/{day}", response_model=OverridesResponse)
async def list_overrides(subject: str, day: date, service: EvaluationService = Depends(get_service)):
    return OverridesResponse(
        subject=subject, day=day, overrides=service.override_store.list(subject, day)
    )


@router.put("/overrides/{subject}/{day}", response_model=OverridesResponse)
async def set_override(
    subject: str,
    day: date,
    body: ActivityOverride,
    service: EvaluationService = Depends(get_service),
):
    service.override_store.set(subject, day, body)
    service.invalidate(subject)
    logger.info("overrides.set", subject=subject, date=day.isoformat(), hour=body.hour)
    return OverridesResponse(
        subject=subject, day=day, overrides=service.override_store.list(subject, day)
    )


@router.delete("/overrides/{subject}/{day}", response_model=ClearedResponse)
async def clear_overrides(subject: str, day: date, service: EvaluationService = Depends(get_service)):
    removed = service.override_store.clear(subject, day)
    service.invalidate(subject)
    return ClearedResponse(removed=removed)
