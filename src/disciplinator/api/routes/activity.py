"""Summary and status routes — what request handlers and drivers poll."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from disciplinator.api.deps import get_service
from disciplinator.models import Status, Summary
from disciplinator.service import EvaluationService

router = APIRouter(tags=["activity"])


@router.get("/summary/{subject}", response_model=Summary)
async def get_summary(subject: str, service: EvaluationService = Depends(get_service)):
    """Current status plus the full day log."""
    return await service.summary(subject)


@router.get("/status/{subject}", response_model=Status)
async def get_status(subject: str, service: EvaluationService = Depends(get_service)):
    return await service.status(subject)
