"""Request dependencies shared across route modules."""

from __future__ import annotations

from fastapi import HTTPException, Request

from disciplinator.service import EvaluationService


def get_service(request: Request) -> EvaluationService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(503, "Evaluation service not ready.")
    return service
