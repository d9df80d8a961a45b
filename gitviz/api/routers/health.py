"""Health endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from gitviz.api.schemas import ApiOutModel
from gitviz.config import Settings, get_settings

router = APIRouter()


class HealthOut(ApiOutModel):
    status: str
    app: str
    environment: str


@router.get("/health", response_model=HealthOut)
def health(settings: Annotated[Settings, Depends(get_settings)]) -> HealthOut:
    return HealthOut(status="ok", app=settings.app_name, environment=settings.environment)
