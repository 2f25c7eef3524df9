"""
Display configuration router.

GET /config/display   — current presentation toggles
PUT /config/display   — replace them (session-scoped, not persisted)
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from lifeclock.routers.deps import get_session
from lifeclock.schemas.common import DisplayConfigSchema
from lifeclock.services.session import DisplayConfig, LifeClockSession

router = APIRouter(prefix="/config", tags=["config"])


@router.get("/display", response_model=DisplayConfigSchema, summary="Display toggles")
async def get_display(session: LifeClockSession = Depends(get_session)):
    return DisplayConfigSchema(**session.display.as_dict())


@router.put("/display", response_model=DisplayConfigSchema, summary="Update display toggles")
async def put_display(
    body: DisplayConfigSchema,
    session: LifeClockSession = Depends(get_session),
):
    session.display = DisplayConfig(**body.model_dump())
    return DisplayConfigSchema(**session.display.as_dict())
