"""
Life parameters router.

PUT /parameters   — validate, store, and restart the countdown
GET /parameters   — current parameters (409 until set)
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from lifeclock.routers.deps import get_session
from lifeclock.schemas.common import ErrorResponse
from lifeclock.schemas.parameters import (
    LifeExpectanciesResponse,
    LifeParametersRequest,
    LifeParametersResponse,
)
from lifeclock.services.lifespan import LifeParameters
from lifeclock.services.session import LifeClockSession

router = APIRouter(prefix="/parameters", tags=["parameters"])


def _params_to_response(params: LifeParameters) -> LifeParametersResponse:
    return LifeParametersResponse(
        date_of_birth=params.date_of_birth.isoformat(),
        health_conditions=sorted(c.value for c in params.health_conditions),
        life_expectancies=LifeExpectanciesResponse(**params.life_expectancies.as_dict()),
    )


@router.put(
    "",
    response_model=LifeParametersResponse,
    summary="Set or replace the life parameters",
    responses={
        422: {"model": ErrorResponse, "description": "Missing/future date of birth, empty conditions, age outside 1–120"},
    },
)
async def put_parameters(
    body: LifeParametersRequest,
    session: LifeClockSession = Depends(get_session),
):
    """
    Derives the three-scenario life expectancy from age and health
    conditions. Nothing is stored when validation fails.
    """
    params = session.set_life_parameters(body.date_of_birth, body.health_conditions)
    return _params_to_response(params)


@router.get(
    "",
    response_model=LifeParametersResponse,
    summary="Current life parameters",
    responses={409: {"model": ErrorResponse, "description": "Parameters not set yet"}},
)
async def get_parameters(session: LifeClockSession = Depends(get_session)):
    return _params_to_response(session.require_parameters())
