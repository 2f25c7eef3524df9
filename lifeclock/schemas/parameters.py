"""
Life parameter schemas.

PUT /parameters → LifeParametersRequest → LifeParametersResponse
GET /parameters → LifeParametersResponse
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from lifeclock.models.life_parameters import HealthCondition


class LifeParametersRequest(BaseModel):
    date_of_birth: Optional[date] = Field(
        default=None,
        description="Calendar date of birth. Must not be in the future.",
        examples=["1990-05-17"],
    )
    health_conditions: list[HealthCondition] = Field(
        default_factory=list,
        description='Non-empty. "none" excludes every other condition.',
        examples=[["none"], ["diabetes", "heart_disease"]],
    )


class LifeExpectanciesResponse(BaseModel):
    optimistic: float
    realistic: float
    pessimistic: float


class LifeParametersResponse(BaseModel):
    date_of_birth: str
    health_conditions: list[str]
    life_expectancies: LifeExpectanciesResponse
