"""
Prediction schemas.

GET /predictions              → PredictionResponse
GET /predictions/countdown    → CountdownResponse
GET /predictions/impact       → ChoiceImpactResponse
GET /predictions/trajectory   → TrajectoryResponse
"""
from typing import Optional

from pydantic import BaseModel, Field


class DomainProjectionResponse(BaseModel):
    optimistic: int = Field(ge=0, le=100)
    realistic: int = Field(ge=0, le=100)
    pessimistic: int = Field(ge=0, le=100)
    caveat: str


class LifespanSummaryResponse(BaseModel):
    current_age: int
    health_conditions: list[str]
    expectancy_range: list[float] = Field(description="[pessimistic, optimistic] years.")
    most_likely: float
    remaining_years: float


class PredictionResponse(BaseModel):
    abstract: dict[str, float] = Field(description="Category → score in [0, 100].")
    aggregate: float
    concrete: dict[str, DomainProjectionResponse]
    lifespan: Optional[LifespanSummaryResponse] = Field(
        default=None, description="Null until life parameters are set."
    )


class TimeBreakdownResponse(BaseModel):
    days: int
    hours: int
    minutes: int
    seconds: int


class DecayBoxesResponse(BaseModel):
    minutes: Optional[int] = None
    seconds: Optional[int] = None


class CountdownResponse(BaseModel):
    status: str = Field(description='"running" | "stopped"')
    computed_at: str
    aggregate: float
    choice_impact_days: float
    reached: bool
    total: TimeBreakdownResponse = Field(description="Absolute totals, realistic scenario.")
    global_clock: Optional[TimeBreakdownResponse] = None
    scenarios: Optional[dict[str, TimeBreakdownResponse]] = None
    decay_boxes: DecayBoxesResponse


class ChoiceImpactResponse(BaseModel):
    category: str
    current_score: float
    new_score: float
    delta: str
    outcome: str


class TrajectoryResponse(BaseModel):
    seed: int
    categories: dict[str, dict[str, float]] = Field(
        description="Category → {short, mid, long} projected score."
    )
