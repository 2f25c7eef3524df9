"""
Predictions router.

GET /predictions               — category scores, aggregate, concrete outcomes, lifespan
GET /predictions/countdown     — live countdown (restarts the timer if stopped)
GET /predictions/impact        — preview of one more choice in a category
GET /predictions/trajectory    — seeded weeks/months/years drift per category
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from lifeclock.models.choice import Category
from lifeclock.routers.deps import get_session
from lifeclock.schemas.common import ErrorResponse
from lifeclock.schemas.prediction import (
    ChoiceImpactResponse,
    CountdownResponse,
    DecayBoxesResponse,
    DomainProjectionResponse,
    LifespanSummaryResponse,
    PredictionResponse,
    TimeBreakdownResponse,
    TrajectoryResponse,
)
from lifeclock.services.lifespan import TimeBreakdown, decay_box_counts
from lifeclock.services.session import LifeClockSession

router = APIRouter(prefix="/predictions", tags=["predictions"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _breakdown(b: TimeBreakdown) -> TimeBreakdownResponse:
    return TimeBreakdownResponse(days=b.days, hours=b.hours, minutes=b.minutes, seconds=b.seconds)


# ---------------------------------------------------------------------------
# GET /predictions
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=PredictionResponse,
    summary="Scores and projections from the last 30 days of choices",
)
async def predictions(session: LifeClockSession = Depends(get_session)):
    """
    Categories without choices in the window score a neutral 50.
    `lifespan` stays null until life parameters are set.
    """
    scores = session.scores()
    lifespan = None
    if session.parameters is not None:
        summary = session.lifespan_summary()
        lifespan = LifespanSummaryResponse(
            current_age=summary.current_age,
            health_conditions=summary.condition_labels,
            expectancy_range=list(summary.expectancy_range),
            most_likely=summary.most_likely,
            remaining_years=summary.remaining_years,
        )
    return PredictionResponse(
        abstract=scores.abstract_dict(),
        aggregate=scores.aggregate,
        concrete={
            name: DomainProjectionResponse(**values)
            for name, values in scores.concrete.as_dict().items()
        },
        lifespan=lifespan,
    )


# ---------------------------------------------------------------------------
# GET /predictions/countdown
# ---------------------------------------------------------------------------

@router.get(
    "/countdown",
    response_model=CountdownResponse,
    summary="Time remaining per scenario",
    responses={409: {"model": ErrorResponse, "description": "Life parameters not set yet"}},
)
async def countdown(session: LifeClockSession = Depends(get_session)):
    """
    The total view counts whole days, hours, minutes and seconds left in the
    realistic scenario independently. Clock views are modular. Every value
    stops at zero. Hidden views (display flags off) are returned as null.
    """
    state = session.countdown()
    display = session.display
    minute_boxes, second_boxes = decay_box_counts(state.total)
    return CountdownResponse(
        status=session.timer.status.value,
        computed_at=state.computed_at.isoformat(),
        aggregate=session.scores(state.computed_at).aggregate,
        choice_impact_days=state.choice_impact_days,
        reached=state.reached,
        total=_breakdown(state.total),
        global_clock=_breakdown(state.breakdown) if display.show_global_clock else None,
        scenarios=(
            {name: _breakdown(b) for name, b in state.scenarios.items()}
            if display.show_scenario_clocks else None
        ),
        decay_boxes=DecayBoxesResponse(
            minutes=minute_boxes if display.show_minute_boxes else None,
            seconds=second_boxes if display.show_second_boxes else None,
        ),
    )


# ---------------------------------------------------------------------------
# GET /predictions/impact
# ---------------------------------------------------------------------------

@router.get(
    "/impact",
    response_model=ChoiceImpactResponse,
    summary="Preview how one more choice would move a category score",
)
async def impact(
    category: Category = Query(description="Category of the prospective choice."),
    weight: int = Query(ge=0, le=100, description="Weight of the prospective choice."),
    session: LifeClockSession = Depends(get_session),
):
    result = session.preview_impact(category, weight)
    return ChoiceImpactResponse(
        category=result.category,
        current_score=result.current_score,
        new_score=result.new_score,
        delta=result.delta,
        outcome=result.outcome,
    )


# ---------------------------------------------------------------------------
# GET /predictions/trajectory
# ---------------------------------------------------------------------------

@router.get(
    "/trajectory",
    response_model=TrajectoryResponse,
    summary="Seeded short/mid/long-term drift of every category score",
)
async def trajectory(
    seed: int = Query(description="Random seed. Same seed, same projection."),
    session: LifeClockSession = Depends(get_session),
):
    return TrajectoryResponse(seed=seed, categories=session.trajectories(seed))
