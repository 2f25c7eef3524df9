"""
Choice log router.

GET    /questions   — the question catalog
POST   /choices     — record a choice (catalog answer or free-form)
GET    /choices     — the cached choice log
DELETE /choices     — clear the log and stop the countdown
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from lifeclock.core.errors import UnknownChoiceError
from lifeclock.routers.deps import get_session
from lifeclock.schemas.common import ErrorResponse
from lifeclock.schemas.choice import (
    ChoiceCreateRequest,
    ChoiceListResponse,
    ChoiceResponse,
    QuestionChoiceResponse,
    QuestionResponse,
)
from lifeclock.services.questions import QUESTIONS, find_choice
from lifeclock.services.session import LifeClockSession
from lifeclock.services.store import StoredChoice
from lifeclock.services.transfer import choice_to_dict

router = APIRouter(tags=["choices"])


# ---------------------------------------------------------------------------
# Serialization helper
# ---------------------------------------------------------------------------

def _choice_to_response(choice: StoredChoice) -> ChoiceResponse:
    return ChoiceResponse(**choice_to_dict(choice))


# ---------------------------------------------------------------------------
# GET /questions
# ---------------------------------------------------------------------------

@router.get(
    "/questions",
    response_model=list[QuestionResponse],
    summary="List the question catalog (one question per category)",
)
async def list_questions():
    return [
        QuestionResponse(
            category=q.category.value,
            question=q.question,
            choices=[
                QuestionChoiceResponse(text=c.text, value=c.value, weight=c.weight)
                for c in q.choices
            ],
        )
        for q in QUESTIONS
    ]


# ---------------------------------------------------------------------------
# POST /choices
# ---------------------------------------------------------------------------

@router.post(
    "/choices",
    response_model=ChoiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a choice",
    responses={
        422: {"model": ErrorResponse, "description": "Validation error or unknown catalog choice"},
    },
)
async def create_choice(
    body: ChoiceCreateRequest,
    session: LifeClockSession = Depends(get_session),
):
    """
    Send only `category` + `value` to answer a catalog question, or include
    `question`, `choice` and `weight` to log a free-form choice.

    Always succeeds once validated: if the store is unavailable the choice is
    kept in memory for the rest of the session.
    """
    if body.is_catalog_reference:
        found = find_choice(body.category, body.value)
        if found is None:
            raise UnknownChoiceError(category=str(body.category), value=body.value)
        question, answer = found
        stored = session.record_choice(
            category=body.category,
            question=question.question,
            choice_text=answer.text,
            value=answer.value,
            weight=answer.weight,
        )
    else:
        stored = session.record_choice(
            category=body.category,
            question=body.question,
            choice_text=body.choice,
            value=body.value,
            weight=body.weight,
        )
    return _choice_to_response(stored)


# ---------------------------------------------------------------------------
# GET /choices
# ---------------------------------------------------------------------------

@router.get(
    "/choices",
    response_model=ChoiceListResponse,
    summary="List the choice log (oldest first)",
)
async def list_choices(session: LifeClockSession = Depends(get_session)):
    items = sorted(session.choices, key=lambda c: (c.timestamp, c.id))
    return ChoiceListResponse(
        total=len(items),
        persisted=session.store.available,
        items=[_choice_to_response(c) for c in items],
    )


# ---------------------------------------------------------------------------
# DELETE /choices
# ---------------------------------------------------------------------------

@router.delete(
    "/choices",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Permanently delete the choice history",
)
async def reset_choices(session: LifeClockSession = Depends(get_session)):
    session.reset_history()
