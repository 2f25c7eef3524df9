"""
Choice log schemas.

POST /choices   → ChoiceCreateRequest → ChoiceResponse
GET  /choices   → ChoiceListResponse
GET  /questions → list[QuestionResponse]
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lifeclock.models.choice import Category


class ChoiceCreateRequest(BaseModel):
    """
    Either a catalog answer (`category` + `value` only) or a free-form
    record (`question`, `choice` and `weight` all given).
    """
    model_config = ConfigDict(use_enum_values=True)

    category: Category = Field(description="One of the 8 behavioral categories.")
    value: str = Field(
        min_length=1,
        max_length=64,
        description="Short value token, e.g. 'mindful'.",
        examples=["mindful", "avoiding"],
    )
    question: Optional[str] = Field(default=None, min_length=1, max_length=2_000)
    choice: Optional[str] = Field(default=None, min_length=1, max_length=2_000)
    weight: Optional[int] = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def free_form_is_complete(self) -> "ChoiceCreateRequest":
        given = [f for f in ("question", "choice", "weight") if getattr(self, f) is not None]
        if given and len(given) != 3:
            raise ValueError("free-form choices need question, choice and weight together")
        return self

    @property
    def is_catalog_reference(self) -> bool:
        return self.question is None


class ChoiceResponse(BaseModel):
    id: int
    timestamp: str = Field(description="UTC instant the choice was recorded.")
    category: str
    question: str
    choice: str
    value: str
    weight: int


class ChoiceListResponse(BaseModel):
    total: int
    persisted: bool = Field(description="False while the store runs in memory only.")
    items: list[ChoiceResponse]


class QuestionChoiceResponse(BaseModel):
    text: str
    value: str
    weight: int


class QuestionResponse(BaseModel):
    category: str
    question: str
    choices: list[QuestionChoiceResponse]
