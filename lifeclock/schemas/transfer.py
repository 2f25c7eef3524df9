"""
Import schemas.

POST /import → ImportRequest → ImportResponse
"""
from typing import Literal

from pydantic import BaseModel, Field


class ImportRequest(BaseModel):
    format: Literal["json", "csv"]
    content: str = Field(min_length=1, description="Full text of a JSON or CSV export.")


class ImportResponse(BaseModel):
    imported: int
    total: int
    persisted: bool
