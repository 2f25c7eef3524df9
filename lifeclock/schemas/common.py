"""
Shared schema primitives used across the API.
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    model_config = ConfigDict(from_attributes=True)

    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class DisplayConfigSchema(BaseModel):
    """Presentation toggles. No effect on any computation."""
    show_global_clock: bool = True
    show_minute_boxes: bool = True
    show_second_boxes: bool = True
    show_scenario_clocks: bool = True
