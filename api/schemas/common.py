from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Dotted <area>.<reason> code", examples=["block.not_found"])
    message: str
    context: dict[str, Any] = Field(default_factory=dict, description="Request values the error refers to")


class ErrorResponse(BaseModel):
    error: ErrorDetail
