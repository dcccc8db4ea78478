"""
Base Schemas.

Response envelopes shared by every endpoint. The notepad wire format is
flat: every body carries a top-level ``success`` flag, successful bodies
add their fields next to it, failed bodies add ``error`` (human readable)
and ``code`` (stable, machine readable).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiResponse(BaseModel):
    """Base for all successful responses."""

    success: bool = True

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(ApiResponse):
    """Acknowledgement with a message only."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = False
    error: str
    code: str
    details: dict[str, Any] | None = None
    request_id: str | None = None


class CamelModel(BaseModel):
    """Model whose JSON keys are camelCase while Python attributes stay snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
