# catalog_http_api/schemas/common.py

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Base / shared types
# ---------------------------------------------------------------------------


class APIModel(BaseModel):
    """
    Base Pydantic model for all HTTP API schemas.

    Common config:
    - camelCase on the wire, snake_case in Python (either is accepted on input)
    - attribute access so ORM rows can be validated directly
    - unknown input fields are ignored
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


# Decimal amounts travel as JSON numbers, not strings.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]


def _assume_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


# SQLite drops the offset on stored timestamps; everything is written in UTC.
UtcDatetime = Annotated[datetime, AfterValidator(_assume_utc)]


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """
    Standard error envelope for all endpoints.
    """

    status: int = Field(..., description="HTTP status code.")
    error: str = Field(..., description="Short reason phrase, e.g. 'Validation failed'.")
    message: str = Field(..., description="Human-readable explanation of the error.")
    path: str = Field(..., description="Request path that produced the error.")
    timestamp: datetime = Field(..., description="When the error was produced (UTC).")


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"},
    403: {"model": ErrorResponse, "description": "Insufficient role"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
}


__all__ = [
    "APIModel",
    "ERROR_RESPONSES",
    "ErrorResponse",
    "Money",
    "UtcDatetime",
]
