"""Common Pydantic schemas."""

from datetime import datetime, timezone
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

Latitude = Annotated[float, Field(ge=-90, le=90, description="Latitude in decimal degrees")]
Longitude = Annotated[float, Field(ge=-180, le=180, description="Longitude in decimal degrees")]
Identity = Annotated[str, Field(min_length=1, max_length=128, description="Pre-authenticated caller identity")]
EntityId = Annotated[str, Field(min_length=1, max_length=64, description="Opaque entity ID")]


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    """Render a timestamp as ISO 8601 in UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class Envelope(BaseModel):
    """Base for every response: a success flag and a human-readable message."""

    success: bool = Field(True, description="Whether the operation succeeded")
    message: str = Field(..., description="Human-readable outcome")


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="Path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details carried inside failure envelopes."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="Request path of this occurrence")
    code: str = Field(..., description="Application-specific error code")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


class FailureResponse(Envelope):
    """Failure envelope returned for any rejected operation."""

    success: bool = Field(False, description="Always false")
    error: Problem


class Position(BaseModel):
    """Geographic position, optionally attributed to a tourist."""

    tourist_id: Optional[str] = Field(None, description="Tourist the position belongs to")
    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")
    updated_at: Optional[str] = Field(None, description="Last update time (ISO 8601)")
