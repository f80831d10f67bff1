"""Liveness ping payload."""

from pydantic import Field

from .common import Envelope


class HealthResponse(Envelope):
    """Ping reply; carries the deployment identity alongside the envelope."""

    status: str = Field("healthy", description="Service status")
    service: str = Field(..., description="Service name")
    environment: str = Field(..., description="Deployment environment")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="Current server time (ISO 8601, UTC)")
