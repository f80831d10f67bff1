"""Tour execution and position Pydantic schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .common import EntityId, Envelope, Identity, Latitude, Longitude, Position
from .tour import KeyPoint


class StartExecutionRequest(BaseModel):
    """Request schema for starting (or resuming) a tour execution."""

    tourist_id: Identity
    tour_id: EntityId
    start_latitude: Latitude
    start_longitude: Longitude


class CheckProximityRequest(BaseModel):
    """Request schema for a position report against an execution."""

    execution_id: EntityId
    tourist_id: Identity
    current_latitude: Latitude
    current_longitude: Longitude


class ExecutionRequest(BaseModel):
    """Request schema addressing one execution on behalf of its tourist."""

    execution_id: EntityId
    tourist_id: Identity


class CompleteExecutionRequest(ExecutionRequest):
    pass


class AbandonExecutionRequest(ExecutionRequest):
    pass


class GetExecutionRequest(ExecutionRequest):
    pass


class GetActiveExecutionsRequest(BaseModel):
    tourist_id: Identity


class CompletedKeyPoint(BaseModel):
    keypoint_id: str
    completed_at: str = Field(..., description="Completion time (ISO 8601)")


class TourExecution(BaseModel):
    """Execution response schema."""

    id: str
    tourist_id: str
    tour_id: str
    status: str = Field(..., description="active, completed or abandoned")
    started_at: str
    completed_at: Optional[str] = Field(None, description="Termination time; null while active")
    last_activity: str
    start_position: Position
    completed_keypoints: List[CompletedKeyPoint] = Field(default_factory=list)
    version: int = Field(..., description="Revision counter used for optimistic concurrency")


class ExecutionResponse(Envelope):
    execution: Optional[TourExecution] = None


class ExecutionsResponse(Envelope):
    executions: List[TourExecution] = Field(default_factory=list)


class ProximityResponse(Envelope):
    near_key_point: bool = Field(False, description="Whether a keypoint was completed by this report")
    nearby_key_point: Optional[KeyPoint] = None
    distance: Optional[float] = Field(
        None,
        description="Meters to the completed keypoint, or to the closest uncompleted one when not advanced",
    )
    execution: Optional[TourExecution] = None


class UpdatePositionRequest(BaseModel):
    tourist_id: Identity
    latitude: Latitude
    longitude: Longitude


class GetPositionRequest(BaseModel):
    tourist_id: Identity


class PositionResponse(Envelope):
    position: Optional[Position] = None
