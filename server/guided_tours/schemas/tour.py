"""Tour and keypoint Pydantic schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .common import EntityId, Envelope, Identity, Latitude, Longitude


class CreateTourRequest(BaseModel):
    """Request schema for creating a tour."""

    guide_id: Identity
    name: str = Field(..., min_length=1, max_length=255, description="Tour name")
    description: str = Field("", max_length=5000, description="Tour description")
    difficulty: str = Field("", max_length=32, description="Free-form difficulty label")
    tags: List[str] = Field(default_factory=list, description="Search tags")


class GetToursRequest(BaseModel):
    """Request schema for listing tours."""

    published_only: bool = Field(True, description="Only list published tours")
    user_id: Optional[str] = Field(None, description="Guide whose tours to list when published_only is false")


class GetMyToursRequest(BaseModel):
    """Request schema for listing a guide's own tours."""

    guide_id: Identity


class GetTourRequest(BaseModel):
    """Request schema for getting a tour."""

    tour_id: EntityId
    user_id: Optional[str] = Field(None, description="Caller identity; owners also see drafts")


class PublishTourRequest(BaseModel):
    """Request schema for publishing a tour."""

    tour_id: EntityId
    guide_id: Identity
    price: float = Field(..., ge=0, description="Purchase price")


class Tour(BaseModel):
    """Tour response schema."""

    id: str = Field(..., description="Unique tour ID")
    guide_id: str = Field(..., description="Owning guide")
    name: str
    description: str
    difficulty: str
    tags: List[str]
    status: str = Field(..., description="draft or published")
    price: float
    is_published: bool
    published_at: Optional[str] = Field(None, description="Publication time (ISO 8601)")
    created_at: str = Field(..., description="Creation time (ISO 8601)")


class TourResponse(Envelope):
    tour: Optional[Tour] = None


class ToursResponse(Envelope):
    tours: List[Tour] = Field(default_factory=list)


class AddKeyPointRequest(BaseModel):
    """Request schema for adding a keypoint to a tour."""

    tour_id: EntityId
    guide_id: Identity
    latitude: Latitude
    longitude: Longitude
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=5000)
    image: str = Field("", max_length=1024, description="Image URL")
    order: int = Field(0, ge=0, description="Display order within the tour")


class UpdateKeyPointRequest(BaseModel):
    """Request schema for updating a keypoint."""

    keypoint_id: EntityId
    tour_id: EntityId
    guide_id: Identity
    latitude: Latitude
    longitude: Longitude
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=5000)
    image: str = Field("", max_length=1024)
    order: Optional[int] = Field(None, ge=0, description="New display order; unchanged when omitted")


class DeleteKeyPointRequest(BaseModel):
    """Request schema for deleting a keypoint."""

    keypoint_id: EntityId
    tour_id: EntityId
    guide_id: Identity


class GetKeyPointsRequest(BaseModel):
    """Request schema for listing a tour's keypoints."""

    tour_id: EntityId
    user_id: Optional[str] = Field(None, description="Caller identity used for purchase/ownership gating")


class KeyPoint(BaseModel):
    """Keypoint response schema."""

    id: str
    tour_id: str
    latitude: float
    longitude: float
    name: str
    description: str
    image: str
    order: int


class KeyPointResponse(Envelope):
    key_point: Optional[KeyPoint] = None


class KeyPointsResponse(Envelope):
    key_points: List[KeyPoint] = Field(default_factory=list)
    is_purchased: bool = Field(False, description="Whether the caller holds a purchase token for the tour")


class DeleteKeyPointResponse(Envelope):
    pass
