"""Tour and KeyPoint model definitions."""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TourStatus(str, Enum):
    """Tour status enumeration."""
    DRAFT = "draft"
    PUBLISHED = "published"


class Tour(Base):
    """Tour entity authored by a guide."""

    __tablename__ = "tours"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Owning guide; identities arrive pre-validated as opaque strings
    guide_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    # Tour information
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    difficulty: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Publication state; price stays 0 until published
    status: Mapped[TourStatus] = mapped_column(String(20), nullable=False, default=TourStatus.DRAFT, index=True)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_published: Mapped[bool] = mapped_column(nullable=False, default=False, index=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_tour_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, name='{self.name}', status={self.status})>"


class KeyPoint(Base):
    """Geotagged waypoint belonging to exactly one tour."""

    __tablename__ = "keypoints"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    tour_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image: Mapped[str] = mapped_column(String(1024), nullable=False, default="")

    # Display order chosen by the guide; sequence breaks ties by insertion
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_keypoint_latitude_range"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_keypoint_longitude_range"),
    )

    def __repr__(self) -> str:
        return (
            f"<KeyPoint(id={self.id}, tour_id={self.tour_id}, name='{self.name}', "
            f"lat={self.latitude}, lon={self.longitude})>"
        )
