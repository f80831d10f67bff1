"""Tour execution and position model definitions."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid, text
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .tour import utcnow


class ExecutionStatus(str, Enum):
    """Execution status enumeration. COMPLETED and ABANDONED are terminal."""
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class TourExecution(Base):
    """One tourist's walk through one purchased tour."""

    __tablename__ = "tour_executions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    tourist_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    tour_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    status: Mapped[ExecutionStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ExecutionStatus.ACTIVE,
        index=True
    )

    start_latitude: Mapped[float] = mapped_column(Float, nullable=False)
    start_longitude: Mapped[float] = mapped_column(Float, nullable=False)

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_activity: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    # Termination time for either terminal status
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    completed_keypoints: Mapped[list["CompletedKeypoint"]] = relationship(
        "CompletedKeypoint",
        back_populates="execution",
        order_by="CompletedKeypoint.sequence",
        collection_class=ordering_list("sequence"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    # At most one active execution per tourist and tour
    __table_args__ = (
        Index(
            "uq_active_execution_per_tour",
            "tourist_id",
            "tour_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status == ExecutionStatus.ACTIVE

    def __repr__(self) -> str:
        return (
            f"<TourExecution(id={self.id}, tourist_id='{self.tourist_id}', tour_id={self.tour_id}, "
            f"status={self.status}, completed={len(self.completed_keypoints)})>"
        )


class CompletedKeypoint(Base):
    """Keypoint reached during an execution, in append order."""

    __tablename__ = "completed_keypoints"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    execution_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tour_executions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # No FK: completions outlive keypoints the guide later deletes
    keypoint_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    execution: Mapped["TourExecution"] = relationship("TourExecution", back_populates="completed_keypoints")

    __table_args__ = (
        UniqueConstraint("execution_id", "keypoint_id", name="uq_completed_keypoint_once"),
    )

    def __repr__(self) -> str:
        return f"<CompletedKeypoint(keypoint_id={self.keypoint_id}, sequence={self.sequence})>"


class Position(Base):
    """Last reported position of a tourist."""

    __tablename__ = "positions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    tourist_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Position(tourist_id='{self.tourist_id}', lat={self.latitude}, lon={self.longitude})>"
