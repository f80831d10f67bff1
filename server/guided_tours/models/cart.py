"""Shopping cart and purchase token model definitions."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Uuid
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .tour import utcnow


class ShoppingCart(Base):
    """One cart per tourist holding snapshot line items."""

    __tablename__ = "shopping_carts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    tourist_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)

    # Always the literal sum of the current line prices
    total_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    items: Mapped[list["CartItem"]] = relationship(
        "CartItem",
        back_populates="cart",
        order_by="CartItem.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<ShoppingCart(tourist_id='{self.tourist_id}', items={len(self.items)}, total={self.total_price})>"


class CartItem(Base):
    """Cart line; name and price are captured when the tour is added."""

    __tablename__ = "cart_items"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    cart_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("shopping_carts.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    tour_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    tour_name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    cart: Mapped["ShoppingCart"] = relationship("ShoppingCart", back_populates="items")

    def __repr__(self) -> str:
        return f"<CartItem(tour_id={self.tour_id}, price={self.price}, position={self.position})>"


class PurchaseToken(Base):
    """Immutable proof that a tourist bought a tour. Never consumed."""

    __tablename__ = "purchase_tokens"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    tourist_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    tour_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    purchased_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<PurchaseToken(tourist_id='{self.tourist_id}', tour_id={self.tour_id})>"
