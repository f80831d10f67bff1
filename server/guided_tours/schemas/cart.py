"""Cart and checkout Pydantic schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .common import EntityId, Envelope, Identity


class AddToCartRequest(BaseModel):
    """Request schema for adding a tour to the cart."""

    tourist_id: Identity
    tour_id: EntityId


class RemoveFromCartRequest(BaseModel):
    """Request schema for removing a tour from the cart."""

    tourist_id: Identity
    tour_id: EntityId


class GetCartRequest(BaseModel):
    tourist_id: Identity


class CheckoutRequest(BaseModel):
    tourist_id: Identity


class CartItem(BaseModel):
    """Cart line; name and price as they were when the tour was added."""

    tour_id: str
    tour_name: str
    price: float


class ShoppingCart(BaseModel):
    tourist_id: str
    items: List[CartItem] = Field(default_factory=list)
    total_price: float = 0.0


class CartResponse(Envelope):
    cart: Optional[ShoppingCart] = None


class PurchaseToken(BaseModel):
    """Proof of purchase issued at checkout."""

    tour_id: str
    token: str
    purchased_at: str = Field(..., description="Purchase time (ISO 8601)")


class CheckoutLine(BaseModel):
    """Outcome of minting the token for one cart line."""

    tour_id: str
    tour_name: str
    success: bool
    token: Optional[PurchaseToken] = None
    error: Optional[str] = None


class CheckoutResponse(Envelope):
    tokens: List[PurchaseToken] = Field(default_factory=list, description="Tokens actually issued")
    lines: List[CheckoutLine] = Field(default_factory=list, description="Per-line outcome in cart order")
    issued_count: int = Field(0, ge=0)
    cart_cleared: bool = True
