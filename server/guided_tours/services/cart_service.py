"""Cart service: cart mutation and best-effort checkout."""

from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import commit_or_raise
from ..core.exceptions import ConflictError, InvalidStateError, PersistenceError
from ..core.observability import get_logger, metrics_collector
from ..models import CartItem, PurchaseToken, ShoppingCart, TourStatus
from ..models.tour import utcnow
from .authorization import parse_id
from .purchase_service import PurchaseService
from .tour_service import TourService

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckoutLineResult:
    """Outcome of minting the token for one cart line."""

    tour_id: UUID
    tour_name: str
    price: float
    token: Optional[PurchaseToken] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.token is not None


@dataclass
class CheckoutResult:
    """Per-line checkout outcome; checkout is not all-or-nothing."""

    lines: List[CheckoutLineResult] = field(default_factory=list)
    cart_cleared: bool = False

    @property
    def tokens(self) -> List[PurchaseToken]:
        return [line.token for line in self.lines if line.token is not None]

    @property
    def issued_count(self) -> int:
        return len(self.tokens)

    @property
    def failed_count(self) -> int:
        return len(self.lines) - self.issued_count


def _recompute_total(cart: ShoppingCart) -> None:
    # Always the literal sum; never adjusted incrementally
    cart.total_price = sum(item.price for item in cart.items)
    cart.updated_at = utcnow()


class CartService:
    """Service for shopping cart and checkout operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)
        self.purchase_service = PurchaseService(db)

    async def get_cart(self, tourist_id: str) -> ShoppingCart:
        """Get the tourist's cart, creating an empty one on first use."""
        stmt = (
            select(ShoppingCart)
            .where(ShoppingCart.tourist_id == tourist_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        cart = result.scalar_one_or_none()
        if cart:
            return cart

        cart = ShoppingCart(tourist_id=tourist_id, items=[], total_price=0.0)
        self.db.add(cart)
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent request created it first
            await self.db.rollback()
            result = await self.db.execute(stmt)
            return result.scalar_one()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(detail="Failed to access cart", operation="create_cart") from e

        logger.info("cart_created", tourist_id=tourist_id)
        return cart

    async def add_to_cart(self, tourist_id: str, tour_id: str) -> ShoppingCart:
        """
        Add a published tour to the cart at its current price.

        Raises:
            NotFoundError: If tour not found
            InvalidStateError: If the tour is not published
            ConflictError: If the tour is already in the cart
        """
        tour = await self.tour_service.get_tour_by_id_or_raise(parse_id(tour_id, "tour"))
        if not tour.is_published:
            raise InvalidStateError("Cannot add unpublished tour to cart", current_state=TourStatus(tour.status).value)

        cart = await self.get_cart(tourist_id)
        if self._find_line(cart, tour.id) is not None:
            raise ConflictError(
                detail="Tour already in cart",
                conflicting_resource={"tour_id": str(tour.id), "tourist_id": tourist_id},
            )

        cart.items.append(CartItem(tour_id=tour.id, tour_name=tour.name, price=tour.price))
        _recompute_total(cart)
        await commit_or_raise(self.db, "cart")

        logger.info(
            "cart_item_added",
            tourist_id=tourist_id,
            tour_id=str(tour.id),
            price=tour.price,
            total_price=cart.total_price,
        )
        return cart

    async def remove_from_cart(self, tourist_id: str, tour_id: str) -> ShoppingCart:
        """
        Remove a tour from the cart; removing an absent tour is a no-op.

        Raises:
            NotFoundError: If the tour id is malformed
        """
        tour_uuid = parse_id(tour_id, "tour")
        cart = await self.get_cart(tourist_id)

        line = self._find_line(cart, tour_uuid)
        if line is not None:
            cart.items.remove(line)
        _recompute_total(cart)
        await commit_or_raise(self.db, "cart")

        logger.info(
            "cart_item_removed",
            tourist_id=tourist_id,
            tour_id=tour_id,
            removed=line is not None,
            total_price=cart.total_price,
        )
        return cart

    async def checkout(self, tourist_id: str) -> CheckoutResult:
        """
        Convert every cart line into a purchase token and empty the cart.

        Each token is written in its own savepoint. A line whose token cannot
        be written is logged and reported as failed; the others still go
        through. The cart is cleared afterwards even if some lines failed.

        Raises:
            InvalidStateError: If the cart is empty
            PersistenceError: If the final commit fails (nothing is issued)
        """
        cart = await self.get_cart(tourist_id)
        if not cart.items:
            raise InvalidStateError("Cart is empty")

        result = CheckoutResult()
        lines = [(item.tour_id, item.tour_name, item.price) for item in cart.items]

        for tour_id, tour_name, price in lines:
            try:
                token = await self.purchase_service.mint_token(tourist_id, tour_id)
            except PersistenceError as e:
                logger.error(
                    "checkout_line_failed",
                    tourist_id=tourist_id,
                    tour_id=str(tour_id),
                    error=str(e),
                )
                result.lines.append(
                    CheckoutLineResult(tour_id=tour_id, tour_name=tour_name, price=price, error="Failed to issue purchase token")
                )
                continue

            result.lines.append(CheckoutLineResult(tour_id=tour_id, tour_name=tour_name, price=price, token=token))

        cart.items = []
        _recompute_total(cart)
        await commit_or_raise(self.db, "checkout")
        result.cart_cleared = True

        metrics_collector.record_checkout(result.issued_count, result.failed_count)
        logger.info(
            "checkout_completed",
            tourist_id=tourist_id,
            lines=len(result.lines),
            issued=result.issued_count,
            failed=result.failed_count,
        )
        return result

    @staticmethod
    def _find_line(cart: ShoppingCart, tour_id: UUID) -> Optional[CartItem]:
        """Linear scan; the first line in cart order wins."""
        for item in cart.items:
            if item.tour_id == tour_id:
                return item
        return None
