"""Conversion from ORM entities to response schemas."""

from ..models import CartItem as CartItemModel
from ..models import KeyPoint as KeyPointModel
from ..models import Position as PositionModel
from ..models import PurchaseToken as PurchaseTokenModel
from ..models import ShoppingCart as ShoppingCartModel
from ..models import Tour as TourModel
from ..models import TourExecution as TourExecutionModel
from ..models import ExecutionStatus, TourStatus
from ..schemas.cart import CartItem, CheckoutLine, PurchaseToken, ShoppingCart
from ..schemas.common import Position, isoformat_utc
from ..schemas.execution import CompletedKeyPoint, TourExecution
from ..schemas.tour import KeyPoint, Tour
from ..services.cart_service import CheckoutLineResult


def convert_tour(tour: TourModel) -> Tour:
    return Tour(
        id=str(tour.id),
        guide_id=tour.guide_id,
        name=tour.name,
        description=tour.description,
        difficulty=tour.difficulty,
        tags=list(tour.tags or []),
        status=TourStatus(tour.status).value,
        price=tour.price,
        is_published=tour.is_published,
        published_at=isoformat_utc(tour.published_at),
        created_at=isoformat_utc(tour.created_at),
    )


def convert_keypoint(keypoint: KeyPointModel) -> KeyPoint:
    return KeyPoint(
        id=str(keypoint.id),
        tour_id=str(keypoint.tour_id),
        latitude=keypoint.latitude,
        longitude=keypoint.longitude,
        name=keypoint.name,
        description=keypoint.description,
        image=keypoint.image,
        order=keypoint.order,
    )


def convert_cart_item(item: CartItemModel) -> CartItem:
    return CartItem(tour_id=str(item.tour_id), tour_name=item.tour_name, price=item.price)


def convert_cart(cart: ShoppingCartModel) -> ShoppingCart:
    return ShoppingCart(
        tourist_id=cart.tourist_id,
        items=[convert_cart_item(item) for item in cart.items],
        total_price=cart.total_price,
    )


def convert_token(token: PurchaseTokenModel) -> PurchaseToken:
    return PurchaseToken(
        tour_id=str(token.tour_id),
        token=token.token,
        purchased_at=isoformat_utc(token.purchased_at),
    )


def convert_checkout_line(line: CheckoutLineResult) -> CheckoutLine:
    return CheckoutLine(
        tour_id=str(line.tour_id),
        tour_name=line.tour_name,
        success=line.success,
        token=convert_token(line.token) if line.token is not None else None,
        error=line.error,
    )


def convert_execution(execution: TourExecutionModel) -> TourExecution:
    """Convert an execution, completions in the order they were reached."""
    return TourExecution(
        id=str(execution.id),
        tourist_id=execution.tourist_id,
        tour_id=str(execution.tour_id),
        status=ExecutionStatus(execution.status).value,
        started_at=isoformat_utc(execution.started_at),
        completed_at=isoformat_utc(execution.completed_at),
        last_activity=isoformat_utc(execution.last_activity),
        start_position=Position(
            latitude=execution.start_latitude,
            longitude=execution.start_longitude,
        ),
        completed_keypoints=[
            CompletedKeyPoint(
                keypoint_id=str(completed.keypoint_id),
                completed_at=isoformat_utc(completed.completed_at),
            )
            for completed in execution.completed_keypoints
        ],
        version=execution.version,
    )


def convert_position(position: PositionModel) -> Position:
    return Position(
        tourist_id=position.tourist_id,
        latitude=position.latitude,
        longitude=position.longitude,
        updated_at=isoformat_utc(position.updated_at),
    )
