"""Cart router for cart management and checkout."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dependencies import CartServiceDependency
from ..schemas.cart import (
    AddToCartRequest,
    CartResponse,
    CheckoutRequest,
    CheckoutResponse,
    GetCartRequest,
    RemoveFromCartRequest,
)
from ..services.cart_service import CartService
from .common import respond, run_operation
from .converters import convert_cart, convert_checkout_line, convert_token

router = APIRouter(prefix="/v1/cart", tags=["cart"])


@router.post("/add", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    cart_service: CartService = CartServiceDependency,
) -> JSONResponse:
    """Add a published tour to the cart at its current price."""
    cart = await run_operation(
        "add_to_cart",
        lambda: cart_service.add_to_cart(request.tourist_id, request.tour_id),
        tourist_id=request.tourist_id,
        tour_id=request.tour_id,
    )
    return respond(CartResponse(message="Tour added to cart", cart=convert_cart(cart)))


@router.post("/remove", response_model=CartResponse)
async def remove_from_cart(
    request: RemoveFromCartRequest,
    cart_service: CartService = CartServiceDependency,
) -> JSONResponse:
    cart = await run_operation(
        "remove_from_cart",
        lambda: cart_service.remove_from_cart(request.tourist_id, request.tour_id),
        tourist_id=request.tourist_id,
        tour_id=request.tour_id,
    )
    return respond(CartResponse(message="Tour removed from cart", cart=convert_cart(cart)))


@router.post("/get", response_model=CartResponse)
async def get_cart(
    request: GetCartRequest,
    cart_service: CartService = CartServiceDependency,
) -> JSONResponse:
    cart = await run_operation(
        "get_cart",
        lambda: cart_service.get_cart(request.tourist_id),
        tourist_id=request.tourist_id,
    )
    return respond(CartResponse(message="Cart retrieved successfully", cart=convert_cart(cart)))


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    request: CheckoutRequest,
    cart_service: CartService = CartServiceDependency,
) -> JSONResponse:
    """
    Buy every tour in the cart.

    Lines whose token could not be issued are reported individually; the
    cart is emptied either way.
    """
    result = await run_operation(
        "checkout",
        lambda: cart_service.checkout(request.tourist_id),
        tourist_id=request.tourist_id,
    )

    if result.failed_count:
        message = f"Checkout completed with {result.failed_count} failed purchase(s)"
    else:
        message = "Checkout successful"

    return respond(
        CheckoutResponse(
            message=message,
            tokens=[convert_token(token) for token in result.tokens],
            lines=[convert_checkout_line(line) for line in result.lines],
            issued_count=result.issued_count,
            cart_cleared=result.cart_cleared,
        )
    )
