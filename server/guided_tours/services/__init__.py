"""Service layer package."""

from .cart_service import CartService, CheckoutLineResult, CheckoutResult
from .execution_service import ExecutionService, ProximityResult
from .keypoint_service import KeyPointListing, KeyPointService
from .position_service import PositionService
from .purchase_service import PurchaseService
from .tour_service import TourService

__all__ = [
    "CartService",
    "CheckoutLineResult",
    "CheckoutResult",
    "ExecutionService",
    "KeyPointListing",
    "KeyPointService",
    "PositionService",
    "ProximityResult",
    "PurchaseService",
    "TourService",
]
