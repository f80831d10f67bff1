"""Models module exporting all database models."""

from .cart import CartItem, PurchaseToken, ShoppingCart
from .execution import CompletedKeypoint, ExecutionStatus, Position, TourExecution
from .tour import KeyPoint, Tour, TourStatus

__all__ = [
    # Authoring
    "Tour",
    "TourStatus",
    "KeyPoint",

    # Purchase ledger
    "ShoppingCart",
    "CartItem",
    "PurchaseToken",

    # Execution
    "TourExecution",
    "ExecutionStatus",
    "CompletedKeypoint",
    "Position",
]
