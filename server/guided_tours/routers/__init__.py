"""FastAPI routers package."""

from .cart import router as cart_router
from .execution import router as execution_router
from .health import router as health_router
from .keypoint import router as keypoint_router
from .metrics import router as metrics_router
from .position import router as position_router
from .tour import router as tour_router

__all__ = [
    "cart_router",
    "execution_router",
    "health_router",
    "keypoint_router",
    "metrics_router",
    "position_router",
    "tour_router",
]
