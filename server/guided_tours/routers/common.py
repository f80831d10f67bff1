"""Helpers shared by the RPC routers."""

from typing import Any, Awaitable, Callable, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import PersistenceError, TourServiceError
from ..core.observability import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def run_operation(operation: str, func: Callable[[], Awaitable[T]], **context: Any) -> T:
    """
    Run a service call on behalf of an endpoint.

    Domain failures are logged and re-raised for the failure envelope
    handler. Store errors that escaped the service become PersistenceError.
    """
    try:
        return await func()
    except TourServiceError as e:
        logger.info(
            "operation_rejected",
            operation=operation,
            code=e.code,
            detail=e.detail,
            **context,
        )
        raise
    except SQLAlchemyError as e:
        logger.error(
            "operation_store_failure",
            operation=operation,
            error=str(e),
            **context,
        )
        raise PersistenceError(detail=f"Failed to {operation.replace('_', ' ')}", operation=operation) from e


def respond(payload: BaseModel, status_code: int = 200) -> JSONResponse:
    """Serialize a response envelope."""
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))
