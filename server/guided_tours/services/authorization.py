"""Ownership guards shared by every mutating operation.

Callers must confirm the entity exists before consulting these, so a missing
resource always reports NotFound and ownership checks never leak existence.
"""

from uuid import UUID

from ..core.exceptions import NotFoundError, UnauthorizedError
from ..models import TourExecution, Tour


def parse_id(value: str, resource_type: str) -> UUID:
    """Parse an opaque entity id; a malformed id is reported as not found."""
    try:
        return UUID(value)
    except (TypeError, ValueError, AttributeError):
        raise NotFoundError(resource_type=resource_type, resource_id=str(value)) from None


def guide_owns_tour(tour: Tour, guide_id: str | None) -> bool:
    return tour.guide_id == guide_id


def tourist_owns_execution(execution: TourExecution, tourist_id: str | None) -> bool:
    return execution.tourist_id == tourist_id


def require_tour_owner(tour: Tour, guide_id: str) -> None:
    if not guide_owns_tour(tour, guide_id):
        raise UnauthorizedError("Unauthorized: You don't own this tour", resource_type="tour")


def require_execution_owner(execution: TourExecution, tourist_id: str) -> None:
    if not tourist_owns_execution(execution, tourist_id):
        raise UnauthorizedError("Unauthorized: You don't own this execution", resource_type="execution")
