"""Tour execution state machine: start, proximity advance, and termination."""

from dataclasses import dataclass
from typing import List, Optional, Tuple
from uuid import UUID

from opentelemetry import trace
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import commit_or_raise
from ..core.exceptions import ConflictError, InvalidStateError, NotFoundError
from ..core.observability import get_logger, metrics_collector
from ..models import CompletedKeypoint, ExecutionStatus, KeyPoint, TourExecution
from ..models.tour import utcnow
from ..schemas.execution import CheckProximityRequest, StartExecutionRequest
from .authorization import parse_id, require_execution_owner
from .keypoint_service import KeyPointService
from .proximity import find_first_reachable
from .purchase_service import PurchaseService
from .tour_service import TourService

logger = get_logger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True)
class ProximityResult:
    """Outcome of one position report against an active execution."""

    advanced: bool
    keypoint: Optional[KeyPoint]
    distance: Optional[float]
    execution: TourExecution


class ExecutionService:
    """Service for tour execution lifecycle operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tour_service = TourService(db)
        self.keypoint_service = KeyPointService(db)
        self.purchase_service = PurchaseService(db)

    async def start_execution(self, request: StartExecutionRequest) -> Tuple[TourExecution, bool]:
        """
        Start a tour execution, or resume the tourist's active one.

        Returns:
            The execution and whether it was newly created

        Raises:
            NotFoundError: If tour not found
            InvalidStateError: If the tourist has not purchased the tour
        """
        tour = await self.tour_service.get_tour_by_id_or_raise(parse_id(request.tour_id, "tour"))

        if not await self.purchase_service.has_purchased(request.tourist_id, tour.id):
            logger.warning("execution_start_rejected", tourist_id=request.tourist_id, tour_id=str(tour.id))
            raise InvalidStateError("Tour not purchased. Please buy the tour first.")

        existing = await self._get_active_execution(request.tourist_id, tour.id)
        if existing:
            return self._resume(existing), False

        execution = TourExecution(
            tourist_id=request.tourist_id,
            tour_id=tour.id,
            status=ExecutionStatus.ACTIVE,
            start_latitude=request.start_latitude,
            start_longitude=request.start_longitude,
            completed_keypoints=[],
        )
        self.db.add(execution)
        try:
            await commit_or_raise(self.db, "execution")
        except ConflictError:
            # A concurrent start inserted the active execution first
            existing = await self._get_active_execution(request.tourist_id, tour.id)
            if existing is None:
                raise
            return self._resume(existing), False

        metrics_collector.record_execution_started(resumed=False)
        logger.info(
            "execution_started",
            execution_id=str(execution.id),
            tourist_id=request.tourist_id,
            tour_id=str(tour.id),
            start_latitude=request.start_latitude,
            start_longitude=request.start_longitude,
        )
        return execution, True

    async def check_proximity(self, request: CheckProximityRequest) -> ProximityResult:
        """
        Report the tourist's position and complete at most one keypoint.

        The tour's keypoints are scanned in stored order and the first
        uncompleted one within range is appended to the completion list.
        Either way the execution's last activity is touched and persisted.

        Raises:
            NotFoundError: If the execution is absent
            UnauthorizedError: If the tourist does not own the execution
            InvalidStateError: If the execution is no longer active
        """
        with tracer.start_as_current_span("execution.check_proximity") as span:
            execution = await self.get_execution_by_id_or_raise(request.execution_id)
            require_execution_owner(execution, request.tourist_id)
            if not execution.is_active:
                state = ExecutionStatus(execution.status).value
                raise InvalidStateError(f"Execution is {state}, not active", current_state=state)

            keypoints = await self.keypoint_service.list_keypoints(execution.tour_id)
            completed_ids = {completed.keypoint_id for completed in execution.completed_keypoints}
            match = find_first_reachable(
                keypoints,
                completed_ids,
                request.current_latitude,
                request.current_longitude,
            )

            if match.reached:
                execution.completed_keypoints.append(CompletedKeypoint(keypoint_id=match.keypoint.id))
            execution.last_activity = utcnow()
            await commit_or_raise(self.db, "execution")

            span.set_attribute("execution.id", str(execution.id))
            span.set_attribute("proximity.advanced", match.reached)

        metrics_collector.record_proximity_check(match.reached)
        if match.reached:
            logger.info(
                "keypoint_completed",
                execution_id=str(execution.id),
                keypoint_id=str(match.keypoint.id),
                distance=round(match.distance, 2),
                completed=len(execution.completed_keypoints),
                total=len(keypoints),
            )
        else:
            logger.debug(
                "proximity_not_advanced",
                execution_id=str(execution.id),
                closest_distance=match.distance,
            )

        return ProximityResult(
            advanced=match.reached,
            keypoint=match.keypoint,
            distance=match.distance,
            execution=execution,
        )

    async def complete_execution(self, execution_id: str, tourist_id: str) -> TourExecution:
        """
        Mark an active execution completed.

        Completion does not require every keypoint to have been visited.

        Raises:
            NotFoundError: If the execution is absent
            UnauthorizedError: If the tourist does not own the execution
            InvalidStateError: If the execution is already terminal
        """
        return await self._terminate(execution_id, tourist_id, ExecutionStatus.COMPLETED)

    async def abandon_execution(self, execution_id: str, tourist_id: str) -> TourExecution:
        """
        Mark an active execution abandoned.

        Raises:
            NotFoundError: If the execution is absent
            UnauthorizedError: If the tourist does not own the execution
            InvalidStateError: If the execution is already terminal
        """
        return await self._terminate(execution_id, tourist_id, ExecutionStatus.ABANDONED)

    async def get_execution(self, execution_id: str, tourist_id: str) -> TourExecution:
        """Get an execution in any state on behalf of its tourist."""
        execution = await self.get_execution_by_id_or_raise(execution_id)
        require_execution_owner(execution, tourist_id)
        return execution

    async def list_active_executions(self, tourist_id: str) -> List[TourExecution]:
        stmt = (
            select(TourExecution)
            .where(
                TourExecution.tourist_id == tourist_id,
                TourExecution.status == ExecutionStatus.ACTIVE,
            )
            .order_by(TourExecution.started_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def count_active_executions(self) -> int:
        stmt = select(func.count()).select_from(TourExecution).where(TourExecution.status == ExecutionStatus.ACTIVE)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def get_execution_by_id_or_raise(self, execution_id: str) -> TourExecution:
        """
        Get execution by ID or raise NotFoundError.

        Raises:
            NotFoundError: If the id is malformed or no execution has it
        """
        stmt = select(TourExecution).where(TourExecution.id == parse_id(execution_id, "execution"))
        result = await self.db.execute(stmt)
        execution = result.scalar_one_or_none()
        if not execution:
            logger.warning("execution_not_found", execution_id=execution_id)
            raise NotFoundError(resource_type="execution", resource_id=execution_id)
        return execution

    async def _get_active_execution(self, tourist_id: str, tour_id: UUID) -> Optional[TourExecution]:
        stmt = (
            select(TourExecution)
            .where(
                TourExecution.tourist_id == tourist_id,
                TourExecution.tour_id == tour_id,
                TourExecution.status == ExecutionStatus.ACTIVE,
            )
            .order_by(TourExecution.started_at)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _resume(execution: TourExecution) -> TourExecution:
        metrics_collector.record_execution_started(resumed=True)
        logger.info(
            "execution_resumed",
            execution_id=str(execution.id),
            tourist_id=execution.tourist_id,
            tour_id=str(execution.tour_id),
        )
        return execution

    async def _terminate(self, execution_id: str, tourist_id: str, status: ExecutionStatus) -> TourExecution:
        execution = await self.get_execution_by_id_or_raise(execution_id)
        require_execution_owner(execution, tourist_id)
        if not execution.is_active:
            state = ExecutionStatus(execution.status).value
            raise InvalidStateError(f"Execution is already {state}", current_state=state)

        now = utcnow()
        execution.status = status
        execution.completed_at = now
        execution.last_activity = now
        await commit_or_raise(self.db, "execution")

        metrics_collector.record_execution_terminated(status.value)
        logger.info(
            "execution_terminated",
            execution_id=str(execution.id),
            tourist_id=tourist_id,
            status=status.value,
            completed=len(execution.completed_keypoints),
        )
        return execution
