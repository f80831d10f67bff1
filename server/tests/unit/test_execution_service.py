"""Unit tests for the tour execution state machine."""

from uuid import uuid4

import pytest

from guided_tours.core.exceptions import InvalidStateError, NotFoundError, UnauthorizedError
from guided_tours.models import ExecutionStatus
from guided_tours.schemas.execution import CheckProximityRequest, StartExecutionRequest
from guided_tours.services.execution_service import ExecutionService
from guided_tours.services.proximity import distance


def _start(tour, tourist_id, latitude=0.0, longitude=0.0):
    return StartExecutionRequest(
        tourist_id=tourist_id,
        tour_id=str(tour.id),
        start_latitude=latitude,
        start_longitude=longitude,
    )


def _report(execution, tourist_id, latitude, longitude):
    return CheckProximityRequest(
        execution_id=str(execution.id),
        tourist_id=tourist_id,
        current_latitude=latitude,
        current_longitude=longitude,
    )


@pytest.mark.asyncio
async def test_start_requires_purchase(test_session, published_tour, tourist_id):
    service = ExecutionService(test_session)

    with pytest.raises(InvalidStateError, match="not purchased"):
        await service.start_execution(_start(published_tour, tourist_id))

    assert await service.list_active_executions(tourist_id) == []


@pytest.mark.asyncio
async def test_start_missing_tour(test_session, tourist_id):
    service = ExecutionService(test_session)

    with pytest.raises(NotFoundError):
        await service.start_execution(
            StartExecutionRequest(tourist_id=tourist_id, tour_id=str(uuid4()), start_latitude=0, start_longitude=0)
        )


@pytest.mark.asyncio
async def test_start_is_idempotent(test_session, purchased_tour, tourist_id):
    service = ExecutionService(test_session)

    first, created = await service.start_execution(_start(purchased_tour, tourist_id))
    second, created_again = await service.start_execution(_start(purchased_tour, tourist_id, 1.0, 1.0))

    assert created is True
    assert created_again is False
    assert second.id == first.id
    assert first.status == ExecutionStatus.ACTIVE
    assert first.start_latitude == 0.0
    assert first.completed_keypoints == []
    assert first.completed_at is None
    assert len(await service.list_active_executions(tourist_id)) == 1


@pytest.mark.asyncio
async def test_walkthrough_advances_once_per_keypoint(test_session, purchased_tour, tour_keypoints, tourist_id):
    """Report at K1 completes it; reporting again at K1 does not advance."""
    service = ExecutionService(test_session)
    execution, _ = await service.start_execution(_start(purchased_tour, tourist_id))
    k1, k2, _k3 = tour_keypoints

    result = await service.check_proximity(_report(execution, tourist_id, k1.latitude, k1.longitude))

    assert result.advanced is True
    assert result.keypoint.id == k1.id
    assert result.distance == pytest.approx(0.0, abs=1e-6)
    assert [c.keypoint_id for c in result.execution.completed_keypoints] == [k1.id]

    again = await service.check_proximity(_report(execution, tourist_id, k1.latitude, k1.longitude))

    assert again.advanced is False
    assert again.keypoint is None
    assert again.distance == pytest.approx(distance(k1.latitude, k1.longitude, k2.latitude, k2.longitude))
    assert [c.keypoint_id for c in again.execution.completed_keypoints] == [k1.id]


@pytest.mark.asyncio
async def test_proximity_touches_last_activity(test_session, purchased_tour, tourist_id):
    service = ExecutionService(test_session)
    execution, _ = await service.start_execution(_start(purchased_tour, tourist_id))
    before = execution.last_activity
    version = execution.version

    result = await service.check_proximity(_report(execution, tourist_id, 45.0, 15.0))

    assert result.advanced is False
    assert result.execution.last_activity >= before
    assert result.execution.version == version + 1


@pytest.mark.asyncio
async def test_one_completion_per_report(test_session, purchased_tour, tour_keypoints, tourist_id):
    """Walking the tour completes exactly one keypoint per report, in stored order."""
    service = ExecutionService(test_session)
    execution, _ = await service.start_execution(_start(purchased_tour, tourist_id))

    # Midway between K1 and K2, about 55 m from each
    result = await service.check_proximity(_report(execution, tourist_id, 0.0015, 0.0))
    assert result.advanced is False
    assert result.distance == pytest.approx(distance(0.0015, 0.0, 0.001, 0.0))

    completed = []
    for keypoint in tour_keypoints:
        result = await service.check_proximity(_report(execution, tourist_id, keypoint.latitude, keypoint.longitude))
        assert result.advanced
        completed.append(result.keypoint.id)
        assert len(result.execution.completed_keypoints) == len(completed)

    assert completed == [kp.id for kp in tour_keypoints]
    assert [c.keypoint_id for c in execution.completed_keypoints] == completed

    final = await service.check_proximity(_report(execution, tourist_id, 0.002, 0.0))
    assert final.advanced is False
    assert final.distance is None


@pytest.mark.asyncio
async def test_proximity_requires_owner(test_session, purchased_tour, tour_keypoints, tourist_id):
    service = ExecutionService(test_session)
    execution, _ = await service.start_execution(_start(purchased_tour, tourist_id))
    k1 = tour_keypoints[0]

    with pytest.raises(UnauthorizedError):
        await service.check_proximity(_report(execution, "tourist-2", k1.latitude, k1.longitude))

    assert execution.completed_keypoints == []


@pytest.mark.asyncio
async def test_missing_or_malformed_execution(test_session, tourist_id):
    service = ExecutionService(test_session)

    with pytest.raises(NotFoundError):
        await service.get_execution(str(uuid4()), tourist_id)
    with pytest.raises(NotFoundError):
        await service.complete_execution("not-a-uuid", tourist_id)


@pytest.mark.asyncio
async def test_complete_without_visiting_keypoints(test_session, purchased_tour, tourist_id):
    service = ExecutionService(test_session)
    execution, _ = await service.start_execution(_start(purchased_tour, tourist_id))

    completed = await service.complete_execution(str(execution.id), tourist_id)

    assert completed.status == ExecutionStatus.COMPLETED
    assert completed.completed_at is not None
    assert await service.list_active_executions(tourist_id) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("terminal", ["complete_execution", "abandon_execution"])
async def test_terminal_execution_rejects_transitions(test_session, purchased_tour, tour_keypoints, tourist_id, terminal):
    service = ExecutionService(test_session)
    execution, _ = await service.start_execution(_start(purchased_tour, tourist_id))
    await getattr(service, terminal)(str(execution.id), tourist_id)
    terminated_at = execution.completed_at

    with pytest.raises(InvalidStateError):
        await service.complete_execution(str(execution.id), tourist_id)
    with pytest.raises(InvalidStateError):
        await service.abandon_execution(str(execution.id), tourist_id)
    k1 = tour_keypoints[0]
    with pytest.raises(InvalidStateError):
        await service.check_proximity(_report(execution, tourist_id, k1.latitude, k1.longitude))

    fetched = await service.get_execution(str(execution.id), tourist_id)
    assert fetched.completed_at == terminated_at
    assert fetched.completed_keypoints == []


@pytest.mark.asyncio
async def test_abandon_then_start_creates_new_execution(test_session, purchased_tour, tourist_id):
    service = ExecutionService(test_session)
    first, _ = await service.start_execution(_start(purchased_tour, tourist_id))

    abandoned = await service.abandon_execution(str(first.id), tourist_id)
    assert abandoned.status == ExecutionStatus.ABANDONED
    assert abandoned.completed_at is not None

    second, created = await service.start_execution(_start(purchased_tour, tourist_id))
    assert created is True
    assert second.id != first.id


@pytest.mark.asyncio
async def test_terminate_requires_owner(test_session, purchased_tour, tourist_id):
    service = ExecutionService(test_session)
    execution, _ = await service.start_execution(_start(purchased_tour, tourist_id))

    with pytest.raises(UnauthorizedError):
        await service.abandon_execution(str(execution.id), "tourist-2")
    with pytest.raises(UnauthorizedError):
        await service.get_execution(str(execution.id), "tourist-2")

    assert execution.status == ExecutionStatus.ACTIVE
