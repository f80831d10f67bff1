"""Unit tests for the position simulator."""

import pytest

from guided_tours.core.exceptions import NotFoundError
from guided_tours.services.position_service import PositionService


@pytest.mark.asyncio
async def test_position_upsert(test_session, tourist_id):
    service = PositionService(test_session)

    with pytest.raises(NotFoundError):
        await service.get_current_position(tourist_id)

    first = await service.update_position(tourist_id, 45.0, 15.0)
    second = await service.update_position(tourist_id, 45.1, 15.1)

    assert second.id == first.id
    current = await service.get_current_position(tourist_id)
    assert (current.latitude, current.longitude) == (45.1, 15.1)


@pytest.mark.asyncio
async def test_positions_are_per_tourist(test_session):
    service = PositionService(test_session)

    await service.update_position("tourist-a", 1.0, 1.0)
    await service.update_position("tourist-b", 2.0, 2.0)

    assert (await service.get_current_position("tourist-a")).latitude == 1.0
    assert (await service.get_current_position("tourist-b")).latitude == 2.0
