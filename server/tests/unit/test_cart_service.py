"""Unit tests for cart service and checkout."""

from uuid import uuid4

import pytest

from guided_tours.core.exceptions import ConflictError, InvalidStateError, NotFoundError, PersistenceError
from guided_tours.schemas.tour import CreateTourRequest, PublishTourRequest
from guided_tours.services.cart_service import CartService
from guided_tours.services.purchase_service import PurchaseService
from guided_tours.services.tour_service import TourService


async def _published(session, guide_id, name, price):
    service = TourService(session)
    tour = await service.create_tour(CreateTourRequest(guide_id=guide_id, name=name))
    return await service.publish_tour(PublishTourRequest(tour_id=str(tour.id), guide_id=guide_id, price=price))


@pytest.mark.asyncio
async def test_get_cart_creates_empty_cart(test_session, tourist_id):
    service = CartService(test_session)

    cart = await service.get_cart(tourist_id)
    again = await service.get_cart(tourist_id)

    assert cart.id == again.id
    assert cart.items == []
    assert cart.total_price == 0.0


@pytest.mark.asyncio
async def test_total_is_recomputed_from_lines(test_session, guide_id, tourist_id):
    """add(A, 10), add(B, 5), remove(A) leaves exactly 5."""
    service = CartService(test_session)
    tour_a = await _published(test_session, guide_id, "A", 10.0)
    tour_b = await _published(test_session, guide_id, "B", 5.0)

    cart = await service.add_to_cart(tourist_id, str(tour_a.id))
    assert cart.total_price == 10.0

    cart = await service.add_to_cart(tourist_id, str(tour_b.id))
    assert cart.total_price == 15.0

    cart = await service.remove_from_cart(tourist_id, str(tour_a.id))
    assert cart.total_price == 5.0
    assert [item.tour_name for item in cart.items] == ["B"]


@pytest.mark.asyncio
async def test_cart_line_keeps_price_at_add_time(test_session, published_tour, guide_id, tourist_id):
    service = CartService(test_session)
    await service.add_to_cart(tourist_id, str(published_tour.id))

    await TourService(test_session).publish_tour(
        PublishTourRequest(tour_id=str(published_tour.id), guide_id=guide_id, price=99.0)
    )

    cart = await service.get_cart(tourist_id)
    assert cart.items[0].price == 25.0
    assert cart.total_price == 25.0


@pytest.mark.asyncio
async def test_add_duplicate_tour_conflicts(test_session, published_tour, tourist_id):
    service = CartService(test_session)
    await service.add_to_cart(tourist_id, str(published_tour.id))

    with pytest.raises(ConflictError, match="already in cart"):
        await service.add_to_cart(tourist_id, str(published_tour.id))

    cart = await service.get_cart(tourist_id)
    assert len(cart.items) == 1


@pytest.mark.asyncio
async def test_add_unpublished_tour(test_session, draft_tour, tourist_id):
    service = CartService(test_session)

    with pytest.raises(InvalidStateError):
        await service.add_to_cart(tourist_id, str(draft_tour.id))


@pytest.mark.asyncio
async def test_add_missing_tour(test_session, tourist_id):
    service = CartService(test_session)

    with pytest.raises(NotFoundError):
        await service.add_to_cart(tourist_id, str(uuid4()))


@pytest.mark.asyncio
async def test_remove_absent_tour_is_noop(test_session, published_tour, tourist_id):
    service = CartService(test_session)
    await service.add_to_cart(tourist_id, str(published_tour.id))

    cart = await service.remove_from_cart(tourist_id, str(uuid4()))

    assert len(cart.items) == 1
    assert cart.total_price == 25.0


@pytest.mark.asyncio
async def test_checkout_empty_cart(test_session, tourist_id):
    service = CartService(test_session)

    with pytest.raises(InvalidStateError, match="Cart is empty"):
        await service.checkout(tourist_id)


@pytest.mark.asyncio
async def test_checkout_issues_tokens_and_clears_cart(test_session, published_tour, tourist_id):
    service = CartService(test_session)
    purchases = PurchaseService(test_session)
    await service.add_to_cart(tourist_id, str(published_tour.id))

    assert not await purchases.has_purchased(tourist_id, published_tour.id)

    result = await service.checkout(tourist_id)

    assert result.issued_count == 1
    assert result.failed_count == 0
    assert result.cart_cleared
    assert result.tokens[0].tour_id == published_tour.id
    assert result.tokens[0].token
    assert await purchases.has_purchased(tourist_id, published_tour.id)

    cart = await service.get_cart(tourist_id)
    assert cart.items == []
    assert cart.total_price == 0.0


@pytest.mark.asyncio
async def test_checkout_continues_past_failed_token(test_session, guide_id, tourist_id, monkeypatch):
    """Three lines with the second token failing: two issued, cart still cleared."""
    service = CartService(test_session)
    tours = [await _published(test_session, guide_id, name, 10.0) for name in ("A", "B", "C")]
    for tour in tours:
        await service.add_to_cart(tourist_id, str(tour.id))

    mint_token = service.purchase_service.mint_token
    calls = []

    async def flaky_mint_token(tourist, tour_id):
        calls.append(tour_id)
        if len(calls) == 2:
            raise PersistenceError(detail="token store unavailable", operation="mint_token")
        return await mint_token(tourist, tour_id)

    monkeypatch.setattr(service.purchase_service, "mint_token", flaky_mint_token)

    result = await service.checkout(tourist_id)

    assert calls == [tour.id for tour in tours]
    assert result.issued_count == 2
    assert result.failed_count == 1
    assert [line.success for line in result.lines] == [True, False, True]
    assert result.lines[1].tour_name == "B"
    assert result.lines[1].error
    assert result.cart_cleared

    purchases = PurchaseService(test_session)
    assert await purchases.has_purchased(tourist_id, tours[0].id)
    assert not await purchases.has_purchased(tourist_id, tours[1].id)
    assert await purchases.has_purchased(tourist_id, tours[2].id)

    cart = await service.get_cart(tourist_id)
    assert cart.items == []
    assert cart.total_price == 0.0
