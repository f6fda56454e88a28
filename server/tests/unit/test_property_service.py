"""Unit tests for PropertyService search."""

import pytest
import pytest_asyncio
from pydantic import ValidationError

from rental_booking.schemas.property import SearchPropertiesRequest
from rental_booking.services.property_service import PropertyService


@pytest_asyncio.fixture
async def listings(property_factory):
    return [
        await property_factory(title="Alpine Chalet", nightly_rate=30000, max_guests=8),
        await property_factory(title="Beach Bungalow", nightly_rate=15000, max_guests=4),
        await property_factory(title="City Loft", nightly_rate=12000, max_guests=2),
        await property_factory(title="Desert Yurt", nightly_rate=8000, max_guests=None),
    ]


async def _titles(session, **filters):
    result = await PropertyService(session).search_properties(SearchPropertiesRequest(**filters))
    return [item.title for item in result.items]


@pytest.mark.asyncio
async def test_search_without_filters_lists_everything(test_session, listings):
    result = await PropertyService(test_session).search_properties(SearchPropertiesRequest())

    assert [item.title for item in result.items] == ["Alpine Chalet", "Beach Bungalow", "City Loft", "Desert Yurt"]
    assert result.total_count == 4
    assert (result.page, result.limit) == (1, 20)


@pytest.mark.asyncio
async def test_search_by_guest_capacity(test_session, listings):
    """Listings without a guest limit match any party size."""
    assert await _titles(test_session, guests=4) == ["Alpine Chalet", "Beach Bungalow", "Desert Yurt"]
    assert await _titles(test_session, guests=10) == ["Desert Yurt"]


@pytest.mark.asyncio
async def test_search_by_nightly_rate_range(test_session, listings):
    assert await _titles(test_session, min_nightly_rate=12000, max_nightly_rate=15000) == ["Beach Bungalow", "City Loft"]
    assert await _titles(test_session, max_nightly_rate=9999) == ["Desert Yurt"]
    assert await _titles(test_session, min_nightly_rate=30000) == ["Alpine Chalet"]


@pytest.mark.asyncio
async def test_search_by_title_text(test_session, listings):
    assert await _titles(test_session, query="loft") == ["City Loft"]
    assert await _titles(test_session, query="%") == []


@pytest.mark.asyncio
async def test_search_by_currency(test_session, listings):
    assert await _titles(test_session, currency="EUR") == []
    assert len(await _titles(test_session, currency="USD")) == 4


@pytest.mark.asyncio
async def test_search_pages_share_total_count(test_session, listings):
    service = PropertyService(test_session)

    first = await service.search_properties(SearchPropertiesRequest(limit=3))
    second = await service.search_properties(SearchPropertiesRequest(limit=3, page=2))
    past_end = await service.search_properties(SearchPropertiesRequest(limit=3, page=3))

    assert [item.title for item in first.items] == ["Alpine Chalet", "Beach Bungalow", "City Loft"]
    assert [item.title for item in second.items] == ["Desert Yurt"]
    assert past_end.items == []
    assert first.total_count == second.total_count == past_end.total_count == 4


def test_search_rejects_inverted_rate_range():
    with pytest.raises(ValidationError):
        SearchPropertiesRequest(min_nightly_rate=20000, max_nightly_rate=10000)
