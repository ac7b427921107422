"""Tests for the backend stand-in and the center directory helpers."""

import pytest

from tests.conftest import make_center
from washflow.config import settings
from washflow.schemas.booking_schema import BookingRequest
from washflow.schemas.center_schema import BroadcastStatus, Service
from washflow.tools.backend import BackendError
from washflow.tools.centers import center_from_record, price_for_service, to_broadcast_center
from washflow.tools.mock_backend import InMemoryBackend


def make_request(center_id="101", **overrides):
    fields = dict(
        service_centre_id=center_id,
        booking_date="02-03-2025",
        booking_time="10:00",
        vehicle_no="AB12 CDE",
        service_id="1",
    )
    fields.update(overrides)
    return BookingRequest(**fields)


class TestCenterDirectory:
    @pytest.mark.asyncio
    async def test_lists_seed_centers(self, backend):
        result = await backend.get_service_centers()
        assert result["success"]
        assert [c.name for c in result["service_centers"]] == [
            "Bubble Bay", "Shine Station", "Foam Factory",
        ]

    @pytest.mark.asyncio
    async def test_raw_records_get_display_defaults(self, backend):
        result = await backend.get_service_centers()
        bubble, shine, foam = result["service_centers"]
        assert bubble.id == "101"
        assert bubble.services_offered[0].effective_price == 10.0
        assert shine.address == "21 Park Avenue"
        assert (foam.rating, foam.address) == (4.5, "Address not available")

    @pytest.mark.asyncio
    async def test_custom_records(self, customer):
        backend = InMemoryBackend(records=[{"service_centre_name": "Suds"}, {}], user=customer)
        result = await backend.get_service_centers()
        assert [(c.id, c.name) for c in result["service_centers"]] == [
            ("1", "Suds"), ("2", "Car Wash Center"),
        ]
        booking = await backend.book_now(make_request(center_id="2"))
        assert booking["success"]

    @pytest.mark.asyncio
    async def test_stale_cache_served_on_failure(self, customer):
        backend = InMemoryBackend(user=customer, cache_seconds=0)
        await backend.get_service_centers()
        backend.fail_centers = True
        result = await backend.get_service_centers(force_refresh=True)
        assert result["success"]
        assert len(result["service_centers"]) == 3

    @pytest.mark.asyncio
    async def test_failure_without_cache(self, backend):
        backend.fail_centers = True
        result = await backend.get_service_centers()
        assert not result["success"]
        assert "service centers" in result["error"]

    @pytest.mark.asyncio
    async def test_fresh_cache_skips_fetch(self, customer):
        backend = InMemoryBackend(user=customer, cache_seconds=300)
        await backend.get_service_centers()
        backend.raise_on_centers = True
        result = await backend.get_service_centers()
        assert result["success"]

    @pytest.mark.asyncio
    async def test_raise_switch(self, backend):
        backend.raise_on_centers = True
        with pytest.raises(BackendError):
            await backend.get_service_centers()


class TestBookNow:
    @pytest.mark.asyncio
    async def test_creates_booking(self, backend):
        result = await backend.book_now(make_request())
        booking = backend.bookings[result["booking_id"]]
        assert booking.service_centre_name == "Bubble Bay"
        assert booking.status == "confirmed"

    @pytest.mark.asyncio
    async def test_requires_login(self, backend):
        backend.user = None
        result = await backend.book_now(make_request())
        assert result == {"success": False, "error": "Please login to book a service"}

    @pytest.mark.asyncio
    async def test_booking_list_refreshes_after_booking(self, backend):
        assert (await backend.get_booking_list())["bookings"] == []
        await backend.book_now(make_request())
        assert len((await backend.get_booking_list())["bookings"]) == 1

    @pytest.mark.asyncio
    async def test_reset(self, backend):
        await backend.book_now(make_request())
        backend.fail_booking = True
        backend.reset()
        assert backend.bookings == {}
        assert not backend.fail_booking


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_clears_user(self, backend):
        result = await backend.logout()
        assert result["success"]
        assert not await backend.is_logged_in()

    @pytest.mark.asyncio
    async def test_failed_logout_still_clears_local_auth(self, backend):
        backend.fail_logout = True
        with pytest.raises(BackendError):
            await backend.logout()
        assert await backend.get_user() is None


class TestCenterHelpers:
    def test_record_defaults(self):
        center = center_from_record({}, 2)
        assert center.id == "3"
        assert center.name == "Car Wash Center"
        assert center.rating == 4.5
        assert center.address == "Address not available"
        assert center.distance is None

    def test_record_alternate_keys(self):
        center = center_from_record(
            {"id": 17, "service_centre_name": "Suds", "location": "1 Quay", "distance": 2.5}, 0
        )
        assert (center.id, center.name, center.address, center.distance) == (
            "17", "Suds", "1 Quay", "2.5"
        )

    def test_broadcast_row_starts_waiting(self):
        row = to_broadcast_center(make_center(distance=None), 3)
        assert row.status == BroadcastStatus.WAITING
        assert row.distance == "2.0 mi"


class TestPricing:
    def test_offer_price_preferred(self):
        center = make_center(services=[Service(id="1", price=12.0, offer_price=10.0)])
        assert price_for_service(center, "1") == 10.0

    def test_requested_service_used(self):
        center = make_center(services=[Service(id="1", price=12.0), Service(id="2", price=30.0)])
        assert price_for_service(center, "2") == 30.0

    def test_first_priced_service_when_unrequested(self):
        center = make_center(services=[Service(id="1"), Service(id="2", price=18.0)])
        assert price_for_service(center) == 18.0

    def test_default_price_without_services(self):
        assert price_for_service(make_center()) == settings.booking.default_wash_price

    def test_default_price_without_center(self):
        assert price_for_service(None) == settings.booking.default_wash_price
