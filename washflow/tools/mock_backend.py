"""
Mock backend used by the console demo and tests.

In production, the booking flow talks to the car-wash booking API through the
app's auth/storage client. This in-memory stand-in honours the same contract,
including cached center lists and failure injection.
"""

import copy
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from washflow.config import settings
from washflow.schemas.booking_schema import Booking, BookingRequest
from washflow.schemas.center_schema import ServiceCenter
from washflow.schemas.session_schema import UserProfile
from washflow.tools.backend import (
    ActionResult,
    BackendError,
    BookingListResult,
    BookingResult,
    CentersResult,
)
from washflow.tools.centers import center_from_record

logger = logging.getLogger(__name__)

# Directory records shaped the way the booking API returns them
SEED_DIRECTORY: list[dict[str, Any]] = [
    {
        "id": 101, "service_centre_name": "Bubble Bay", "rating": 4.7, "distance": "0.4 mi",
        "address": "5 Dock Street",
        "services_offered": [{"id": 1, "name": "Exterior Wash", "price": 12.0, "offer_price": 10.0}],
    },
    {
        "id": 102, "service_centre_name": "Shine Station", "rating": 4.4, "distance": "0.9 mi",
        "location": "21 Park Avenue",
        "services_offered": [{"id": 2, "name": "Full Valet", "price": 25.0}],
    },
    {"id": 103, "name": "Foam Factory", "distance": "1.3 mi"},
]

SEED_CENTERS: list[ServiceCenter] = [
    center_from_record(record, index) for index, record in enumerate(SEED_DIRECTORY)
]


class InMemoryBackend:
    """Deterministic backend honouring the BackendClient contract."""

    def __init__(
        self,
        records: Optional[list[dict[str, Any]]] = None,
        user: Optional[UserProfile] = None,
        cache_seconds: Optional[int] = None,
    ) -> None:
        self.records = copy.deepcopy(records if records is not None else SEED_DIRECTORY)
        self.user = user
        self.cache_seconds = settings.backend.center_cache_sec if cache_seconds is None else cache_seconds
        self.bookings: dict[str, Booking] = {}
        self.logout_calls = 0

        # Failure injection switches
        self.fail_centers = False
        self.fail_booking = False
        self.fail_logout = False
        self.raise_on_centers = False

        self._center_cache: Optional[tuple[float, list[ServiceCenter]]] = None
        self._booking_cache: Optional[list[Booking]] = None

    async def is_logged_in(self) -> bool:
        return self.user is not None

    async def get_user(self) -> Optional[UserProfile]:
        return self.user

    async def clear_auth(self) -> None:
        self.user = None
        self._center_cache = None
        self._booking_cache = None

    async def logout(self) -> ActionResult:
        self.logout_calls += 1
        await self.clear_auth()
        if self.fail_logout:
            raise BackendError("Network Error - Please check your internet connection")
        return {"success": True, "message": "Logged out successfully"}

    async def get_service_centers(self, force_refresh: bool = False) -> CentersResult:
        if not force_refresh and self._center_cache is not None:
            cached_at, cached = self._center_cache
            if time.monotonic() - cached_at < self.cache_seconds:
                return {"success": True, "service_centers": list(cached)}

        if self.raise_on_centers:
            raise BackendError("Request timeout. Please check your internet connection.")
        if self.fail_centers:
            if self._center_cache is not None:
                logger.debug("Directory unavailable, serving stale cache")
                return {"success": True, "service_centers": list(self._center_cache[1])}
            return {
                "success": False,
                "error": "Failed to fetch service centers. Please try again.",
            }

        centers = self._directory()
        self._center_cache = (time.monotonic(), centers)
        return {"success": True, "service_centers": list(centers)}

    async def book_now(self, request: BookingRequest) -> BookingResult:
        if self.user is None:
            return {"success": False, "error": "Please login to book a service"}
        if self.fail_booking:
            return {"success": False, "error": "Failed to book service. Please try again."}

        center = next((c for c in self._directory() if c.id == request.service_centre_id), None)
        if center is None:
            return {"success": False, "error": "Selected service centre is not available."}

        booking_id = f"WB-{uuid.uuid4().hex[:6].upper()}"
        self.bookings[booking_id] = Booking(
            booking_id=booking_id,
            service_centre_id=center.id,
            service_centre_name=center.name,
            booking_date=request.booking_date,
            booking_time=request.booking_time,
            vehicle_no=request.vehicle_no,
            service_id=request.service_id,
            notes=request.notes,
            status="confirmed",
            created_at=datetime.now(timezone.utc),
        )
        self._booking_cache = None
        logger.info("Booking created: %s at %s on %s %s", booking_id, center.name,
                    request.booking_date, request.booking_time)
        return {"success": True, "booking_id": booking_id}

    async def get_booking_list(self, force_refresh: bool = False) -> BookingListResult:
        if self.user is None:
            return {"success": False, "error": "Please login to view bookings"}
        if force_refresh or self._booking_cache is None:
            self._booking_cache = list(self.bookings.values())
        return {"success": True, "bookings": list(self._booking_cache)}

    def _directory(self) -> list[ServiceCenter]:
        return [center_from_record(record, index) for index, record in enumerate(self.records)]

    def reset(self) -> None:
        """Clear bookings, caches and failure switches. Used by test fixtures."""
        self.bookings.clear()
        self._center_cache = None
        self._booking_cache = None
        self.fail_centers = self.fail_booking = self.fail_logout = self.raise_on_centers = False
        self.logout_calls = 0
