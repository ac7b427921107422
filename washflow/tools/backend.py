"""
Backend client contract consumed by the booking flow.

The real client (session storage, HTTP calls for login, service centers,
bookings and payments) lives outside this package. The flow only relies on
the operations below and treats every one of them as fallible: failures
arrive either as ``success=False`` results or as ``BackendError``. Raw
directory records are mapped with ``tools.centers.center_from_record`` before
they are returned, so the flow only ever sees ``ServiceCenter`` models.
"""

from typing import Optional, Protocol, TypedDict

from washflow.schemas.booking_schema import Booking, BookingRequest
from washflow.schemas.center_schema import ServiceCenter
from washflow.schemas.session_schema import UserProfile


class BackendError(Exception):
    """Raised when the backend cannot be reached or answers unusably."""


class ActionResult(TypedDict, total=False):
    """Result of a fire-and-forget style call such as logout."""

    success: bool
    message: str
    error: str


class CentersResult(TypedDict, total=False):
    """Result from get_service_centers."""

    success: bool
    service_centers: list[ServiceCenter]
    error: str


class BookingResult(TypedDict, total=False):
    """Result from book_now."""

    success: bool
    booking_id: str
    error: str


class BookingListResult(TypedDict, total=False):
    """Result from get_booking_list."""

    success: bool
    bookings: list[Booking]
    error: str


class BackendClient(Protocol):
    """Operations the orchestration core needs from the backend."""

    async def is_logged_in(self) -> bool: ...

    async def get_user(self) -> Optional[UserProfile]: ...

    async def clear_auth(self) -> None: ...

    async def logout(self) -> ActionResult: ...

    async def get_service_centers(self, force_refresh: bool = False) -> CentersResult: ...

    async def book_now(self, request: BookingRequest) -> BookingResult: ...

    async def get_booking_list(self, force_refresh: bool = False) -> BookingListResult: ...
