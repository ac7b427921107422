"""Booking request and history data models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

BACKEND_DATE_PATTERN = r"^\d{2}-\d{2}-\d{4}$"
BACKEND_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class BookingRequest(BaseModel):
    """Payload for the backend ``book_now`` call."""
    service_centre_id: str = Field(min_length=1)
    booking_date: str = Field(pattern=BACKEND_DATE_PATTERN)
    booking_time: str = Field(pattern=BACKEND_TIME_PATTERN)
    vehicle_no: str = Field(min_length=1)
    service_id: Optional[str] = None
    notes: str = ""


class Booking(BaseModel):
    """Booking record as listed in the customer's history."""
    booking_id: str
    service_centre_id: str
    service_centre_name: str = ""
    booking_date: str
    booking_time: str
    vehicle_no: str
    service_id: Optional[str] = None
    notes: str = ""
    status: str = "pending"
    amount: Optional[float] = None
    created_at: Optional[datetime] = None
