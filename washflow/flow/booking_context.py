"""
Booking-in-progress record and its merge rules.

Instant and scheduled bookings share the same fields, filled in different
orders by different screens. Every update is a field-level merge that
prefers incoming values that are set and never turns a set field back
into ``None``.

Usage:
    ctx = BookingContext()
    ctx = merge(ctx, {"center": center})
    ctx = fill_missing(ctx, Slot.instant().as_fields())
"""

from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from washflow.schemas.center_schema import ServiceCenter
from washflow.utils import INSTANT_MARKER, day_chip


@dataclass(frozen=True)
class BookingContext:
    """Draft record threaded through one booking attempt."""
    center: Optional[ServiceCenter] = None
    date: Optional[str] = None
    time: Optional[str] = None
    vehicle: Optional[str] = None
    booking_id: Optional[str] = None
    payment_amount: Optional[float] = None


BOOKING_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(BookingContext))

BookingUpdate = Union[BookingContext, Mapping[str, Any]]


@dataclass(frozen=True)
class Slot:
    """A date/time pair. ``date`` may be the instant marker ``"now"``."""
    date: Optional[str] = None
    time: Optional[str] = None

    @classmethod
    def instant(cls, now: Optional[datetime] = None) -> "Slot":
        moment = now or datetime.now()
        return cls(date=INSTANT_MARKER, time=moment.strftime("%H:%M"))

    def as_fields(self) -> dict[str, Optional[str]]:
        return {"date": self.date, "time": self.time}


@dataclass(frozen=True)
class BookingDraft:
    """Everything the schedule-booking screen collects before payment."""
    center: Optional[ServiceCenter] = None
    date: Optional[str] = None
    time: Optional[str] = None
    vehicle: Optional[str] = None
    service_id: Optional[str] = None
    notes: str = ""

    def as_fields(self) -> dict[str, Any]:
        return {"center": self.center, "date": self.date, "time": self.time, "vehicle": self.vehicle}


def _incoming_values(incoming: BookingUpdate) -> dict[str, Any]:
    if isinstance(incoming, BookingContext):
        return {name: getattr(incoming, name) for name in BOOKING_FIELDS}
    unknown = set(incoming) - set(BOOKING_FIELDS)
    if unknown:
        raise ValueError(f"Unknown booking field(s): {sorted(unknown)}")
    return dict(incoming)


def merge(old: BookingContext, incoming: BookingUpdate) -> BookingContext:
    """Field-level merge where incoming values win unless they are ``None``."""
    updates = {k: v for k, v in _incoming_values(incoming).items() if v is not None}
    return replace(old, **updates) if updates else old


def fill_missing(old: BookingContext, incoming: BookingUpdate) -> BookingContext:
    """Field-level merge where existing values win; only unset fields are filled."""
    updates = {
        k: v
        for k, v in _incoming_values(incoming).items()
        if v is not None and getattr(old, k) is None
    }
    return replace(old, **updates) if updates else old


def is_scheduled_booking(ctx: BookingContext) -> bool:
    """
    Infer whether the booking in progress is a scheduled one.

    The confirm action is shared by both flows, so the flow is read from what
    has been collected: a chosen center plus a concrete future slot.
    """
    return (
        ctx.center is not None
        and ctx.date is not None
        and ctx.time is not None
        and ctx.date.strip().lower() != INSTANT_MARKER
    )


def slot_summary(ctx: BookingContext, scheduled: bool, now: Optional[datetime] = None) -> str:
    """Slot line for the confirmation screens: ``Now`` or ``<date> <time> (<chip>)``."""
    if not scheduled or ctx.date is None or ctx.date.strip().lower() == INSTANT_MARKER:
        return "Now"
    when = f"{ctx.date[:10]} {ctx.time}" if ctx.time else ctx.date[:10]
    return f"{when} ({day_chip(ctx.date, now)})"
