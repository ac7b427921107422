"""
Checkout: turn the booking record into a backend booking and record payment.

This is where internal values cross the backend boundary: dates become
``DD-MM-YYYY``, times 24-hour ``HH:MM`` (12-hour strings from the scheduling
screens are converted first), and the instant marker becomes the current
moment. Input errors are reported before any call; backend errors leave the
booking record and the screen exactly as they were, and a booking that
completes after the user has moved on is never written into the record.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from washflow.flow.booking_context import BookingDraft, Slot
from washflow.flow.state_machine import Screen, ScreenRouter, TransitionResult
from washflow.flow.validation import validate_booking_draft
from washflow.logging_context import get_session_logger
from washflow.schemas.booking_schema import BookingRequest
from washflow.tools.backend import BackendClient, BackendError
from washflow.tools.centers import price_for_service
from washflow.utils import normalize_vehicle_no, to_backend_date, to_backend_time

logger = get_session_logger(__name__)

PAYMENT_SCREENS = frozenset({Screen.PAYMENT, Screen.SCHEDULE_PAYMENT})


@dataclass
class CheckoutResult:
    """Outcome of a checkout attempt."""
    success: bool
    booking_id: Optional[str] = None
    amount: Optional[float] = None
    message: Optional[str] = None
    transition: Optional[TransitionResult] = None


def build_booking_request(draft: BookingDraft, now: Optional[datetime] = None) -> BookingRequest:
    """Convert a validated draft into the backend payload."""
    return BookingRequest(
        service_centre_id=draft.center.id,
        booking_date=to_backend_date(draft.date, now),
        booking_time=to_backend_time(draft.time, now),
        vehicle_no=normalize_vehicle_no(draft.vehicle),
        service_id=draft.service_id,
        notes=draft.notes.strip(),
    )


async def checkout(
    router: ScreenRouter,
    backend: BackendClient,
    service_id: Optional[str] = None,
    notes: str = "",
    now: Optional[datetime] = None,
) -> CheckoutResult:
    """Book the wash held in the router's record and report the payment back."""
    snapshot = router.snapshot()
    if snapshot.screen not in PAYMENT_SCREENS:
        return CheckoutResult(False, message="No payment in progress")

    ctx = snapshot.context
    moment = now or datetime.now()
    draft = BookingDraft(
        center=ctx.center,
        date=ctx.date or Slot.instant(moment).date,
        time=ctx.time or Slot.instant(moment).time,
        vehicle=ctx.vehicle,
        service_id=service_id,
        notes=notes,
    )
    check = validate_booking_draft(draft)
    if not check.passed:
        return CheckoutResult(False, message=check.message)

    request = build_booking_request(draft, moment)
    attempt = router.booking_attempt
    try:
        result = await backend.book_now(request)
    except BackendError as exc:
        logger.warning("Booking call failed: %s", exc)
        return CheckoutResult(False, message=str(exc))

    if not result.get("success") or not result.get("booking_id"):
        message = result.get("error") or "Failed to book service. Please try again."
        logger.warning("Booking rejected: %s", message)
        return CheckoutResult(False, message=message)

    booking_id = result["booking_id"]
    amount = price_for_service(ctx.center, service_id)
    slot = Slot(date=moment.date().isoformat(), time=request.booking_time)
    transition = router.payment_succeeded(
        booking_id, slot=slot, amount=amount, attempt=attempt, from_screen=snapshot.screen
    )
    if not transition.accepted:
        return CheckoutResult(False, booking_id=booking_id, amount=amount,
                              message="Booking is no longer in progress", transition=transition)
    logger.info("Booking %s paid (%.2f) for %s %s", booking_id, amount,
                request.booking_date, request.booking_time)
    return CheckoutResult(True, booking_id=booking_id, amount=amount, transition=transition)
