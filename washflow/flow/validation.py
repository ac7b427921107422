"""
User-input checks run before any backend call.

A failed check refuses the transition or checkout and carries the inline
message the screen shows next to the offending field.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from washflow.flow.booking_context import BookingDraft
from washflow.utils import INSTANT_MARKER, TimeFormatError, parse_iso_date, to_24h

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Outcome of a single input check."""
    passed: bool
    violation_type: Optional[str] = None
    message: Optional[str] = None


PASSED = ValidationResult(passed=True)


def _fail(violation_type: str, message: str) -> ValidationResult:
    logger.debug("Input check failed: %s", violation_type)
    return ValidationResult(passed=False, violation_type=violation_type, message=message)


def check_center(draft: BookingDraft) -> ValidationResult:
    # Booking requires an already-resolved center id; ids are never guessed.
    if draft.center is None or not draft.center.id.strip():
        return _fail("missing_center", "Please select a service center")
    return PASSED


def check_service(draft: BookingDraft) -> ValidationResult:
    if draft.center is not None and draft.center.services_offered and not draft.service_id:
        return _fail("missing_service", "Please select a service")
    if draft.service_id and draft.center is not None and draft.center.services_offered:
        offered = {s.id for s in draft.center.services_offered}
        if str(draft.service_id) not in offered:
            return _fail("unknown_service", "Selected service is not offered by this center")
    return PASSED


def check_slot(draft: BookingDraft) -> ValidationResult:
    if not draft.date:
        return _fail("missing_date", "Please select a date")
    if not draft.time:
        return _fail("missing_time", "Please select a time")
    try:
        if draft.date.strip().lower() != INSTANT_MARKER:
            parse_iso_date(draft.date)
        if draft.time.strip().lower() != INSTANT_MARKER:
            to_24h(draft.time)
    except TimeFormatError:
        return _fail("invalid_slot", "Please choose a valid date and time")
    return PASSED


def check_vehicle(draft: BookingDraft) -> ValidationResult:
    if not draft.vehicle or not draft.vehicle.strip():
        return _fail("missing_vehicle", "Please enter vehicle number")
    return PASSED


def validate_booking_draft(draft: BookingDraft) -> ValidationResult:
    """Run every check in screen order and return the first failure."""
    for check in (check_center, check_service, check_slot, check_vehicle):
        result = check(draft)
        if not result.passed:
            return result
    return PASSED
