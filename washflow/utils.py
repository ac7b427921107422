"""Date/time helpers for the backend boundary and booking summaries."""

import re
from datetime import date, datetime
from typing import Optional, Union

INSTANT_MARKER = "now"

_TIME_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
_TIME_24H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


class TimeFormatError(ValueError):
    """Raised when a date or time string cannot be interpreted."""


def to_24h(value: str) -> str:
    """Convert a ``HH:MM AM/PM`` or ``HH:MM`` string to 24-hour ``HH:MM``.

    Examples:
        >>> to_24h("10:00 AM")
        '10:00'
        >>> to_24h("12:30 AM")
        '00:30'
        >>> to_24h("01:00 PM")
        '13:00'
        >>> to_24h("9:05")
        '09:05'
    """
    match = _TIME_12H.match(value)
    if match:
        hour, minute, meridiem = int(match.group(1)), int(match.group(2)), match.group(3).upper()
        if not 1 <= hour <= 12 or minute > 59:
            raise TimeFormatError(f"Invalid 12-hour time: {value!r}")
        if meridiem == "AM":
            hour = 0 if hour == 12 else hour
        else:
            hour = 12 if hour == 12 else hour + 12
        return f"{hour:02d}:{minute:02d}"

    match = _TIME_24H.match(value)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise TimeFormatError(f"Invalid 24-hour time: {value!r}")
        return f"{hour:02d}:{minute:02d}"

    raise TimeFormatError(f"Unrecognised time format: {value!r}")


def parse_iso_date(value: str) -> date:
    """Parse an ISO date, accepting full ISO datetimes such as ``2025-03-01T00:00:00Z``."""
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise TimeFormatError(f"Invalid ISO date: {value!r}") from None


def to_backend_date(value: Union[str, date, datetime], now: Optional[datetime] = None) -> str:
    """Render a date as ``DD-MM-YYYY``. The instant marker resolves to today."""
    if isinstance(value, datetime):
        day = value.date()
    elif isinstance(value, date):
        day = value
    elif value.strip().lower() == INSTANT_MARKER:
        day = (now or datetime.now()).date()
    else:
        day = parse_iso_date(value)
    return day.strftime("%d-%m-%Y")


def to_backend_time(value: Optional[str], now: Optional[datetime] = None) -> str:
    """Render a time as 24-hour ``HH:MM``. Missing or ``now`` resolves to the current time."""
    if value is None or value.strip().lower() == INSTANT_MARKER:
        return (now or datetime.now()).strftime("%H:%M")
    return to_24h(value)


def day_chip(value: str, now: Optional[datetime] = None) -> str:
    """Label a scheduled date relative to today: ``Today`` or ``Next Day``."""
    today = (now or datetime.now()).date()
    return "Today" if parse_iso_date(value) == today else "Next Day"


def format_elapsed(seconds: int) -> str:
    """Format an elapsed-seconds counter as ``m:ss``.

    Examples:
        >>> format_elapsed(7)
        '0:07'
        >>> format_elapsed(75)
        '1:15'
    """
    mins, secs = divmod(max(seconds, 0), 60)
    return f"{mins}:{secs:02d}"


def normalize_vehicle_no(value: str) -> str:
    """Collapse whitespace and upper-case a plate number."""
    return " ".join(value.split()).upper()
