"""Session ID logging context for tracing one app session across modules.

Every log record carries the id of the app session it belongs to, so a
single user's booking attempt can be followed through the router, the
broadcast screen and checkout. The app installs a fresh id when it starts,
binds a new one to the user once a session is restored or a login succeeds,
and starts an anonymous one on logout so nothing after logout is attributed
to that user.

Usage:
    from washflow.logging_context import get_session_logger, new_session_id

    new_session_id("u-1")
    logger = get_session_logger(__name__)
    logger.info("Booking started")  # record.session_id == "SESSION-u-1-3f2a9c1b"
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

NO_SESSION_ID = "NO_SESSION_ID"

_session_id: ContextVar[str] = ContextVar("session_id", default=NO_SESSION_ID)


def set_session_id(session_id: str) -> None:
    _session_id.set(session_id)


def get_session_id() -> str:
    return _session_id.get()


def new_session_id(user_id: Optional[str] = None) -> str:
    """Generate and install a fresh id, tagged with the user when one is known."""
    suffix = uuid.uuid4().hex[:8]
    session_id = f"SESSION-{user_id}-{suffix}" if user_id else f"SESSION-{suffix}"
    set_session_id(session_id)
    return session_id


class SessionIdFilter(logging.Filter):
    """Stamps session_id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """Module logger with SessionIdFilter attached once."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger
