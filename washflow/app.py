"""
Root application controller.

Wires the session, backend, scheduler and router together and plays the
part of the app shell: it mounts the broadcast screen when the router
enters ``finding-center`` and unmounts it on the way out.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from washflow.flow.broadcast import CenterBroadcastSimulator
from washflow.flow.checkout import CheckoutResult, checkout
from washflow.flow.finding_center import FindingCenterScreen, Locator
from washflow.flow.scheduler import AsyncioScheduler, Scheduler
from washflow.flow.state_machine import (
    NavTrigger,
    RouterSnapshot,
    Screen,
    ScreenRouter,
    TransitionResult,
)
from washflow.logging_context import get_session_logger, new_session_id
from washflow.schemas.booking_schema import Booking
from washflow.schemas.session_schema import SessionContext, UserProfile
from washflow.tools.backend import BackendClient, BackendError

logger = get_session_logger(__name__)


@dataclass
class HistoryResult:
    """Booking history for the history screen, or the alert to show instead."""
    success: bool
    bookings: list[Booking] = field(default_factory=list)
    message: Optional[str] = None


class WashApp:
    """One running app session."""

    def __init__(
        self,
        backend: BackendClient,
        scheduler: Optional[Scheduler] = None,
        session: Optional[SessionContext] = None,
        simulator: Optional[CenterBroadcastSimulator] = None,
        locator: Optional[Locator] = None,
    ) -> None:
        self.session_id = new_session_id()
        self.backend = backend
        self.scheduler = scheduler or AsyncioScheduler()
        self.session = session or SessionContext()
        self.router = ScreenRouter(self.session, backend=backend, scheduler=self.scheduler)
        self.simulator = simulator or CenterBroadcastSimulator(self.scheduler)
        self._locator = locator
        self.finding_screen: Optional[FindingCenterScreen] = None
        self.router.subscribe(self._on_render)

    def _on_render(self, snapshot: RouterSnapshot) -> None:
        if snapshot.screen == Screen.FINDING_CENTER:
            if self.finding_screen is None:
                self.finding_screen = FindingCenterScreen(
                    self.router, self.backend, self.simulator, self._locator
                )
                self.scheduler.spawn(self.finding_screen.mount(), name="finding-center-mount")
        elif self.finding_screen is not None:
            self.finding_screen.unmount()
            self.finding_screen = None

    async def bootstrap(self) -> TransitionResult:
        """Restore a persisted session, or stay on onboarding."""
        user = None
        try:
            if await self.backend.is_logged_in():
                user = await self.backend.get_user()
        except BackendError as exc:
            logger.warning("Could not read stored session: %s", exc)
        if user is None:
            return TransitionResult(
                False, self.router.current_screen, NavTrigger.SESSION_RESTORED, "No stored session"
            )
        self.session_id = new_session_id(user.id)
        logger.info("Restoring stored session")
        return self.router.restore_session(user)

    def login_succeeded(self, user: UserProfile) -> TransitionResult:
        result = self.router.login_succeeded(user)
        if result.accepted:
            self.session_id = new_session_id(user.id)
            logger.info("Signed in as %s", self.session.role.value)
        return result

    async def checkout(
        self, service_id: Optional[str] = None, notes: str = "", now: Optional[datetime] = None
    ) -> CheckoutResult:
        return await checkout(self.router, self.backend, service_id=service_id, notes=notes, now=now)

    async def load_booking_history(self, force_refresh: bool = False) -> HistoryResult:
        try:
            result = await self.backend.get_booking_list(force_refresh)
        except BackendError as exc:
            logger.warning("Booking history unavailable: %s", exc)
            return HistoryResult(False, message=str(exc))
        if not result.get("success"):
            return HistoryResult(False, message=result.get("error", "Failed to load bookings"))
        return HistoryResult(True, bookings=list(result.get("bookings") or []))

    def logout(self) -> TransitionResult:
        result = self.router.logout()
        self.session_id = new_session_id()
        return result