"""
Broadcast screen controller ("Finding your car wash").

Mounted when the router enters ``finding-center``. It resolves the
candidate set the router committed with that transition, starts the
broadcast run and reports the winner back to the router. Unmounting
cancels the run so a late acceptance can never navigate on its own.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from washflow.config import settings
from washflow.flow.broadcast import BroadcastRun, CenterBroadcastSimulator, resolve_candidates
from washflow.flow.state_machine import Screen, ScreenRouter
from washflow.logging_context import get_session_logger
from washflow.schemas.center_schema import BroadcastCenter, BroadcastStatus
from washflow.tools.backend import BackendClient

logger = get_session_logger(__name__)

Locator = Callable[[], Awaitable[Optional[str]]]

# Upper bound on the reverse-geocode lookup for the "your location" line
LOCATION_TIMEOUT_SEC = 5.0


class FindingCenterScreen:
    """Owns one broadcast run for the lifetime of the screen."""

    def __init__(
        self,
        router: ScreenRouter,
        backend: BackendClient,
        simulator: CenterBroadcastSimulator,
        locator: Optional[Locator] = None,
    ) -> None:
        self._router = router
        self._backend = backend
        self._simulator = simulator
        self._locator = locator
        self._mounted = False
        self._closed = False
        self.run: Optional[BroadcastRun] = None
        self.degraded = False
        self.location_label = settings.booking.fallback_location_label

    @property
    def is_mounted(self) -> bool:
        return self._mounted and not self._closed

    @property
    def centers(self) -> list[BroadcastCenter]:
        return list(self.run.centers) if self.run is not None else []

    @property
    def status_text(self) -> str:
        if any(c.status == BroadcastStatus.ACCEPTED for c in self.centers):
            return "Match found!"
        return "Searching for available centers..."

    @property
    def title(self) -> str:
        return f"Broadcasting to All Centers ({len(self.centers)})"

    async def mount(self) -> Optional[BroadcastRun]:
        """Resolve candidates and start broadcasting. Calling it again returns the same run."""
        if self._mounted or self._closed:
            return self.run
        self._mounted = True

        snapshot = self._router.snapshot()
        if snapshot.screen != Screen.FINDING_CENTER:
            logger.debug("Broadcast screen mounted off-screen, nothing to do")
            return None

        centers, self.degraded = await resolve_candidates(
            snapshot.candidate_centers, self._backend
        )
        if self._closed or self._router.current_screen != Screen.FINDING_CENTER:
            logger.debug("Left the broadcast screen while loading centers, not starting")
            return None

        self.run = self._simulator.start(centers, on_accept=self._router.center_accepted)
        await self._resolve_location()
        return self.run

    def unmount(self) -> None:
        self._closed = True
        if self.run is not None:
            self.run.cancel()

    async def _resolve_location(self) -> None:
        if self._locator is None:
            return
        try:
            label = await asyncio.wait_for(self._locator(), timeout=LOCATION_TIMEOUT_SEC)
        except Exception as exc:
            # Best effort only; the broadcast is already running.
            logger.debug("Location lookup failed: %s", exc)
            return
        if label:
            self.location_label = label
