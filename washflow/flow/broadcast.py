"""
Simulated broadcast of an instant booking request to nearby centers.

A run shows every candidate as ``waiting``, counts elapsed seconds, and after
a fixed delay resolves once: one candidate, picked uniformly at random, is
marked ``accepted`` and every other row ``not-available`` in a single batch.
The accepted center is then handed to the acceptance callback exactly once.

Usage:
    simulator = CenterBroadcastSimulator(scheduler)
    run = simulator.start(candidates, on_accept=router.center_accepted)
    ...
    run.cancel()  # user navigated away; nothing is emitted afterwards
"""

import logging
import random
from dataclasses import replace
from typing import Callable, Optional

from washflow.config import settings
from washflow.flow.scheduler import RepeatingTimer, Scheduler
from washflow.schemas.center_schema import BroadcastCenter, BroadcastStatus, ServiceCenter
from washflow.tools.backend import BackendClient, BackendError
from washflow.tools.centers import fallback_centers, to_broadcast_center
from washflow.utils import format_elapsed

logger = logging.getLogger(__name__)

CandidateCenterSet = Optional[list[ServiceCenter]]
AcceptCallback = Callable[[ServiceCenter], object]


async def resolve_candidates(
    candidates: CandidateCenterSet, backend: BackendClient
) -> tuple[list[ServiceCenter], bool]:
    """
    Turn a CandidateCenterSet into a concrete list.

    ``None`` means "every center in the directory" and is loaded now; a list
    is used verbatim, even when empty. When the directory cannot be loaded
    the built-in sample list is used instead.

    Returns:
        (centers, degraded) where degraded is True if the fallback list was used.
    """
    if candidates is not None:
        return list(candidates), False

    try:
        result = await backend.get_service_centers()
    except BackendError as exc:
        logger.warning("Center directory unavailable (%s), using fallback list", exc)
        return fallback_centers(), True

    if not result.get("success"):
        logger.warning(
            "Center directory fetch failed (%s), using fallback list",
            result.get("error", "unknown error"),
        )
        return fallback_centers(), True
    return list(result.get("service_centers") or []), False


class BroadcastRun:
    """One broadcast, from ``waiting`` rows to a single resolution."""

    def __init__(
        self,
        candidates: list[ServiceCenter],
        on_accept: AcceptCallback,
        scheduler: Scheduler,
        resolution_delay_sec: float,
        tick_interval_sec: float,
        rng: random.Random,
    ) -> None:
        self._candidates = list(candidates)
        self._on_accept = on_accept
        self._rng = rng
        self.centers: list[BroadcastCenter] = [
            to_broadcast_center(c, i) for i, c in enumerate(self._candidates)
        ]
        self.elapsed_seconds = 0
        self._resolved = False
        self._cancelled = False
        self._accepted: Optional[ServiceCenter] = None

        self._tick_timer = RepeatingTimer(scheduler, tick_interval_sec, self.tick)
        self._resolve_timer = scheduler.call_later(resolution_delay_sec, self.resolve)
        logger.debug("Broadcast started to %d center(s)", len(self.centers))

    @property
    def is_resolved(self) -> bool:
        return self._resolved

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def accepted_center(self) -> Optional[ServiceCenter]:
        return self._accepted

    @property
    def elapsed_label(self) -> str:
        return format_elapsed(self.elapsed_seconds)

    def tick(self) -> None:
        if not (self._resolved or self._cancelled):
            self.elapsed_seconds += 1

    def resolve(self) -> Optional[ServiceCenter]:
        """
        Pick the accepting center and emit it.

        Safe to call more than once: later calls return the first outcome
        without picking again or re-emitting. A cancelled run never emits.
        """
        if self._cancelled:
            return None
        if self._resolved:
            return self._accepted

        self._resolved = True
        self._stop_timers()

        if not self.centers:
            logger.info("Broadcast finished with no candidates, no acceptance")
            return None

        winner = self._rng.randrange(len(self.centers))
        self.centers = [
            replace(
                row,
                status=BroadcastStatus.ACCEPTED if i == winner else BroadcastStatus.NOT_AVAILABLE,
            )
            for i, row in enumerate(self.centers)
        ]
        self._accepted = self._candidates[winner]
        logger.info("Center accepted: %s (%s)", self._accepted.name, self._accepted.id)
        self._on_accept(self._accepted)
        return self._accepted

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._stop_timers()
        if not self._resolved:
            logger.debug("Broadcast cancelled before resolution")

    def _stop_timers(self) -> None:
        self._tick_timer.cancel()
        self._resolve_timer.cancel()


class CenterBroadcastSimulator:
    """Factory for broadcast runs sharing one scheduler and random source."""

    def __init__(
        self,
        scheduler: Scheduler,
        resolution_delay_sec: Optional[float] = None,
        tick_interval_sec: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._scheduler = scheduler
        self.resolution_delay_sec = (
            settings.broadcast.resolution_delay_sec
            if resolution_delay_sec is None else resolution_delay_sec
        )
        self.tick_interval_sec = (
            settings.broadcast.tick_interval_sec
            if tick_interval_sec is None else tick_interval_sec
        )
        self._rng = rng or random.Random(settings.broadcast.random_seed)

    def start(self, candidates: list[ServiceCenter], on_accept: AcceptCallback) -> BroadcastRun:
        """Start a run. ``candidates`` must already be concrete (see resolve_candidates)."""
        if candidates is None:
            raise ValueError("Broadcast candidates must be resolved to a list before starting")
        return BroadcastRun(
            candidates,
            on_accept,
            self._scheduler,
            self.resolution_delay_sec,
            self.tick_interval_sec,
            self._rng,
        )
