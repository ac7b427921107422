"""Shared test fixtures and helpers."""

import random
from typing import Any, Callable, Coroutine, Optional

import pytest

from washflow.app import WashApp
from washflow.flow.broadcast import CenterBroadcastSimulator
from washflow.flow.state_machine import NavTrigger, ScreenRouter
from washflow.schemas.center_schema import Service, ServiceCenter
from washflow.schemas.session_schema import SessionContext, UserProfile, UserRole
from washflow.tools.mock_backend import InMemoryBackend


class ManualTimer:
    """Timer handle driven by ManualScheduler.advance()."""

    def __init__(self, when: float, seq: int, callback: Callable[[], None]) -> None:
        self.when = when
        self.seq = seq
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Fake clock: timers fire only when advance() moves time past them."""

    def __init__(self) -> None:
        self.now = 0.0
        self._seq = 0
        self._timers: list[ManualTimer] = []
        self.spawned: list[tuple[Optional[str], Coroutine[Any, Any, Any]]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        self._seq += 1
        timer = ManualTimer(self.now + delay, self._seq, callback)
        self._timers.append(timer)
        return timer

    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> None:
        self.spawned.append((name, coro))

    @property
    def active_timers(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled())

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled() and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.when, t.seq))
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self.now = target

    async def run_spawned(self) -> None:
        while self.spawned:
            _, coro = self.spawned.pop(0)
            await coro

    def close(self) -> None:
        for _, coro in self.spawned:
            coro.close()
        self.spawned.clear()


def make_center(
    center_id: str = "101",
    name: str = "Bubble Bay",
    distance: Optional[str] = "0.4 mi",
    services: Optional[list[Service]] = None,
) -> ServiceCenter:
    """Helper to create a ServiceCenter."""
    return ServiceCenter(
        id=center_id,
        name=name,
        distance=distance,
        services_offered=services or [],
    )


@pytest.fixture
def scheduler():
    manual = ManualScheduler()
    yield manual
    manual.close()


@pytest.fixture
def customer():
    return UserProfile(id="u-1", name="Alex Morgan", email="alex@example.com")


@pytest.fixture
def owner():
    return UserProfile(id="o-1", name="Sam Patel", role=UserRole.SERVICE_OWNER)


@pytest.fixture
def session():
    return SessionContext()


@pytest.fixture
def backend(customer):
    return InMemoryBackend(user=customer, cache_seconds=0)


@pytest.fixture
def sample_centers():
    return [
        make_center("101", "Bubble Bay", "0.4 mi"),
        make_center("102", "Shine Station", None),
        make_center("103", "Foam Factory", "1.3 mi"),
    ]


@pytest.fixture
def router(session, backend, scheduler):
    return ScreenRouter(session, backend=backend, scheduler=scheduler)


@pytest.fixture
def customer_router(router, customer):
    """Router already signed in as a customer, sitting on the dashboard."""
    sign_in(router, customer, UserRole.CUSTOMER)
    return router


@pytest.fixture
def simulator(scheduler):
    return CenterBroadcastSimulator(
        scheduler, resolution_delay_sec=7.0, tick_interval_sec=1.0, rng=random.Random(42)
    )


@pytest.fixture
def app(backend, scheduler, simulator):
    return WashApp(backend, scheduler=scheduler, simulator=simulator)


def sign_in(router: ScreenRouter, user: UserProfile, role: UserRole) -> None:
    """Drive a router from onboarding to the role's home screen."""
    router.navigate(NavTrigger.ONBOARDING_COMPLETE)
    router.choose_role(role)
    router.login_succeeded(user)
