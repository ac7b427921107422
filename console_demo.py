"""
Offline console demo: replays booking flows without a backend or a phone.

Drives the real router, broadcast screen and checkout against the in-memory
backend on a live asyncio loop. No network calls. Designed for demo
walkthroughs of the instant and scheduled booking paths.

Usage:
    python console_demo.py
    python console_demo.py --scenario scheduled
    python console_demo.py --scenario empty --delay 1
"""

import argparse
import asyncio
from datetime import datetime, timedelta
from typing import Optional

from washflow.app import WashApp
from washflow.config import settings
from washflow.flow.booking_context import BookingDraft, Slot, slot_summary
from washflow.flow.broadcast import CenterBroadcastSimulator
from washflow.flow.scheduler import AsyncioScheduler
from washflow.flow.state_machine import NavTrigger, PaymentFlow, Screen
from washflow.schemas.session_schema import UserProfile, UserRole
from washflow.tools.mock_backend import InMemoryBackend

BLUE = "\033[94m"
GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_USER = UserProfile(id="u-1", name="Alex Morgan", email="alex@example.com",
                        phone="+447700900123")


def service_label(center) -> str:
    if center is not None and center.services_offered:
        return center.services_offered[0].name
    return settings.booking.default_service_name


class ConsoleSession:
    """Replays one booking scenario in the terminal."""

    SCENARIOS = ("instant", "scheduled", "empty", "logout")

    def __init__(self, delay: Optional[float] = None) -> None:
        self.delay = delay
        self.app: Optional[WashApp] = None

    def screen_say(self, text: str) -> None:
        screen = self.app.router.current_screen.value if self.app else "-"
        print(f"{GREEN}{BOLD}[{screen}]{RESET} {GREEN}{text}{RESET}")

    def user_do(self, text: str) -> None:
        print(f"\n{BLUE}[User] {RESET}{text}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _build_app(self) -> WashApp:
        scheduler = AsyncioScheduler()
        simulator = CenterBroadcastSimulator(scheduler, resolution_delay_sec=self.delay)
        app = WashApp(InMemoryBackend(user=DEMO_USER), scheduler=scheduler, simulator=simulator)
        app.router.subscribe(lambda snap: self.system_log(f"Screen: {snap.screen.value}"))
        return app

    async def _sign_in(self) -> None:
        router = self.app.router
        self.user_do("Skips onboarding and signs in as a customer")
        router.navigate(NavTrigger.ONBOARDING_SKIPPED)
        router.choose_role(UserRole.CUSTOMER)
        self.app.login_succeeded(DEMO_USER)
        self.screen_say(f"Welcome back, {DEMO_USER.name}.")

    async def _wait_for_acceptance(self) -> None:
        router = self.app.router
        while router.current_screen == Screen.FINDING_CENTER:
            await asyncio.sleep(0.25)
            screen = self.app.finding_screen
            if screen is not None and screen.run is not None and not screen.run.is_resolved:
                print(f"{DIM}  .. {screen.status_text} {screen.run.elapsed_label}{RESET}", end="\r")
            if screen is not None and screen.run is not None and screen.run.is_resolved:
                if screen.run.accepted_center is None:
                    print()
                    self.screen_say("No center accepted the request.")
                    return
        print()

    async def _instant(self, candidates) -> None:
        router = self.app.router
        router.start_booking()
        label = "all nearby centers" if candidates is None else f"{len(candidates)} center(s)"
        self.user_do(f"Books an instant wash, broadcasting to {label}")
        router.confirm_instant_broadcast(candidates)
        await self._wait_for_acceptance()

        if router.current_screen != Screen.BOOKING_CONFIRMED:
            self.user_do("Gives up and goes back")
            router.cancel_broadcast()
            return

        center = router.context.center
        self.screen_say(f"{center.name} accepted your request ({center.distance}).")
        self.user_do("Enters vehicle AB12 CDE and proceeds to payment")
        router.proceed_to_payment(Slot.instant(), vehicle="AB12 CDE")
        service_id = center.services_offered[0].id if center.services_offered else None
        result = await self.app.checkout(service_id=service_id)
        self._report_checkout(result)

    async def _scheduled(self) -> None:
        router = self.app.router
        router.start_booking()
        self.user_do("Chooses to schedule for later")
        router.schedule_for_later()
        centers = (await self.app.backend.get_service_centers())["service_centers"]
        center = centers[1]
        self.user_do(f"Picks {center.name}")
        router.select_center(center)

        tomorrow = (datetime.now() + timedelta(days=1)).date().isoformat()
        self.user_do("Continues without a vehicle number")
        refused = router.schedule_continue(BookingDraft(date=tomorrow, time="10:00 AM",
                                                        service_id=center.services_offered[0].id))
        self.screen_say(f"{RED}{refused.message}{RESET}")

        self.user_do(f"Picks {tomorrow} 10:00 AM for vehicle XY70 ZZZ")
        router.schedule_continue(BookingDraft(date=tomorrow, time="10:00 AM", vehicle="XY70 ZZZ",
                                              service_id=center.services_offered[0].id))
        result = await self.app.checkout(service_id=center.services_offered[0].id,
                                         notes="Please use the side entrance")
        self._report_checkout(result)

    def _report_checkout(self, result) -> None:
        router = self.app.router
        if not result.success:
            self.screen_say(f"{RED}Booking failed: {result.message}{RESET}")
            return
        scheduled = router.payment_flow == PaymentFlow.SCHEDULED
        summary = slot_summary(router.context, scheduled)
        self.screen_say(
            f"Booking {result.booking_id} confirmed. Paid {settings.booking.currency} "
            f"{result.amount:.2f} for {service_label(router.context.center)}. When: {summary}"
        )
        router.finish_booking()

    async def run_scenario(self, scenario: str) -> None:
        self.app = self._build_app()
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  WASHFLOW - Scenario: {scenario}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        await self._sign_in()
        if scenario == "instant":
            await self._instant(None)
        elif scenario == "empty":
            await self._instant([])
        elif scenario == "scheduled":
            await self._scheduled()
        elif scenario == "logout":
            self.user_do("Logs out")
            self.app.logout()
            self.screen_say("Signed out.")
            await asyncio.sleep(0)
        else:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        history = await self.app.load_booking_history(force_refresh=True)
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Screen trace: {' -> '.join(self.app.router.get_state_trace())}{RESET}")
        if history.success:
            print(f"{DIM}  Bookings on record: {len(history.bookings)}{RESET}")
        else:
            print(f"{DIM}  Booking history: {history.message}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline booking flow demo")
    parser.add_argument(
        "--scenario",
        choices=list(ConsoleSession.SCENARIOS),
        default="instant",
        help="Booking flow to replay",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Broadcast resolution delay in seconds (defaults to configuration)",
    )
    args = parser.parse_args()
    asyncio.run(ConsoleSession(delay=args.delay).run_scenario(args.scenario))


if __name__ == "__main__":
    main()
