"""Integration tests: app shell + router + broadcast screen + checkout together."""

from datetime import datetime, timedelta

import pytest

from washflow.flow.booking_context import BookingDraft, Slot, slot_summary
from washflow.flow.state_machine import NavTrigger, PaymentFlow, Screen
from washflow.logging_context import get_session_id
from washflow.schemas.center_schema import BroadcastStatus
from washflow.schemas.session_schema import UserRole

NOW = datetime(2025, 3, 1, 9, 30)


def service_for(center):
    return center.services_offered[0].id if center.services_offered else None


class TestBootstrap:
    @pytest.mark.asyncio
    async def test_stored_session_skips_onboarding(self, app):
        result = await app.bootstrap()
        assert result.accepted
        assert app.router.current_screen == Screen.CUSTOMER_HOME

    @pytest.mark.asyncio
    async def test_no_stored_session_stays_on_onboarding(self, app, backend):
        backend.user = None
        result = await app.bootstrap()
        assert not result.accepted
        assert app.router.current_screen == Screen.ONBOARDING

    def test_each_app_gets_a_session_id(self, app):
        assert app.session_id.startswith("SESSION-")

    @pytest.mark.asyncio
    async def test_restored_session_binds_user_to_session_id(self, app, customer):
        anonymous = app.session_id
        await app.bootstrap()
        assert app.session_id != anonymous
        assert app.session_id.startswith(f"SESSION-{customer.id}-")
        assert get_session_id() == app.session_id

    def test_login_binds_user_to_session_id(self, app, customer):
        app.router.navigate(NavTrigger.ONBOARDING_COMPLETE)
        app.router.choose_role(UserRole.CUSTOMER)
        result = app.login_succeeded(customer)
        assert result.accepted
        assert app.session_id.startswith(f"SESSION-{customer.id}-")

    def test_refused_login_keeps_session_id(self, app, customer):
        anonymous = app.session_id
        assert not app.login_succeeded(customer).accepted
        assert app.session_id == anonymous


class TestInstantBookingEndToEnd:
    @pytest.mark.asyncio
    async def test_happy_path(self, app, scheduler):
        await app.bootstrap()
        router = app.router

        router.start_booking()
        router.confirm_instant_broadcast(None)
        assert app.finding_screen is not None
        await scheduler.run_spawned()

        screen = app.finding_screen
        assert len(screen.centers) == 3
        scheduler.advance(7)

        assert router.current_screen == Screen.BOOKING_CONFIRMED
        assert app.finding_screen is None
        statuses = [c.status for c in screen.run.centers]
        assert statuses.count(BroadcastStatus.ACCEPTED) == 1

        center = router.context.center
        router.proceed_to_payment(Slot.instant(NOW), vehicle="AB12 CDE")
        result = await app.checkout(service_id=service_for(center), now=NOW)

        assert result.success
        assert router.current_screen == Screen.PAYMENT_CONFIRMED
        assert router.payment_flow == PaymentFlow.INSTANT
        assert slot_summary(router.context, scheduled=False) == "Now"

        router.finish_booking()
        assert router.current_screen == Screen.CUSTOMER_HOME
        history = await app.load_booking_history(force_refresh=True)
        assert history.success
        assert [b.booking_id for b in history.bookings] == [result.booking_id]

    @pytest.mark.asyncio
    async def test_leaving_broadcast_discards_late_acceptance(self, app, scheduler):
        await app.bootstrap()
        router = app.router
        router.start_booking()
        router.confirm_instant_broadcast(None)
        await scheduler.run_spawned()
        screen = app.finding_screen

        scheduler.advance(5)
        router.back()
        scheduler.advance(10)

        assert router.current_screen == Screen.BOOK_WASH
        assert screen.run.is_cancelled
        assert screen.run.accepted_center is None
        assert router.context.center is None

    @pytest.mark.asyncio
    async def test_leaving_before_mount_starts_nothing(self, app, scheduler):
        await app.bootstrap()
        router = app.router
        router.start_booking()
        router.confirm_instant_broadcast(None)
        screen = app.finding_screen
        router.cancel_broadcast()
        await scheduler.run_spawned()

        assert screen.run is None
        assert scheduler.active_timers == 0

    @pytest.mark.asyncio
    async def test_rebroadcast_gets_a_fresh_screen(self, app, scheduler, sample_centers):
        await app.bootstrap()
        router = app.router
        router.start_booking()
        router.confirm_instant_broadcast(sample_centers)
        first = app.finding_screen
        router.cancel_broadcast()
        router.confirm_instant_broadcast(sample_centers[:1])
        await scheduler.run_spawned()

        assert first.run is None
        assert [c.id for c in app.finding_screen.centers] == ["101"]
        scheduler.advance(7)
        assert router.context.center == sample_centers[0]

    @pytest.mark.asyncio
    async def test_failed_checkout_can_be_retried(self, app, backend, scheduler):
        await app.bootstrap()
        router = app.router
        router.start_booking()
        router.confirm_instant_broadcast(None)
        await scheduler.run_spawned()
        scheduler.advance(7)
        center = router.context.center
        router.proceed_to_payment(Slot.instant(NOW), vehicle="AB12 CDE")

        backend.fail_booking = True
        failed = await app.checkout(service_id=service_for(center), now=NOW)
        assert not failed.success
        assert router.current_screen == Screen.PAYMENT

        backend.fail_booking = False
        retried = await app.checkout(service_id=service_for(center), now=NOW)
        assert retried.success
        assert router.current_screen == Screen.PAYMENT_CONFIRMED


class TestScheduledBookingEndToEnd:
    @pytest.mark.asyncio
    async def test_happy_path_via_confirm_screen(self, app):
        await app.bootstrap()
        router = app.router
        centers = (await app.backend.get_service_centers())["service_centers"]
        center = centers[1]
        tomorrow = (NOW + timedelta(days=1)).date().isoformat()
        draft = BookingDraft(date=tomorrow, time="10:00 AM", vehicle="XY70 ZZZ",
                             service_id=service_for(center))

        router.start_booking()
        router.schedule_for_later()
        router.select_center(center)
        router.review_booking(draft)
        router.confirm_booking()
        assert router.current_screen == Screen.SCHEDULE_PAYMENT

        result = await app.checkout(service_id=service_for(center), now=NOW)
        assert result.success
        assert router.current_screen == Screen.SCHEDULE_PAYMENT_CONFIRMED
        assert slot_summary(router.context, scheduled=True, now=NOW) == (
            f"{tomorrow} 10:00 AM (Next Day)"
        )
        booking = app.backend.bookings[result.booking_id]
        assert booking.booking_date == "02-03-2025"
        assert booking.booking_time == "10:00"


class TestLogoutEndToEnd:
    @pytest.mark.asyncio
    async def test_logout_mid_broadcast(self, app, scheduler, backend):
        await app.bootstrap()
        router = app.router
        router.start_booking()
        router.confirm_instant_broadcast(None)
        await scheduler.run_spawned()
        screen = app.finding_screen

        result = app.logout()
        assert result.accepted
        assert router.current_screen == Screen.USER_CHOICE
        assert screen.run.is_cancelled
        scheduler.advance(10)
        assert router.current_screen == Screen.USER_CHOICE

        await scheduler.run_spawned()
        assert backend.logout_calls == 1

    @pytest.mark.asyncio
    async def test_logout_starts_anonymous_session_id(self, app, customer):
        await app.bootstrap()
        signed_in = app.session_id
        app.logout()
        assert app.session_id != signed_in
        assert customer.id not in app.session_id
        assert get_session_id() == app.session_id

    @pytest.mark.asyncio
    async def test_history_needs_login(self, app, backend):
        backend.user = None
        history = await app.load_booking_history()
        assert not history.success
        assert history.message == "Please login to view bookings"
