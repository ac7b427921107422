"""
Screen router: the state machine behind the booking app.

Tracks the one screen currently displayed, owns the booking-in-progress
record, and decides the next screen from explicit user actions and from
what the booking record already holds. Plain navigation is table driven;
booking actions are methods that carry a payload and commit their record
write and their screen change together, before any listener sees either.

Usage:
    router = ScreenRouter(SessionContext(), backend=backend, scheduler=scheduler)
    router.navigate(NavTrigger.ONBOARDING_COMPLETE)
    router.choose_role(UserRole.CUSTOMER)
    router.login_succeeded(user)
    router.start_booking()
    assert router.current_screen == Screen.BOOK_WASH

The router never raises for an unavailable action: it refuses it, logs a
warning and returns a TransitionResult with ``accepted=False``.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

from washflow.flow.booking_context import (
    BookingContext,
    BookingDraft,
    Slot,
    fill_missing,
    is_scheduled_booking,
    merge,
)
from washflow.flow.broadcast import CandidateCenterSet
from washflow.flow.scheduler import AsyncioScheduler, Scheduler
from washflow.flow.validation import validate_booking_draft
from washflow.logging_context import get_session_logger
from washflow.schemas.center_schema import ServiceCenter
from washflow.schemas.session_schema import SessionContext, UserProfile, UserRole
from washflow.tools.backend import BackendClient

logger = get_session_logger(__name__)


class Screen(str, Enum):
    """Every screen the app can display."""
    ONBOARDING = "onboarding"
    USER_CHOICE = "user-choice"
    AUTH = "auth"
    CUSTOMER_HOME = "customer-home"
    OWNER_HOME = "owner-home"
    BOOK_WASH = "book-wash"
    FINDING_CENTER = "finding-center"
    BOOKING_CONFIRMED = "booking-confirmed"
    PAYMENT = "payment"
    PAYMENT_CONFIRMED = "payment-confirmed"
    SCHEDULE_FOR_LATER = "schedule-for-later"
    SCHEDULE_BOOKING = "schedule-booking"
    CONFIRM_BOOKING = "confirm-booking"
    SCHEDULE_PAYMENT = "schedule-payment"
    SCHEDULE_PAYMENT_CONFIRMED = "schedule-payment-confirmed"
    BOOKING_HISTORY = "booking-history"
    PROFILE = "profile"
    EDIT_PROFILE = "edit-profile"
    CHANGE_PASSWORD = "change-password"
    HELP_SUPPORT = "help-support"
    SETTINGS = "settings"
    NOTIFICATIONS = "notifications"


class NavTrigger(str, Enum):
    """Events that cause screen transitions."""
    ONBOARDING_COMPLETE = "onboarding_complete"
    ONBOARDING_SKIPPED = "onboarding_skipped"
    SESSION_RESTORED = "session_restored"
    ROLE_CHOSEN = "role_chosen"
    LOGIN_SUCCEEDED = "login_succeeded"
    BACK = "back"
    START_BOOKING = "start_booking"
    BROADCAST_CONFIRMED = "broadcast_confirmed"
    BROADCAST_CANCELLED = "broadcast_cancelled"
    CENTER_ACCEPTED = "center_accepted"
    PROCEED_TO_PAYMENT = "proceed_to_payment"
    PAYMENT_SUCCEEDED = "payment_succeeded"
    SCHEDULE_FOR_LATER = "schedule_for_later"
    CENTER_SELECTED = "center_selected"
    SCHEDULE_CONTINUE = "schedule_continue"
    REVIEW_BOOKING = "review_booking"
    CONFIRM_BOOKING = "confirm_booking"
    FINISH_BOOKING = "finish_booking"
    GO_HOME = "go_home"
    VIEW_HISTORY = "view_history"
    OPEN_PROFILE = "open_profile"
    EDIT_PROFILE = "edit_profile"
    OPEN_SETTINGS = "open_settings"
    CHANGE_PASSWORD = "change_password"
    OPEN_HELP = "open_help"
    OPEN_NOTIFICATIONS = "open_notifications"
    LOGOUT = "logout"


class PaymentFlow(str, Enum):
    """Which payment entry point the booking in progress went through."""
    INSTANT = "instant"
    SCHEDULED = "scheduled"


HOME_SCREENS = frozenset({Screen.CUSTOMER_HOME, Screen.OWNER_HOME})

PUBLIC_SCREENS = frozenset({Screen.ONBOARDING, Screen.USER_CHOICE, Screen.AUTH})

OWNER_SCREENS = frozenset({Screen.OWNER_HOME})

CUSTOMER_SCREENS = frozenset(Screen) - PUBLIC_SCREENS - OWNER_SCREENS

Guard = Callable[["ScreenRouter"], bool]


@dataclass
class Transition:
    """A single valid screen transition."""
    from_state: Screen
    to_state: Screen
    trigger: NavTrigger
    guard: Optional[Guard] = None


@dataclass
class StateEntry:
    """Recorded history entry for a screen visit."""
    state: Screen
    entered_at: datetime
    trigger: Optional[NavTrigger] = None


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a requested transition."""
    accepted: bool
    screen: Screen
    trigger: NavTrigger
    message: Optional[str] = None


@dataclass(frozen=True)
class RouterSnapshot:
    """Everything a screen may read when it renders."""
    screen: Screen
    context: BookingContext
    candidate_centers: CandidateCenterSet
    payment_flow: Optional[PaymentFlow]
    role: Optional[UserRole]


Listener = Callable[[RouterSnapshot], Any]

_UNCHANGED: Any = object()


def _is_customer(router: "ScreenRouter") -> bool:
    return router.session.role == UserRole.CUSTOMER


def _is_owner(router: "ScreenRouter") -> bool:
    return router.session.role == UserRole.SERVICE_OWNER


def _flow_is(flow: PaymentFlow) -> Guard:
    return lambda router: router.payment_flow == flow


def _scheduled(router: "ScreenRouter") -> bool:
    return is_scheduled_booking(router.context)


def _instant(router: "ScreenRouter") -> bool:
    return not is_scheduled_booking(router.context)


class ScreenRouter:
    """
    Deterministic screen state machine for one app session.

    Sole owner of the BookingContext: screens request transitions carrying a
    payload, and only the router applies the merge. Customer screens are
    reachable only by an authenticated customer, the owner dashboard only by
    an authenticated service owner.
    """

    TRANSITIONS: list[Transition] = [
        # --- Onboarding and auth ---
        Transition(Screen.ONBOARDING, Screen.USER_CHOICE, NavTrigger.ONBOARDING_COMPLETE),
        Transition(Screen.ONBOARDING, Screen.USER_CHOICE, NavTrigger.ONBOARDING_SKIPPED),
        Transition(Screen.ONBOARDING, Screen.CUSTOMER_HOME, NavTrigger.SESSION_RESTORED,
                   _is_customer),
        Transition(Screen.ONBOARDING, Screen.OWNER_HOME, NavTrigger.SESSION_RESTORED,
                   _is_owner),
        Transition(Screen.USER_CHOICE, Screen.AUTH, NavTrigger.ROLE_CHOSEN),
        Transition(Screen.AUTH, Screen.USER_CHOICE, NavTrigger.BACK),
        Transition(Screen.AUTH, Screen.CUSTOMER_HOME, NavTrigger.LOGIN_SUCCEEDED, _is_customer),
        Transition(Screen.AUTH, Screen.OWNER_HOME, NavTrigger.LOGIN_SUCCEEDED, _is_owner),

        # --- Instant booking ---
        Transition(Screen.CUSTOMER_HOME, Screen.BOOK_WASH, NavTrigger.START_BOOKING),
        Transition(Screen.BOOK_WASH, Screen.CUSTOMER_HOME, NavTrigger.BACK),
        Transition(Screen.BOOK_WASH, Screen.FINDING_CENTER, NavTrigger.BROADCAST_CONFIRMED),
        Transition(Screen.FINDING_CENTER, Screen.BOOK_WASH, NavTrigger.BROADCAST_CANCELLED),
        Transition(Screen.FINDING_CENTER, Screen.BOOK_WASH, NavTrigger.BACK),
        Transition(Screen.FINDING_CENTER, Screen.BOOKING_CONFIRMED, NavTrigger.CENTER_ACCEPTED),
        Transition(Screen.BOOKING_CONFIRMED, Screen.PAYMENT, NavTrigger.PROCEED_TO_PAYMENT),
        Transition(Screen.BOOKING_CONFIRMED, Screen.CONFIRM_BOOKING, NavTrigger.REVIEW_BOOKING),
        Transition(Screen.PAYMENT, Screen.BOOKING_CONFIRMED, NavTrigger.BACK),
        Transition(Screen.PAYMENT, Screen.PAYMENT_CONFIRMED, NavTrigger.PAYMENT_SUCCEEDED,
                   _flow_is(PaymentFlow.INSTANT)),
        Transition(Screen.PAYMENT_CONFIRMED, Screen.CUSTOMER_HOME, NavTrigger.FINISH_BOOKING),

        # --- Scheduled booking ---
        Transition(Screen.BOOK_WASH, Screen.SCHEDULE_FOR_LATER, NavTrigger.SCHEDULE_FOR_LATER),
        Transition(Screen.SCHEDULE_FOR_LATER, Screen.BOOK_WASH, NavTrigger.BACK),
        Transition(Screen.SCHEDULE_FOR_LATER, Screen.SCHEDULE_BOOKING, NavTrigger.CENTER_SELECTED),
        Transition(Screen.SCHEDULE_BOOKING, Screen.SCHEDULE_FOR_LATER, NavTrigger.BACK),
        Transition(Screen.SCHEDULE_BOOKING, Screen.SCHEDULE_PAYMENT, NavTrigger.SCHEDULE_CONTINUE),
        Transition(Screen.SCHEDULE_BOOKING, Screen.CONFIRM_BOOKING, NavTrigger.REVIEW_BOOKING),
        Transition(Screen.SCHEDULE_PAYMENT, Screen.SCHEDULE_BOOKING, NavTrigger.BACK),
        Transition(Screen.SCHEDULE_PAYMENT, Screen.SCHEDULE_PAYMENT_CONFIRMED,
                   NavTrigger.PAYMENT_SUCCEEDED, _flow_is(PaymentFlow.SCHEDULED)),
        Transition(Screen.SCHEDULE_PAYMENT_CONFIRMED, Screen.CUSTOMER_HOME,
                   NavTrigger.FINISH_BOOKING),

        # --- Shared confirm: flow inferred from the booking record ---
        Transition(Screen.CONFIRM_BOOKING, Screen.SCHEDULE_PAYMENT, NavTrigger.CONFIRM_BOOKING,
                   _scheduled),
        Transition(Screen.CONFIRM_BOOKING, Screen.CUSTOMER_HOME, NavTrigger.CONFIRM_BOOKING,
                   _instant),

        # --- Account screens ---
        Transition(Screen.CUSTOMER_HOME, Screen.BOOKING_HISTORY, NavTrigger.VIEW_HISTORY),
        Transition(Screen.CUSTOMER_HOME, Screen.PROFILE, NavTrigger.OPEN_PROFILE),
        Transition(Screen.CUSTOMER_HOME, Screen.NOTIFICATIONS, NavTrigger.OPEN_NOTIFICATIONS),
        Transition(Screen.BOOKING_HISTORY, Screen.CUSTOMER_HOME, NavTrigger.BACK),
        Transition(Screen.NOTIFICATIONS, Screen.CUSTOMER_HOME, NavTrigger.BACK),
        Transition(Screen.PROFILE, Screen.CUSTOMER_HOME, NavTrigger.BACK),
        Transition(Screen.PROFILE, Screen.BOOKING_HISTORY, NavTrigger.VIEW_HISTORY),
        Transition(Screen.PROFILE, Screen.EDIT_PROFILE, NavTrigger.EDIT_PROFILE),
        Transition(Screen.PROFILE, Screen.SETTINGS, NavTrigger.OPEN_SETTINGS),
        Transition(Screen.PROFILE, Screen.HELP_SUPPORT, NavTrigger.OPEN_HELP),
        Transition(Screen.EDIT_PROFILE, Screen.PROFILE, NavTrigger.BACK),
        Transition(Screen.SETTINGS, Screen.PROFILE, NavTrigger.BACK),
        Transition(Screen.SETTINGS, Screen.CHANGE_PASSWORD, NavTrigger.CHANGE_PASSWORD),
        Transition(Screen.SETTINGS, Screen.HELP_SUPPORT, NavTrigger.OPEN_HELP),
        Transition(Screen.CHANGE_PASSWORD, Screen.SETTINGS, NavTrigger.BACK),
        Transition(Screen.HELP_SUPPORT, Screen.PROFILE, NavTrigger.BACK),
    ]

    def __init__(
        self,
        session: SessionContext,
        backend: Optional[BackendClient] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.session = session
        self._backend = backend
        self._scheduler = scheduler or AsyncioScheduler()
        self._current_screen = Screen.ONBOARDING
        self._context = BookingContext()
        self._candidate_centers: CandidateCenterSet = None
        self._payment_flow: Optional[PaymentFlow] = None
        self._attempt = 0
        self._listeners: list[Listener] = []
        self._history: list[StateEntry] = [
            StateEntry(state=Screen.ONBOARDING, entered_at=datetime.now(timezone.utc))
        ]

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #

    @property
    def current_screen(self) -> Screen:
        return self._current_screen

    @property
    def context(self) -> BookingContext:
        return self._context

    @property
    def candidate_centers(self) -> CandidateCenterSet:
        return None if self._candidate_centers is None else list(self._candidate_centers)

    @property
    def payment_flow(self) -> Optional[PaymentFlow]:
        return self._payment_flow

    @property
    def booking_attempt(self) -> int:
        """Token for the booking record in progress; changes whenever the record is discarded."""
        return self._attempt

    @property
    def is_scheduled(self) -> bool:
        return is_scheduled_booking(self._context)

    def snapshot(self) -> RouterSnapshot:
        return RouterSnapshot(
            screen=self._current_screen,
            context=self._context,
            candidate_centers=self.candidate_centers,
            payment_flow=self._payment_flow,
            role=self.session.role,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a render callback. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_valid_triggers(self) -> list[NavTrigger]:
        """Return all table triggers valid from the current screen."""
        return [
            t.trigger for t in self.TRANSITIONS
            if t.from_state == self._current_screen and (t.guard is None or t.guard(self))
        ]

    def get_history(self) -> list[StateEntry]:
        """Return the full screen transition history."""
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of screen names visited."""
        return [entry.state.value for entry in self._history]

    # ------------------------------------------------------------------ #
    # Core commit machinery
    # ------------------------------------------------------------------ #

    def _reachable(self, screen: Screen) -> bool:
        if screen in CUSTOMER_SCREENS:
            return self.session.is_customer()
        if screen in OWNER_SCREENS:
            return self.session.is_owner()
        return True

    def _refuse(self, trigger: NavTrigger, message: str) -> TransitionResult:
        logger.warning("Transition refused on '%s' (trigger: %s): %s",
                       self._current_screen.value, trigger.value, message)
        return TransitionResult(False, self._current_screen, trigger, message)

    def _commit(
        self,
        screen: Screen,
        trigger: NavTrigger,
        context: Any = _UNCHANGED,
        candidates: Any = _UNCHANGED,
        payment_flow: Any = _UNCHANGED,
    ) -> TransitionResult:
        """Apply every write of one transition, then notify listeners once."""
        fresh_record = screen in HOME_SCREENS or screen == Screen.USER_CHOICE
        if fresh_record:
            context, candidates, payment_flow = BookingContext(), None, None
        if fresh_record or trigger == NavTrigger.START_BOOKING:
            self._attempt += 1
        if context is not _UNCHANGED:
            self._context = context
        if candidates is not _UNCHANGED:
            self._candidate_centers = None if candidates is None else list(candidates)
        if payment_flow is not _UNCHANGED:
            self._payment_flow = payment_flow

        old_screen = self._current_screen
        self._current_screen = screen
        self._history.append(StateEntry(
            state=screen,
            entered_at=datetime.now(timezone.utc),
            trigger=trigger,
        ))
        logger.debug("Screen transition: %s -> %s (trigger: %s)",
                     old_screen.value, screen.value, trigger.value)
        self._notify()
        return TransitionResult(True, screen, trigger)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _apply(self, trigger: NavTrigger, **changes: Any) -> TransitionResult:
        for t in self.TRANSITIONS:
            if t.from_state == self._current_screen and t.trigger == trigger:
                if t.guard is not None and not t.guard(self):
                    continue
                if not self._reachable(t.to_state):
                    return self._refuse(trigger, f"'{t.to_state.value}' is not available "
                                                 "for this session")
                return self._commit(t.to_state, trigger, **changes)

        valid = [t.value for t in self.get_valid_triggers()]
        return self._refuse(trigger, f"No valid transition. Valid triggers: {valid}")

    # ------------------------------------------------------------------ #
    # Plain navigation and session
    # ------------------------------------------------------------------ #

    def navigate(self, trigger: NavTrigger) -> TransitionResult:
        """Follow a payload-free transition from the table."""
        return self._apply(trigger)

    def back(self) -> TransitionResult:
        return self._apply(NavTrigger.BACK)

    def choose_role(self, role: UserRole) -> TransitionResult:
        if self._current_screen != Screen.USER_CHOICE:
            return self._refuse(NavTrigger.ROLE_CHOSEN, "Role can only be chosen on user-choice")
        self.session.role = role
        return self._apply(NavTrigger.ROLE_CHOSEN)

    def login_succeeded(self, user: UserProfile) -> TransitionResult:
        if self._current_screen != Screen.AUTH:
            return self._refuse(NavTrigger.LOGIN_SUCCEEDED, "Not on the auth screen")
        self.session.start(user, self.session.role)
        return self._apply(NavTrigger.LOGIN_SUCCEEDED)

    def restore_session(self, user: UserProfile) -> TransitionResult:
        """Skip onboarding for a user whose session survived an app restart."""
        if self._current_screen != Screen.ONBOARDING:
            return self._refuse(NavTrigger.SESSION_RESTORED, "Session restore only at start-up")
        self.session.start(user)
        return self._apply(NavTrigger.SESSION_RESTORED)

    def go_home(self) -> TransitionResult:
        """Return to the role's home screen from anywhere, discarding the booking."""
        if self.session.is_customer():
            return self._commit(Screen.CUSTOMER_HOME, NavTrigger.GO_HOME)
        if self.session.is_owner():
            return self._commit(Screen.OWNER_HOME, NavTrigger.GO_HOME)
        return self._refuse(NavTrigger.GO_HOME, "No authenticated session")

    def logout(self) -> TransitionResult:
        """
        Log out locally first, then tell the backend in the background.

        The session is cleared and ``user-choice`` committed before the remote
        call even starts. The remote outcome is only logged; it never reverses
        the navigation and is never awaited here.
        """
        self.session.clear()
        result = self._commit(Screen.USER_CHOICE, NavTrigger.LOGOUT)
        if self._backend is not None:
            coro = self._remote_logout()
            try:
                self._scheduler.spawn(coro, name="remote-logout")
            except RuntimeError:
                coro.close()
                logger.warning("No event loop running, remote logout skipped")
        return result

    async def _remote_logout(self) -> None:
        try:
            result = await self._backend.logout()
        except Exception as exc:
            # Local state already advanced; remote session is eventually consistent.
            logger.warning("Remote logout failed: %s", exc)
            return
        if result.get("success"):
            logger.info("Remote logout confirmed")
        else:
            logger.warning("Remote logout rejected: %s", result.get("error", "unknown error"))

    # ------------------------------------------------------------------ #
    # Booking flow
    # ------------------------------------------------------------------ #

    def start_booking(self) -> TransitionResult:
        """Begin a new booking attempt with an empty record."""
        return self._apply(
            NavTrigger.START_BOOKING,
            context=BookingContext(), candidates=None, payment_flow=None,
        )

    def confirm_instant_broadcast(self, candidate_centers: CandidateCenterSet) -> TransitionResult:
        """
        Broadcast an instant booking.

        ``None`` broadcasts to the whole directory; a list, even an empty one,
        restricts the broadcast to exactly those centers. The candidate set and
        the screen change land in the same commit.
        """
        return self._apply(NavTrigger.BROADCAST_CONFIRMED, candidates=candidate_centers)

    def cancel_broadcast(self) -> TransitionResult:
        return self._apply(NavTrigger.BROADCAST_CANCELLED, candidates=None)

    def center_accepted(self, center: ServiceCenter) -> TransitionResult:
        """Record the accepting center. Refused once the broadcast screen is gone."""
        return self._apply(NavTrigger.CENTER_ACCEPTED, context=merge(self._context, {"center": center}))

    def proceed_to_payment(
        self, instant_slot: Optional[Slot] = None, vehicle: Optional[str] = None
    ) -> TransitionResult:
        """Go to instant payment, filling the "now" slot only where none is set yet."""
        context = merge(self._context, {"vehicle": vehicle})
        if instant_slot is not None:
            context = fill_missing(context, instant_slot.as_fields())
        return self._apply(
            NavTrigger.PROCEED_TO_PAYMENT, context=context, payment_flow=PaymentFlow.INSTANT
        )

    def payment_succeeded(
        self,
        booking_id: str,
        slot: Optional[Slot] = None,
        amount: Optional[float] = None,
        attempt: Optional[int] = None,
        from_screen: Optional[Screen] = None,
    ) -> TransitionResult:
        """
        Record a successful payment and show the matching confirmation.

        The booking id and a defined amount are merged in; the slot only fills
        a date/time that is still unset. The confirmation screen follows the
        payment entry point. A payment reported for an earlier booking attempt,
        or after the payment screen it started on was left, is dropped and the
        record stays untouched, as it does for any refused payment.
        """
        if attempt is not None and attempt != self._attempt:
            return self._refuse(NavTrigger.PAYMENT_SUCCEEDED,
                                f"Payment {booking_id} belongs to a discarded booking")
        if from_screen is not None and from_screen != self._current_screen:
            return self._refuse(NavTrigger.PAYMENT_SUCCEEDED,
                                f"Payment {booking_id} arrived after leaving '{from_screen.value}'")

        context = merge(self._context, {"booking_id": booking_id, "payment_amount": amount})
        if slot is not None:
            context = fill_missing(context, slot.as_fields())
        return self._apply(NavTrigger.PAYMENT_SUCCEEDED, context=context)

    def schedule_for_later(self) -> TransitionResult:
        return self._apply(NavTrigger.SCHEDULE_FOR_LATER)

    def select_center(self, center: ServiceCenter) -> TransitionResult:
        return self._apply(NavTrigger.CENTER_SELECTED, context=merge(self._context, {"center": center}))

    def schedule_continue(self, draft: BookingDraft) -> TransitionResult:
        """Validate the scheduled draft, merge all of it, and go to scheduled payment."""
        draft = self._with_known_center(draft)
        check = validate_booking_draft(draft)
        if not check.passed:
            return self._refuse(NavTrigger.SCHEDULE_CONTINUE, check.message or "Invalid booking")
        return self._apply(
            NavTrigger.SCHEDULE_CONTINUE,
            context=merge(self._context, draft.as_fields()),
            payment_flow=PaymentFlow.SCHEDULED,
        )

    def review_booking(self, draft: Optional[BookingDraft] = None) -> TransitionResult:
        """Open the confirm screen, optionally carrying the scheduled draft along."""
        context = self._context
        if draft is not None:
            draft = self._with_known_center(draft)
            check = validate_booking_draft(draft)
            if not check.passed:
                return self._refuse(NavTrigger.REVIEW_BOOKING, check.message or "Invalid booking")
            context = merge(context, draft.as_fields())
        return self._apply(NavTrigger.REVIEW_BOOKING, context=context)

    def confirm_booking(self) -> TransitionResult:
        """
        Shared confirm action.

        A scheduled booking (center and a concrete slot already collected)
        continues to scheduled payment; otherwise this returns to the dashboard.
        """
        flow = PaymentFlow.SCHEDULED if self.is_scheduled else None
        return self._apply(NavTrigger.CONFIRM_BOOKING, payment_flow=flow)

    def finish_booking(self) -> TransitionResult:
        return self._apply(NavTrigger.FINISH_BOOKING)

    def _with_known_center(self, draft: BookingDraft) -> BookingDraft:
        if draft.center is None and self._context.center is not None:
            return replace(draft, center=self._context.center)
        return draft
