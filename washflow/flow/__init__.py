from washflow.flow.booking_context import BookingContext, BookingDraft, Slot, is_scheduled_booking
from washflow.flow.broadcast import BroadcastRun, CenterBroadcastSimulator
from washflow.flow.state_machine import (
    NavTrigger,
    PaymentFlow,
    Screen,
    ScreenRouter,
)

__all__ = [
    "ScreenRouter",
    "Screen",
    "NavTrigger",
    "PaymentFlow",
    "BookingContext",
    "BookingDraft",
    "Slot",
    "is_scheduled_booking",
    "CenterBroadcastSimulator",
    "BroadcastRun",
]
