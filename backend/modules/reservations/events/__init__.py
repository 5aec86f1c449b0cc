"""
Reservation system events for async workflows.
"""

from .reservation_events import (
    ReservationEvent,
    ReservationCreatedEvent,
    ReservationConfirmedEvent,
    ReservationCancelledEvent,
    emit_reservation_event,
    register_event_handler,
    unregister_event_handler,
    register_default_handlers,
    reservation_event_handlers,
)

__all__ = [
    "ReservationEvent",
    "ReservationCreatedEvent",
    "ReservationConfirmedEvent",
    "ReservationCancelledEvent",
    "emit_reservation_event",
    "register_event_handler",
    "unregister_event_handler",
    "register_default_handlers",
    "reservation_event_handlers",
]
