# backend/modules/reservations/events/reservation_events.py

"""
Event system for reservation lifecycle hooks.

Notification and payment collaborators subscribe here; a failing handler
is logged and never affects the reservation that triggered it.
"""

from typing import Dict, Any, List, Callable, Optional
from datetime import datetime
from dataclasses import dataclass
import asyncio
import logging

logger = logging.getLogger(__name__)


@dataclass(kw_only=True)
class ReservationEvent:
    """Base reservation event"""

    event_type: str
    reservation_id: int
    owner_id: int
    timestamp: datetime
    user_id: Optional[int] = None  # Who triggered the event
    metadata: Dict[str, Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary"""
        return {
            "event_type": self.event_type,
            "reservation_id": self.reservation_id,
            "owner_id": self.owner_id,
            "timestamp": self.timestamp.isoformat(),
            "user_id": self.user_id,
            "metadata": self.metadata or {},
        }


@dataclass(kw_only=True)
class ReservationCreatedEvent(ReservationEvent):
    """Emitted when a reservation row is inserted"""

    event_type: str = "reservation.created"
    party_size: int = None
    reservation_date: str = None
    start_time: str = None
    deposit_required: bool = False


@dataclass(kw_only=True)
class ReservationConfirmedEvent(ReservationEvent):
    """Emitted when a table is held for the reservation"""

    event_type: str = "reservation.confirmed"
    table_number: str = None
    confirmation_code: str = None


@dataclass(kw_only=True)
class ReservationCancelledEvent(ReservationEvent):
    """Emitted when reservation is cancelled"""

    event_type: str = "reservation.cancelled"
    reason: str = None
    cancelled_by: str = None


# Event handlers registry
reservation_event_handlers: Dict[str, List[Callable]] = {
    "reservation.created": [],
    "reservation.confirmed": [],
    "reservation.cancelled": [],
}


def register_event_handler(event_type: str, handler: Callable):
    """Register an event handler"""
    if event_type not in reservation_event_handlers:
        raise ValueError(f"Unknown event type: {event_type}")

    if handler not in reservation_event_handlers[event_type]:
        reservation_event_handlers[event_type].append(handler)
        logger.info(f"Registered handler {handler.__name__} for {event_type}")


def unregister_event_handler(event_type: str, handler: Callable):
    """Unregister an event handler"""
    handlers = reservation_event_handlers.get(event_type, [])
    if handler in handlers:
        handlers.remove(handler)


async def emit_reservation_event(event: ReservationEvent):
    """Emit a reservation event to all registered handlers"""
    event_type = event.event_type
    handlers = list(reservation_event_handlers.get(event_type, []))

    if not handlers:
        logger.debug(f"No handlers registered for {event_type}")
        return

    logger.info(f"Emitting {event_type} for reservation {event.reservation_id}")

    # Run handlers concurrently
    tasks = []
    for handler in handlers:
        if asyncio.iscoroutinefunction(handler):
            tasks.append(handler(event))
        else:
            # Wrap sync handlers
            tasks.append(asyncio.to_thread(handler, event))

    results = await asyncio.gather(*tasks, return_exceptions=True)

    for handler, result in zip(handlers, results):
        if isinstance(result, Exception):
            logger.error(
                f"Handler {handler.__name__} failed for {event_type}: {result}"
            )


async def log_reservation_event(event: ReservationEvent):
    """Log reservation events for analytics"""
    logger.info(f"Event logged: {event.to_dict()}")


def register_default_handlers():
    """Attach the logging handler to every known event type."""
    for event_type in reservation_event_handlers:
        register_event_handler(event_type, log_reservation_event)
