from .reservation_models import (
    DiningTable,
    Holiday,
    OpeningHours,
    Reservation,
    ReservationStatus,
    SlotClaim,
)
from .audit_models import AuditAction, ReservationAuditLog

__all__ = [
    "DiningTable",
    "Holiday",
    "OpeningHours",
    "Reservation",
    "ReservationStatus",
    "SlotClaim",
    "AuditAction",
    "ReservationAuditLog",
]
