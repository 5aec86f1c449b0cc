from .reservation_schemas import (
    ReservationStatus,
    TimeSlot,
    ReservationCreate,
    StaffReservationCreate,
    ReservationResponse,
    ReservationListResponse,
    TableAvailability,
    ReservationAvailability,
    ReservationCancellation,
    PaymentConfirmation,
)
from .admin_schemas import (
    TableCreate,
    TableUpdate,
    TableResponse,
    OpeningHoursSet,
    OpeningHoursResponse,
    HolidayCreate,
    HolidayUpdate,
    HolidayResponse,
)

__all__ = [
    "ReservationStatus",
    "TimeSlot",
    "ReservationCreate",
    "StaffReservationCreate",
    "ReservationResponse",
    "ReservationListResponse",
    "TableAvailability",
    "ReservationAvailability",
    "ReservationCancellation",
    "PaymentConfirmation",
    "TableCreate",
    "TableUpdate",
    "TableResponse",
    "OpeningHoursSet",
    "OpeningHoursResponse",
    "HolidayCreate",
    "HolidayUpdate",
    "HolidayResponse",
]
