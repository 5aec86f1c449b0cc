# backend/modules/reservations/schemas/reservation_schemas.py

"""
Pydantic schemas for reservation system.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, time, datetime
from typing import Optional, List
from enum import Enum


class ReservationStatus(str, Enum):
    """Reservation status enum for schemas"""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class TimeSlot(BaseModel):
    """Time slot for availability"""

    time: time
    available: bool
    tables_available: int


class ReservationBase(BaseModel):
    """Base reservation schema"""

    reservation_date: date
    start_time: time
    party_size: int = Field(..., ge=1, le=100)
    duration_minutes: Optional[int] = Field(None, ge=15, le=480)
    contact_name: str = Field(..., min_length=1, max_length=100)
    contact_email: Optional[str] = Field(None, max_length=255)
    contact_phone: Optional[str] = Field(None, max_length=30)
    special_requests: Optional[str] = Field(None, max_length=500)


class ReservationCreate(ReservationBase):
    """Schema for creating a new reservation"""

    source: Optional[str] = "website"

    @field_validator("reservation_date")
    @classmethod
    def validate_date(cls, v):
        if v < date.today():
            raise ValueError("Reservation date cannot be in the past")
        return v


class StaffReservationCreate(ReservationCreate):
    """Staff booking on behalf of a customer"""

    user_id: int = Field(..., ge=1)
    source: Optional[str] = "staff"


class ReservationResponse(BaseModel):
    """Schema for reservation response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    reservation_date: date
    start_time: time
    duration_minutes: int
    party_size: int
    status: ReservationStatus
    confirmation_code: str
    source: Optional[str] = None

    # Table assignment
    table_id: Optional[int] = None
    table_number: Optional[str] = None

    contact_name: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    special_requests: Optional[str] = None

    deposit_required: bool = False
    payment_reference: Optional[str] = None

    # Timestamps
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    # Cancellation info
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[str] = None


class ReservationListResponse(BaseModel):
    """Schema for list of reservations"""

    reservations: List[ReservationResponse]
    total: int
    page: int
    page_size: int
    has_next: bool
    has_previous: bool


class TableAvailability(BaseModel):
    """A table free for the requested slot"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    table_number: str
    section: Optional[str] = None
    capacity: int


class ReservationAvailability(BaseModel):
    """Schema for checking reservation availability"""

    date: date
    party_size: int
    duration_minutes: int
    is_closed: bool = False
    open_time: Optional[time] = None
    close_time: Optional[time] = None
    time_slots: List[TimeSlot]
    is_fully_booked: bool = False


class ReservationCancellation(BaseModel):
    """Schema for cancelling a reservation"""

    reason: Optional[str] = Field(None, max_length=500)


class PaymentConfirmation(BaseModel):
    """Deposit charge reported by the payment gateway"""

    payment_reference: str = Field(..., min_length=1, max_length=100)
