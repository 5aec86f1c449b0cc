# backend/modules/reservations/routes/reservation_routes.py

"""
Customer-facing reservation API routes.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date, time
import logging

from core.auth import User, get_current_user, require_payment_callback
from core.database import get_db
from ..services import ReservationService, AvailabilityService
from ..models.reservation_models import ReservationStatus as ModelReservationStatus
from ..schemas import (
    ReservationCreate,
    ReservationResponse,
    ReservationListResponse,
    ReservationAvailability,
    ReservationCancellation,
    PaymentConfirmation,
    TableAvailability,
    TimeSlot,
    ReservationStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED
)
async def create_reservation(
    reservation_data: ReservationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a new reservation for the current user.

    - Rejects slots outside opening hours or on closed holidays (422)
    - Assigns the smallest free table that seats the party
    - Returns 409 when no table is available
    """
    service = ReservationService(db)
    reservation = await service.create_reservation(
        current_user.id, reservation_data, actor=current_user
    )
    return ReservationResponse.model_validate(reservation)


@router.get("/availability", response_model=ReservationAvailability)
async def check_availability(
    reservation_date: date = Query(..., alias="date"),
    party_size: int = Query(..., ge=1, le=100),
    duration_minutes: Optional[int] = Query(None, ge=15, le=480),
    db: Session = Depends(get_db),
):
    """Bookable start times for a date and party size."""
    service = AvailabilityService(db)
    duration = duration_minutes or service.settings.reservation_default_duration_minutes
    hours = service.get_effective_hours(reservation_date)
    slots = service.get_time_slots(reservation_date, party_size, duration)

    return ReservationAvailability(
        date=reservation_date,
        party_size=party_size,
        duration_minutes=duration,
        is_closed=hours is None,
        open_time=hours[0] if hours else None,
        close_time=hours[1] if hours else None,
        time_slots=[TimeSlot(**slot) for slot in slots],
        is_fully_booked=bool(slots) and not any(slot["available"] for slot in slots),
    )


@router.get("/availability/tables", response_model=List[TableAvailability])
async def get_available_tables(
    reservation_date: date = Query(..., alias="date"),
    start_time: time = Query(...),
    party_size: int = Query(..., ge=1, le=100),
    duration_minutes: Optional[int] = Query(None, ge=15, le=480),
    db: Session = Depends(get_db),
):
    """Tables free for an exact slot, best fit first."""
    service = AvailabilityService(db)
    duration = duration_minutes or service.settings.reservation_default_duration_minutes
    service.validate_party_size(party_size)
    service.validate_slot(reservation_date, start_time, duration)
    tables = service.get_available_tables(reservation_date, start_time, duration, party_size)
    return [TableAvailability.model_validate(table) for table in tables]


@router.get("/my-reservations", response_model=ReservationListResponse)
async def get_my_reservations(
    status: Optional[ReservationStatus] = None,
    upcoming_only: bool = Query(False, description="Show only upcoming reservations"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get all reservations for the current user with pagination."""
    service = ReservationService(db)

    skip = (page - 1) * page_size
    reservations, total = service.list_user_reservations(
        current_user.id,
        status=ModelReservationStatus(status.value) if status else None,
        upcoming_only=upcoming_only,
        skip=skip,
        limit=page_size,
    )

    return ReservationListResponse(
        reservations=[ReservationResponse.model_validate(r) for r in reservations],
        total=total,
        page=page,
        page_size=page_size,
        has_next=skip + page_size < total,
        has_previous=page > 1,
    )


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a reservation owned by the current user (staff may view any)."""
    service = ReservationService(db)
    return ReservationResponse.model_validate(
        service.get_reservation(reservation_id, current_user)
    )


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: int,
    cancellation: Optional[ReservationCancellation] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Cancel a reservation before its start time. Repeated calls are no-ops."""
    service = ReservationService(db)
    reservation = await service.cancel_reservation(
        reservation_id,
        current_user,
        reason=cancellation.reason if cancellation else None,
    )
    return ReservationResponse.model_validate(reservation)


@router.post("/{reservation_id}/payment-confirmation", response_model=ReservationResponse)
async def confirm_payment(
    reservation_id: int,
    payment: PaymentConfirmation,
    current_user: User = Depends(require_payment_callback),
    db: Session = Depends(get_db),
):
    """Called by the payment gateway once a deposit has been charged."""
    service = ReservationService(db)
    reservation = await service.confirm_payment(
        reservation_id, payment.payment_reference, actor=current_user
    )
    return ReservationResponse.model_validate(reservation)
