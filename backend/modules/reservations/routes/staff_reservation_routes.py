# backend/modules/reservations/routes/staff_reservation_routes.py

"""
Staff-facing reservation management routes.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from core.auth import User, require_staff
from core.database import get_db
from ..services import ReservationService
from ..models.reservation_models import ReservationStatus as ModelReservationStatus
from ..schemas import (
    ReservationResponse,
    ReservationListResponse,
    ReservationCancellation,
    StaffReservationCreate,
    ReservationStatus,
)

router = APIRouter()


@router.get("/daily", response_model=ReservationListResponse)
async def get_daily_reservations(
    reservation_date: date = Query(..., description="Date to get reservations for"),
    status: Optional[ReservationStatus] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    """Get all reservations for a specific date."""
    service = ReservationService(db)

    all_reservations = service.get_daily_reservations(
        reservation_date,
        ModelReservationStatus(status.value) if status else None,
    )

    total = len(all_reservations)
    skip = (page - 1) * page_size
    reservations = all_reservations[skip:skip + page_size]

    return ReservationListResponse(
        reservations=[ReservationResponse.model_validate(r) for r in reservations],
        total=total,
        page=page,
        page_size=page_size,
        has_next=skip + page_size < total,
        has_previous=page > 1,
    )


@router.get("/lookup/{confirmation_code}", response_model=ReservationResponse)
async def lookup_by_confirmation_code(
    confirmation_code: str,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    """Find a reservation by the code given to the guest."""
    service = ReservationService(db)
    return ReservationResponse.model_validate(
        service.get_by_confirmation_code(confirmation_code)
    )


@router.post(
    "/", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED
)
async def create_reservation_for_customer(
    reservation_data: StaffReservationCreate,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    """Book on behalf of a customer (phone bookings). Capacity rules still apply."""
    service = ReservationService(db)
    reservation = await service.create_reservation(
        reservation_data.user_id, reservation_data, actor=current_user
    )
    return ReservationResponse.model_validate(reservation)


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation_as_staff(
    reservation_id: int,
    cancellation: Optional[ReservationCancellation] = None,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    """Cancel any reservation before its start time."""
    service = ReservationService(db)
    reservation = await service.cancel_reservation(
        reservation_id,
        current_user,
        reason=cancellation.reason if cancellation else None,
    )
    return ReservationResponse.model_validate(reservation)
