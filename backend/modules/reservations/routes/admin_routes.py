# backend/modules/reservations/routes/admin_routes.py

"""
Administration routes for tables, opening hours and holidays.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from core.auth import User, require_manager, require_staff
from core.database import get_db
from ..services import ConfigurationService
from ..schemas import (
    TableCreate,
    TableUpdate,
    TableResponse,
    OpeningHoursSet,
    OpeningHoursResponse,
    HolidayCreate,
    HolidayUpdate,
    HolidayResponse,
)

router = APIRouter()


@router.get("/tables", response_model=List[TableResponse])
async def list_tables(
    include_inactive: bool = False,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    service = ConfigurationService(db)
    return [TableResponse.model_validate(t) for t in service.list_tables(include_inactive)]


@router.post("/tables", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
async def create_table(
    table_data: TableCreate,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    service = ConfigurationService(db)
    return TableResponse.model_validate(service.create_table(table_data))


@router.patch("/tables/{table_id}", response_model=TableResponse)
async def update_table(
    table_id: int,
    update_data: TableUpdate,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    service = ConfigurationService(db)
    return TableResponse.model_validate(service.update_table(table_id, update_data))


@router.delete("/tables/{table_id}", response_model=TableResponse)
async def deactivate_table(
    table_id: int,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    """Tables are deactivated, never deleted, so past reservations keep their table."""
    service = ConfigurationService(db)
    return TableResponse.model_validate(service.deactivate_table(table_id))


@router.get("/opening-hours", response_model=List[OpeningHoursResponse])
async def list_opening_hours(
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    service = ConfigurationService(db)
    return [OpeningHoursResponse.model_validate(h) for h in service.list_opening_hours()]


@router.put("/opening-hours/{day_of_week}", response_model=OpeningHoursResponse)
async def set_opening_hours(
    hours: OpeningHoursSet,
    day_of_week: int = Path(..., ge=0, le=6, description="0 = Monday"),
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    service = ConfigurationService(db)
    return OpeningHoursResponse.model_validate(service.set_opening_hours(day_of_week, hours))


@router.delete("/opening-hours/{day_of_week}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_opening_hours(
    day_of_week: int = Path(..., ge=0, le=6),
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    ConfigurationService(db).clear_opening_hours(day_of_week)


@router.get("/holidays", response_model=List[HolidayResponse])
async def list_holidays(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    service = ConfigurationService(db)
    return [HolidayResponse.model_validate(h) for h in service.list_holidays(start, end)]


@router.post("/holidays", response_model=HolidayResponse, status_code=status.HTTP_201_CREATED)
async def create_holiday(
    holiday_data: HolidayCreate,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    service = ConfigurationService(db)
    return HolidayResponse.model_validate(service.create_holiday(holiday_data))


@router.patch("/holidays/{holiday_id}", response_model=HolidayResponse)
async def update_holiday(
    holiday_id: int,
    update_data: HolidayUpdate,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    service = ConfigurationService(db)
    return HolidayResponse.model_validate(service.update_holiday(holiday_id, update_data))


@router.delete("/holidays/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_holiday(
    holiday_id: int,
    current_user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    ConfigurationService(db).delete_holiday(holiday_id)
