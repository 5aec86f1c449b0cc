# backend/modules/reservations/services/configuration_service.py

"""
Administration of tables, weekly opening hours and holidays.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import date
from typing import List, Optional
import logging

from ..exceptions import ConfigurationError, ReservationNotFoundError
from ..models.reservation_models import (
    DiningTable, Holiday, OpeningHours, Reservation, ReservationStatus
)
from ..schemas.admin_schemas import (
    TableCreate, TableUpdate, OpeningHoursSet, HolidayCreate, HolidayUpdate
)

logger = logging.getLogger(__name__)


class ConfigurationService:
    """Staff-facing CRUD for the data the allocator reads"""

    def __init__(self, db: Session):
        self.db = db

    # Tables

    def list_tables(self, include_inactive: bool = False) -> List[DiningTable]:
        query = self.db.query(DiningTable)
        if not include_inactive:
            query = query.filter(DiningTable.is_active.is_(True))
        return query.order_by(DiningTable.capacity, DiningTable.id).all()

    def get_table(self, table_id: int) -> DiningTable:
        table = self.db.query(DiningTable).filter_by(id=table_id).first()
        if not table:
            raise ReservationNotFoundError("Table", table_id)
        return table

    def create_table(self, table_data: TableCreate) -> DiningTable:
        table = DiningTable(**table_data.model_dump())
        self.db.add(table)
        self._commit(f"Table number {table_data.table_number} already exists")
        self.db.refresh(table)
        logger.info(f"Created table {table.table_number} seating {table.capacity}")
        return table

    def update_table(self, table_id: int, update_data: TableUpdate) -> DiningTable:
        """
        Update a table.

        Existing reservations keep their table. Capacity cannot drop below the
        party size of an upcoming reservation already assigned to the table.
        """
        table = self.get_table(table_id)
        changes = update_data.model_dump(exclude_unset=True)

        new_capacity = changes.get("capacity")
        if new_capacity is not None and new_capacity < table.capacity:
            largest_party = self.db.query(func.max(Reservation.party_size)).filter(
                Reservation.table_id == table.id,
                Reservation.status != ReservationStatus.CANCELLED,
                Reservation.reservation_date >= date.today(),
            ).scalar()
            if largest_party is not None and largest_party > new_capacity:
                raise ConfigurationError(
                    f"Table {table.table_number} has an upcoming reservation for "
                    f"{largest_party} guests; capacity cannot drop to {new_capacity}",
                    status_code=409,
                )

        for field, value in changes.items():
            setattr(table, field, value)
        self._commit(f"Table number {update_data.table_number} already exists")
        self.db.refresh(table)
        logger.info(f"Updated table {table.table_number}")
        return table

    def deactivate_table(self, table_id: int) -> DiningTable:
        table = self.get_table(table_id)
        table.is_active = False
        self._commit()
        self.db.refresh(table)
        logger.info(f"Deactivated table {table.table_number}")
        return table

    # Opening hours

    def list_opening_hours(self) -> List[OpeningHours]:
        return self.db.query(OpeningHours).order_by(OpeningHours.day_of_week).all()

    def set_opening_hours(self, day_of_week: int, hours: OpeningHoursSet) -> OpeningHours:
        if not 0 <= day_of_week <= 6:
            raise ConfigurationError("day_of_week must be between 0 (Monday) and 6 (Sunday)")

        entry = self.db.query(OpeningHours).filter_by(day_of_week=day_of_week).first()
        if entry is None:
            entry = OpeningHours(day_of_week=day_of_week)
            self.db.add(entry)
        entry.open_time = hours.open_time
        entry.close_time = hours.close_time

        self._commit()
        self.db.refresh(entry)
        logger.info(f"Opening hours for day {day_of_week} set to {hours.open_time}-{hours.close_time}")
        return entry

    def clear_opening_hours(self, day_of_week: int) -> None:
        """Mark a weekday as closed."""
        entry = self.db.query(OpeningHours).filter_by(day_of_week=day_of_week).first()
        if entry is None:
            raise ReservationNotFoundError("Opening hours for day", day_of_week)
        self.db.delete(entry)
        self._commit()
        logger.info(f"Day {day_of_week} marked closed")

    # Holidays

    def list_holidays(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Holiday]:
        query = self.db.query(Holiday)
        if start:
            query = query.filter(Holiday.date >= start)
        if end:
            query = query.filter(Holiday.date <= end)
        return query.order_by(Holiday.date).all()

    def get_holiday(self, holiday_id: int) -> Holiday:
        holiday = self.db.query(Holiday).filter_by(id=holiday_id).first()
        if not holiday:
            raise ReservationNotFoundError("Holiday", holiday_id)
        return holiday

    def create_holiday(self, holiday_data: HolidayCreate) -> Holiday:
        holiday = Holiday(**holiday_data.model_dump())
        self.db.add(holiday)
        self._commit(f"A holiday already exists on {holiday_data.date}")
        self.db.refresh(holiday)
        logger.info(f"Created holiday {holiday.name or holiday.date} (closed={holiday.is_closed})")
        return holiday

    def update_holiday(self, holiday_id: int, update_data: HolidayUpdate) -> Holiday:
        holiday = self.get_holiday(holiday_id)
        for field, value in update_data.model_dump(exclude_unset=True).items():
            setattr(holiday, field, value)

        if (holiday.open_time is None) != (holiday.close_time is None):
            self.db.rollback()
            raise ConfigurationError("open_time and close_time must be given together")
        if holiday.has_modified_hours and holiday.close_time <= holiday.open_time:
            self.db.rollback()
            raise ConfigurationError("close_time must be after open_time")

        self._commit()
        self.db.refresh(holiday)
        return holiday

    def delete_holiday(self, holiday_id: int) -> None:
        holiday = self.get_holiday(holiday_id)
        self.db.delete(holiday)
        self._commit()
        logger.info(f"Deleted holiday {holiday_id}")

    def _commit(self, conflict_message: str = "Configuration conflicts with existing data") -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Configuration change rejected: {e.orig}")
            raise ConfigurationError(conflict_message, status_code=409) from e
