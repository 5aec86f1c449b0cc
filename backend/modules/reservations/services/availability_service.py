# backend/modules/reservations/services/availability_service.py

"""
Service for checking table availability and choosing a table for a slot.
"""

from sqlalchemy.orm import Session
from datetime import datetime, date, time, timedelta
from typing import Callable, Dict, List, Optional, Tuple
import logging

from core.config import Settings, get_settings
from ..exceptions import InvalidSlotError, NoAvailabilityError, ReservationException
from ..models.reservation_models import (
    DiningTable, Holiday, OpeningHours, Reservation, ReservationStatus
)

logger = logging.getLogger(__name__)


def iter_slot_starts(target_date: date, start_time: time, duration_minutes: int, interval_minutes: int) -> List[time]:
    """Start times of every slot interval covered by [start, start + duration)."""
    start_at = datetime.combine(target_date, start_time)
    end_at = start_at + timedelta(minutes=duration_minutes)
    step = timedelta(minutes=interval_minutes)

    slots = []
    current = start_at
    while current < end_at:
        slots.append(current.time())
        current += step
    return slots


class AvailabilityService:
    """Service for managing table availability"""

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self._now = clock or datetime.now

    def get_holiday(self, target_date: date) -> Optional[Holiday]:
        return self.db.query(Holiday).filter_by(date=target_date).first()

    def get_effective_hours(self, target_date: date) -> Optional[Tuple[time, time]]:
        """
        Opening hours that apply on a date.

        A holiday entry overrides the weekly rule: closed holidays yield None,
        holidays with modified hours yield those hours. Otherwise the weekday's
        opening hours apply; a weekday without hours is closed.
        """
        holiday = self.get_holiday(target_date)
        if holiday:
            if holiday.is_closed:
                return None
            if holiday.has_modified_hours:
                return holiday.open_time, holiday.close_time

        hours = self.db.query(OpeningHours).filter_by(
            day_of_week=target_date.weekday()
        ).first()
        if not hours:
            return None
        return hours.open_time, hours.close_time

    def validate_party_size(self, party_size: int) -> None:
        if party_size < 1 or party_size > self.settings.reservation_max_party_size:
            raise ReservationException(
                f"Party size must be between 1 and {self.settings.reservation_max_party_size}",
                code="INVALID_PARTY_SIZE",
                status_code=422,
            )

    def validate_duration(self, duration_minutes: int) -> None:
        interval = self.settings.reservation_slot_interval_minutes
        if duration_minutes % interval:
            raise InvalidSlotError(f"Duration must be a multiple of {interval} minutes")

        if not (
            self.settings.reservation_min_duration_minutes
            <= duration_minutes
            <= self.settings.reservation_max_duration_minutes
        ):
            raise InvalidSlotError(
                f"Duration must be between {self.settings.reservation_min_duration_minutes} "
                f"and {self.settings.reservation_max_duration_minutes} minutes"
            )

    def validate_slot(
        self,
        target_date: date,
        target_time: time,
        duration_minutes: int,
    ) -> None:
        """Raise InvalidSlotError unless the slot is bookable on that date."""
        interval = self.settings.reservation_slot_interval_minutes

        if target_time.second or target_time.microsecond or target_time.minute % interval:
            raise InvalidSlotError(f"Start time must fall on a {interval}-minute boundary")

        self.validate_duration(duration_minutes)

        holiday = self.get_holiday(target_date)
        if holiday and holiday.is_closed:
            raise InvalidSlotError(f"Restaurant is closed on {holiday.name or target_date.isoformat()}")

        hours = self.get_effective_hours(target_date)
        if hours is None:
            raise InvalidSlotError(f"Restaurant is closed on {target_date.strftime('%A')}")

        open_time, close_time = hours
        start_at = datetime.combine(target_date, target_time)
        end_at = start_at + timedelta(minutes=duration_minutes)
        if start_at < datetime.combine(target_date, open_time) or end_at > datetime.combine(target_date, close_time):
            raise InvalidSlotError(
                f"Requested time {target_time.strftime('%H:%M')}-{end_at.strftime('%H:%M')} "
                f"is outside opening hours {open_time.strftime('%H:%M')}-{close_time.strftime('%H:%M')}"
            )

        if start_at <= self._now():
            raise InvalidSlotError("Requested time is in the past")

    def _get_reserved_table_ids(
        self,
        target_date: date,
        target_time: time,
        duration_minutes: int,
        exclude_reservation_id: Optional[int] = None,
    ) -> set:
        """Get IDs of tables with a confirmed reservation overlapping the slot"""
        start_datetime = datetime.combine(target_date, target_time)
        end_datetime = start_datetime + timedelta(minutes=duration_minutes)

        query = self.db.query(Reservation).filter(
            Reservation.reservation_date == target_date,
            Reservation.status == ReservationStatus.CONFIRMED,
            Reservation.table_id.isnot(None),
        )

        if exclude_reservation_id:
            query = query.filter(Reservation.id != exclude_reservation_id)

        reserved_table_ids = set()
        for reservation in query.all():
            if reservation.overlaps(start_datetime, end_datetime):
                reserved_table_ids.add(reservation.table_id)

        return reserved_table_ids

    def get_available_tables(
        self,
        target_date: date,
        target_time: time,
        duration_minutes: int,
        party_size: int,
        exclude_reservation_id: Optional[int] = None,
    ) -> List[DiningTable]:
        """
        Tables that can seat the party for the whole slot, best fit first.

        Ordering is smallest capacity first, then table id, so the first
        entry wastes the fewest seats and the choice is deterministic.
        """
        candidates = self.db.query(DiningTable).filter(
            DiningTable.is_active.is_(True),
            DiningTable.capacity >= party_size,
        ).order_by(DiningTable.capacity, DiningTable.id).all()

        if not candidates:
            return []

        reserved_table_ids = self._get_reserved_table_ids(
            target_date, target_time, duration_minutes, exclude_reservation_id
        )

        return [table for table in candidates if table.id not in reserved_table_ids]

    def select_table(
        self,
        target_date: date,
        target_time: time,
        duration_minutes: int,
        party_size: int,
        exclude_reservation_id: Optional[int] = None,
    ) -> DiningTable:
        """Pick the best available table or raise NoAvailabilityError."""
        available_tables = self.get_available_tables(
            target_date, target_time, duration_minutes, party_size, exclude_reservation_id
        )
        if not available_tables:
            logger.info(
                f"No table for party of {party_size} on {target_date} at {target_time}"
            )
            raise NoAvailabilityError()

        table = available_tables[0]
        logger.info(
            f"Selected table {table.table_number} (seats {table.capacity}) for party of "
            f"{party_size} on {target_date} at {target_time}"
        )
        return table

    def is_table_free(
        self,
        table: DiningTable,
        target_date: date,
        target_time: time,
        duration_minutes: int,
        party_size: int,
        exclude_reservation_id: Optional[int] = None,
    ) -> bool:
        """Whether a specific table can still take this reservation."""
        if not table.is_active or table.capacity < party_size:
            return False
        reserved = self._get_reserved_table_ids(
            target_date, target_time, duration_minutes, exclude_reservation_id
        )
        return table.id not in reserved

    def get_time_slots(
        self,
        target_date: date,
        party_size: int,
        duration_minutes: Optional[int] = None,
    ) -> List[Dict]:
        """Get every bookable start time of a date with its availability"""
        duration_minutes = duration_minutes or self.settings.reservation_default_duration_minutes
        self.validate_party_size(party_size)
        self.validate_duration(duration_minutes)

        hours = self.get_effective_hours(target_date)
        if hours is None:
            return []

        open_time, close_time = hours
        interval = timedelta(minutes=self.settings.reservation_slot_interval_minutes)
        duration = timedelta(minutes=duration_minutes)
        close_at = datetime.combine(target_date, close_time)
        now = self._now()

        tables = self.db.query(DiningTable).filter(
            DiningTable.is_active.is_(True),
            DiningTable.capacity >= party_size,
        ).all()
        confirmed = self.db.query(Reservation).filter(
            Reservation.reservation_date == target_date,
            Reservation.status == ReservationStatus.CONFIRMED,
            Reservation.table_id.isnot(None),
        ).all()

        slots = []
        current = datetime.combine(target_date, open_time)
        # Align the first slot to the interval grid
        minute_offset = current.minute % self.settings.reservation_slot_interval_minutes
        if minute_offset:
            current += interval - timedelta(minutes=minute_offset)

        while current + duration <= close_at:
            end = current + duration
            busy = {r.table_id for r in confirmed if r.overlaps(current, end)}
            free_count = sum(1 for table in tables if table.id not in busy)
            slots.append({
                "time": current.time(),
                "available": free_count > 0 and current > now,
                "tables_available": free_count,
            })
            current += interval

        return slots
