# backend/modules/reservations/tests/test_availability_service.py

"""
Tests for availability service.
"""

import pytest
from datetime import date, time, datetime, timedelta
from sqlalchemy.orm import Session

from ..services import AvailabilityService
from ..services.availability_service import iter_slot_starts
from ..exceptions import InvalidSlotError, NoAvailabilityError, ReservationException
from ..models.reservation_models import OpeningHours, ReservationStatus
from .factories import BOOKING_DATE, DiningTableFactory, HolidayFactory, ReservationFactory


class TestEffectiveHours:
    """Weekly hours and holiday overrides"""

    @pytest.fixture
    def service(self, db_session: Session, settings, clock):
        return AvailabilityService(db_session, settings, clock)

    def test_weekly_hours(self, service, opening_hours):
        assert service.get_effective_hours(BOOKING_DATE) == (time(11, 0), time(22, 0))

    def test_weekday_without_hours_is_closed(self, service, opening_hours, db_session):
        db_session.query(OpeningHours).filter_by(day_of_week=BOOKING_DATE.weekday()).delete()
        db_session.commit()

        assert service.get_effective_hours(BOOKING_DATE) is None
        # Other days are unaffected
        assert service.get_effective_hours(BOOKING_DATE + timedelta(days=1)) is not None

    def test_closed_holiday_overrides_weekly_hours(self, service, opening_hours):
        HolidayFactory(date=BOOKING_DATE, is_closed=True)
        assert service.get_effective_hours(BOOKING_DATE) is None

    def test_holiday_with_modified_hours(self, service, opening_hours):
        HolidayFactory(
            date=BOOKING_DATE, is_closed=False, open_time=time(12, 0), close_time=time(16, 0)
        )
        assert service.get_effective_hours(BOOKING_DATE) == (time(12, 0), time(16, 0))

    def test_holiday_without_hours_keeps_weekly_hours(self, service, opening_hours):
        HolidayFactory(date=BOOKING_DATE, is_closed=False, requires_deposit=True)
        assert service.get_effective_hours(BOOKING_DATE) == (time(11, 0), time(22, 0))


class TestValidateSlot:
    """Slot validation against hours, grid and duration bounds"""

    @pytest.fixture
    def service(self, db_session: Session, settings, clock, opening_hours):
        return AvailabilityService(db_session, settings, clock)

    def test_slot_inside_hours(self, service):
        service.validate_slot(BOOKING_DATE, time(19, 0), 90)

    def test_slot_ending_exactly_at_close(self, service):
        service.validate_slot(BOOKING_DATE, time(20, 30), 90)

    def test_slot_starting_at_open(self, service):
        service.validate_slot(BOOKING_DATE, time(11, 0), 90)

    @pytest.mark.parametrize(
        "start, duration",
        [
            (time(23, 0), 90),   # after close
            (time(21, 0), 90),   # runs past close
            (time(10, 45), 90),  # before open
        ],
    )
    def test_slot_outside_hours(self, service, start, duration):
        with pytest.raises(InvalidSlotError, match="outside opening hours"):
            service.validate_slot(BOOKING_DATE, start, duration)

    def test_misaligned_start(self, service):
        with pytest.raises(InvalidSlotError, match="15-minute boundary"):
            service.validate_slot(BOOKING_DATE, time(19, 10), 90)

    def test_misaligned_duration(self, service):
        with pytest.raises(InvalidSlotError, match="multiple of 15"):
            service.validate_slot(BOOKING_DATE, time(19, 0), 100)

    def test_duration_out_of_bounds(self, service):
        with pytest.raises(InvalidSlotError, match="between"):
            service.validate_slot(BOOKING_DATE, time(12, 0), 300)
        with pytest.raises(InvalidSlotError, match="between"):
            service.validate_slot(BOOKING_DATE, time(12, 0), 15)

    def test_closed_holiday(self, service):
        HolidayFactory(date=BOOKING_DATE, name="Staff Party", is_closed=True)
        with pytest.raises(InvalidSlotError, match="Staff Party"):
            service.validate_slot(BOOKING_DATE, time(19, 0), 90)

    def test_modified_holiday_hours(self, service):
        HolidayFactory(
            date=BOOKING_DATE, is_closed=False, open_time=time(12, 0), close_time=time(16, 0)
        )
        service.validate_slot(BOOKING_DATE, time(13, 0), 90)
        with pytest.raises(InvalidSlotError):
            service.validate_slot(BOOKING_DATE, time(19, 0), 90)

    def test_closed_weekday(self, service, db_session):
        db_session.query(OpeningHours).filter_by(day_of_week=BOOKING_DATE.weekday()).delete()
        db_session.commit()

        with pytest.raises(InvalidSlotError, match="closed"):
            service.validate_slot(BOOKING_DATE, time(19, 0), 90)

    def test_past_start(self, db_session, settings, opening_hours):
        late_clock = lambda: datetime.combine(BOOKING_DATE, time(19, 30))  # noqa: E731
        service = AvailabilityService(db_session, settings, late_clock)

        with pytest.raises(InvalidSlotError, match="past"):
            service.validate_slot(BOOKING_DATE, time(19, 0), 90)

    def test_party_size_limits(self, service):
        service.validate_party_size(20)
        with pytest.raises(ReservationException) as exc_info:
            service.validate_party_size(21)
        assert exc_info.value.code == "INVALID_PARTY_SIZE"
        assert exc_info.value.status_code == 422


class TestTableSelection:
    """Best-fit ordering and overlap exclusion"""

    @pytest.fixture
    def service(self, db_session: Session, settings, clock, opening_hours):
        return AvailabilityService(db_session, settings, clock)

    def test_smallest_sufficient_table_first(self, service):
        six = DiningTableFactory(table_number="T6", capacity=6)
        two = DiningTableFactory(table_number="T2", capacity=2)
        four = DiningTableFactory(table_number="T4", capacity=4)

        tables = service.get_available_tables(BOOKING_DATE, time(19, 0), 90, 3)

        assert [t.id for t in tables] == [four.id, six.id]
        assert two not in tables

    def test_equal_capacity_ties_break_on_id(self, service):
        first = DiningTableFactory(table_number="A", capacity=4)
        second = DiningTableFactory(table_number="B", capacity=4)

        table = service.select_table(BOOKING_DATE, time(19, 0), 90, 4)

        assert first.id < second.id
        assert table.id == first.id

    def test_inactive_tables_ignored(self, service):
        DiningTableFactory(capacity=4, is_active=False)
        with pytest.raises(NoAvailabilityError):
            service.select_table(BOOKING_DATE, time(19, 0), 90, 2)

    def test_party_larger_than_every_table(self, service):
        DiningTableFactory(capacity=4)
        DiningTableFactory(capacity=6)
        with pytest.raises(NoAvailabilityError):
            service.select_table(BOOKING_DATE, time(19, 0), 90, 8)

    def test_overlapping_confirmed_reservation_excludes_table(self, service):
        small = DiningTableFactory(capacity=4)
        large = DiningTableFactory(capacity=6)
        ReservationFactory(table=small, start_time=time(18, 30), duration_minutes=90)

        table = service.select_table(BOOKING_DATE, time(19, 0), 90, 4)

        assert table.id == large.id

    def test_back_to_back_reservations_do_not_overlap(self, service):
        table = DiningTableFactory(capacity=4)
        ReservationFactory(table=table, start_time=time(17, 30), duration_minutes=90)

        # [17:30, 19:00) and [19:00, 20:30) share only the boundary
        assert service.select_table(BOOKING_DATE, time(19, 0), 90, 4).id == table.id

    def test_pending_and_cancelled_reservations_do_not_hold_tables(self, service):
        table = DiningTableFactory(capacity=4)
        ReservationFactory(table=table, status=ReservationStatus.PENDING)
        ReservationFactory(table=table, status=ReservationStatus.CANCELLED)

        assert service.is_table_free(table, BOOKING_DATE, time(19, 0), 90, 4)

    def test_other_dates_do_not_interfere(self, service):
        table = DiningTableFactory(capacity=4)
        ReservationFactory(table=table, reservation_date=BOOKING_DATE + timedelta(days=1))

        assert service.is_table_free(table, BOOKING_DATE, time(19, 0), 90, 4)

    def test_is_table_free_respects_capacity(self, service):
        table = DiningTableFactory(capacity=2)
        assert not service.is_table_free(table, BOOKING_DATE, time(19, 0), 90, 3)


class TestTimeSlots:
    """Availability grid for a date"""

    @pytest.fixture
    def service(self, db_session: Session, settings, clock, opening_hours):
        return AvailabilityService(db_session, settings, clock)

    def test_grid_covers_opening_hours(self, service):
        DiningTableFactory(capacity=4)

        slots = service.get_time_slots(BOOKING_DATE, 2, 90)

        assert slots[0]["time"] == time(11, 0)
        assert slots[-1]["time"] == time(20, 30)
        assert len(slots) == 39
        assert all(slot["available"] for slot in slots)

    def test_overlapping_slots_unavailable(self, service):
        table = DiningTableFactory(capacity=4)
        ReservationFactory(table=table, start_time=time(19, 0), duration_minutes=90)

        slots = {slot["time"]: slot for slot in service.get_time_slots(BOOKING_DATE, 2, 90)}

        assert slots[time(17, 30)]["available"]
        assert not slots[time(17, 45)]["available"]
        assert not slots[time(20, 15)]["available"]
        assert slots[time(20, 30)]["available"]
        assert slots[time(19, 0)]["tables_available"] == 0

    def test_closed_date_has_no_slots(self, service):
        HolidayFactory(date=BOOKING_DATE, is_closed=True)
        assert service.get_time_slots(BOOKING_DATE, 2) == []

    def test_past_slots_unavailable(self, db_session, settings, opening_hours):
        DiningTableFactory(capacity=4)
        midday = lambda: datetime.combine(BOOKING_DATE, time(14, 0))  # noqa: E731
        service = AvailabilityService(db_session, settings, midday)

        slots = {slot["time"]: slot for slot in service.get_time_slots(BOOKING_DATE, 2, 90)}

        assert not slots[time(13, 45)]["available"]
        assert not slots[time(14, 0)]["available"]
        assert slots[time(14, 15)]["available"]

    @pytest.mark.parametrize("duration", [20, 15, 255])
    def test_unbookable_duration_rejected(self, service, duration):
        DiningTableFactory(capacity=4)

        with pytest.raises(InvalidSlotError, match="Duration"):
            service.get_time_slots(BOOKING_DATE, 2, duration)

    def test_party_above_limit_rejected(self, service):
        DiningTableFactory(capacity=30)

        with pytest.raises(ReservationException) as exc_info:
            service.get_time_slots(BOOKING_DATE, 21, 90)
        assert exc_info.value.code == "INVALID_PARTY_SIZE"


def test_iter_slot_starts_covers_half_open_interval():
    slots = iter_slot_starts(date(2030, 1, 1), time(19, 0), 90, 15)

    assert slots[0] == time(19, 0)
    assert slots[-1] == time(20, 15)
    assert len(slots) == 6
