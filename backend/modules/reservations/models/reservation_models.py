# backend/modules/reservations/models/reservation_models.py

"""
Reservation models: dining tables, opening hours, holidays, reservations
and the slot claims that guard against double booking.
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Date, Time, Text,
    Enum, Boolean, UniqueConstraint, Index, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import enum
from datetime import datetime, timedelta


class ReservationStatus(str, enum.Enum):
    """Reservation status enum"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class DiningTable(Base):
    """A bookable table"""
    __tablename__ = "dining_tables"

    id = Column(Integer, primary_key=True, index=True)
    table_number = Column(String(20), unique=True, nullable=False)
    section = Column(String(50), default="main")  # main, patio, private, bar
    capacity = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    reservations = relationship("Reservation", back_populates="table")

    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_dining_table_capacity"),
    )

    def __repr__(self):
        return f"<DiningTable {self.table_number} seats={self.capacity}>"


class OpeningHours(Base):
    """Weekly opening hours; a weekday without a row is closed"""
    __tablename__ = "opening_hours"

    id = Column(Integer, primary_key=True)
    day_of_week = Column(Integer, unique=True, nullable=False)  # 0 = Monday
    open_time = Column(Time, nullable=False)
    close_time = Column(Time, nullable=False)

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_opening_hours_day"),
        CheckConstraint("close_time > open_time", name="ck_opening_hours_range"),
    )


class Holiday(Base):
    """Closure or modified hours for a single date"""
    __tablename__ = "holidays"

    id = Column(Integer, primary_key=True)
    date = Column(Date, unique=True, nullable=False, index=True)
    name = Column(String(100))  # "Christmas Day", "New Year's Eve"

    is_closed = Column(Boolean, default=False, nullable=False)
    open_time = Column(Time)
    close_time = Column(Time)
    requires_deposit = Column(Boolean, default=False, nullable=False)

    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def has_modified_hours(self) -> bool:
        return self.open_time is not None and self.close_time is not None


class Reservation(Base):
    """A booking of one table for a time interval on one date"""
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    table_id = Column(Integer, ForeignKey("dining_tables.id"), nullable=True)

    # Reservation details
    reservation_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=90)
    party_size = Column(Integer, nullable=False)

    # Status and tracking
    status = Column(Enum(ReservationStatus), default=ReservationStatus.PENDING, nullable=False, index=True)
    confirmation_code = Column(String(20), unique=True, index=True)
    source = Column(String(50), default="website")  # website, phone, staff

    # Contact info
    contact_name = Column(String(100), nullable=False)
    contact_email = Column(String(255))
    contact_phone = Column(String(30))
    special_requests = Column(Text)

    # Deposit
    deposit_required = Column(Boolean, default=False, nullable=False)
    payment_reference = Column(String(100))

    # Cancellation info
    cancelled_at = Column(DateTime(timezone=True))
    cancellation_reason = Column(Text)
    cancelled_by = Column(String(20))  # customer, staff, system

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    confirmed_at = Column(DateTime(timezone=True))

    table = relationship("DiningTable", back_populates="reservations")
    slot_claims = relationship(
        "SlotClaim", back_populates="reservation", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_reservation_date_table", "reservation_date", "table_id"),
        Index("idx_reservation_status_date", "status", "reservation_date"),
        CheckConstraint("party_size >= 1", name="ck_reservation_party_size"),
        CheckConstraint("duration_minutes > 0", name="ck_reservation_duration"),
    )

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.reservation_date, self.start_time)

    @property
    def end_at(self) -> datetime:
        return self.start_at + timedelta(minutes=self.duration_minutes)

    @property
    def table_number(self):
        return self.table.table_number if self.table else None

    def overlaps(self, start_at: datetime, end_at: datetime) -> bool:
        """Half-open interval overlap with [start_at, end_at)."""
        return self.start_at < end_at and start_at < self.end_at

    def __repr__(self):
        return f"<Reservation {self.id} - table {self.table_id} on {self.reservation_date} at {self.start_time}>"


class SlotClaim(Base):
    """
    One slot interval of a table held by a confirmed reservation.

    The unique constraint makes two confirmed reservations covering the
    same slot of the same table impossible at the store level.
    """
    __tablename__ = "reservation_slot_claims"

    id = Column(Integer, primary_key=True)
    reservation_id = Column(
        Integer, ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    table_id = Column(Integer, ForeignKey("dining_tables.id"), nullable=False)
    claim_date = Column(Date, nullable=False)
    slot_start = Column(Time, nullable=False)

    reservation = relationship("Reservation", back_populates="slot_claims")

    __table_args__ = (
        UniqueConstraint("table_id", "claim_date", "slot_start", name="uq_slot_claim_table_slot"),
    )
