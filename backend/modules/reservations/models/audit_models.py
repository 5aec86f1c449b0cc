# backend/modules/reservations/models/audit_models.py

"""
Audit models for reservation system.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, JSON, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import enum


class AuditAction(enum.Enum):
    """Audit action types"""

    CREATED = "created"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    TABLE_CHANGED = "table_changed"


class ReservationAuditLog(Base):
    """Detailed audit log for reservation changes"""

    __tablename__ = "reservation_audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    reservation_id = Column(
        Integer, ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False
    )
    action = Column(String(50), nullable=False)

    # Who made the change
    user_id = Column(Integer)
    user_type = Column(String(20))  # customer, staff, system

    # What changed
    field_changes = Column(JSON)  # {"field": {"old": value, "new": value}}
    reason = Column(Text)

    timestamp = Column(DateTime(timezone=True), server_default=func.now())

    # "metadata" is reserved on declarative models
    details = Column(JSON)

    reservation = relationship("Reservation", backref="audit_logs")

    __table_args__ = (
        Index("idx_reservation_audit_reservation_id", "reservation_id"),
        Index("idx_reservation_audit_action", "action"),
    )

    def __repr__(self):
        return (
            f"<ReservationAuditLog {self.id} - {self.action} on {self.reservation_id}>"
        )
