# backend/modules/reservations/exceptions.py

"""
Custom exceptions for reservation module.

Every error here is recoverable by the caller; none leaves a partially
written reservation behind.
"""

from typing import Any, Optional

from core.exceptions import DomainError


class ReservationException(DomainError):
    """Base exception for reservation module"""

    def __init__(self, message: str, code: str = "RESERVATION_ERROR", status_code: int = 400):
        super().__init__(message=message, code=code, status_code=status_code)


class InvalidSlotError(ReservationException):
    """Requested time is outside effective opening hours or on a closed holiday"""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_SLOT", status_code=422)


class NoAvailabilityError(ReservationException):
    """No table satisfies the capacity and time constraints"""

    def __init__(self, message: str = "No tables available for this time slot"):
        super().__init__(message=message, code="NO_AVAILABILITY", status_code=409)


class ConflictOnInsertError(ReservationException):
    """A concurrent request claimed the same table slot first"""

    def __init__(self, table_id: Optional[int] = None):
        message = "Table slot was taken by a concurrent reservation"
        if table_id is not None:
            message = f"Table {table_id} slot was taken by a concurrent reservation"
        super().__init__(message=message, code="CONFLICT_ON_INSERT", status_code=409)
        self.table_id = table_id


class ReservationNotFoundError(ReservationException):
    """Resource not found error"""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} with identifier {identifier} not found",
            code="NOT_FOUND",
            status_code=404,
        )


class ReservationPermissionError(ReservationException):
    """Caller is neither the owner nor staff"""

    def __init__(self, message: str = "Not allowed to act on this reservation"):
        super().__init__(message=message, code="PERMISSION_DENIED", status_code=403)


class ReservationStateError(ReservationException):
    """Requested transition is not allowed from the current state"""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_STATE", status_code=400)


class ConfigurationError(ReservationException):
    """Invalid table, opening hours or holiday configuration"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message=message, code="INVALID_CONFIGURATION", status_code=status_code)
