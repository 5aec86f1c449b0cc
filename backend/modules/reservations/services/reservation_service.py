# backend/modules/reservations/services/reservation_service.py

"""
Reservation service: allocation, deposit confirmation and cancellation.
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import datetime, date, time
from typing import Callable, List, Optional, Tuple
import random
import string
import logging

from core.auth import User
from core.config import Settings, get_settings
from ..exceptions import (
    ConflictOnInsertError,
    NoAvailabilityError,
    ReservationNotFoundError,
    ReservationPermissionError,
    ReservationStateError,
)
from ..models.reservation_models import (
    DiningTable, Reservation, ReservationStatus, SlotClaim
)
from ..models.audit_models import ReservationAuditLog, AuditAction
from ..schemas.reservation_schemas import ReservationCreate
from .availability_service import AvailabilityService, iter_slot_starts
from ..events import (
    emit_reservation_event,
    ReservationCreatedEvent,
    ReservationConfirmedEvent,
    ReservationCancelledEvent,
)

logger = logging.getLogger(__name__)

# PostgreSQL names the constraint; SQLite reports the constrained columns
SLOT_CLAIM_CONSTRAINT_MARKERS = (
    "uq_slot_claim_table_slot",
    "UNIQUE constraint failed: reservation_slot_claims.table_id",
)


def _is_slot_claim_violation(error: IntegrityError) -> bool:
    message = str(error.orig) if error.orig is not None else str(error)
    return any(marker in message for marker in SLOT_CLAIM_CONSTRAINT_MARKERS)


class ReservationService:
    """Service for managing reservations"""

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self._now = clock or datetime.now
        self.availability_service = AvailabilityService(db, self.settings, self._now)

    def generate_confirmation_code(self) -> str:
        """Generate a unique confirmation code"""
        alphabet = string.ascii_uppercase + string.digits
        while True:
            # Format: RES-XXXX-XXXX
            code = f"RES-{''.join(random.choices(alphabet, k=4))}-{''.join(random.choices(alphabet, k=4))}"
            if not self.db.query(Reservation).filter_by(confirmation_code=code).first():
                return code

    def requires_deposit(self, target_date: date, party_size: int) -> bool:
        threshold = self.settings.reservation_deposit_party_size
        if threshold is not None and party_size >= threshold:
            return True
        holiday = self.availability_service.get_holiday(target_date)
        return bool(holiday and holiday.requires_deposit)

    async def create_reservation(
        self,
        owner_id: int,
        reservation_data: ReservationCreate,
        actor: Optional[User] = None,
    ) -> Reservation:
        """
        Allocate a table and insert the reservation.

        Without a deposit the reservation is confirmed in the same
        transaction that claims its table. With a deposit it stays PENDING
        with a tentative table until ``confirm_payment`` runs.

        Raises:
            InvalidSlotError: slot outside effective opening hours
            NoAvailabilityError: no table fits, or the retry also lost the race
        """
        duration = (
            reservation_data.duration_minutes
            or self.settings.reservation_default_duration_minutes
        )

        self.availability_service.validate_party_size(reservation_data.party_size)
        self.availability_service.validate_slot(
            reservation_data.reservation_date,
            reservation_data.start_time,
            duration,
        )

        deposit_required = self.requires_deposit(
            reservation_data.reservation_date, reservation_data.party_size
        )

        attempts = 1 + self.settings.reservation_allocation_retries
        for attempt in range(1, attempts + 1):
            try:
                reservation = self._allocate_and_insert(
                    owner_id, reservation_data, duration, deposit_required, actor
                )
                break
            except ConflictOnInsertError as e:
                logger.warning(
                    f"Allocation conflict on attempt {attempt}/{attempts} for "
                    f"{reservation_data.reservation_date} {reservation_data.start_time}: {e.message}"
                )
                if attempt == attempts:
                    raise NoAvailabilityError(
                        "No tables available for this time slot after a concurrent booking"
                    )

        await emit_reservation_event(ReservationCreatedEvent(
            reservation_id=reservation.id,
            owner_id=reservation.user_id,
            timestamp=datetime.utcnow(),
            user_id=actor.id if actor else owner_id,
            party_size=reservation.party_size,
            reservation_date=str(reservation.reservation_date),
            start_time=str(reservation.start_time),
            deposit_required=reservation.deposit_required,
        ))
        if reservation.status == ReservationStatus.CONFIRMED:
            await self._emit_confirmed(reservation, actor.id if actor else owner_id)

        logger.info(
            f"Created reservation {reservation.id} ({reservation.status.value}) for user {owner_id} "
            f"at table {reservation.table_number}"
        )
        return reservation

    def _allocate_and_insert(
        self,
        owner_id: int,
        reservation_data: ReservationCreate,
        duration: int,
        deposit_required: bool,
        actor: Optional[User],
    ) -> Reservation:
        """Steps 2-7 of allocation in a single transaction."""
        try:
            table = self.availability_service.select_table(
                reservation_data.reservation_date,
                reservation_data.start_time,
                duration,
                reservation_data.party_size,
            )

            reservation = Reservation(
                user_id=owner_id,
                table_id=table.id,
                reservation_date=reservation_data.reservation_date,
                start_time=reservation_data.start_time,
                duration_minutes=duration,
                party_size=reservation_data.party_size,
                status=ReservationStatus.PENDING,
                confirmation_code=self.generate_confirmation_code(),
                source=reservation_data.source or "website",
                contact_name=reservation_data.contact_name,
                contact_email=reservation_data.contact_email,
                contact_phone=reservation_data.contact_phone,
                special_requests=reservation_data.special_requests,
                deposit_required=deposit_required,
            )
            self.db.add(reservation)
            self.db.flush()

            self._add_audit_log(
                reservation,
                AuditAction.CREATED,
                actor,
                details={
                    "source": reservation.source,
                    "party_size": reservation.party_size,
                    "table_id": table.id,
                    "deposit_required": deposit_required,
                },
            )

            if not deposit_required:
                self._claim_table(reservation, table)
                self._mark_confirmed(reservation, actor)

            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if _is_slot_claim_violation(e):
                raise ConflictOnInsertError(table.id) from e
            raise
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(reservation)
        return reservation

    def _claim_table(self, reservation: Reservation, table: DiningTable) -> None:
        """
        Hold the table for the reservation's interval.

        Locks the table row where the backend supports it, re-checks overlap
        and inserts one claim per slot. A concurrent claim on any slot fails
        the unique constraint at flush.
        """
        locked = self.db.query(DiningTable).filter(
            DiningTable.id == table.id
        ).with_for_update().one()

        if not self.availability_service.is_table_free(
            locked,
            reservation.reservation_date,
            reservation.start_time,
            reservation.duration_minutes,
            reservation.party_size,
            exclude_reservation_id=reservation.id,
        ):
            raise ConflictOnInsertError(table.id)

        for slot_start in iter_slot_starts(
            reservation.reservation_date,
            reservation.start_time,
            reservation.duration_minutes,
            self.settings.reservation_slot_interval_minutes,
        ):
            reservation.slot_claims.append(SlotClaim(
                table_id=table.id,
                claim_date=reservation.reservation_date,
                slot_start=slot_start,
            ))

        self.db.flush()

    def _mark_confirmed(self, reservation: Reservation, actor: Optional[User]) -> None:
        reservation.status = ReservationStatus.CONFIRMED
        reservation.confirmed_at = datetime.utcnow()
        self._add_audit_log(
            reservation,
            AuditAction.CONFIRMED,
            actor,
            details={
                "table_id": reservation.table_id,
                "payment_reference": reservation.payment_reference,
            },
        )

    async def confirm_payment(
        self,
        reservation_id: int,
        payment_reference: str,
        actor: Optional[User] = None,
    ) -> Reservation:
        """
        Confirm a PENDING reservation once its deposit has been charged.

        The slot is validated again against the current hours and holidays,
        raising InvalidSlotError and leaving the reservation PENDING when it is
        no longer bookable. The tentative table is kept when it is still free;
        otherwise a new table is allocated. Calling again for a CONFIRMED
        reservation is a no-op.
        """
        reservation = self._get_or_raise(reservation_id)

        if reservation.status == ReservationStatus.CONFIRMED:
            logger.info(f"Reservation {reservation_id} already confirmed")
            return reservation

        if reservation.status == ReservationStatus.CANCELLED:
            raise ReservationStateError("Cancelled reservations cannot be confirmed")

        if reservation.start_at <= self._now():
            raise ReservationStateError("Reservation start time has already passed")

        # Hours or holidays may have changed since the booking was taken
        self.availability_service.validate_slot(
            reservation.reservation_date,
            reservation.start_time,
            reservation.duration_minutes,
        )

        attempts = 1 + self.settings.reservation_allocation_retries
        for attempt in range(1, attempts + 1):
            try:
                self._confirm_pending(reservation, payment_reference, actor)
                break
            except ConflictOnInsertError as e:
                logger.warning(
                    f"Confirmation conflict on attempt {attempt}/{attempts} for reservation "
                    f"{reservation_id}: {e.message}"
                )
                if attempt == attempts:
                    raise NoAvailabilityError(
                        "No tables available for this time slot after a concurrent booking"
                    )

        await self._emit_confirmed(reservation, actor.id if actor else None)
        logger.info(f"Confirmed reservation {reservation_id} with payment {payment_reference}")
        return reservation

    def _confirm_pending(
        self,
        reservation: Reservation,
        payment_reference: str,
        actor: Optional[User],
    ) -> None:
        try:
            table = reservation.table
            if table is None or not self.availability_service.is_table_free(
                table,
                reservation.reservation_date,
                reservation.start_time,
                reservation.duration_minutes,
                reservation.party_size,
                exclude_reservation_id=reservation.id,
            ):
                previous_table_id = reservation.table_id
                table = self.availability_service.select_table(
                    reservation.reservation_date,
                    reservation.start_time,
                    reservation.duration_minutes,
                    reservation.party_size,
                    exclude_reservation_id=reservation.id,
                )
                reservation.table_id = table.id
                reservation.table = table
                self._add_audit_log(
                    reservation,
                    AuditAction.TABLE_CHANGED,
                    actor,
                    field_changes={"table_id": {"old": previous_table_id, "new": table.id}},
                )

            reservation.payment_reference = payment_reference
            self._claim_table(reservation, table)
            self._mark_confirmed(reservation, actor)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if _is_slot_claim_violation(e):
                raise ConflictOnInsertError(reservation.table_id) from e
            raise
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(reservation)

    async def cancel_reservation(
        self,
        reservation_id: int,
        actor: User,
        reason: Optional[str] = None,
    ) -> Reservation:
        """
        Cancel a reservation and release its table.

        Allowed for the owner or staff before the start time. Cancelling an
        already cancelled reservation returns it unchanged.
        """
        reservation = self._get_or_raise(reservation_id)
        self._check_access(reservation, actor)

        if reservation.status == ReservationStatus.CANCELLED:
            return reservation

        if self._now() >= reservation.start_at:
            raise ReservationStateError("Reservations cannot be cancelled after their start time")

        cancelled_by = "customer" if reservation.user_id == actor.id else "staff"
        previous_status = reservation.status

        try:
            reservation.status = ReservationStatus.CANCELLED
            reservation.cancelled_at = datetime.utcnow()
            reservation.cancellation_reason = reason
            reservation.cancelled_by = cancelled_by
            reservation.slot_claims.clear()

            self._add_audit_log(
                reservation,
                AuditAction.CANCELLED,
                actor,
                reason=reason,
                field_changes={"status": {"old": previous_status.value, "new": "cancelled"}},
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(reservation)

        await emit_reservation_event(ReservationCancelledEvent(
            reservation_id=reservation.id,
            owner_id=reservation.user_id,
            timestamp=datetime.utcnow(),
            user_id=actor.id,
            reason=reason,
            cancelled_by=cancelled_by,
            metadata={
                "party_size": reservation.party_size,
                "reservation_date": str(reservation.reservation_date),
                "start_time": str(reservation.start_time),
            },
        ))

        logger.info(f"Cancelled reservation {reservation_id} by {cancelled_by} {actor.id}")
        return reservation

    def get_reservation(self, reservation_id: int, actor: User) -> Reservation:
        """Get a reservation visible to the caller"""
        reservation = self._get_or_raise(reservation_id)
        self._check_access(reservation, actor)
        return reservation

    def get_by_confirmation_code(self, code: str) -> Reservation:
        reservation = self.db.query(Reservation).filter_by(confirmation_code=code).first()
        if not reservation:
            raise ReservationNotFoundError("Reservation", code)
        return reservation

    def list_user_reservations(
        self,
        user_id: int,
        status: Optional[ReservationStatus] = None,
        upcoming_only: bool = False,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Reservation], int]:
        """Get reservations owned by a user with pagination"""
        query = self.db.query(Reservation).filter(Reservation.user_id == user_id)

        if status:
            query = query.filter(Reservation.status == status)

        if upcoming_only:
            query = query.filter(
                Reservation.reservation_date >= self._now().date(),
                Reservation.status != ReservationStatus.CANCELLED,
            )

        total = query.count()
        reservations = query.order_by(
            Reservation.reservation_date, Reservation.start_time
        ).offset(skip).limit(limit).all()

        return reservations, total

    def get_daily_reservations(
        self,
        target_date: date,
        status: Optional[ReservationStatus] = None,
    ) -> List[Reservation]:
        """Get all reservations for a specific date"""
        query = self.db.query(Reservation).filter(Reservation.reservation_date == target_date)
        if status:
            query = query.filter(Reservation.status == status)
        return query.order_by(Reservation.start_time, Reservation.table_id).all()

    def _get_or_raise(self, reservation_id: int) -> Reservation:
        reservation = self.db.query(Reservation).filter_by(id=reservation_id).first()
        if not reservation:
            raise ReservationNotFoundError("Reservation", reservation_id)
        return reservation

    @staticmethod
    def _check_access(reservation: Reservation, actor: User) -> None:
        if reservation.user_id != actor.id and not actor.is_staff:
            raise ReservationPermissionError()

    def _add_audit_log(
        self,
        reservation: Reservation,
        action: AuditAction,
        actor: Optional[User],
        field_changes: Optional[dict] = None,
        reason: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        if actor is None:
            user_type = "system"
        elif actor.id == reservation.user_id:
            user_type = "customer"
        else:
            user_type = "staff"

        self.db.add(ReservationAuditLog(
            reservation_id=reservation.id,
            action=action.value,
            user_id=actor.id if actor else None,
            user_type=user_type,
            field_changes=field_changes,
            reason=reason,
            details=details,
        ))

    async def _emit_confirmed(self, reservation: Reservation, user_id: Optional[int]) -> None:
        await emit_reservation_event(ReservationConfirmedEvent(
            reservation_id=reservation.id,
            owner_id=reservation.user_id,
            timestamp=datetime.utcnow(),
            user_id=user_id,
            table_number=reservation.table_number,
            confirmation_code=reservation.confirmation_code,
        ))
