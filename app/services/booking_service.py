from sqlalchemy.orm import Session
from datetime import datetime
import logging

from ..core.exceptions import ValidationError, NotFoundError, ForbiddenError, SlotTakenError
from ..core.security import Principal, UserRole
from ..models.appointment import Appointment
from ..models.user import User
from .appointment_service import AppointmentService
from .appointment_store import AppointmentStore
from .slot_catalog import is_catalog_time

logger = logging.getLogger(__name__)

def parse_date_key(value: str) -> str:
    """Check a YYYY-MM-DD string names a real calendar date."""
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError):
        raise ValidationError("Date must be a valid calendar date in YYYY-MM-DD format")
    # strptime accepts unpadded fields such as 2025-7-1
    if parsed.strftime("%Y-%m-%d") != value:
        raise ValidationError("Date must be a valid calendar date in YYYY-MM-DD format")
    return value

class BookingService:
    """The only path that creates appointments."""

    def __init__(self, db: Session):
        self.db = db
        self.store = AppointmentStore(db)
        self.lifecycle = AppointmentService(db)

    def book(self, principal: Principal, doctor_id: int, date: str, time: str) -> Appointment:
        """Book ``time`` on ``date`` with ``doctor_id`` for the calling patient.

        The availability check here only gives early, friendly feedback. The
        guarantee that one of several racing requests wins comes from the
        unique index the store inserts against.
        """
        if not principal.can_book:
            raise ForbiddenError("Only patients can book appointments")
        if not doctor_id or not date or not time:
            raise ValidationError("Doctor, date and time are required")

        date = parse_date_key(date)
        if not is_catalog_time(time):
            raise ValidationError(f"'{time}' is not a bookable time slot")

        doctor = self.db.query(User).filter(
            User.id == doctor_id,
            User.role == UserRole.DOCTOR
        ).first()
        if not doctor:
            raise NotFoundError("Doctor not found")

        if self.store.find_active_conflict(doctor_id, date, time):
            logger.info(f"Slot already booked: doctor={doctor_id} date={date} time={time}")
            raise SlotTakenError()

        appointment = Appointment(
            patient_id=principal.id,
            doctor_id=doctor_id,
            date=date,
            time=time,
            status=self.lifecycle.initial_status(),
        )
        created = self.store.insert(appointment)

        logger.info(
            f"Appointment {created.id} booked: patient={principal.id} "
            f"doctor={doctor_id} date={date} time={time} status={created.status.value}"
        )
        return created
