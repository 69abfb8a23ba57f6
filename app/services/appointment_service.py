from sqlalchemy.orm import Session
from datetime import date as date_type, datetime, timezone
from typing import List, Optional
import logging

from ..core.config import settings
from ..core.exceptions import ForbiddenError
from ..core.security import Principal
from ..models.appointment import Appointment, AppointmentStatus
from .appointment_store import AppointmentStore

logger = logging.getLogger(__name__)

def utc_today() -> date_type:
    return datetime.now(timezone.utc).date()

class AppointmentService:
    """Appointment lifecycle and role-scoped queries.

    Status machine::

        (booked) -> Confirmed   when AUTO_CONFIRM_BOOKINGS
        (booked) -> Pending     otherwise
        Pending | Confirmed | Cancelled | Completed -> Cancelled

    Cancelled is terminal. No transition produces Completed.
    """

    def __init__(self, db: Session, auto_confirm: Optional[bool] = None):
        self.db = db
        self.store = AppointmentStore(db)
        self.auto_confirm = settings.AUTO_CONFIRM_BOOKINGS if auto_confirm is None else auto_confirm

    def initial_status(self) -> AppointmentStatus:
        if self.auto_confirm:
            return AppointmentStatus.CONFIRMED
        return AppointmentStatus.PENDING

    def cancel(self, appointment_id: int, principal: Principal) -> Appointment:
        """Cancel an appointment on behalf of its patient or an admin."""
        appointment = self.store.get(appointment_id)

        if not principal.can_cancel(appointment):
            logger.warning(
                f"User {principal.id} ({principal.role.value}) denied cancelling appointment {appointment_id}"
            )
            raise ForbiddenError("User not authorized to cancel this appointment")

        cancelled = self.store.set_status(appointment_id, AppointmentStatus.CANCELLED)
        logger.info(f"Appointment {appointment_id} cancelled by user {principal.id}")
        return cancelled

    def my_appointments(self, principal: Principal) -> List[Appointment]:
        return self.store.find_by_patient(principal.id)

    def doctor_upcoming(self, principal: Principal, today: Optional[date_type] = None) -> List[Appointment]:
        today = today or utc_today()
        return self.store.find_by_doctor_upcoming(principal.id, today.isoformat())

    def all_appointments(self) -> List[Appointment]:
        return self.store.find_all()

    def list_booked_times(self, doctor_id: int, date: str) -> List[str]:
        return self.store.booked_times(doctor_id, date)
