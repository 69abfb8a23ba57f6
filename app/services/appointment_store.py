from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import List, Optional
import logging

from ..core.exceptions import NotFoundError, SlotTakenError, StorageError
from ..models.appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES

logger = logging.getLogger(__name__)

class AppointmentStore:
    """Persistence for appointment records.

    The partial unique index ``uq_appointments_active_slot`` is what keeps a
    slot single-occupancy; ``insert`` turns a violation of it into
    ``SlotTakenError``. Every read goes through the session of the caller and
    sees whatever has been committed before it runs.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_active_conflict(self, doctor_id: int, date: str, time: str) -> Optional[Appointment]:
        """Return the active appointment holding this slot, if any."""
        return self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.date == date,
            Appointment.time == time,
            Appointment.status.in_(ACTIVE_STATUSES)
        ).first()

    def insert(self, appointment: Appointment) -> Appointment:
        """Persist a new appointment in its own transaction."""
        self.db.add(appointment)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            # Anything other than the slot index is a storage fault
            if self.find_active_conflict(appointment.doctor_id, appointment.date, appointment.time):
                logger.info(
                    f"Slot conflict on insert: doctor={appointment.doctor_id} "
                    f"date={appointment.date} time={appointment.time}"
                )
                raise SlotTakenError() from exc
            logger.error(f"Integrity error inserting appointment: {exc}")
            raise StorageError() from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Failed to insert appointment: {exc}")
            raise StorageError() from exc

        self.db.refresh(appointment)
        return appointment

    def get(self, appointment_id: int) -> Appointment:
        appointment = self.db.get(Appointment, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    def set_status(self, appointment_id: int, new_status: AppointmentStatus) -> Appointment:
        appointment = self.get(appointment_id)
        appointment.status = new_status
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Reactivating a slot someone else now holds
            self.db.rollback()
            logger.info(
                f"Slot conflict on status change: appointment={appointment_id} status={new_status.value}"
            )
            raise SlotTakenError() from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Failed to update appointment {appointment_id}: {exc}")
            raise StorageError() from exc

        self.db.refresh(appointment)
        return appointment

    def find_by_patient(self, patient_id: int) -> List[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.patient_id == patient_id
        ).order_by(Appointment.date.desc(), Appointment.time.desc()).all()

    def find_by_doctor_upcoming(self, doctor_id: int, from_date: str) -> List[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.status.in_(ACTIVE_STATUSES),
            Appointment.date >= from_date
        ).order_by(Appointment.date.asc(), Appointment.time.asc()).all()

    def find_all(self) -> List[Appointment]:
        return self.db.query(Appointment).order_by(
            Appointment.date.desc(), Appointment.time.desc()
        ).all()

    def booked_times(self, doctor_id: int, date: str) -> List[str]:
        """Start times held by active appointments for one doctor and day."""
        rows = self.db.query(Appointment.time).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.date == date,
            Appointment.status.in_(ACTIVE_STATUSES)
        ).order_by(Appointment.time.asc()).all()
        return [row[0] for row in rows]
