from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Index, Enum as SQLEnum, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

class AppointmentStatus(str, enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    # Nothing transitions into COMPLETED yet; kept so stored rows and
    # clients that reference it stay valid.
    COMPLETED = "Completed"

# Statuses that occupy a slot
ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)

_ACTIVE_SLOT_CLAUSE = text(
    "status IN (%s)" % ", ".join(f"'{s.value}'" for s in ACTIVE_STATUSES)
)

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # "YYYY-MM-DD" and "HH:MM"; both sort lexicographically
    date = Column(String(10), nullable=False)
    time = Column(String(5), nullable=False)
    status = Column(
        SQLEnum(AppointmentStatus, values_callable=lambda statuses: [s.value for s in statuses],
                native_enum=False, length=20),
        nullable=False,
        default=AppointmentStatus.CONFIRMED,
    )

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("User", foreign_keys=[patient_id])
    doctor = relationship("User", foreign_keys=[doctor_id])

    __table_args__ = (
        # At most one active appointment per doctor, day and start time
        Index(
            "uq_appointments_active_slot",
            "doctor_id", "date", "time",
            unique=True,
            sqlite_where=_ACTIVE_SLOT_CLAUSE,
            postgresql_where=_ACTIVE_SLOT_CLAUSE,
        ),
        Index("ix_appointments_doctor_date", "doctor_id", "date"),
    )

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, date='{self.date}', time='{self.time}', status='{self.status}')>"
