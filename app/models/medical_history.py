from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class MedicalHistory(Base):
    __tablename__ = "medical_histories"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("User")
    records = relationship(
        "MedicalRecord",
        back_populates="history",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<MedicalHistory(id={self.id}, patient_id={self.patient_id})>"

class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(Integer, primary_key=True, index=True)
    history_id = Column(Integer, ForeignKey("medical_histories.id"), nullable=False, index=True)
    treated_by_doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    diagnosis = Column(String(255), nullable=False)
    notes = Column(Text, nullable=False)
    recorded_at = Column(DateTime, server_default=func.now(), nullable=False)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    history = relationship("MedicalHistory", back_populates="records")
    treated_by_doctor = relationship("User")

    def __repr__(self):
        return f"<MedicalRecord(id={self.id}, history_id={self.history_id}, diagnosis='{self.diagnosis}')>"
