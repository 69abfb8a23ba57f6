from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..core.exceptions import ValidationError, NotFoundError, ForbiddenError
from ..core.security import Principal, UserRole
from ..models.medical_history import MedicalHistory, MedicalRecord
from ..models.user import User

logger = logging.getLogger(__name__)

class MedicalHistoryService:
    def __init__(self, db: Session):
        self.db = db

    def _resolve_patient_id(self, principal: Principal, patient_id: Optional[int]) -> int:
        # Patients always read their own history
        if principal.is_patient:
            return principal.id
        if not patient_id:
            raise ValidationError("Patient ID is required")
        return patient_id

    def _records(self, history: Optional[MedicalHistory]) -> List[MedicalRecord]:
        if history is None:
            return []
        return self.db.query(MedicalRecord).filter(
            MedicalRecord.history_id == history.id
        ).order_by(MedicalRecord.recorded_at.desc(), MedicalRecord.id.desc()).all()

    def get_history(self, principal: Principal, patient_id: Optional[int] = None) -> dict:
        patient_id = self._resolve_patient_id(principal, patient_id)
        if not principal.can_view_history(patient_id):
            raise ForbiddenError("Not authorized to view this medical history")

        history = self.db.query(MedicalHistory).filter(
            MedicalHistory.patient_id == patient_id
        ).first()

        return {"patient_id": patient_id, "records": self._records(history)}

    def add_record(self, principal: Principal, patient_id: int, diagnosis: str, notes: str) -> dict:
        if not principal.can_write_history:
            raise ForbiddenError("Only doctors and admins can add medical records")

        patient = self.db.query(User).filter(
            User.id == patient_id,
            User.role == UserRole.PATIENT
        ).first()
        if not patient:
            raise NotFoundError("Patient not found")

        history = self.db.query(MedicalHistory).filter(
            MedicalHistory.patient_id == patient_id
        ).first()
        if not history:
            history = MedicalHistory(patient_id=patient_id)
            self.db.add(history)

        history.records.append(MedicalRecord(
            diagnosis=diagnosis,
            notes=notes,
            treated_by_doctor_id=principal.id,
        ))
        self.db.commit()
        self.db.refresh(history)

        logger.info(f"Medical record added for patient {patient_id} by user {principal.id}")
        return {"patient_id": patient_id, "records": self._records(history)}
