from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from ...core.database import get_db
from ...core.security import Principal
from ...api.deps import get_principal, get_doctor_or_admin_principal
from ...schemas.medical_history import MedicalHistoryResponse, MedicalRecordCreate
from ...services.medical_history_service import MedicalHistoryService

router = APIRouter(prefix="/history", tags=["Medical History"])

@router.get("", response_model=MedicalHistoryResponse)
def get_history(
    patient_id: Optional[int] = Query(None, alias="patientId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal)
):
    """Patients get their own history; doctors and admins pass patientId."""
    history = MedicalHistoryService(db).get_history(principal, patient_id)
    return MedicalHistoryResponse.model_validate(history)

@router.post("/{patient_id}", response_model=MedicalHistoryResponse, status_code=status.HTTP_201_CREATED)
def add_history_record(
    patient_id: int,
    record: MedicalRecordCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_doctor_or_admin_principal)
):
    history = MedicalHistoryService(db).add_record(principal, patient_id, record.diagnosis, record.notes)
    return MedicalHistoryResponse.model_validate(history)
