from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from .appointment import CamelModel, UserSummary


class MedicalRecordCreate(CamelModel):
    diagnosis: str = Field(..., max_length=255)
    notes: str

    @field_validator("diagnosis", "notes")
    @classmethod
    def strip_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Diagnosis and notes are required")
        return value


class MedicalRecordResponse(CamelModel):
    id: int
    diagnosis: str
    notes: str
    recorded_at: Optional[datetime] = None
    treated_by_doctor: Optional[UserSummary] = None


class MedicalHistoryResponse(CamelModel):
    patient_id: int
    records: List[MedicalRecordResponse] = []
