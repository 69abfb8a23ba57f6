from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models.appointment import AppointmentStatus


class CamelModel(BaseModel):
    """Serializes with camelCase keys and accepts either spelling on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserSummary(CamelModel):
    id: int
    name: str
    email: Optional[str] = None
    mobile: Optional[str] = None
    specialty: Optional[str] = None


class BookAppointmentRequest(CamelModel):
    doctor_id: int = Field(..., gt=0)
    date: str = Field(..., description="Calendar date, YYYY-MM-DD")
    time: str = Field(..., description="Slot start, HH:MM")


class AppointmentResponse(CamelModel):
    id: int
    patient_id: int
    doctor_id: int
    date: str
    time: str
    status: AppointmentStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    patient: Optional[UserSummary] = None
    doctor: Optional[UserSummary] = None


class MessageResponse(BaseModel):
    message: str
