from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import Principal
from ...api.deps import (
    get_principal, get_patient_principal, get_doctor_principal,
    get_admin_principal, get_patient_or_admin_principal
)
from ...schemas.appointment import AppointmentResponse, BookAppointmentRequest, MessageResponse
from ...services.appointment_service import AppointmentService
from ...services.booking_service import BookingService, parse_date_key
from ...services.slot_catalog import SLOT_TIMES

# Path operations are plain functions so concurrent requests run on the
# threadpool, each with its own session.
router = APIRouter(prefix="/appointments", tags=["Appointments"])

def _to_response(appointments) -> List[AppointmentResponse]:
    return [AppointmentResponse.model_validate(a) for a in appointments]

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def book_appointment(
    body: BookAppointmentRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_patient_principal)
):
    """Book a slot with a doctor."""
    appointment = BookingService(db).book(principal, body.doctor_id, body.date, body.time)
    return AppointmentResponse.model_validate(appointment)

@router.get("", response_model=List[AppointmentResponse])
def list_my_appointments(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_patient_principal)
):
    """Appointments of the logged-in patient, newest first."""
    return _to_response(AppointmentService(db).my_appointments(principal))

@router.get("/doctor", response_model=List[AppointmentResponse])
def list_doctor_appointments(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_doctor_principal)
):
    """Active appointments of the logged-in doctor from today onwards."""
    return _to_response(AppointmentService(db).doctor_upcoming(principal))

@router.get("/admin", response_model=List[AppointmentResponse])
def list_all_appointments(
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin_principal)
):
    """Every appointment, newest first."""
    return _to_response(AppointmentService(db).all_appointments())

@router.get("/booked", response_model=List[str])
def list_booked_slots(
    doctor_id: int = Query(..., alias="doctorId", gt=0),
    date: str = Query(...),
    db: Session = Depends(get_db),
    _: Principal = Depends(get_principal)
):
    """Times already taken for a doctor on a date."""
    return AppointmentService(db).list_booked_times(doctor_id, parse_date_key(date))

@router.get("/slots", response_model=List[str])
def list_slot_catalog():
    """The bookable times of a clinic day."""
    return list(SLOT_TIMES)

@router.put("/cancel/{appointment_id}", response_model=MessageResponse)
def cancel_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_patient_or_admin_principal)
):
    """Cancel an appointment (owning patient or admin)."""
    AppointmentService(db).cancel(appointment_id, principal)
    return MessageResponse(message="Appointment cancelled successfully")
