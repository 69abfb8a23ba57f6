from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import Principal, UserRole
from ...api.deps import get_admin_principal
from ...schemas.appointment import UserSummary
from ...schemas.auth import UserResponse
from ...services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("/doctors", response_model=List[UserSummary])
def list_doctors(db: Session = Depends(get_db)):
    """Public list of doctors for the booking form."""
    return [UserSummary.model_validate(u) for u in UserService(db).list_by_role(UserRole.DOCTOR)]

@router.get("/staff", response_model=List[UserSummary])
def list_staff(db: Session = Depends(get_db)):
    """Public list of admin staff."""
    return [UserSummary.model_validate(u) for u in UserService(db).list_by_role(UserRole.ADMIN)]

@router.get("/patients", response_model=List[UserSummary])
def list_patients(
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin_principal)
):
    """All patients (admin only)."""
    return [UserSummary.model_validate(u) for u in UserService(db).list_by_role(UserRole.PATIENT)]

@router.get("", response_model=List[UserResponse])
def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    _: Principal = Depends(get_admin_principal)
):
    """List all users (admin only)."""
    return [UserResponse.model_validate(u) for u in UserService(db).list_users(skip, limit)]
