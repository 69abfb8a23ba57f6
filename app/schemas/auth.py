from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from ..core.security import UserRole

class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    mobile: str = Field(..., min_length=5, max_length=20)
    role: UserRole = UserRole.PATIENT

    @field_validator("name", "mobile")
    @classmethod
    def strip_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not any(c.isdigit() for c in value) or not any(c.isalpha() for c in value):
            raise ValueError("password must contain letters and digits")
        return value

class UserLogin(BaseModel):
    email: EmailStr
    password: str
    role: Optional[UserRole] = None

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    mobile: Optional[str] = None
    specialty: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
