from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import datetime
import logging

from ..models.user import User
from ..core.security import (
    verify_password, get_password_hash, create_user_token, UserRole
)
from ..schemas.auth import UserLogin, UserRegister, TokenResponse, UserResponse

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new patient. Staff accounts are provisioned, not registered."""
        if user_data.role != UserRole.PATIENT:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This form is only for patient registration."
            )

        existing_user = self.db.query(User).filter(
            User.email == user_data.email
        ).first()

        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

        new_user = User(
            name=user_data.name,
            email=user_data.email,
            mobile=user_data.mobile,
            specialty="N/A",
            password_hash=get_password_hash(user_data.password),
            role=UserRole.PATIENT,
            is_active=True,
        )

        self.db.add(new_user)
        self.db.commit()
        self.db.refresh(new_user)

        logger.info(f"Registered patient {new_user.id}")
        return new_user

    def authenticate_user(self, login_data: UserLogin) -> TokenResponse:
        """Authenticate user and return an access token."""
        user = self.db.query(User).filter(
            User.email == login_data.email
        ).first()

        if not user or not verify_password(login_data.password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated"
            )

        if login_data.role and user.role != login_data.role:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect role selected for this user."
            )

        user.last_login = datetime.utcnow()
        self.db.commit()
        self.db.refresh(user)

        token = create_user_token(user.id, user.email, user.role)

        return TokenResponse(
            access_token=token.access_token,
            token_type=token.token_type,
            expires_in=token.expires_in,
            user=UserResponse.model_validate(user)
        )
