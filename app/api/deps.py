from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import List
import logging
import redis

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.security import (
    security, verify_token, AuthenticationError,
    AuthorizationError, UserRole, TokenPayload, Principal
)
from ..models.user import User

logger = logging.getLogger(__name__)

async def get_current_user_token(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    token = credentials.credentials

    token_payload = verify_token(token)
    if not token_payload:
        raise AuthenticationError("Invalid or expired token")

    if token_payload.token_type != "access":
        raise AuthenticationError("Invalid token type")

    return token_payload

def get_current_user(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from database."""
    if not token_payload.sub:
        raise AuthenticationError("Invalid token payload")

    user = db.query(User).filter(User.id == token_payload.sub).first()
    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user

# Role-based access control dependencies
def require_role(allowed_roles: List[UserRole]):
    """Create a dependency that requires specific user roles."""
    def role_checker(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                f"User role '{current_user.role.value}' is not authorized to access this route"
            )
        return current_user

    return role_checker

def principal_of(user: User) -> Principal:
    return Principal(id=user.id, role=user.role)

def get_principal(current_user: User = Depends(get_current_user)) -> Principal:
    """Any authenticated user."""
    return principal_of(current_user)

def get_patient_principal(
    current_user: User = Depends(require_role([UserRole.PATIENT]))
) -> Principal:
    return principal_of(current_user)

def get_doctor_principal(
    current_user: User = Depends(require_role([UserRole.DOCTOR]))
) -> Principal:
    return principal_of(current_user)

def get_admin_principal(
    current_user: User = Depends(require_role([UserRole.ADMIN]))
) -> Principal:
    return principal_of(current_user)

def get_patient_or_admin_principal(
    current_user: User = Depends(require_role([UserRole.PATIENT, UserRole.ADMIN]))
) -> Principal:
    return principal_of(current_user)

def get_doctor_or_admin_principal(
    current_user: User = Depends(require_role([UserRole.DOCTOR, UserRole.ADMIN]))
) -> Principal:
    return principal_of(current_user)

# Rate limiting dependency
def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic per-IP rate limiting for the public authentication endpoints."""
    if not settings.RATE_LIMIT_ENABLED:
        return

    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    try:
        current_requests = redis_client.get(key)
        if current_requests is None:
            redis_client.setex(key, settings.RATE_LIMIT_WINDOW_SECONDS, 1)
            return
        if int(current_requests) >= settings.RATE_LIMIT_MAX_REQUESTS:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
    except redis.RedisError as exc:
        # Fail open when Redis is unreachable
        logger.warning(f"Rate limiting skipped, Redis unavailable: {exc}")
