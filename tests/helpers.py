from app.core.security import Principal, create_user_token
from app.models.user import User


def principal(user: User) -> Principal:
    return Principal(id=user.id, role=user.role)


def auth_headers(user: User) -> dict:
    token = create_user_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token.access_token}"}
