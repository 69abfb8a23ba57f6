import itertools

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.database import Base, SessionLocal, engine, init_db
from app.core.security import UserRole, get_password_hash
from app.models.user import User

TEST_PASSWORD = "TestPassword123"

# Hashing is slow; every fixture user shares one hash
_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    """Insert a user straight into the database."""
    counter = itertools.count(1)

    def _make_user(role: UserRole = UserRole.PATIENT, name: str = None) -> User:
        n = next(counter)
        user = User(
            name=name or f"{role.value.title()} {n}",
            email=f"{role.value}{n}@example.com",
            mobile="5550100",
            specialty="General Physician" if role == UserRole.DOCTOR else "N/A",
            password_hash=_PASSWORD_HASH,
            role=role,
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user
