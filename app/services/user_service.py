from sqlalchemy.orm import Session
from typing import List
import logging

from ..core.config import settings
from ..core.security import UserRole, get_password_hash
from ..models.user import User

logger = logging.getLogger(__name__)

# Staff accounts created on first startup
DEFAULT_STAFF = [
    {"name": "Admin Staff", "email": "admin@clinic.com", "role": UserRole.ADMIN, "specialty": "Administration"},
    {"name": "Dr. Vikas Gosavi", "email": "v.gosavi@clinic.com", "role": UserRole.DOCTOR, "specialty": "Oncologist"},
    {"name": "Dr. Shailesh Irali", "email": "s.irali@clinic.com", "role": UserRole.DOCTOR, "specialty": "ENT Specialist"},
    {"name": "Dr. Rishikesh Kore", "email": "r.kore@clinic.com", "role": UserRole.DOCTOR, "specialty": "Urologist"},
    {"name": "Dr. Kunal Patil", "email": "k.patil@clinic.com", "role": UserRole.DOCTOR, "specialty": "Ophthalmologist"},
    {"name": "Dr. G S Kulkarni", "email": "gs.kulkarni@clinic.com", "role": UserRole.DOCTOR, "specialty": "General Physician"},
]

class UserService:
    def __init__(self, db: Session):
        self.db = db

    def list_by_role(self, role: UserRole) -> List[User]:
        return self.db.query(User).filter(
            User.role == role,
            User.is_active == True
        ).order_by(User.name).all()

    def list_users(self, skip: int = 0, limit: int = 10) -> List[User]:
        return self.db.query(User).order_by(User.id).offset(skip).limit(limit).all()

    def seed_default_staff(self, password: str = None) -> int:
        """Create the default admin and doctor accounts that are missing."""
        password_hash = get_password_hash(password or settings.DEFAULT_STAFF_PASSWORD)
        created = 0
        for entry in DEFAULT_STAFF:
            exists = self.db.query(User).filter(User.email == entry["email"]).first()
            if exists:
                continue
            self.db.add(User(password_hash=password_hash, is_active=True, **entry))
            created += 1
            logger.info(f"Seeded {entry['role'].value}: {entry['name']}")

        self.db.commit()
        return created
