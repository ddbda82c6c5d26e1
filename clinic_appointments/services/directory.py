from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from ..core.security import UserRole
from ..models.clinic import Clinic, doctor_clinic
from ..models.user import User


class IdentityDirectory:
    """Read-only lookups of users, roles and clinic membership."""

    def __init__(self, db: Session):
        self.db = db

    def find_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_user_by_role(self, user_id: int, role: UserRole) -> Optional[User]:
        return self.db.query(User).filter(
            User.id == user_id,
            User.role == role
        ).first()

    def find_clinic(self, clinic_id: int) -> Optional[Clinic]:
        return self.db.get(Clinic, clinic_id)

    def is_doctor_at_clinic(self, doctor_id: int, clinic_id: int) -> bool:
        query = select(
            exists().where(
                doctor_clinic.c.doctor_id == doctor_id,
                doctor_clinic.c.clinic_id == clinic_id,
            )
        )
        return bool(self.db.execute(query).scalar())
