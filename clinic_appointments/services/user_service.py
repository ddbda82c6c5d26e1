import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import (
    DuplicateError, ErrorCode, ErrorDetail, InternalError,
    InvalidCredentialsError, NotFoundError, ValidationError
)
from ..core.security import get_password_hash, verify_password
from ..core.timeutils import end_of_day, start_of_day
from ..models.user import User
from ..schemas.common import Page
from ..schemas.user import ChangePassword, UserCreate, UserFilters, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "id": User.id,
    "name": User.name,
    "role": User.role,
    "created_at": User.created_at,
}


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def list_users(self, filters: UserFilters, page: int = 1, per_page: int = 10) -> Page[UserResponse]:
        query = self.db.query(User)

        if filters.name:
            query = query.filter(User.name.icontains(filters.name, autoescape=True))
        if filters.role:
            query = query.filter(User.role == filters.role)
        if filters.created_from:
            query = query.filter(User.created_at >= start_of_day(filters.created_from))
        if filters.created_to:
            query = query.filter(User.created_at <= end_of_day(filters.created_to))

        total = query.count()

        column = SORTABLE_COLUMNS[filters.sort_by]
        ordering = column.desc() if filters.sort_order == "desc" else column.asc()
        users = (
            query.order_by(ordering, User.id.asc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )

        return Page[UserResponse].build(
            items=[UserResponse.model_validate(u) for u in users],
            total=total,
            page=page,
            per_page=per_page,
        )

    def create_user(self, user_data: UserCreate) -> User:
        """Create a user with a hashed password."""
        self._ensure_email_free(user_data.email)

        user = User(
            email=user_data.email,
            name=user_data.name,
            phone=user_data.phone,
            address=user_data.address,
            role=user_data.role,
            password_hash=get_password_hash(user_data.password),
            is_active=user_data.is_active,
        )
        self.db.add(user)
        self._commit()
        self.db.refresh(user)

        logger.info(f"Created user {user.id} with role {user.role.value}")
        return user

    def update_user(self, user_id: int, user_data: UserUpdate) -> User:
        user = self.get_user(user_id)
        self._ensure_email_free(user_data.email, exclude_id=user.id)

        user.email = user_data.email
        user.name = user_data.name
        user.phone = user_data.phone
        user.address = user_data.address
        user.role = user_data.role
        user.is_active = user_data.is_active
        self._commit()
        self.db.refresh(user)
        return user

    def delete_user(self, user_id: int) -> None:
        user = self.get_user(user_id)
        if user.patient_appointments or user.doctor_appointments:
            raise ValidationError(
                "User has appointments and cannot be deleted",
                [ErrorDetail(code=ErrorCode.INVALID_FIELD, field="id")]
            )
        self.db.delete(user)
        self._commit()
        logger.info(f"Deleted user {user_id}")

    def change_password(self, user: User, password_data: ChangePassword) -> None:
        if not verify_password(password_data.current_password, user.password_hash):
            raise InvalidCredentialsError(
                "The current password is incorrect",
                [ErrorDetail(code=ErrorCode.INVALID_CREDENTIALS, field="current_password")]
            )

        user.password_hash = get_password_hash(password_data.new_password)
        self._commit()

    def _ensure_email_free(self, email: str, exclude_id: Optional[int] = None):
        query = self.db.query(User).filter(User.email == email)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise DuplicateError("email")

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save user: {str(e)}")
            raise InternalError(str(e))
