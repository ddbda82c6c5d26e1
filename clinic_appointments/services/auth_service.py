import logging

from sqlalchemy.orm import Session

from ..core.errors import ErrorCode, ErrorDetail, InvalidCredentialsError
from ..core.security import UserRole, create_user_token, verify_password
from ..models.user import User
from ..schemas.auth import TokenResponse, UserLogin, UserRegister
from ..schemas.user import UserCreate, UserResponse
from .user_service import UserService

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new patient account."""
        return UserService(self.db).create_user(
            UserCreate(**user_data.model_dump(), role=UserRole.PATIENT)
        )

    def authenticate_user(self, login_data: UserLogin) -> TokenResponse:
        """Authenticate user and return an access token."""
        user = self.db.query(User).filter(
            User.email == login_data.email
        ).first()

        if not user or not verify_password(login_data.password, user.password_hash):
            logger.warning(f"Failed login for {login_data.email}")
            raise InvalidCredentialsError(
                errors=[ErrorDetail(code=ErrorCode.INVALID_CREDENTIALS, field="email")]
            )

        if not user.is_active:
            raise InvalidCredentialsError(
                "Account is deactivated",
                [ErrorDetail(code=ErrorCode.INVALID_CREDENTIALS, field="email")]
            )

        token = create_user_token(user.id, user.email, user.role)

        return TokenResponse(
            access_token=token.access_token,
            token_type=token.token_type,
            expires_in=token.expires_in,
            user=UserResponse.model_validate(user)
        )
