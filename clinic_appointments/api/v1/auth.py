from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.responses import success
from ...api.deps import rate_limit_check
from ...services.auth_service import AuthService
from ...schemas.auth import UserLogin, UserRegister
from ...schemas.user import UserResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Register a new patient account."""
    user = AuthService(db).register_user(user_data)
    return success(
        UserResponse.model_validate(user),
        "User registered successfully",
        status.HTTP_201_CREATED
    )

@router.post("/login")
async def login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate user and return an access token."""
    token = AuthService(db).authenticate_user(login_data)
    return success(token, "Login successful")
