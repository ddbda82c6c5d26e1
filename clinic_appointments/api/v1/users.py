from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.responses import success
from ...core.security import UserRole
from ...api.deps import Pagination, get_admin_user, get_current_user
from ...models.user import User
from ...schemas.user import ChangePassword, UserCreate, UserFilters, UserResponse, UserUpdate
from ...services.user_service import UserService

router = APIRouter(prefix="/users", tags=["User Management"])

def user_filters(
    name: Optional[str] = None,
    role: Optional[UserRole] = None,
    created_from: Optional[date] = None,
    created_to: Optional[date] = None,
    sort_by: Literal["id", "name", "role", "created_at"] = "id",
    sort_order: Literal["asc", "desc"] = "asc",
) -> UserFilters:
    return UserFilters(
        name=name,
        role=role,
        created_from=created_from,
        created_to=created_to,
        sort_by=sort_by,
        sort_order=sort_order,
    )

@router.get("")
async def list_users(
    filters: UserFilters = Depends(user_filters),
    pagination: Pagination = Depends(),
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """List users (admin only)."""
    page = UserService(db).list_users(filters, pagination.page, pagination.per_page)
    return success(page)

@router.get("/me")
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return success(UserResponse.model_validate(current_user), "Get user successful")

@router.get("/check-role")
async def check_role(
    current_user: User = Depends(get_current_user)
):
    """Report the role of the current user."""
    return success({"role": current_user.role.value})

@router.patch("/change-password")
async def change_password(
    password_data: ChangePassword,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change the current user's password."""
    UserService(db).change_password(current_user, password_data)
    return success(message="Password changed successfully")

@router.get("/{user_id}")
async def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """Get a user by id (admin only)."""
    user = UserService(db).get_user(user_id)
    return success(UserResponse.model_validate(user))

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """Create a user with any role (admin only)."""
    user = UserService(db).create_user(user_data)
    return success(
        UserResponse.model_validate(user),
        "User created successfully",
        status.HTTP_201_CREATED
    )

@router.put("/{user_id}")
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """Update a user (admin only)."""
    user = UserService(db).update_user(user_id, user_data)
    return success(UserResponse.model_validate(user), "User updated successfully")

@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """Delete a user (admin only)."""
    UserService(db).delete_user(user_id)
    return success(message="User deleted successfully")
