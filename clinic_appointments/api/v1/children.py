from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.responses import success
from ...api.deps import get_current_user
from ...models.user import User
from ...schemas.child import ChildCreate, ChildResponse
from ...services.child_service import ChildService

router = APIRouter(prefix="/children", tags=["Children Management"])

@router.get("/{user_id}")
async def list_children(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List the children registered under a user."""
    children = ChildService(db).list_children(user_id)
    return success(
        [ChildResponse.model_validate(c) for c in children],
        "Children retrieved successfully"
    )

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_child(
    child_data: ChildCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Register a child under a user."""
    child = ChildService(db).create_child(child_data)
    return success(ChildResponse.model_validate(child), "Child created successfully", status.HTTP_201_CREATED)
