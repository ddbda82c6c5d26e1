from fastapi import APIRouter, Depends

from ...core.responses import success
from ...core.security import UserRole
from ...api.deps import get_current_user
from ...models.user import User

router = APIRouter(prefix="/roles", tags=["Roles"])

@router.get("")
async def list_roles(current_user: User = Depends(get_current_user)):
    """List the available user roles."""
    return success([{"name": role.value} for role in UserRole])
