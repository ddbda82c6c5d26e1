from typing import List

from sqlalchemy.orm import Session

from ..core.errors import ErrorCollector, ErrorCode, NotFoundError
from ..models.child import Child
from ..schemas.child import ChildCreate
from .directory import IdentityDirectory


class ChildService:
    def __init__(self, db: Session):
        self.db = db
        self.directory = IdentityDirectory(db)

    def list_children(self, user_id: int) -> List[Child]:
        user = self.directory.find_user(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return list(user.children)

    def create_child(self, child_data: ChildCreate) -> Child:
        errors = ErrorCollector()
        if self.directory.find_user(child_data.user_id) is None:
            errors.add(ErrorCode.NOT_FOUND, "user_id", "The selected user id is invalid")
        errors.raise_if_any("Validation failed")

        child = Child(**child_data.model_dump())
        self.db.add(child)
        self.db.commit()
        self.db.refresh(child)
        return child
