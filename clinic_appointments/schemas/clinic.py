from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .user import UserSummary


class ClinicSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: Optional[str] = None


class ClinicResponse(ClinicSummary):
    doctors: List[UserSummary] = []
    created_at: Optional[datetime] = None


class ClinicCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = None
