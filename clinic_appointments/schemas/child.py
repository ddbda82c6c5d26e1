from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChildCreate(BaseModel):
    user_id: int
    name: str = Field(..., min_length=1, max_length=255)
    dob: date
    gender: Optional[str] = Field(None, max_length=10)


class ChildResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    dob: date
    gender: Optional[str] = None
    created_at: Optional[datetime] = None
