from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..core.security import UserRole


class ChildSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    dob: date
    gender: Optional[str] = None


class UserSummary(BaseModel):
    """Compact user shape embedded in other resources."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    role: UserRole


class PatientSummary(UserSummary):
    children: List[ChildSummary] = []


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=15)
    address: Optional[str] = None
    role: UserRole = UserRole.PATIENT
    password: str = Field(..., min_length=6)
    is_active: bool = True


class UserUpdate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=15)
    address: Optional[str] = None
    role: UserRole
    is_active: bool = True


class ChangePassword(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class UserFilters(BaseModel):
    name: Optional[str] = None
    role: Optional[UserRole] = None
    created_from: Optional[date] = None
    created_to: Optional[date] = None
    sort_by: Literal["id", "name", "role", "created_at"] = "id"
    sort_order: Literal["asc", "desc"] = "asc"
