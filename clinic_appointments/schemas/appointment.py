from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from ..models.appointment import AppointmentStatus
from .clinic import ClinicSummary
from .user import PatientSummary, UserSummary


class AppointmentCreate(BaseModel):
    # Only honoured when explicit patient ids are enabled
    patient_id: Optional[int] = None
    doctor_id: int
    clinic_id: int
    reason: Optional[str] = None
    appointment_time: datetime


class AppointmentStatusUpdate(BaseModel):
    # Checked against the workflow policy, not the enum, so legacy names pass through
    status: str


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    doctor_id: int
    clinic_id: int
    reason: Optional[str] = None
    appointment_time: datetime
    status: AppointmentStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    patient: Optional[PatientSummary] = None
    doctor: Optional[UserSummary] = None
    clinic: Optional[ClinicSummary] = None


class AppointmentFilters(BaseModel):
    patient_id: Optional[int] = None
    patient_name: Optional[str] = None
    doctor_name: Optional[str] = None
    clinic_id: Optional[int] = None
    clinic_name: Optional[str] = None
    status: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_from: Optional[date] = None
    created_to: Optional[date] = None
    sort_by: Literal["appointment_time", "status", "id", "created_at"] = "appointment_time"
    sort_order: Literal["asc", "desc"] = "asc"


class MonthlyCount(BaseModel):
    month: int
    count: int
