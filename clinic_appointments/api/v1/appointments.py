from datetime import date, datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.policy import WorkflowPolicy
from ...core.responses import success
from ...api.deps import Pagination, get_current_user, get_staff_user, get_workflow_policy
from ...models.user import User
from ...schemas.appointment import AppointmentCreate, AppointmentFilters, AppointmentResponse, AppointmentStatusUpdate
from ...services.appointment_query import AppointmentQueryService
from ...services.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["Appointments"])

def appointment_filters(
    patient_id: Optional[int] = None,
    patient_name: Optional[str] = None,
    doctor_name: Optional[str] = None,
    clinic_id: Optional[int] = None,
    clinic_name: Optional[str] = None,
    status: Optional[str] = None,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    created_from: Optional[date] = None,
    created_to: Optional[date] = None,
    sort_by: Literal["appointment_time", "status", "id", "created_at"] = "appointment_time",
    sort_order: Literal["asc", "desc"] = "asc",
) -> AppointmentFilters:
    return AppointmentFilters(
        patient_id=patient_id,
        patient_name=patient_name,
        doctor_name=doctor_name,
        clinic_id=clinic_id,
        clinic_name=clinic_name,
        status=status,
        start_time=start_time,
        end_time=end_time,
        created_from=created_from,
        created_to=created_to,
        sort_by=sort_by,
        sort_order=sort_order,
    )

@router.get("")
async def list_appointments(
    filters: AppointmentFilters = Depends(appointment_filters),
    pagination: Pagination = Depends(),
    db: Session = Depends(get_db),
    policy: WorkflowPolicy = Depends(get_workflow_policy),
    current_user: User = Depends(get_current_user)
):
    """List appointments with filters, sorting and pagination."""
    page = AppointmentQueryService(db, policy).list_appointments(
        filters, pagination.page, pagination.per_page
    )
    return success(page)

@router.get("/statistics")
async def appointment_statistics(
    year: Optional[int] = Query(None, ge=1, le=9998),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Appointment counts per month of a year (current year by default)."""
    stats = AppointmentQueryService(db).monthly_statistics(year)
    return success(stats)

@router.get("/doctor/{doctor_id}")
async def appointments_by_doctor(
    doctor_id: int,
    status: Optional[str] = None,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    db: Session = Depends(get_db),
    policy: WorkflowPolicy = Depends(get_workflow_policy),
    current_user: User = Depends(get_current_user)
):
    """All appointments of a doctor ordered by time."""
    appointments = AppointmentQueryService(db, policy).appointments_by_doctor(
        doctor_id, status, start_time, end_time
    )
    return success(_serialize(appointments))

@router.get("/{appointment_id}")
async def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    policy: WorkflowPolicy = Depends(get_workflow_policy),
    current_user: User = Depends(get_current_user)
):
    """Get a single appointment."""
    appointment = AppointmentService(db, policy).get_appointment(appointment_id)
    return success(AppointmentResponse.model_validate(appointment))

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    policy: WorkflowPolicy = Depends(get_workflow_policy),
    current_user: User = Depends(get_current_user)
):
    """Book an appointment. It starts as pending."""
    appointment = AppointmentService(db, policy).create_appointment(current_user, appointment_data)
    return success(
        AppointmentResponse.model_validate(appointment),
        "Appointment created successfully",
        status.HTTP_201_CREATED
    )

@router.patch("/{appointment_id}/status")
async def update_appointment_status(
    appointment_id: int,
    status_data: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    policy: WorkflowPolicy = Depends(get_workflow_policy),
    current_user: User = Depends(get_staff_user)
):
    """Confirm or cancel an appointment (doctor or admin only)."""
    appointment = AppointmentService(db, policy).update_status(appointment_id, status_data.status)
    return success(
        AppointmentResponse.model_validate(appointment),
        "Appointment status updated successfully"
    )

def _serialize(appointments) -> List[AppointmentResponse]:
    return [AppointmentResponse.model_validate(a) for a in appointments]
