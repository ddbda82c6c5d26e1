from datetime import datetime
from typing import List, Optional

from sqlalchemy import extract, func
from sqlalchemy.orm import Query, Session, selectinload

from ..core.errors import ErrorCode, ErrorDetail, NotFoundError, ValidationError
from ..core.policy import WorkflowPolicy
from ..core.security import UserRole
from ..core.timeutils import end_of_day, start_of_day, to_naive_utc, utcnow
from ..models.appointment import Appointment, AppointmentStatus
from ..models.clinic import Clinic
from ..models.user import User
from ..schemas.appointment import AppointmentFilters, AppointmentResponse, MonthlyCount
from ..schemas.common import Page
from .directory import IdentityDirectory

SORTABLE_COLUMNS = {
    "appointment_time": Appointment.appointment_time,
    "status": Appointment.status,
    "id": Appointment.id,
    "created_at": Appointment.created_at,
}


def with_relations():
    """Loader options attaching patient (with children), doctor and clinic in batches."""
    return (
        selectinload(Appointment.patient).selectinload(User.children),
        selectinload(Appointment.doctor),
        selectinload(Appointment.clinic),
    )


class AppointmentQueryService:
    """Filtered listings and statistics over appointments."""

    def __init__(self, db: Session, policy: Optional[WorkflowPolicy] = None):
        self.db = db
        self.policy = policy or WorkflowPolicy()

    def list_appointments(
        self,
        filters: AppointmentFilters,
        page: int = 1,
        per_page: int = 10
    ) -> Page[AppointmentResponse]:
        query = self.db.query(Appointment)

        if filters.patient_id is not None:
            query = query.filter(Appointment.patient_id == filters.patient_id)
        if filters.patient_name:
            query = query.filter(
                Appointment.patient.has(User.name.icontains(filters.patient_name, autoescape=True))
            )
        if filters.doctor_name:
            query = query.filter(
                Appointment.doctor.has(User.name.icontains(filters.doctor_name, autoescape=True))
            )
        if filters.clinic_id is not None:
            query = query.filter(Appointment.clinic_id == filters.clinic_id)
        if filters.clinic_name:
            query = query.filter(
                Appointment.clinic.has(Clinic.name.icontains(filters.clinic_name, autoescape=True))
            )
        query = self._filter_status_and_time(query, filters.status, filters.start_time, filters.end_time)

        # Creation dates are calendar days: from 00:00 of the first to the end of the last
        if filters.created_from:
            query = query.filter(Appointment.created_at >= start_of_day(filters.created_from))
        if filters.created_to:
            query = query.filter(Appointment.created_at <= end_of_day(filters.created_to))

        total = query.count()

        column = SORTABLE_COLUMNS[filters.sort_by]
        ordering = column.desc() if filters.sort_order == "desc" else column.asc()
        tie_breaker = Appointment.id.desc() if filters.sort_order == "desc" else Appointment.id.asc()

        appointments = (
            query.options(*with_relations())
            .order_by(ordering, tie_breaker)
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )

        return Page[AppointmentResponse].build(
            items=[AppointmentResponse.model_validate(a) for a in appointments],
            total=total,
            page=page,
            per_page=per_page,
        )

    def appointments_by_doctor(
        self,
        doctor_id: int,
        status: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None
    ) -> List[Appointment]:
        """All matching appointments of one doctor, earliest first."""
        doctor = IdentityDirectory(self.db).find_user_by_role(doctor_id, UserRole.DOCTOR)
        if doctor is None:
            raise NotFoundError("Doctor", doctor_id)

        query = self.db.query(Appointment).filter(Appointment.doctor_id == doctor_id)
        query = self._filter_status_and_time(query, status, start_time, end_time)

        return (
            query.options(*with_relations())
            .order_by(Appointment.appointment_time.asc(), Appointment.id.asc())
            .all()
        )

    def monthly_statistics(self, year: Optional[int] = None) -> List[MonthlyCount]:
        """Appointment counts per calendar month of ``year``, all twelve months."""
        year = year or utcnow().year
        month = extract("month", Appointment.appointment_time)

        rows = (
            self.db.query(month.label("month"), func.count(Appointment.id))
            .filter(
                Appointment.appointment_time >= datetime(year, 1, 1),
                Appointment.appointment_time < datetime(year + 1, 1, 1),
            )
            .group_by(month)
            .all()
        )
        counts = {int(m): c for m, c in rows}

        return [MonthlyCount(month=m, count=counts.get(m, 0)) for m in range(1, 13)]

    def _filter_status_and_time(
        self,
        query: Query,
        status: Optional[str],
        start_time: Optional[datetime],
        end_time: Optional[datetime]
    ) -> Query:
        if status:
            query = query.filter(Appointment.status == self._resolve_status(status))
        # Inclusive on both ends; either bound may be open
        if start_time:
            query = query.filter(Appointment.appointment_time >= to_naive_utc(start_time))
        if end_time:
            query = query.filter(Appointment.appointment_time <= to_naive_utc(end_time))
        return query

    def _resolve_status(self, value: str) -> AppointmentStatus:
        status = self.policy.resolve_status(value)
        if status is None:
            raise ValidationError(
                "Invalid status",
                [ErrorDetail(code=ErrorCode.INVALID_STATUS, field="status")]
            )
        return status
