import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import (
    ErrorCode, ErrorCollector, ErrorDetail, InternalError,
    InvalidTransitionError, NotFoundError, ValidationError
)
from ..core.policy import WorkflowPolicy
from ..core.timeutils import to_naive_utc, utcnow
from ..models.appointment import Appointment, AppointmentStatus
from ..models.user import User
from ..schemas.appointment import AppointmentCreate
from .appointment_query import with_relations
from .directory import IdentityDirectory
from .eligibility import EligibilityChecker

logger = logging.getLogger(__name__)


class AppointmentService:
    """Creates appointments and moves them through their lifecycle.

    pending -> confirmed | cancelled. Unless the policy enforces pending
    transitions, an update re-stamps whatever status is current.
    """

    def __init__(self, db: Session, policy: WorkflowPolicy):
        self.db = db
        self.policy = policy
        self.directory = IdentityDirectory(db)
        self.eligibility = EligibilityChecker(self.directory)

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = (
            self.db.query(Appointment)
            .options(*with_relations())
            .filter(Appointment.id == appointment_id)
            .first()
        )
        if not appointment:
            raise NotFoundError("Appointment", appointment_id)
        return appointment

    def create_appointment(self, requester: User, data: AppointmentCreate) -> Appointment:
        """Book a pending appointment for the requester or, if allowed, a named patient."""
        errors = ErrorCollector()

        if self.policy.allow_explicit_patient_id and data.patient_id is not None:
            patient_id = data.patient_id
            if self.directory.find_user(patient_id) is None:
                errors.add(ErrorCode.NOT_FOUND, "patient_id", "The selected patient id is invalid")
        else:
            patient_id = requester.id

        if self.directory.find_user(data.doctor_id) is None:
            errors.add(ErrorCode.NOT_FOUND, "doctor_id", "The selected doctor id is invalid")

        if self.directory.find_clinic(data.clinic_id) is None:
            errors.add(ErrorCode.NOT_FOUND, "clinic_id", "The selected clinic id is invalid")

        appointment_time = to_naive_utc(data.appointment_time)
        if appointment_time <= utcnow():
            errors.add(ErrorCode.NOT_FUTURE_DATE, "appointment_time")

        errors.raise_if_any()

        if self.policy.enforce_doctor_clinic_membership:
            self.eligibility.check(data.doctor_id, data.clinic_id)

        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=data.doctor_id,
            clinic_id=data.clinic_id,
            reason=data.reason,
            appointment_time=appointment_time,
            status=AppointmentStatus.PENDING,
        )
        self.db.add(appointment)
        self._commit()

        logger.info(
            f"Appointment {appointment.id} booked: patient={patient_id} "
            f"doctor={data.doctor_id} clinic={data.clinic_id} at {appointment_time.isoformat()}"
        )
        return self.get_appointment(appointment.id)

    def update_status(self, appointment_id: int, new_status: str) -> Appointment:
        """Set the status of an appointment. Last write wins."""
        status = self.policy.resolve_status(new_status)
        if status is None or status not in self.policy.allowed_status_values:
            allowed = ", ".join(sorted(s.value for s in self.policy.allowed_status_values))
            raise ValidationError(
                "Invalid status",
                [ErrorDetail(
                    code=ErrorCode.INVALID_STATUS,
                    field="status",
                    message=f"The status must be one of: {allowed}"
                )]
            )

        appointment = self.db.get(Appointment, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment", appointment_id)

        previous = appointment.status
        if self.policy.enforce_pending_transitions and previous != AppointmentStatus.PENDING:
            raise InvalidTransitionError(previous.value, status.value)

        appointment.status = status
        self._commit()

        logger.info(f"Appointment {appointment_id} status {previous.value} -> {status.value}")
        return self.get_appointment(appointment_id)

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save appointment: {str(e)}")
            raise InternalError(str(e))
