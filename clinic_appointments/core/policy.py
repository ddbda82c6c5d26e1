from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional

from .config import Settings
from ..models.appointment import AppointmentStatus


@dataclass(frozen=True)
class WorkflowPolicy:
    """Feature flags for the appointment workflow.

    ``enforce_doctor_clinic_membership`` selects strict mode, where a booking
    requires the doctor to hold the doctor role and practise at the clinic.
    Permissive mode only checks that the referenced rows exist.

    ``allow_explicit_patient_id`` lets the caller name the patient; otherwise
    the authenticated requester is always the patient.

    ``allowed_status_values`` are the targets accepted by a status update.

    ``enforce_pending_transitions`` rejects updates of appointments that are no
    longer pending. It is off by default, so a confirmed appointment can be
    re-stamped cancelled and vice versa.

    ``status_aliases`` maps legacy status names onto the canonical vocabulary.
    """

    enforce_doctor_clinic_membership: bool = True
    allow_explicit_patient_id: bool = False
    allowed_status_values: FrozenSet[AppointmentStatus] = frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}
    )
    enforce_pending_transitions: bool = False
    status_aliases: Mapping[str, str] = field(
        default_factory=lambda: {"completed": AppointmentStatus.CONFIRMED.value}
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> "WorkflowPolicy":
        aliases = {k.lower(): v.lower() for k, v in settings.STATUS_ALIASES.items()}
        allowed = set()
        for value in settings.ALLOWED_STATUS_VALUES:
            value = value.lower()
            allowed.add(AppointmentStatus(aliases.get(value, value)))
        return cls(
            enforce_doctor_clinic_membership=settings.ENFORCE_DOCTOR_CLINIC_MEMBERSHIP,
            allow_explicit_patient_id=settings.ALLOW_EXPLICIT_PATIENT_ID,
            allowed_status_values=frozenset(allowed),
            enforce_pending_transitions=settings.ENFORCE_PENDING_TRANSITIONS,
            status_aliases=aliases,
        )

    def resolve_status(self, value: Optional[str]) -> Optional[AppointmentStatus]:
        """Map a raw status name to the canonical enum, None when unknown."""
        if value is None:
            return None
        name = value.strip().lower()
        name = self.status_aliases.get(name, name)
        try:
            return AppointmentStatus(name)
        except ValueError:
            return None
