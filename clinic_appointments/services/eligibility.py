import logging

from ..core.errors import EligibilityError
from ..core.security import UserRole
from .directory import IdentityDirectory

logger = logging.getLogger(__name__)


class EligibilityChecker:
    """Decides whether a doctor can be booked at a clinic."""

    def __init__(self, directory: IdentityDirectory):
        self.directory = directory

    def check(self, doctor_id: int, clinic_id: int) -> None:
        """Raise EligibilityError unless the doctor practises at the clinic."""
        if self.directory.find_user_by_role(doctor_id, UserRole.DOCTOR) is None:
            reason = EligibilityError.DOCTOR_NOT_FOUND
        elif self.directory.find_clinic(clinic_id) is None:
            reason = EligibilityError.CLINIC_NOT_FOUND
        elif not self.directory.is_doctor_at_clinic(doctor_id, clinic_id):
            reason = EligibilityError.DOCTOR_NOT_AT_CLINIC
        else:
            return

        logger.warning(f"Doctor {doctor_id} not eligible at clinic {clinic_id}: {reason}")
        raise EligibilityError(reason)
