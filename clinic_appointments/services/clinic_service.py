import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.errors import DuplicateError, InternalError, NotFoundError
from ..core.security import UserRole
from ..models.clinic import Clinic
from ..schemas.clinic import ClinicCreate
from .directory import IdentityDirectory

logger = logging.getLogger(__name__)


class ClinicService:
    def __init__(self, db: Session):
        self.db = db
        self.directory = IdentityDirectory(db)

    def list_clinics(self) -> List[Clinic]:
        return (
            self.db.query(Clinic)
            .options(selectinload(Clinic.doctors))
            .order_by(Clinic.id.asc())
            .all()
        )

    def get_clinic(self, clinic_id: int) -> Clinic:
        clinic = self.directory.find_clinic(clinic_id)
        if not clinic:
            raise NotFoundError("Clinic", clinic_id)
        return clinic

    def create_clinic(self, clinic_data: ClinicCreate) -> Clinic:
        clinic = Clinic(name=clinic_data.name, address=clinic_data.address)
        self.db.add(clinic)
        self._commit()
        self.db.refresh(clinic)
        return clinic

    def add_doctor(self, clinic_id: int, doctor_id: int) -> Clinic:
        """Make a doctor bookable at a clinic."""
        clinic = self.get_clinic(clinic_id)
        doctor = self.directory.find_user_by_role(doctor_id, UserRole.DOCTOR)
        if not doctor:
            raise NotFoundError("Doctor", doctor_id)
        if self.directory.is_doctor_at_clinic(doctor_id, clinic_id):
            raise DuplicateError("doctor_id", "Doctor already works at this clinic")

        clinic.doctors.append(doctor)
        self._commit()
        logger.info(f"Doctor {doctor_id} added to clinic {clinic_id}")
        return clinic

    def remove_doctor(self, clinic_id: int, doctor_id: int) -> Clinic:
        clinic = self.get_clinic(clinic_id)
        doctor = next((d for d in clinic.doctors if d.id == doctor_id), None)
        if not doctor:
            raise NotFoundError("Doctor", doctor_id)

        clinic.doctors.remove(doctor)
        self._commit()
        logger.info(f"Doctor {doctor_id} removed from clinic {clinic_id}")
        return clinic

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save clinic: {str(e)}")
            raise InternalError(str(e))
