
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.responses import success
from ...api.deps import get_admin_user, get_current_user
from ...models.user import User
from ...schemas.clinic import ClinicCreate, ClinicResponse
from ...services.clinic_service import ClinicService

router = APIRouter(prefix="/clinics", tags=["Clinics"])

@router.get("")
async def list_clinics(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List clinics with the doctors practising there."""
    clinics = [
        ClinicResponse.model_validate(c) for c in ClinicService(db).list_clinics()
    ]
    return success(clinics)

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_clinic(
    clinic_data: ClinicCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    clinic = ClinicService(db).create_clinic(clinic_data)
    return success(ClinicResponse.model_validate(clinic), "Clinic created successfully", status.HTTP_201_CREATED)

@router.post("/{clinic_id}/doctors/{doctor_id}", status_code=status.HTTP_201_CREATED)
async def add_doctor(
    clinic_id: int,
    doctor_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """Associate a doctor with a clinic."""
    clinic = ClinicService(db).add_doctor(clinic_id, doctor_id)
    return success(ClinicResponse.model_validate(clinic), "Doctor added to clinic", status.HTTP_201_CREATED)

@router.delete("/{clinic_id}/doctors/{doctor_id}")
async def remove_doctor(
    clinic_id: int,
    doctor_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    clinic = ClinicService(db).remove_doctor(clinic_id, doctor_id)
    return success(ClinicResponse.model_validate(clinic), "Doctor removed from clinic")
