from .clinic import Clinic, doctor_clinic
from .user import User
from .child import Child
from .appointment import Appointment, AppointmentStatus

__all__ = ["Appointment", "AppointmentStatus", "Child", "Clinic", "User", "doctor_clinic"]
