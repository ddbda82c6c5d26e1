import os
from datetime import date, timedelta

import fakeredis
import pytest
from fastapi.testclient import TestClient

# Must be set before the application modules read their settings
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

from clinic_appointments.main import app  # noqa: E402
from clinic_appointments.core.database import Base, SessionLocal, engine, get_redis  # noqa: E402
from clinic_appointments.core.security import UserRole, create_user_token, get_password_hash  # noqa: E402
from clinic_appointments.core.timeutils import utcnow  # noqa: E402
from clinic_appointments.models import Appointment, AppointmentStatus, Child, Clinic, User  # noqa: E402

PASSWORD = "Secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)

fake_redis = fakeredis.FakeRedis(decode_responses=True)
app.dependency_overrides[get_redis] = lambda: fake_redis


@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    fake_redis.flushall()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


def make_user(db, name, role=UserRole.PATIENT, email=None, **kwargs):
    user = User(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.com",
        role=role,
        password_hash=PASSWORD_HASH,
        is_active=True,
        **kwargs
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_appointment(db, patient, doctor, clinic, appointment_time, status=AppointmentStatus.PENDING, **kwargs):
    """Insert an appointment directly, bypassing booking rules."""
    appointment = Appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        clinic_id=clinic.id,
        appointment_time=appointment_time,
        status=status,
        **kwargs
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment


def auth_headers(user):
    token = create_user_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token.access_token}"}


class World:
    """A small clinic: one admin, two doctors, two patients, two clinics."""

    def __init__(self, db):
        self.admin = make_user(db, "Admin Ha", UserRole.ADMIN)
        self.doctor = make_user(db, "Doctor Tuyen", UserRole.DOCTOR)
        self.other_doctor = make_user(db, "Doctor Lan", UserRole.DOCTOR)
        self.patient = make_user(db, "Patient Khai")
        self.other_patient = make_user(db, "Patient Minh")

        self.clinic = Clinic(name="Smile Dental", address="1 Main St")
        self.other_clinic = Clinic(name="Bright Teeth", address="2 Side St")
        self.clinic.doctors.append(self.doctor)
        self.other_clinic.doctors.append(self.other_doctor)
        db.add_all([self.clinic, self.other_clinic])

        db.add(Child(user_id=self.patient.id, name="Little Khai", dob=date(2018, 5, 1), gender="male"))
        db.commit()
        for obj in (self.clinic, self.other_clinic, self.doctor, self.other_doctor, self.patient):
            db.refresh(obj)


@pytest.fixture
def world(db):
    return World(db)


def future(days=7):
    return utcnow().replace(microsecond=0) + timedelta(days=days)
