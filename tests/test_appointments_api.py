from datetime import datetime, timedelta

import pytest

from clinic_appointments.api.deps import get_workflow_policy
from clinic_appointments.core.policy import WorkflowPolicy
from clinic_appointments.core.timeutils import utcnow
from clinic_appointments.main import app
from clinic_appointments.models import Appointment, AppointmentStatus

from .conftest import auth_headers, future, make_appointment

API = "/api/v1/appointments"


def booking_body(world, **overrides):
    body = {
        "doctor_id": world.doctor.id,
        "clinic_id": world.clinic.id,
        "reason": "dental issue",
        "appointment_time": future().isoformat(),
    }
    body.update(overrides)
    return body


@pytest.fixture
def policy_override():
    """Swap the workflow policy for the duration of a test."""
    def apply(policy):
        app.dependency_overrides[get_workflow_policy] = lambda: policy
    yield apply
    app.dependency_overrides.pop(get_workflow_policy, None)


class TestCreateAppointment:

    def test_create_and_retrieve(self, client, world):
        """A booked appointment is pending and visible through list and show."""
        headers = auth_headers(world.patient)
        response = client.post(API, json=booking_body(world), headers=headers)
        assert response.status_code == 201

        body = response.json()
        assert body["status"] == "success"
        assert body["message"] == "Appointment created successfully"
        created = body["data"]
        assert created["status"] == "pending"
        assert created["patient_id"] == world.patient.id

        shown = client.get(f"{API}/{created['id']}", headers=headers)
        assert shown.status_code == 200
        assert shown.json()["data"]["doctor"]["name"] == "Doctor Tuyen"

        listed = client.get(API, headers=headers).json()["data"]
        assert [a["id"] for a in listed["items"]] == [created["id"]]

    def test_past_time(self, client, world, db):
        body = booking_body(world, appointment_time=(utcnow() - timedelta(hours=1)).isoformat())

        response = client.post(API, json=body, headers=auth_headers(world.patient))

        assert response.status_code == 422
        assert response.json()["errors"] == [{"code": "E003", "field": "appointment_time"}]
        assert db.query(Appointment).count() == 0

    def test_missing_and_malformed_fields(self, client, world):
        response = client.post(
            API,
            json={"clinic_id": "abc", "appointment_time": "not a date"},
            headers=auth_headers(world.patient)
        )

        assert response.status_code == 422
        errors = response.json()["errors"]
        assert {e["field"] for e in errors} == {"doctor_id", "clinic_id", "appointment_time"}
        assert all(e["code"] == "E001" and e["message"] for e in errors)

    def test_unknown_references(self, client, world):
        response = client.post(
            API,
            json=booking_body(world, doctor_id=9999, clinic_id=9998),
            headers=auth_headers(world.patient)
        )

        assert response.status_code == 422
        assert [(e["code"], e["field"]) for e in response.json()["errors"]] == [
            ("E004", "doctor_id"),
            ("E004", "clinic_id"),
        ]

    def test_doctor_not_at_clinic(self, client, world, db):
        response = client.post(
            API,
            json=booking_body(world, doctor_id=world.other_doctor.id),
            headers=auth_headers(world.patient)
        )

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Doctor does not work at this clinic"
        assert body["errors"] == [{"code": "E007", "field": "doctor_id"}]
        assert db.query(Appointment).count() == 0

    def test_permissive_mode(self, client, world, policy_override):
        policy_override(WorkflowPolicy(enforce_doctor_clinic_membership=False))

        response = client.post(
            API,
            json=booking_body(world, doctor_id=world.other_doctor.id),
            headers=auth_headers(world.patient)
        )

        assert response.status_code == 201

    def test_explicit_patient(self, client, world, policy_override):
        policy_override(WorkflowPolicy(allow_explicit_patient_id=True))

        response = client.post(
            API,
            json=booking_body(world, patient_id=world.other_patient.id),
            headers=auth_headers(world.admin)
        )

        assert response.status_code == 201
        assert response.json()["data"]["patient_id"] == world.other_patient.id

    def test_requires_authentication(self, client, world):
        response = client.post(API, json=booking_body(world))
        assert response.status_code == 401


class TestUpdateStatus:

    @pytest.fixture
    def appointment(self, db, world):
        return make_appointment(db, world.patient, world.doctor, world.clinic, future())

    def test_doctor_confirms_then_cancels(self, client, world, appointment):
        headers = auth_headers(world.doctor)

        confirmed = client.patch(f"{API}/{appointment.id}/status", json={"status": "confirmed"}, headers=headers)
        assert confirmed.status_code == 200
        assert confirmed.json()["data"]["status"] == "confirmed"

        cancelled = client.patch(f"{API}/{appointment.id}/status", json={"status": "cancelled"}, headers=headers)
        assert cancelled.status_code == 200
        assert cancelled.json()["data"]["status"] == "cancelled"

    def test_admin_may_update(self, client, world, appointment):
        response = client.patch(
            f"{API}/{appointment.id}/status", json={"status": "cancelled"}, headers=auth_headers(world.admin)
        )
        assert response.status_code == 200

    def test_patient_forbidden(self, client, world, appointment, db):
        response = client.patch(
            f"{API}/{appointment.id}/status", json={"status": "confirmed"}, headers=auth_headers(world.patient)
        )

        assert response.status_code == 403
        db.refresh(appointment)
        assert appointment.status == AppointmentStatus.PENDING

    def test_invalid_status(self, client, world, appointment):
        response = client.patch(
            f"{API}/{appointment.id}/status", json={"status": "archived"}, headers=auth_headers(world.doctor)
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["code"] == "E005"
        assert response.json()["errors"][0]["field"] == "status"

    def test_not_found(self, client, world):
        response = client.patch(f"{API}/9999/status", json={"status": "confirmed"}, headers=auth_headers(world.doctor))

        assert response.status_code == 404
        assert response.json()["message"] == "Appointment not found"

    def test_enforced_transitions(self, client, world, appointment, policy_override):
        policy_override(WorkflowPolicy(enforce_pending_transitions=True))
        headers = auth_headers(world.doctor)
        client.patch(f"{API}/{appointment.id}/status", json={"status": "confirmed"}, headers=headers)

        response = client.patch(f"{API}/{appointment.id}/status", json={"status": "cancelled"}, headers=headers)

        assert response.status_code == 422
        assert response.json()["errors"] == [{"code": "E008", "field": "status"}]


class TestQueries:

    def test_show_missing(self, client, world):
        response = client.get(f"{API}/9999", headers=auth_headers(world.patient))

        assert response.status_code == 404
        assert response.json()["status"] == "error"

    def test_list_pages(self, client, world, db):
        for i in range(25):
            make_appointment(db, world.patient, world.doctor, world.clinic, future(i + 1))
        headers = auth_headers(world.admin)

        data = client.get(API, params={"page": 3}, headers=headers).json()["data"]

        assert data["total"] == 25
        assert data["per_page"] == 10
        assert data["pages"] == 3
        assert len(data["items"]) == 5

    def test_list_rejects_unknown_sort(self, client, world):
        response = client.get(API, params={"sort_by": "password"}, headers=auth_headers(world.admin))
        assert response.status_code == 422

    def test_list_filters(self, client, world, db):
        inside = make_appointment(db, world.patient, world.doctor, world.clinic, datetime(2030, 5, 10, 9, 0))
        make_appointment(db, world.patient, world.doctor, world.clinic, datetime(2030, 6, 10, 9, 0))

        response = client.get(
            API,
            params={
                "doctor_name": "tuyen",
                "start_time": "2030-05-10T09:00:00",
                "end_time": "2030-05-31T00:00:00",
            },
            headers=auth_headers(world.admin)
        )

        assert [a["id"] for a in response.json()["data"]["items"]] == [inside.id]

    def test_by_doctor(self, client, world, db):
        later = make_appointment(db, world.patient, world.doctor, world.clinic, future(4))
        sooner = make_appointment(db, world.patient, world.doctor, world.clinic, future(2))

        response = client.get(f"{API}/doctor/{world.doctor.id}", headers=auth_headers(world.patient))

        assert response.status_code == 200
        assert [a["id"] for a in response.json()["data"]] == [sooner.id, later.id]

    @pytest.mark.parametrize("who", ["patient", None])
    def test_by_doctor_not_found(self, client, world, who):
        doctor_id = getattr(world, who).id if who else 9999

        response = client.get(f"{API}/doctor/{doctor_id}", headers=auth_headers(world.patient))

        assert response.status_code == 404
        body = response.json()
        assert body["message"] == "Doctor not found"
        assert "data" not in body

    def test_statistics(self, client, world, db):
        make_appointment(db, world.patient, world.doctor, world.clinic, datetime(2025, 3, 3, 10, 0))
        make_appointment(db, world.patient, world.doctor, world.clinic, datetime(2025, 12, 3, 10, 0))

        response = client.get(f"{API}/statistics", params={"year": 2025}, headers=auth_headers(world.admin))

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 12
        assert data[2] == {"month": 3, "count": 1}
        assert data[11] == {"month": 12, "count": 1}
        assert sum(entry["count"] for entry in data) == 2


class TestErrorEnvelope:

    def test_unexpected_error_becomes_500(self, client, world, monkeypatch):
        from clinic_appointments.services.appointment_query import AppointmentQueryService

        def boom(self, year=None):
            raise RuntimeError("database went away")

        monkeypatch.setattr(AppointmentQueryService, "monthly_statistics", boom)

        response = client.get(f"{API}/statistics", headers=auth_headers(world.admin))

        assert response.status_code == 500
        body = response.json()
        assert body["status"] == "error"
        assert body["errors"][0]["code"] == "E999"
        assert body["errors"][0]["message"] == "database went away"
