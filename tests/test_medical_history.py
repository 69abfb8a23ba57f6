import pytest

from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.core.security import UserRole
from app.services.medical_history_service import MedicalHistoryService
from tests.helpers import auth_headers, principal

BASE = "/api/v1/history"


@pytest.fixture
def people(make_user):
    return {
        "patient": make_user(name="Patient"),
        "other": make_user(name="Other Patient"),
        "doctor": make_user(UserRole.DOCTOR, name="Dr. House"),
        "admin": make_user(UserRole.ADMIN, name="Admin"),
    }


class TestMedicalHistoryService:

    def test_empty_history(self, db, people):
        history = MedicalHistoryService(db).get_history(principal(people["patient"]))

        assert history == {"patient_id": people["patient"].id, "records": []}

    def test_records_are_newest_first(self, db, people):
        service = MedicalHistoryService(db)
        service.add_record(principal(people["doctor"]), people["patient"].id, "Flu", "Rest and fluids")
        service.add_record(principal(people["doctor"]), people["patient"].id, "Follow-up", "Recovered")

        history = service.get_history(principal(people["patient"]))

        assert [r.diagnosis for r in history["records"]] == ["Follow-up", "Flu"]

    def test_patient_id_is_ignored_for_patients(self, db, people):
        service = MedicalHistoryService(db)
        service.add_record(principal(people["doctor"]), people["other"].id, "Flu", "Rest")

        history = service.get_history(principal(people["patient"]), people["other"].id)

        assert history["patient_id"] == people["patient"].id
        assert history["records"] == []

    def test_staff_must_name_a_patient(self, db, people):
        with pytest.raises(ValidationError):
            MedicalHistoryService(db).get_history(principal(people["doctor"]))

    def test_patients_cannot_write(self, db, people):
        with pytest.raises(ForbiddenError):
            MedicalHistoryService(db).add_record(principal(people["patient"]), people["patient"].id, "Flu", "Rest")

    def test_unknown_patient(self, db, people):
        with pytest.raises(NotFoundError):
            MedicalHistoryService(db).add_record(principal(people["doctor"]), people["doctor"].id, "Flu", "Rest")


class TestMedicalHistoryApi:

    def test_doctor_adds_and_patient_reads(self, client, people):
        response = client.post(
            f"{BASE}/{people['patient'].id}",
            json={"diagnosis": "Migraine", "notes": "Prescribed rest"},
            headers=auth_headers(people["doctor"]),
        )
        assert response.status_code == 201
        assert response.json()["records"][0]["treatedByDoctor"]["name"] == "Dr. House"

        response = client.get(BASE, headers=auth_headers(people["patient"]))
        assert response.status_code == 200
        data = response.json()
        assert data["patientId"] == people["patient"].id
        assert [r["diagnosis"] for r in data["records"]] == ["Migraine"]

    def test_admin_reads_by_patient_id(self, client, people):
        response = client.get(BASE, params={"patientId": people["patient"].id}, headers=auth_headers(people["admin"]))
        assert response.status_code == 200

    def test_doctor_without_patient_id(self, client, people):
        response = client.get(BASE, headers=auth_headers(people["doctor"]))
        assert response.status_code == 400
        assert response.json()["detail"] == "Patient ID is required"

    def test_patient_cannot_add_records(self, client, people):
        response = client.post(
            f"{BASE}/{people['patient'].id}",
            json={"diagnosis": "Self", "notes": "diagnosis"},
            headers=auth_headers(people["patient"]),
        )
        assert response.status_code == 403

    def test_blank_fields_rejected(self, client, people):
        response = client.post(
            f"{BASE}/{people['patient'].id}",
            json={"diagnosis": "  ", "notes": "x"},
            headers=auth_headers(people["doctor"]),
        )
        assert response.status_code == 400
