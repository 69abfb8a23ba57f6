import pytest

from sqlalchemy.exc import OperationalError

from app.core.exceptions import NotFoundError, SlotTakenError, StorageError
from app.core.security import UserRole
from app.models.appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES
from app.services.appointment_store import AppointmentStore


def _appointment(patient, doctor, date="2025-06-01", time="09:00", status=AppointmentStatus.CONFIRMED):
    return Appointment(patient_id=patient.id, doctor_id=doctor.id, date=date, time=time, status=status)


def _active_count(db, doctor_id, date, time):
    return db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.date == date,
        Appointment.time == time,
        Appointment.status.in_(ACTIVE_STATUSES),
    ).count()


class TestAppointmentStore:

    def test_insert_assigns_id_and_timestamps(self, db, make_user):
        patient, doctor = make_user(), make_user(UserRole.DOCTOR)

        created = AppointmentStore(db).insert(_appointment(patient, doctor))

        assert created.id is not None
        assert created.status == AppointmentStatus.CONFIRMED
        assert created.created_at is not None

    def test_find_active_conflict(self, db, make_user):
        patient, doctor = make_user(), make_user(UserRole.DOCTOR)
        store = AppointmentStore(db)
        created = store.insert(_appointment(patient, doctor))

        assert store.find_active_conflict(doctor.id, "2025-06-01", "09:00").id == created.id
        assert store.find_active_conflict(doctor.id, "2025-06-01", "09:30") is None
        assert store.find_active_conflict(doctor.id, "2025-06-02", "09:00") is None

    def test_unique_index_rejects_second_active_booking(self, db, make_user):
        """The store refuses a duplicate even when no availability check ran first."""
        first, second, doctor = make_user(), make_user(), make_user(UserRole.DOCTOR)
        store = AppointmentStore(db)
        store.insert(_appointment(first, doctor))

        with pytest.raises(SlotTakenError):
            store.insert(_appointment(second, doctor, status=AppointmentStatus.PENDING))

        assert _active_count(db, doctor.id, "2025-06-01", "09:00") == 1
        assert db.query(Appointment).filter(Appointment.patient_id == second.id).count() == 0

    @pytest.mark.parametrize("inactive", [AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED])
    def test_inactive_appointments_do_not_hold_the_slot(self, db, make_user, inactive):
        first, second, doctor = make_user(), make_user(), make_user(UserRole.DOCTOR)
        store = AppointmentStore(db)
        store.insert(_appointment(first, doctor, status=inactive))
        store.insert(_appointment(first, doctor, status=inactive))

        created = store.insert(_appointment(second, doctor))

        assert created.status == AppointmentStatus.CONFIRMED
        assert store.find_active_conflict(doctor.id, "2025-06-01", "09:00").id == created.id

    def test_same_time_with_other_doctor_is_independent(self, db, make_user):
        patient = make_user()
        doctor_a, doctor_b = make_user(UserRole.DOCTOR), make_user(UserRole.DOCTOR)
        store = AppointmentStore(db)

        store.insert(_appointment(patient, doctor_a))
        store.insert(_appointment(patient, doctor_b))

        assert _active_count(db, doctor_a.id, "2025-06-01", "09:00") == 1
        assert _active_count(db, doctor_b.id, "2025-06-01", "09:00") == 1

    def test_set_status(self, db, make_user):
        patient, doctor = make_user(), make_user(UserRole.DOCTOR)
        store = AppointmentStore(db)
        created = store.insert(_appointment(patient, doctor))

        updated = store.set_status(created.id, AppointmentStatus.CANCELLED)

        assert updated.status == AppointmentStatus.CANCELLED
        assert store.find_active_conflict(doctor.id, "2025-06-01", "09:00") is None

    def test_set_status_reactivating_a_taken_slot(self, db, make_user):
        first, second, doctor = make_user(), make_user(), make_user(UserRole.DOCTOR)
        store = AppointmentStore(db)
        old = store.insert(_appointment(first, doctor, status=AppointmentStatus.CANCELLED))
        store.insert(_appointment(second, doctor))

        with pytest.raises(SlotTakenError):
            store.set_status(old.id, AppointmentStatus.CONFIRMED)

        assert store.get(old.id).status == AppointmentStatus.CANCELLED
        assert _active_count(db, doctor.id, "2025-06-01", "09:00") == 1

    def test_set_status_unknown_id(self, db):
        with pytest.raises(NotFoundError):
            AppointmentStore(db).set_status(9999, AppointmentStatus.CANCELLED)

    def test_get_unknown_id(self, db):
        with pytest.raises(NotFoundError):
            AppointmentStore(db).get(9999)

    def test_query_ordering(self, db, make_user):
        patient, doctor = make_user(), make_user(UserRole.DOCTOR)
        store = AppointmentStore(db)
        for date, time in [("2025-06-02", "09:00"), ("2025-06-01", "10:00"),
                           ("2025-06-03", "09:30"), ("2025-06-01", "09:00")]:
            store.insert(_appointment(patient, doctor, date=date, time=time))

        by_patient = [(a.date, a.time) for a in store.find_by_patient(patient.id)]
        assert by_patient == [
            ("2025-06-03", "09:30"), ("2025-06-02", "09:00"),
            ("2025-06-01", "10:00"), ("2025-06-01", "09:00"),
        ]
        assert [(a.date, a.time) for a in store.find_all()] == by_patient

        upcoming = [(a.date, a.time) for a in store.find_by_doctor_upcoming(doctor.id, "2025-06-02")]
        assert upcoming == [("2025-06-02", "09:00"), ("2025-06-03", "09:30")]

    def test_upcoming_excludes_inactive(self, db, make_user):
        patient, doctor = make_user(), make_user(UserRole.DOCTOR)
        store = AppointmentStore(db)
        store.insert(_appointment(patient, doctor, time="09:00", status=AppointmentStatus.CANCELLED))
        store.insert(_appointment(patient, doctor, time="09:30", status=AppointmentStatus.PENDING))

        upcoming = store.find_by_doctor_upcoming(doctor.id, "2025-01-01")

        assert [a.time for a in upcoming] == ["09:30"]

    def test_booked_times(self, db, make_user):
        patient, doctor = make_user(), make_user(UserRole.DOCTOR)
        store = AppointmentStore(db)
        store.insert(_appointment(patient, doctor, time="11:00"))
        store.insert(_appointment(patient, doctor, time="09:30", status=AppointmentStatus.PENDING))
        store.insert(_appointment(patient, doctor, time="10:00", status=AppointmentStatus.CANCELLED))
        store.insert(_appointment(patient, doctor, date="2025-06-02", time="12:00"))

        assert store.booked_times(doctor.id, "2025-06-01") == ["09:30", "11:00"]


class TestStorageFailures:

    def test_database_error_on_insert(self, db, make_user, monkeypatch):
        patient, doctor = make_user(), make_user(UserRole.DOCTOR)

        def failing_commit():
            raise OperationalError("INSERT INTO appointments", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db, "commit", failing_commit)

        with pytest.raises(StorageError):
            AppointmentStore(db).insert(_appointment(patient, doctor))

        assert db.query(Appointment).count() == 0

    def test_integrity_error_without_slot_conflict(self, db, make_user):
        """A constraint other than the slot index is a storage fault, not a taken slot."""
        doctor = make_user(UserRole.DOCTOR)
        orphan = Appointment(patient_id=None, doctor_id=doctor.id, date="2025-06-01",
                             time="09:00", status=AppointmentStatus.CONFIRMED)

        with pytest.raises(StorageError):
            AppointmentStore(db).insert(orphan)

        assert db.query(Appointment).count() == 0

    def test_database_error_on_status_change(self, db, make_user, monkeypatch):
        patient, doctor = make_user(), make_user(UserRole.DOCTOR)
        store = AppointmentStore(db)
        created = store.insert(_appointment(patient, doctor))

        def failing_commit():
            raise OperationalError("UPDATE appointments", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", failing_commit)

        with pytest.raises(StorageError):
            store.set_status(created.id, AppointmentStatus.CANCELLED)

        assert store.get(created.id).status == AppointmentStatus.CONFIRMED
