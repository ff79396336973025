from datetime import datetime, timedelta

import pytest
from sqlalchemy import DateTime

from conftest import seed_doctor
from medcare.application.identity import Role
from medcare.db.models import Appointment
from medcare.exceptions import PatientDoubleBookingError, SlotAlreadyBookedError
from medcare.infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from medcare.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository

SLOT = (datetime.now() + timedelta(days=7)).replace(hour=10, minute=0, second=0, microsecond=0)


@pytest.fixture
def repo(session):
    users = SqlUserRepository(session)
    users.create("Alice", "alice@example.com", "hash", "555", Role.PATIENT)
    users.create("Bob", "bob@example.com", "hash", "556", Role.PATIENT)
    seed_doctor(session, doctor_id=7)
    seed_doctor(session, doctor_id=8, name="Dr. Brown")
    return SqlAppointmentsRepository(session)


def test_slot_columns_store_naive_datetimes():
    assert type(Appointment.__table__.c.appointment_datetime.type) is DateTime
    assert Appointment.__table__.c.appointment_datetime.type.timezone is False


def test_create_stores_naive_slot(repo):
    appt = repo.create(1, 7, SLOT, "checkup")
    assert appt.appointment_datetime == SLOT
    assert appt.patient_name == "Alice"
    assert appt.doctor_name == "Dr. Gray"


def test_store_rejects_second_booking_of_doctor_slot(repo):
    repo.create(1, 7, SLOT, "checkup")
    with pytest.raises(SlotAlreadyBookedError):
        repo.create(2, 7, SLOT, "checkup")
    assert len(repo.list(doctor_ids=[7])) == 1


def test_store_rejects_patient_in_two_places_at_once(repo):
    repo.create(1, 7, SLOT, "checkup")
    with pytest.raises(PatientDoubleBookingError):
        repo.create(1, 8, SLOT, "rash")


def test_cancelled_row_does_not_hold_the_slot(repo):
    first = repo.create(1, 7, SLOT, "checkup")
    repo.update_status(first.id, "cancelled", notes="changed plans")
    second = repo.create(2, 7, SLOT, "checkup")
    assert second.status == "scheduled"
    assert repo.find_doctor_conflict(7, SLOT) is True
    assert sorted(a.status for a in repo.list(doctor_ids=[7])) == ["cancelled", "scheduled"]
