import pytest

from medcare.application.identity import IdentityContext, Role
from medcare.application.services.doctor_service import DoctorService
from medcare.application.services.facility_service import FacilityService
from medcare.application.services.hospital_service import HospitalService
from medcare.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from medcare.schemas.doctors.doctor import DoctorCreate

ALICE = IdentityContext(user_id=1, email="alice@example.com", name="Alice", role=Role.PATIENT)
DR_GRAY = IdentityContext(user_id=10, email="gray@example.com", name="Dr. Gray", role=Role.DOCTOR)
DR_OTHER = IdentityContext(user_id=11, email="other@example.com", name="Dr. Other", role=Role.DOCTOR)
ADMIN = IdentityContext(user_id=99, email="admin@example.com", name="Admin", role=Role.ADMIN)


class FakeStore:
    def __init__(self, defaults=None):
        self._id = 1
        self.rows = {}
        self.defaults = defaults or {}

    def get(self, record_id):
        row = self.rows.get(record_id)
        return dict(row) if row else None

    def list(self, filters=None, contains=None, search=None, search_fields=(), page=1, limit=10, order_by=None):
        rows = list(self.rows.values())
        for name, value in (filters or {}).items():
            if value is not None:
                rows = [r for r in rows if r.get(name) == value]
        for name, value in (contains or {}).items():
            if value:
                rows = [r for r in rows if value.lower() in (r.get(name) or "").lower()]
        return rows, len(rows)

    def create(self, values):
        row = dict(self.defaults, id=self._id, **values)
        self.rows[self._id] = row
        self._id += 1
        return dict(row)

    def update(self, record_id, values):
        if record_id not in self.rows:
            return None
        self.rows[record_id].update(values)
        return dict(self.rows[record_id])

    def delete(self, record_id):
        return self.rows.pop(record_id, None) is not None

    def exists(self, field, value, exclude_id=None):
        return any(r.get(field) == value and r["id"] != exclude_id for r in self.rows.values())

    def distinct_values(self, field):
        return sorted({r[field] for r in self.rows.values() if r.get(field)})


class FakeApptRepo:
    def count_for_doctor(self, doctor_id):
        return 3


def _doctors():
    store = FakeStore(defaults={"open_hour": "09:00", "close_hour": "17:00", "user_id": None})
    return DoctorService(store=store, appointments=FakeApptRepo()), store


def test_doctor_creates_own_linked_profile():
    svc, _ = _doctors()
    doctor = svc.create_doctor(DR_GRAY, {"name": "Dr. Gray", "user_id": 55, "email": None})
    assert doctor["user_id"] == DR_GRAY.user_id
    assert "email" not in doctor or doctor["email"] is None


def test_patient_cannot_create_doctor():
    svc, _ = _doctors()
    with pytest.raises(AuthorizationError):
        svc.create_doctor(ALICE, {"name": "Dr. Fake"})


def test_create_doctor_rejects_bad_hours_and_duplicate_email():
    svc, _ = _doctors()
    with pytest.raises(ValidationError):
        svc.create_doctor(ADMIN, {"name": "Dr. Night", "open_hour": "18:00", "close_hour": "09:00"})
    svc.create_doctor(ADMIN, {"name": "Dr. Gray", "email": "gray@example.com"})
    with pytest.raises(ConflictError):
        svc.create_doctor(ADMIN, {"name": "Dr. Copy", "email": "gray@example.com"})


def test_get_doctor_includes_appointment_count():
    svc, _ = _doctors()
    created = svc.create_doctor(ADMIN, {"name": "Dr. Gray"})
    assert svc.get_doctor(created["id"])["appointments_count"] == 3
    with pytest.raises(NotFoundError):
        svc.get_doctor(404)


def test_update_doctor_by_owner_only():
    svc, _ = _doctors()
    created = svc.create_doctor(DR_GRAY, {"name": "Dr. Gray"})

    with pytest.raises(AuthorizationError):
        svc.update_doctor(DR_OTHER, created["id"], {"specialization": "Surgery"})

    updated = svc.update_doctor(DR_GRAY, created["id"], {"specialization": "Surgery", "user_id": DR_OTHER.user_id})
    assert updated["specialization"] == "Surgery"
    assert updated["user_id"] == DR_GRAY.user_id

    assert svc.update_doctor(ADMIN, created["id"], {"user_id": DR_OTHER.user_id})["user_id"] == DR_OTHER.user_id


def test_delete_doctor_is_admin_only():
    svc, _ = _doctors()
    created = svc.create_doctor(DR_GRAY, {"name": "Dr. Gray"})
    with pytest.raises(AuthorizationError):
        svc.delete_doctor(DR_GRAY, created["id"])
    svc.delete_doctor(ADMIN, created["id"])
    with pytest.raises(NotFoundError):
        svc.delete_doctor(ADMIN, created["id"])


def test_hospital_writes_are_admin_only():
    svc = HospitalService(store=FakeStore())
    with pytest.raises(AuthorizationError):
        svc.create_hospital(DR_GRAY, {"name": "General"})
    hospital = svc.create_hospital(ADMIN, {"name": "General", "city": "Springfield", "phone": None})
    assert svc.list_hospitals("spring", None, 1, 10)[1] == 1
    with pytest.raises(ValidationError):
        svc.update_hospital(ADMIN, hospital["id"], {"name": None})
    with pytest.raises(NotFoundError):
        svc.update_hospital(ADMIN, 404, {"name": "Other"})


def test_working_hours_compare_whole_hours_only():
    assert "minutes are ignored" in DoctorCreate.model_fields["open_hour"].description
    svc, _ = _doctors()
    with pytest.raises(ValidationError):
        svc.create_doctor(ADMIN, {"name": "Dr. Brief", "open_hour": "09:00", "close_hour": "09:30"})
    assert svc.create_doctor(ADMIN, {"name": "Dr. Late", "open_hour": "09:00", "close_hour": "17:30"})["close_hour"] == "17:30"


def test_specializations_are_distinct_and_sorted():
    svc, _ = _doctors()
    for name, specialization in [("Dr. A", "Neurology"), ("Dr. B", "Cardiology"), ("Dr. C", "Neurology"), ("Dr. D", None)]:
        svc.create_doctor(ADMIN, {"name": name, "specialization": specialization})
    assert svc.list_specializations() == ["Cardiology", "Neurology"]


def test_hospital_doctor_listing_requires_existing_hospital():
    doctors = FakeStore(defaults={"is_active": True})
    svc = HospitalService(store=FakeStore(), doctors=doctors)
    with pytest.raises(NotFoundError):
        svc.list_doctors(5, None, 1, 10)

    hospital = svc.create_hospital(ADMIN, {"name": "General"})
    doctors.create({"name": "Dr. In", "hospital_id": hospital["id"]})
    doctors.create({"name": "Dr. Out", "hospital_id": hospital["id"] + 1})
    doctors.create({"name": "Dr. Gone", "hospital_id": hospital["id"], "is_active": False})
    rows, total = svc.list_doctors(hospital["id"], None, 1, 10)
    assert [r["name"] for r in rows] == ["Dr. In"]
    assert total == 1


def test_facility_writes_are_admin_only_and_names_unique():
    svc = FacilityService(store=FakeStore(), label="Pharmacy")
    with pytest.raises(AuthorizationError):
        svc.create_facility(ALICE, {"name": "Corner Drugs"})
    first = svc.create_facility(ADMIN, {"name": "Corner Drugs", "phone": None})
    assert "phone" not in first
    with pytest.raises(ConflictError):
        svc.create_facility(ADMIN, {"name": "Corner Drugs"})
    # renaming to its own name is not a conflict
    assert svc.update_facility(ADMIN, first["id"], {"name": "Corner Drugs"})["name"] == "Corner Drugs"
    with pytest.raises(ValidationError):
        svc.update_facility(ADMIN, first["id"], {"name": None})

    svc.delete_facility(ADMIN, first["id"])
    with pytest.raises(NotFoundError):
        svc.get_facility(first["id"])


def test_clinic_delete_only_deactivates():
    store = FakeStore(defaults={"is_active": True})
    svc = FacilityService(store=store, label="Clinic", unique_name=False, soft_delete=True)
    clinic = svc.create_facility(ADMIN, {"name": "Riverside", "city": "Springfield"})
    svc.create_facility(ADMIN, {"name": "Riverside", "city": "Shelbyville"})

    svc.delete_facility(ADMIN, clinic["id"])
    assert store.rows[clinic["id"]]["is_active"] is False
    with pytest.raises(NotFoundError):
        svc.get_facility(clinic["id"])
    with pytest.raises(NotFoundError):
        svc.delete_facility(ADMIN, clinic["id"])
    rows, total = svc.list_facilities(None, 1, 10)
    assert total == 1 and rows[0]["city"] == "Shelbyville"
