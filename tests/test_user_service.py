from datetime import datetime

import pytest

from medcare.application.identity import IdentityContext, Role
from medcare.application.ports.user_repo import UserDto
from medcare.application.services.user_service import UserService
from medcare.exceptions import AuthorizationError, DuplicateEmailError, NotFoundError, ValidationError

ALICE = IdentityContext(user_id=1, email="alice@example.com", name="Alice", role=Role.PATIENT)
ADMIN = IdentityContext(user_id=99, email="admin@example.com", name="Admin", role=Role.ADMIN)


class FakeUserRepo:
    def __init__(self):
        now = datetime.utcnow()
        self.users = {
            1: UserDto(1, "Alice", "alice@example.com", "555", Role.PATIENT, now, now),
            2: UserDto(2, "Bob", "bob@example.com", "556", Role.PATIENT, now, now),
            99: UserDto(99, "Admin", "admin@example.com", "557", Role.ADMIN, now, now),
        }
        self.updates = []

    def get_by_id(self, user_id):
        return self.users.get(user_id)

    def email_taken(self, email, exclude_user_id=None):
        return any(u.email == email and u.id != exclude_user_id for u in self.users.values())

    def update_fields(self, user_id, fields):
        self.updates.append((user_id, fields))
        return self.users.get(user_id)

    def delete(self, user_id):
        return self.users.pop(user_id, None) is not None

    def list(self, search, role, page, limit):
        return list(self.users.values()), len(self.users)


def test_get_user_self_or_admin():
    svc = UserService(user_repo=FakeUserRepo())
    assert svc.get_user(ALICE, 1).name == "Alice"
    assert svc.get_user(ADMIN, 2).name == "Bob"
    with pytest.raises(AuthorizationError):
        svc.get_user(ALICE, 2)
    with pytest.raises(NotFoundError):
        svc.get_user(ADMIN, 404)


def test_list_users_is_admin_only():
    svc = UserService(user_repo=FakeUserRepo())
    with pytest.raises(AuthorizationError):
        svc.list_users(ALICE, None, None, 1, 10)
    _, total = svc.list_users(ADMIN, None, None, 1, 10)
    assert total == 3


def test_update_profile_needs_a_field():
    repo = FakeUserRepo()
    svc = UserService(user_repo=repo)
    with pytest.raises(ValidationError):
        svc.update_profile(ALICE, None, None)
    svc.update_profile(ALICE, "Alicia", None)
    assert repo.updates == [(1, {"name": "Alicia"})]


def test_update_user_rejects_taken_email():
    repo = FakeUserRepo()
    svc = UserService(user_repo=repo)
    with pytest.raises(DuplicateEmailError):
        svc.update_user(ADMIN, 1, {"email": " BOB@example.com"})
    svc.update_user(ADMIN, 1, {"email": "Alice@Example.com", "role": Role.DOCTOR})
    assert repo.updates == [(1, {"email": "alice@example.com", "role": Role.DOCTOR})]


def test_delete_user_rules():
    svc = UserService(user_repo=FakeUserRepo())
    with pytest.raises(AuthorizationError):
        svc.delete_user(ALICE, 2)
    with pytest.raises(ValidationError):
        svc.delete_user(ADMIN, ADMIN.user_id)
    svc.delete_user(ADMIN, 2)
    with pytest.raises(NotFoundError):
        svc.delete_user(ADMIN, 2)
