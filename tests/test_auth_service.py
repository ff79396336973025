from datetime import datetime, timedelta
from typing import Optional

import pytest

from medcare.application.identity import Role
from medcare.application.ports.user_repo import UserCredentialsDto, UserDto
from medcare.application.services.auth_service import AuthService
from medcare.application.services.token_service import TokenService
from medcare.exceptions import DuplicateEmailError, InvalidCredentialsError, NotFoundError, ValidationError
from medcare.infrastructure.security.password_hasher import BcryptPasswordHasher

SECRET = "unit-test-secret-key-with-enough-length-for-hs256"


class FakeUserRepo:
    def __init__(self):
        self._id = 1
        self.users = {}
        self.hashes = {}
        self.reset_tokens = {}

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[UserDto]:
        return next((u for u in self.users.values() if u.email == email), None)

    def get_credentials_by_email(self, email: str) -> Optional[UserCredentialsDto]:
        u = self.get_by_email(email)
        if not u:
            return None
        return UserCredentialsDto(u.id, u.email, self.hashes[u.id], u.role)

    def get_password_hash(self, user_id: int) -> Optional[str]:
        return self.hashes.get(user_id)

    def create(self, name, email, password_hash, phone, role):
        u = UserDto(self._id, name, email, phone, role, datetime.utcnow(), datetime.utcnow())
        self.users[u.id] = u
        self.hashes[u.id] = password_hash
        self._id += 1
        return u

    def set_password(self, user_id, password_hash):
        self.hashes[user_id] = password_hash
        self.reset_tokens.pop(user_id, None)

    def set_reset_token(self, user_id, token_hash, expires_at):
        self.reset_tokens[user_id] = (token_hash, expires_at)

    def get_by_reset_token(self, token_hash, now):
        for user_id, (stored, expires_at) in self.reset_tokens.items():
            if stored == token_hash and expires_at > now:
                return self.users[user_id]
        return None


class FakeAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, email, user_id=None, success=True, details=None):
        self.entries.append((action, success))


class Clock:
    def __init__(self):
        self.now = datetime(2026, 3, 4, 12, 0)

    def __call__(self):
        return self.now


def _svc(**kwargs):
    repo = FakeUserRepo()
    audit = FakeAudit()
    svc = AuthService(
        user_repo=repo,
        hasher=BcryptPasswordHasher(rounds=4),
        tokens=TokenService(secret_key=SECRET),
        audit=audit,
        **kwargs,
    )
    return svc, repo, audit


def test_register_hashes_password_and_issues_token():
    svc, repo, audit = _svc()
    result = svc.register("Alice", " Alice@Example.com ", "secret123", "555")
    assert result.user.email == "alice@example.com"
    assert result.user.role is Role.PATIENT
    assert repo.hashes[result.user.id] != "secret123"
    assert svc.hasher.verify("secret123", repo.hashes[result.user.id])

    claims = svc.tokens.verify(result.token)
    assert claims.user_id == result.user.id
    assert claims.role is Role.PATIENT
    assert audit.entries == [("register", True)]


def test_register_duplicate_email_is_rejected():
    svc, _, audit = _svc()
    svc.register("Alice", "alice@example.com", "secret123", "555")
    with pytest.raises(DuplicateEmailError):
        svc.register("Alice Again", "ALICE@example.com", "secret123", "555")
    assert audit.entries[-1] == ("register", False)


def test_register_admin_requires_opt_in():
    svc, _, _ = _svc()
    with pytest.raises(ValidationError):
        svc.register("Eve", "eve@example.com", "secret123", "555", Role.ADMIN)

    svc, _, _ = _svc(allow_admin_registration=True)
    assert svc.register("Eve", "eve@example.com", "secret123", "555", Role.ADMIN).user.role is Role.ADMIN


def test_login_success_and_failures():
    svc, _, _ = _svc()
    svc.register("Alice", "alice@example.com", "secret123", "555", Role.DOCTOR)

    result = svc.login("alice@example.com", "secret123")
    assert svc.tokens.verify(result.token).role is Role.DOCTOR

    with pytest.raises(InvalidCredentialsError):
        svc.login("alice@example.com", "wrong-pass")
    with pytest.raises(InvalidCredentialsError):
        svc.login("nobody@example.com", "secret123")


def test_change_password():
    svc, _, _ = _svc()
    user = svc.register("Alice", "alice@example.com", "secret123", "555").user
    with pytest.raises(ValidationError):
        svc.change_password(user.id, "wrong-pass", "newsecret")
    svc.change_password(user.id, "secret123", "newsecret")
    assert svc.login("alice@example.com", "newsecret").user.id == user.id


def test_reset_password_token_is_single_use_and_expires():
    clock = Clock()
    svc, repo, _ = _svc(clock=clock)
    user = svc.register("Alice", "alice@example.com", "secret123", "555").user

    with pytest.raises(NotFoundError):
        svc.forgot_password("nobody@example.com")

    token, expires_at = svc.forgot_password("alice@example.com")
    assert expires_at == clock.now + timedelta(hours=1)
    assert repo.reset_tokens[user.id][0] != token

    svc.reset_password(token, "reset-pass")
    assert svc.login("alice@example.com", "reset-pass").user.id == user.id
    with pytest.raises(ValidationError):
        svc.reset_password(token, "again-pass")

    token, _ = svc.forgot_password("alice@example.com")
    clock.now += timedelta(hours=2)
    with pytest.raises(ValidationError):
        svc.reset_password(token, "late-pass")
