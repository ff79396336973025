from datetime import datetime, timedelta, timezone

import pytest

from medcare.application.identity import IdentityContext, Role
from medcare.application.ports.user_repo import UserDto
from medcare.application.services.auth_gate import AuthGate, authorize, extract_bearer_token
from medcare.application.services.token_service import TokenService
from medcare.exceptions import (
    AuthenticationServiceError,
    AuthorizationError,
    InvalidTokenError,
    MissingTokenError,
    TokenExpiredError,
    UserNotFoundError,
)

SECRET = "unit-test-secret-key-with-enough-length-for-hs256"
NOW = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


class FakeUserRepo:
    def __init__(self):
        self.users = {
            1: UserDto(1, "Alice", "alice@example.com", "555", Role.PATIENT, datetime.utcnow(), datetime.utcnow()),
        }

    def get_by_id(self, user_id: int):
        return self.users.get(user_id)


class BrokenUserRepo:
    def get_by_id(self, user_id: int):
        raise RuntimeError("database is down")


def _gate(repo=None, now=NOW):
    tokens = TokenService(secret_key=SECRET, clock=lambda: now)
    return AuthGate(tokens=tokens, user_repo=repo or FakeUserRepo()), tokens


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc") == "abc"
    assert extract_bearer_token("bearer abc") == "abc"
    assert extract_bearer_token("Basic abc") is None
    assert extract_bearer_token("Bearer") is None
    assert extract_bearer_token(None) is None


def test_authenticate_builds_identity_context():
    gate, tokens = _gate()
    ctx = gate.authenticate(f"Bearer {tokens.issue(1, 'alice@example.com', Role.PATIENT)}")
    assert ctx == IdentityContext(user_id=1, email="alice@example.com", name="Alice", role=Role.PATIENT)


def test_missing_header_is_rejected():
    gate, _ = _gate()
    with pytest.raises(MissingTokenError):
        gate.authenticate(None)
    with pytest.raises(MissingTokenError):
        gate.authenticate("Token abc")


def test_expired_token_is_rejected():
    gate, _ = _gate()
    old_tokens = TokenService(secret_key=SECRET, clock=lambda: NOW - timedelta(days=2))
    with pytest.raises(TokenExpiredError):
        gate.authenticate(f"Bearer {old_tokens.issue(1, 'alice@example.com', Role.PATIENT)}")


def test_forged_token_is_rejected():
    gate, _ = _gate()
    forger = TokenService(secret_key="attacker-secret-key-with-enough-length-for-hs256", clock=lambda: NOW)
    with pytest.raises(InvalidTokenError):
        gate.authenticate(f"Bearer {forger.issue(1, 'alice@example.com', Role.ADMIN)}")


def test_deleted_user_is_rejected():
    gate, tokens = _gate()
    with pytest.raises(UserNotFoundError):
        gate.authenticate(f"Bearer {tokens.issue(99, 'ghost@example.com', Role.PATIENT)}")


def test_repository_failure_becomes_service_error():
    gate, tokens = _gate(repo=BrokenUserRepo())
    with pytest.raises(AuthenticationServiceError) as exc:
        gate.authenticate(f"Bearer {tokens.issue(1, 'alice@example.com', Role.PATIENT)}")
    assert exc.value.status_code == 500


@pytest.mark.parametrize("role", list(Role))
def test_role_gate_passes_only_listed_roles(role):
    ctx = IdentityContext(user_id=1, email="a@example.com", name="A", role=role)
    allowed = (Role.DOCTOR, Role.ADMIN)
    if role in allowed:
        authorize(ctx, allowed)
    else:
        with pytest.raises(AuthorizationError):
            authorize(ctx, allowed)
