from datetime import datetime, timedelta, timezone

import jwt
import pytest

from medcare.application.identity import Role
from medcare.application.services.token_service import (
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenService,
)

SECRET = "unit-test-secret-key-with-enough-length-for-hs256"
NOW = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def test_issue_then_verify_round_trips_claims():
    svc = TokenService(secret_key=SECRET, clock=Clock(NOW))
    token = svc.issue(42, "alice@example.com", Role.PATIENT)
    claims = svc.verify(token)
    assert claims.user_id == 42
    assert claims.email == "alice@example.com"
    assert claims.role is Role.PATIENT
    assert claims.expires_at == NOW + timedelta(hours=24)


def test_token_expires_exactly_at_exp():
    clock = Clock(NOW)
    svc = TokenService(secret_key=SECRET, clock=clock)
    token = svc.issue(1, "a@example.com", Role.ADMIN, ttl=timedelta(hours=1))

    clock.now = NOW + timedelta(minutes=59)
    assert svc.verify(token).role is Role.ADMIN

    clock.now = NOW + timedelta(hours=1)
    with pytest.raises(ExpiredTokenError):
        svc.verify(token)


def test_token_signed_with_other_secret_is_rejected():
    other = TokenService(secret_key="another-secret-key-with-enough-length-for-hs256", clock=Clock(NOW))
    svc = TokenService(secret_key=SECRET, clock=Clock(NOW))
    with pytest.raises(InvalidSignatureError):
        svc.verify(other.issue(1, "a@example.com", Role.PATIENT))


def test_garbage_token_is_malformed():
    svc = TokenService(secret_key=SECRET, clock=Clock(NOW))
    with pytest.raises(MalformedTokenError):
        svc.verify("not.a.token")


def test_unknown_role_claim_is_malformed():
    svc = TokenService(secret_key=SECRET, clock=Clock(NOW))
    token = jwt.encode(
        {"sub": "1", "email": "a@example.com", "role": "superuser", "exp": int((NOW + timedelta(hours=1)).timestamp())},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(MalformedTokenError):
        svc.verify(token)


def test_missing_exp_claim_is_malformed():
    svc = TokenService(secret_key=SECRET, clock=Clock(NOW))
    token = jwt.encode({"sub": "1", "role": "patient"}, SECRET, algorithm="HS256")
    with pytest.raises(MalformedTokenError):
        svc.verify(token)
