from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import logging

import jwt

from ..identity import Role

logger = logging.getLogger(__name__)


class TokenError(Exception):
    pass


class InvalidSignatureError(TokenError):
    pass


class ExpiredTokenError(TokenError):
    pass


class MalformedTokenError(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str
    role: Role
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TokenService:
    """Issues and verifies stateless HS256 identity tokens.

    There is no revocation list: a token stays valid until its ``exp`` claim
    passes, whatever happens to the account in the meantime.
    """

    secret_key: str
    algorithm: str = "HS256"
    default_ttl: timedelta = timedelta(hours=24)
    clock: Callable[[], datetime] = field(default=_utcnow)

    def issue(self, user_id: int, email: str, role: Role, ttl: Optional[timedelta] = None) -> str:
        now = self.clock()
        expire = now + (ttl if ttl is not None else self.default_ttl)
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "role": Role(role).value,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            # Time-based claims are checked below against our own clock
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False, "require": ["sub", "exp"]},
            )
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(str(e)) from e

        try:
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
            claims = TokenClaims(
                user_id=int(payload["sub"]),
                email=str(payload.get("email", "")),
                role=Role(payload.get("role")),
                expires_at=expires_at,
            )
        except (TypeError, ValueError) as e:
            raise MalformedTokenError(f"Invalid token claims: {e}") from e

        if self.clock() >= expires_at:
            raise ExpiredTokenError("Token has expired")
        return claims
