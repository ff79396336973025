from dataclasses import dataclass
from typing import Iterable, Optional
import logging

from ..identity import IdentityContext, Role
from ..ports.user_repo import UserRepository
from .token_service import TokenService, ExpiredTokenError, TokenError
from ...exceptions import (
    APIError,
    AuthenticationServiceError,
    AuthorizationError,
    InvalidTokenError,
    MissingTokenError,
    TokenExpiredError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the credential of a ``Bearer <token>`` header, or None."""
    if not authorization:
        return None
    parts = authorization.strip().split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


@dataclass
class AuthGate:
    tokens: TokenService
    user_repo: UserRepository

    def authenticate(self, authorization: Optional[str]) -> IdentityContext:
        token = extract_bearer_token(authorization)
        if not token:
            raise MissingTokenError()

        try:
            try:
                claims = self.tokens.verify(token)
            except ExpiredTokenError:
                raise TokenExpiredError()
            except TokenError as e:
                logger.warning(f"Rejected bearer token: {e}")
                raise InvalidTokenError()

            # The row is re-read only to confirm the account still exists
            user = self.user_repo.get_by_id(claims.user_id)
            if not user:
                raise UserNotFoundError()
        except APIError:
            raise
        except Exception as e:
            logger.exception(f"Authentication error: {e}")
            raise AuthenticationServiceError()

        return IdentityContext(
            user_id=claims.user_id,
            email=claims.email,
            name=user.name,
            role=claims.role,
        )


def authorize(context: IdentityContext, allowed_roles: Iterable[Role]) -> None:
    """Role gate: pass iff the caller's role is in the allow-list."""
    if context.role not in frozenset(allowed_roles):
        raise AuthorizationError("Access denied. Insufficient permissions.")
