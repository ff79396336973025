from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Tuple
import hashlib
import logging
import secrets

from ..identity import Role
from ..ports.user_repo import UserRepository, UserDto
from ..ports.password_hasher import PasswordHasher
from ..ports.audit_logger import AuditLogger
from .token_service import TokenService
from ...exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


@dataclass
class AuthResult:
    user: UserDto
    token: str


@dataclass
class AuthService:
    user_repo: UserRepository
    hasher: PasswordHasher
    tokens: TokenService
    audit: AuditLogger
    allow_admin_registration: bool = False
    reset_token_ttl: timedelta = timedelta(hours=1)
    clock: Callable[[], datetime] = field(default=datetime.utcnow)

    def register(self, name: str, email: str, password: str, phone: str, role: Role = Role.PATIENT) -> AuthResult:
        email = normalize_email(email)
        if role == Role.ADMIN and not self.allow_admin_registration:
            raise ValidationError("Admin accounts cannot be self-registered")
        if self.user_repo.get_by_email(email):
            self.audit.log("register", email, success=False, details={"reason": "duplicate_email"})
            raise DuplicateEmailError()

        user = self.user_repo.create(name.strip(), email, self.hasher.hash(password), phone.strip(), role)
        self.audit.log("register", email, user_id=user.id)
        return AuthResult(user=user, token=self.tokens.issue(user.id, user.email, user.role))

    def login(self, email: str, password: str) -> AuthResult:
        email = normalize_email(email)
        creds = self.user_repo.get_credentials_by_email(email)
        if not creds or not self.hasher.verify(password, creds.password_hash):
            self.audit.log("login", email, user_id=creds.id if creds else None, success=False)
            raise InvalidCredentialsError()

        user = self.user_repo.get_by_id(creds.id)
        self.audit.log("login", email, user_id=user.id)
        return AuthResult(user=user, token=self.tokens.issue(user.id, user.email, user.role))

    def profile(self, user_id: int) -> UserDto:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        password_hash = self.user_repo.get_password_hash(user_id)
        if password_hash is None:
            raise NotFoundError("User not found")
        user = self.user_repo.get_by_id(user_id)
        if not self.hasher.verify(current_password, password_hash):
            self.audit.log("change_password", user.email, user_id=user_id, success=False)
            raise ValidationError("Current password is incorrect")

        self.user_repo.set_password(user_id, self.hasher.hash(new_password))
        self.audit.log("change_password", user.email, user_id=user_id)

    def forgot_password(self, email: str) -> Tuple[str, datetime]:
        """Store a one-time reset token for the account and return it with its expiry."""
        email = normalize_email(email)
        user = self.user_repo.get_by_email(email)
        if not user:
            raise NotFoundError("User with this email not found")

        token = secrets.token_hex(32)
        expires_at = self.clock() + self.reset_token_ttl
        self.user_repo.set_reset_token(user.id, hash_reset_token(token), expires_at)
        self.audit.log("forgot_password", email, user_id=user.id)
        return token, expires_at

    def reset_password(self, token: str, new_password: str) -> None:
        user = self.user_repo.get_by_reset_token(hash_reset_token(token), self.clock())
        if not user:
            raise ValidationError("Invalid or expired reset token")
        # set_password also clears the reset token
        self.user_repo.set_password(user.id, self.hasher.hash(new_password))
        self.audit.log("reset_password", user.email, user_id=user.id)
