from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


@dataclass(frozen=True)
class IdentityContext:
    """Caller identity attached to a request once the bearer token checks out."""

    user_id: int
    email: str
    name: str
    role: Role
