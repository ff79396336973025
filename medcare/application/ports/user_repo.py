from dataclasses import dataclass
from typing import Protocol, Optional, List, Tuple, Dict, Any
from datetime import datetime

from ..identity import Role


@dataclass
class UserDto:
    id: int
    name: str
    email: str
    phone: str
    role: Role
    created_at: datetime
    updated_at: datetime


@dataclass
class UserCredentialsDto:
    id: int
    email: str
    password_hash: str
    role: Role


class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        ...

    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def get_credentials_by_email(self, email: str) -> Optional[UserCredentialsDto]:
        ...

    def get_password_hash(self, user_id: int) -> Optional[str]:
        ...

    def email_taken(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        ...

    def create(self, name: str, email: str, password_hash: str, phone: str, role: Role) -> UserDto:
        ...

    def update_fields(self, user_id: int, fields: Dict[str, Any]) -> Optional[UserDto]:
        ...

    def set_password(self, user_id: int, password_hash: str) -> None:
        ...

    def set_reset_token(self, user_id: int, token_hash: str, expires_at: datetime) -> None:
        ...

    def get_by_reset_token(self, token_hash: str, now: datetime) -> Optional[UserDto]:
        ...

    def list(self, search: Optional[str], role: Optional[Role], page: int, limit: int) -> Tuple[List[UserDto], int]:
        ...

    def delete(self, user_id: int) -> bool:
        ...

    def stats(self, since: datetime) -> Dict[str, Any]:
        ...
