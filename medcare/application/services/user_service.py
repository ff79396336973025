from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional, List, Tuple, Dict, Any
import logging

from ..identity import IdentityContext, Role
from ..ports.user_repo import UserRepository, UserDto
from .auth_gate import authorize
from .auth_service import normalize_email
from ...exceptions import AuthorizationError, DuplicateEmailError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class UserService:
    user_repo: UserRepository
    clock: Callable[[], datetime] = field(default=datetime.utcnow)

    def list_users(self, context: IdentityContext, search: Optional[str], role: Optional[Role], page: int, limit: int) -> Tuple[List[UserDto], int]:
        authorize(context, (Role.ADMIN,))
        return self.user_repo.list(search, role, page, limit)

    def get_user(self, context: IdentityContext, user_id: int) -> UserDto:
        if context.role != Role.ADMIN and context.user_id != user_id:
            raise AuthorizationError()
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, context: IdentityContext, name: Optional[str], phone: Optional[str]) -> UserDto:
        fields = {k: v for k, v in {"name": name, "phone": phone}.items() if v is not None}
        if not fields:
            raise ValidationError("No valid fields to update")
        user = self.user_repo.update_fields(context.user_id, fields)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_user(self, context: IdentityContext, user_id: int, fields: Dict[str, Any]) -> UserDto:
        authorize(context, (Role.ADMIN,))
        fields = {k: v for k, v in fields.items() if v is not None}
        if not fields:
            raise ValidationError("No valid fields to update")
        if not self.user_repo.get_by_id(user_id):
            raise NotFoundError("User not found")
        if "email" in fields:
            fields["email"] = normalize_email(fields["email"])
            if self.user_repo.email_taken(fields["email"], exclude_user_id=user_id):
                raise DuplicateEmailError("Email is already taken")
        user = self.user_repo.update_fields(user_id, fields)
        logger.info(f"User {user_id} updated by admin {context.user_id}: {sorted(fields)}")
        return user

    def delete_user(self, context: IdentityContext, user_id: int) -> None:
        authorize(context, (Role.ADMIN,))
        if user_id == context.user_id:
            raise ValidationError("Cannot delete your own account")
        if not self.user_repo.delete(user_id):
            raise NotFoundError("User not found")
        logger.info(f"User {user_id} deleted by admin {context.user_id}")

    def stats(self, context: IdentityContext) -> Dict[str, Any]:
        authorize(context, (Role.ADMIN,))
        return self.user_repo.stats(self.clock() - timedelta(days=7))
