from datetime import datetime
from typing import Optional, List, Tuple, Dict, Any
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import User
from .....application.identity import Role
from .....application.ports.user_repo import UserRepository, UserDto, UserCredentialsDto
from .....exceptions import ConflictError, DuplicateEmailError

# Columns a profile or admin update may touch
UPDATABLE_FIELDS = ("name", "email", "phone", "role")

class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            role=Role(user.role),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def _get(self, user_id: int) -> Optional[User]:
        return self.session.exec(select(User).where(User.id == user_id)).first()

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        user = self._get(user_id)
        return self._to_dto(user) if user else None

    def get_by_email(self, email: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.email == email)).first()
        return self._to_dto(user) if user else None

    def get_credentials_by_email(self, email: str) -> Optional[UserCredentialsDto]:
        user = self.session.exec(select(User).where(User.email == email)).first()
        if not user:
            return None
        return UserCredentialsDto(id=user.id, email=user.email, password_hash=user.password, role=Role(user.role))

    def get_password_hash(self, user_id: int) -> Optional[str]:
        user = self._get(user_id)
        return user.password if user else None

    def email_taken(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        query = select(User.id).where(User.email == email)
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        return self.session.exec(query).first() is not None

    def create(self, name: str, email: str, password_hash: str, phone: str, role: Role) -> UserDto:
        user = User(name=name, email=email, password=password_hash, phone=phone, role=role.value)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise DuplicateEmailError()
        self.session.refresh(user)
        return self._to_dto(user)

    def update_fields(self, user_id: int, fields: Dict[str, Any]) -> Optional[UserDto]:
        user = self._get(user_id)
        if not user:
            return None
        for key, value in fields.items():
            if key not in UPDATABLE_FIELDS or value is None:
                continue
            setattr(user, key, value.value if isinstance(value, Role) else value)
        user.updated_at = datetime.utcnow()
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise DuplicateEmailError("Email is already taken")
        self.session.refresh(user)
        return self._to_dto(user)

    def set_password(self, user_id: int, password_hash: str) -> None:
        user = self._get(user_id)
        if not user:
            return
        user.password = password_hash
        user.reset_token_hash = None
        user.reset_token_expires_at = None
        user.updated_at = datetime.utcnow()
        self.session.add(user)
        self.session.commit()

    def set_reset_token(self, user_id: int, token_hash: str, expires_at: datetime) -> None:
        user = self._get(user_id)
        if not user:
            return
        user.reset_token_hash = token_hash
        user.reset_token_expires_at = expires_at
        self.session.add(user)
        self.session.commit()

    def get_by_reset_token(self, token_hash: str, now: datetime) -> Optional[UserDto]:
        user = self.session.exec(
            select(User)
            .where(User.reset_token_hash == token_hash)
            .where(User.reset_token_expires_at > now)
        ).first()
        return self._to_dto(user) if user else None

    def list(self, search: Optional[str], role: Optional[Role], page: int, limit: int) -> Tuple[List[UserDto], int]:
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(User.name.ilike(pattern), User.email.ilike(pattern), User.phone.ilike(pattern)))
        if role is not None:
            conditions.append(User.role == role.value)

        rows = self.session.exec(
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        total = self.session.exec(select(func.count()).select_from(User).where(*conditions)).one()
        return [self._to_dto(r) for r in rows], int(total)

    def delete(self, user_id: int) -> bool:
        user = self._get(user_id)
        if not user:
            return False
        self.session.delete(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError("User has related records and cannot be deleted")
        return True

    def stats(self, since: datetime) -> Dict[str, Any]:
        total = self.session.exec(select(func.count()).select_from(User)).one()
        by_role = self.session.exec(select(User.role, func.count()).group_by(User.role)).all()
        recent = self.session.exec(select(func.count()).select_from(User).where(User.created_at >= since)).one()
        return {
            "total": int(total),
            "byRole": [{"role": role, "count": int(count)} for role, count in by_role],
            "recent": int(recent),
        }
