# medcare/schemas/users/user.py
from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, Any

from ...application.identity import Role
from ...application.ports.user_repo import UserDto
from ..auth.auth import validate_email_format

def user_to_dict(user: UserDto) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "type": user.role.value,
        "created_at": user.created_at,
    }

class UpdateProfileRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, min_length=1, max_length=30)

    @validator('name')
    def validate_name(cls, v):
        if v is not None:
            return v.strip()
        return v

class UpdateUserRequest(UpdateProfileRequest):
    email: Optional[str] = None
    type: Optional[Role] = None

    @validator('email')
    def validate_email(cls, v):
        if v is None:
            return v
        return validate_email_format(v)
