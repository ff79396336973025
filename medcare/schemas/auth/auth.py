# medcare/schemas/auth/auth.py
from pydantic import BaseModel, Field, validator
from typing import Optional
import re

from ...application.identity import Role

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

def validate_email_format(v: str) -> str:
    v = v.strip().lower()
    if not EMAIL_PATTERN.match(v):
        raise ValueError('Must be a valid email')
    return v

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="User's full name")
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=72, description="At least 6 characters")
    phone: str = Field(..., min_length=1, max_length=30)
    type: Optional[Role] = Field(None, description="patient (default), doctor or admin")

    @validator('name', 'phone')
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Field is required')
        return v.strip()

    @validator('email')
    def validate_email(cls, v):
        return validate_email_format(v)

class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)

    @validator('email')
    def validate_email(cls, v):
        return validate_email_format(v)

class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=6, max_length=72)

    class Config:
        populate_by_name = True

class ForgotPasswordRequest(BaseModel):
    email: str

    @validator('email')
    def validate_email(cls, v):
        return validate_email_format(v)

class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=6, max_length=72)

    class Config:
        populate_by_name = True
