# medcare/schemas/hospitals/hospital.py
from pydantic import BaseModel, Field, validator
from typing import Optional

from ..auth.auth import validate_email_format

class HospitalUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=150)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = None

    @validator('email')
    def validate_email(cls, v):
        if v is None:
            return v
        return validate_email_format(v)

class HospitalCreate(HospitalUpdate):
    name: str = Field(..., min_length=2, max_length=150)
