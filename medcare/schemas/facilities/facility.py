# medcare/schemas/facilities/facility.py
from pydantic import BaseModel, Field, validator
from typing import Optional

from ..auth.auth import validate_email_format

class PharmacyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=150)
    address: Optional[str] = Field(None, max_length=500)
    phone: Optional[str] = Field(None, max_length=30)

    @validator('name')
    def validate_name(cls, v):
        return v.strip() if v is not None else v

class PharmacyCreate(PharmacyUpdate):
    name: str = Field(..., min_length=2, max_length=150)

class LabUpdate(PharmacyUpdate):
    available_tests: Optional[str] = Field(None, alias="availableTests", max_length=1000)

    class Config:
        populate_by_name = True

class LabCreate(LabUpdate):
    name: str = Field(..., min_length=2, max_length=150)

class ClinicUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = Field(None, max_length=1000)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)
    specialization: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None

    @validator('email')
    def validate_email(cls, v):
        if v is None:
            return v
        return validate_email_format(v)

    @validator('website')
    def validate_website(cls, v):
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError('Website must be an http(s) URL')
        return v

class ClinicCreate(ClinicUpdate):
    name: str = Field(..., min_length=1, max_length=150)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    is_active: Optional[bool] = Field(None, exclude=True)
