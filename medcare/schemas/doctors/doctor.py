# medcare/schemas/doctors/doctor.py
from pydantic import BaseModel, Field, validator
from typing import Optional
import re

from ..auth.auth import validate_email_format

HOUR_PATTERN = re.compile(r'^(([01]\d|2[0-3]):[0-5]\d|24:00)$')

def validate_hour_format(v: Optional[str]) -> Optional[str]:
    if v is not None and not HOUR_PATTERN.match(v):
        raise ValueError('Working hours must use HH:MM format')
    return v

class DoctorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)
    specialization: Optional[str] = Field(None, max_length=100)
    hospital_id: Optional[int] = Field(None, alias="hospitalId")
    open_hour: Optional[str] = Field(None, alias="openHour", description="HH:MM; only the hour is compared, minutes are ignored")
    close_hour: Optional[str] = Field(None, alias="closeHour", description="HH:MM, exclusive; only the hour is compared, so 17:30 closes bookings at 17:00")
    is_active: Optional[bool] = Field(None, alias="isActive")
    user_id: Optional[int] = Field(None, alias="userId", description="Linked doctor account (admin only)")

    class Config:
        populate_by_name = True

    @validator('email')
    def validate_email(cls, v):
        if v is None:
            return v
        return validate_email_format(v)

    @validator('open_hour', 'close_hour')
    def validate_hours(cls, v):
        return validate_hour_format(v)

class DoctorCreate(DoctorUpdate):
    name: str = Field(..., min_length=2, max_length=100)
