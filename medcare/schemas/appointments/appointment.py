# medcare/schemas/appointments/appointment.py
from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime

class AppointmentCreate(BaseModel):
    doctor_id: int
    appointment_date: datetime  # ISO 8601, e.g. 2026-10-26T10:00:00
    reason: str = Field(..., min_length=1, max_length=500)

    @validator('reason')
    def validate_reason(cls, v):
        if not v.strip():
            raise ValueError('Reason is required')
        return v.strip()

class AppointmentStatusUpdate(BaseModel):
    status: str

class CancelAppointmentRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500, description="Reason must be less than 500 characters")
