# medcare/db/models/health/appointment.py
from typing import Optional
from sqlalchemy import DateTime, Index, text
from sqlmodel import SQLModel, Field
from datetime import datetime

# A slot stays taken for every status except cancelled
_ACTIVE_ROW = text("status != 'cancelled'")

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            "uq_appointments_doctor_slot", "doctor_id", "appointment_datetime",
            unique=True, sqlite_where=_ACTIVE_ROW, postgresql_where=_ACTIVE_ROW,
        ),
        Index(
            "uq_appointments_patient_slot", "patient_id", "appointment_datetime",
            unique=True, sqlite_where=_ACTIVE_ROW, postgresql_where=_ACTIVE_ROW,
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    patient_id: int = Field(foreign_key="users.id", index=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True)
    appointment_datetime: datetime = Field(sa_type=DateTime)  # naive local wall clock
    reason: str = Field(max_length=500)
    status: str = Field(default="scheduled", max_length=20)  # scheduled, completed, cancelled
    notes: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
