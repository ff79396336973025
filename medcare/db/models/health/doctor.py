# medcare/db/models/health/doctor.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    name: str = Field(max_length=100)
    email: Optional[str] = Field(default=None, max_length=255, index=True)
    phone: Optional[str] = Field(default=None, max_length=30)
    specialization: Optional[str] = Field(default=None, max_length=100, index=True)
    hospital_id: Optional[int] = Field(default=None, index=True)  # weak reference, no FK
    open_hour: str = Field(default="09:00", max_length=5)  # HH:MM
    close_hour: str = Field(default="17:00", max_length=5)  # HH:MM
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
