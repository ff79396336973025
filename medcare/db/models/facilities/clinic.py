# medcare/db/models/facilities/clinic.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

class Clinic(SQLModel, table=True):
    __tablename__ = "clinics"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=150, index=True)
    description: Optional[str] = Field(default=None, max_length=1000)
    address: str = Field(max_length=500)
    city: str = Field(max_length=100, index=True)
    phone: Optional[str] = Field(default=None, max_length=30)
    email: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=255)
    specialization: Optional[str] = Field(default=None, max_length=100)
    is_active: bool = Field(default=True)  # deletes only deactivate
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
