# medcare/db/models/health/hospital.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

class Hospital(SQLModel, table=True):
    __tablename__ = "hospitals"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=150, index=True)
    address: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100, index=True)
    phone: Optional[str] = Field(default=None, max_length=30)
    email: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
