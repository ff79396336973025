# medcare/db/models/facilities/lab.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

class Lab(SQLModel, table=True):
    __tablename__ = "labs"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=150, unique=True, index=True)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=30)
    available_tests: Optional[str] = Field(default=None, max_length=1000)  # free text, comma separated
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
