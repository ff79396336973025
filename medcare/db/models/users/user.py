# medcare/db/models/users/user.py
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(max_length=255, unique=True, index=True)
    password: str = Field(max_length=255)  # bcrypt hash, never the plaintext
    phone: str = Field(max_length=30)
    role: str = Field(default="patient", max_length=20, index=True)  # patient, doctor, admin
    reset_token_hash: Optional[str] = Field(default=None, max_length=64, index=True)
    reset_token_expires_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
