import os

# Settings are read once at import time, so the test environment goes in first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import date, datetime, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from medcare.main import app
from medcare.database import create_db_and_tables, get_session
from medcare.db.models import Doctor
from medcare.application.identity import Role
from medcare.dependencies import get_password_hasher
from medcare.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def next_monday_10am():
    today = date.today()
    days_ahead = (7 - today.weekday()) % 7 or 7
    return datetime.combine(today + timedelta(days=days_ahead), time(10, 0))


def register(client, name, email, password="secret123", phone="555-0100", role=None):
    payload = {"name": name, "email": email, "password": password, "phone": phone}
    if role:
        payload["type"] = role
    res = client.post("/api/auth/register", json=payload)
    assert res.status_code == 201, res.text
    return res.json()["data"]


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def seed_admin(session, client, email="admin@example.com", password="adminpass"):
    repo = SqlUserRepository(session)
    repo.create("Admin", email, get_password_hasher().hash(password), "555-0199", Role.ADMIN)
    res = client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return res.json()["data"]["token"]


def seed_doctor(session, doctor_id=7, user_id=None, **fields):
    values = {"name": "Dr. Gray", "specialization": "Cardiology", "open_hour": "09:00", "close_hour": "17:00"}
    values.update(fields)
    doctor = Doctor(id=doctor_id, user_id=user_id, **values)
    session.add(doctor)
    session.commit()
    return doctor
