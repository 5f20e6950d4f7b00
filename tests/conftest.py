import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ADMIN_INVITE_CODE", "test-invite")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_portal.db")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from trainer_portal.database import Base, get_db
from trainer_portal.main import app
from trainer_portal.models.batch import Batch, BatchTrainer
from trainer_portal.models.user import User
from trainer_portal.utils.clock import FrozenClock, get_clock
from trainer_portal.utils.security import hash_password
from trainer_portal.utils.time_window import combine, parse_date, parse_time

TEST_DB_URL = "sqlite:///./test_portal.db"
PASSWORD = "Passw0rd!Strong"

# 2026-03-10 10:00 in the schedule offset (UTC+05:30).
NOW = datetime(2026, 3, 10, 4, 30, tzinfo=timezone.utc)

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clock():
    frozen = FrozenClock(NOW)
    app.dependency_overrides[get_clock] = lambda: frozen
    yield frozen
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    password_hash = hash_password(PASSWORD)
    users = {
        "admin": User(full_name="Admin User", email="admin@example.com", password_hash=password_hash, role="admin"),
        "asha": User(full_name="Asha Rao", email="asha@example.com", password_hash=password_hash, role="trainer"),
        "ravi": User(full_name="Ravi Kumar", email="ravi@example.com", password_hash=password_hash, role="trainer"),
        "meera": User(full_name="Meera Iyer", email="meera@example.com", password_hash=password_hash, role="trainer"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


def make_batch(db, name, trainers, day, start, end, created_by, cancelled=False, credentials=None):
    """Insert a batch directly, bypassing validation (for past or overlapping fixtures)."""
    batch = Batch(
        name=name,
        start_at=combine(parse_date(day), parse_time(start)),
        end_at=combine(parse_date(day), parse_time(end)),
        is_cancelled=cancelled,
        created_by=created_by.user_id,
    )
    batch.trainer_links = [
        BatchTrainer(user_id=trainer.user_id, position=position)
        for position, trainer in enumerate(trainers)
    ]
    if credentials:
        batch.login_url, batch.lab_username, batch.lab_password = credentials
    db.add(batch)
    db.commit()
    db.refresh(batch)
    return batch


def batch_payload(**overrides) -> dict:
    payload = {
        "name": "React 101",
        "trainer_ids": [],
        "date": "2026-03-10",
        "start_time": "10:30",
        "end_time": "11:30",
        "lab_credentials": {
            "login_url": "https://lab.example.com/login",
            "username": "react-lab",
            "password": "Lab@Pass123",
        },
    }
    payload.update(overrides)
    return payload


def get_token(client, email: str, password: str = PASSWORD) -> str:
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str, password: str = PASSWORD) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email, password)}"}
