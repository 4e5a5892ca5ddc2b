import os

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["RATELIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["FRONTEND_BASE_URL"] = "http://localhost:5173"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.ratelimit import limiter
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.complaint import Priority
from app.models.user import UserRole
from app.services import accounts, agencies, categories
from app.services.notify_email import get_mailer

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

PASSWORD = "s3cret-pass"


@pytest.fixture()
def password():
    return PASSWORD


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send_reset_password(self, to_email: str, token: str) -> bool:
        if self.fail:
            return False
        self.sent.append((to_email, token))
        return True


@pytest.fixture()
def db():
    Base.metadata.create_all(engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture()
def open_session(db):
    """Extra sessions on the test database, closed at teardown."""
    sessions = []

    def _open():
        session = TestingSession()
        sessions.append(session)
        return session

    yield _open
    for session in sessions:
        session.close()


@pytest.fixture(autouse=True)
def fresh_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def client(db, mailer):
    def _get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    counter = {"n": 0}

    def _make(role=UserRole.citizen, agency=None, email=None, name=None):
        counter["n"] += 1
        email = email or f"{role.value}{counter['n']}@citizens.org"
        return accounts.register(
            db, email, PASSWORD, name or f"{role.value.title()} {counter['n']}",
            role=role, agency_id=agency.id if agency else None,
        )

    return _make


@pytest.fixture()
def make_agency(db):
    counter = {"n": 0}

    def _make(name=None):
        counter["n"] += 1
        return agencies.create_agency(db, name or f"Agency {counter['n']}", "Handles city matters")

    return _make


@pytest.fixture()
def make_category(db):
    counter = {"n": 0}

    def _make(agency, name=None):
        counter["n"] += 1
        return categories.create_category(db, name or f"Category {counter['n']}", agency.id)

    return _make


@pytest.fixture()
def auth():
    def _headers(user):
        return {"Authorization": f"Bearer {accounts.issue_token(user)}"}

    return _headers


@pytest.fixture()
def file_complaint(client, auth):
    def _file(citizen, category, title="Pothole on Main St", priority=Priority.high):
        r = client.post(
            "/api/complaints",
            json={
                "title": title,
                "description": "Large pothole near the crossing",
                "category_id": category.id,
                "priority": priority.value,
                "location": "Main St & 3rd Ave",
            },
            headers=auth(citizen),
        )
        assert r.status_code == 201, r.text
        return r.json()

    return _file
