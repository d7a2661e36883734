# tests/conftest.py
import itertools
import os
import tempfile

# point the app at a throwaway SQLite file before anything imports app.db
_TMP = tempfile.mkdtemp(prefix="fixify-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["JWT_SECRET"] = "test-secret"
for _var in ("CLOUDINARY_URL", "CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET", "GEMINI_API_KEY"):
    os.environ[_var] = ""

import pytest
from fastapi.testclient import TestClient

from app import crud
from app.db import Base, SessionLocal, engine
from app.schemas import ActingUser
from app.security import create_access_token, hash_password

_emails = itertools.count(1)


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(role="user", name=None, password="secret123"):
        n = next(_emails)
        return crud.create_user(db, {
            "name": name or f"User {n}",
            "email": f"user{n}@mailbox.org",
            "password_hash": hash_password(password),
            "phone": "9000000000",
            "role": role,
        })
    return _make


def acting(user):
    return ActingUser(id=user.id, role=user.role)


def auth_header(user):
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def client():
    from app.main import app
    return TestClient(app)


@pytest.fixture
def listing_fields():
    return {
        "title": "Plumber on-call",
        "category": "plumbing",
        "type": "service",
        "contact_number": "9876543210",
    }
