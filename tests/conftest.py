import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("FAMILYTREE_DATABASE_URL", "sqlite://")
os.environ["FAMILYTREE_IDENTITY_SECRET"] = "test-identity-secret-0123456789abcdef"
os.environ["FAMILYTREE_IDENTITY_ALGORITHMS"] = '["HS256"]'

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from familytree.api.deps import get_db
from familytree.db.base import Base
from familytree.main import app
from familytree.schemas.tree import TreeCreate
from familytree.services.access import Requester
from familytree.services.tree_service import create_tree

SECRET = os.environ["FAMILYTREE_IDENTITY_SECRET"]


def make_token(sub: str, *, name: str | None = None, email: str | None = None, picture: str | None = None, minutes: int = 60) -> str:
    payload = {"sub": sub, "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes)}
    if name:
        payload["name"] = name
    if email:
        payload["email"] = email
    if picture:
        payload["picture"] = picture
    return jwt.encode(payload, SECRET, algorithm="HS256")


def bearer(sub: str, **claims) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, **claims)}"}


def person(first_name: str, gender: str, role: str, **extra) -> dict:
    return {"first_name": first_name, "gender": gender, "role": role, **extra}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return bearer("subject-ada", name="Ada", email="ada@example.com")


@pytest.fixture
def other_headers():
    return bearer("subject-bob", name="Bob", email="bob@example.com")


@pytest.fixture
def guest_headers(client):
    token = client.post("/guest-sessions/start").json()["guest_session_id"]
    return {"X-Guest-Session-Id": token}


@pytest.fixture
def tree(db):
    """An empty guest-owned tree for service-level tests."""
    t, _ = create_tree(db, Requester(guest_session_id="guest-token"), TreeCreate(name="Service Tree"))
    return t
