"""Common test fixtures for the knowledge base service."""
import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_MAX_CALLS", "10000")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kb.auth.deps import get_db
from kb.db.session import init_db
from kb.main import create_app
from kb.models.user import User


@pytest.fixture
def engine():
    """A fresh in-memory database shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def _make_user(db, email):
    user = User(email=email, password_hash="unused")
    db.add(user)
    db.commit()
    return user.id


@pytest.fixture
def owner(db):
    """Id of a user row for service-level tests."""
    return _make_user(db, "owner@example.com")


@pytest.fixture
def stranger(db):
    return _make_user(db, "stranger@example.com")


@pytest.fixture
def app(session_factory):
    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    return app


@pytest.fixture
def make_client(app):
    """Factory for logged-in clients; each one has its own cookie jar."""
    clients = []

    def _make(email="a@x.com", password="password1"):
        client = TestClient(app)
        resp = client.post("/auth/register", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.text
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def client(make_client):
    return make_client()
