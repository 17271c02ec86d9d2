"""
Pytest configuration and fixtures for the backoffice tests.

Every test gets a fresh in-memory SQLite database with foreign keys enabled.
The API's ``get_db`` dependency is overridden to hand out sessions bound to
that database, so no PostgreSQL server is needed.
"""

import os

# Tables are created per test below, not by the application lifespan.
os.environ["SKIP_DB_INIT"] = "1"

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backoffice.core.security import create_user, token_for_user
from backoffice.db.session import Base, get_db, init_database
from backoffice.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    init_database(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def user_factory(db):
    """
    Helper fixture that creates users directly through the security module.
    Returns a callable so tests can create both admin and operator users.
    """
    def _create_user(*, role: str = "operator", username: str = None,
                     password: str = "Password123!", is_active: bool = True) -> dict:
        user = create_user(
            db=db,
            username=username or f"{role}_{uuid4().hex[:8]}",
            password=password,
            role=role,
            is_active=is_active,
        )
        token = token_for_user(user)
        return {
            "user": user,
            "token": token,
            "username": user.username,
            "password": password,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _create_user


@pytest.fixture
def admin_headers(user_factory):
    return user_factory(role="admin")["headers"]


@pytest.fixture
def operator_headers(user_factory):
    return user_factory(role="operator")["headers"]
