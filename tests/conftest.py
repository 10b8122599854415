"""Shared fixtures: in-memory SQLite database, repositories and API clients."""

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from app.core.config import Settings
from app.db import base  # noqa: F401
from app.db.repositories.user import UserRepository
from app.db.session import Database
from app.main import create_app


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL_OVERRIDE": "sqlite://",
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def database(settings: Settings) -> Iterator[Database]:
    db = Database(settings)
    SQLModel.metadata.create_all(db.engine)
    yield db
    db.dispose()


@pytest.fixture
def session(database: Database) -> Iterator[Session]:
    with database.session() as s:
        yield s


@pytest.fixture
def repository(session: Session) -> UserRepository:
    return UserRepository(session)


@pytest.fixture
def client(settings: Settings, database: Database) -> Iterator[TestClient]:
    app = create_app(settings, database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_client() -> Iterator[Callable[..., TestClient]]:
    """Build a client for an app with custom settings; closed at teardown."""
    opened: list[TestClient] = []

    def _make(raise_server_exceptions: bool = True, **overrides) -> TestClient:
        app = create_app(make_settings(**overrides))
        test_client = TestClient(app, raise_server_exceptions=raise_server_exceptions)
        test_client.__enter__()
        opened.append(test_client)
        return test_client

    yield _make

    for test_client in opened:
        test_client.__exit__(None, None, None)


@pytest.fixture
def create_user(client: TestClient) -> Callable[..., dict]:
    """POST a user and return the created entity."""

    def _create(**fields) -> dict:
        payload = {"name": "Ana Gomez", "email": "ana@example.com"}
        payload.update(fields)
        response = client.post("/api/users", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
