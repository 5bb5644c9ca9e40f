"""Shared test fixtures."""

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from gedkeeper.database import enable_sqlite_savepoints, get_session, get_transactional_session, transaction
from gedkeeper.main import app
from gedkeeper.models import DataSet


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="data_set")
def data_set_fixture(session: Session) -> DataSet:
    data_set = DataSet(name="test", title="Test tree")
    session.add(data_set)
    session.commit()
    session.refresh(data_set)
    return data_set


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        yield session

    def get_transactional_session_override():
        with transaction(session):
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_transactional_session] = get_transactional_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
