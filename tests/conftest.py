"""Pytest configuration and shared fixtures.

Every test gets its own SQLite database file under ``tmp_path``, so
committed data never leaks between tests and several sessions can work
against the same database (the concurrency tests rely on this).
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import docflow.db.models  # noqa: F401  (registers tables on Base.metadata)
from docflow.api.deps import get_db, get_document_service, get_workflow_config
from docflow.common.config import WorkflowConfig
from docflow.core.security import create_access_token
from docflow.db.base import Base
from docflow.db.seed import seed_directory
from tests import factories


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'docflow-test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def workflow_config():
    return WorkflowConfig()


@pytest.fixture
def service(db_session, workflow_config):
    """Document service wired the same way the API wires it."""
    return get_document_service(db_session, workflow_config)


# ---------------------------------------------------------------------------
# Directory and templates
# ---------------------------------------------------------------------------


@pytest.fixture
def admin(db_session):
    """The default administrative party; holds decision authority."""
    return seed_directory(db_session)


@pytest.fixture
def submitter(db_session):
    return factories.create_party(db_session, name="alice", unit="hr", team="recruiting")


@pytest.fixture
def outsider(db_session):
    return factories.create_party(db_session, name="mallory", unit="hr")


@pytest.fixture
def template(db_session):
    return factories.create_template(db_session)


@pytest.fixture
def trip_data():
    return {"destination": "Busan", "start_date": "2026-11-02", "budget": 1200}


@pytest.fixture
def party_factory(db_session):
    def _create(**kwargs):
        return factories.create_party(db_session, **kwargs)
    return _create


@pytest.fixture
def template_factory(db_session):
    def _create(**kwargs):
        return factories.create_template(db_session, **kwargs)
    return _create


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


@pytest.fixture
def client(session_factory):
    from docflow.api.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_workflow_config] = lambda: WorkflowConfig()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(party) -> dict:
        return {"Authorization": f"Bearer {create_access_token(party.id)}"}
    return _headers
