"""
Pytest configuration.

Registers the ``integration`` marker (tests against a real LLM provider,
skipped unless ``--run-integration`` is given) and provides an in-memory
database wired into the FastAPI app through dependency overrides.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.main import app
from src.core.config import settings
from src.core.db import get_db, init_db


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against a real LLM provider"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring a real LLM provider"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def session_factory():
    """Fresh in-memory SQLite database shared by every session in one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """TestClient bound to the test database, with MOCK extraction enabled"""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    original_mock = settings.mock
    settings.mock = True
    app.dependency_overrides[get_db] = override_get_db

    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        settings.mock = original_mock


@pytest.fixture
def count_rows(db):
    """Row count for an ORM table in the test database"""
    def _count(model) -> int:
        return db.scalar(select(func.count()).select_from(model))
    return _count
