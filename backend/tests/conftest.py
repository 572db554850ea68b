"""
Central pytest configuration for the wellness clinic tests.

This file provides common fixtures and marker setup for both unit and
integration tests. Environment defaults are set before any application
module is imported so import-time configuration sees them.
"""

import os

# Test database configuration (set early so the lazy engine uses it)
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("REPOSITORY_BACKEND", "memory")
os.environ.setdefault("WELLNESS_TAX_RATE", "0.08")
os.environ.setdefault("PACKAGE_SESSION_POLICY", "reject")

import pytest  # noqa: E402

from tests.config.markers import (  # noqa: E402,F401
    pytest_collection_modifyitems,
    pytest_configure,
)
from wellness_clinic.db.seed import build_demo_data  # noqa: E402
from wellness_clinic.db.session import (  # noqa: E402
    SessionLocal,
    create_tables,
    drop_tables,
)
from wellness_clinic.main import build_services, create_app  # noqa: E402


@pytest.fixture
def demo_data():
    """Fresh copy of the reference clinic for each test."""
    return build_demo_data()


@pytest.fixture
def services(demo_data):
    """Application services wired to in-memory repositories."""
    return build_services(demo_data)


@pytest.fixture
def scheduling_service(services):
    return services["scheduling"]


@pytest.fixture
def billing_service(services):
    return services["billing"]


@pytest.fixture
def app():
    app = create_app({"TESTING": True, "REPOSITORY_BACKEND": "memory"})
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db_session():
    """SQLite in-memory session with fresh tables for each test."""
    create_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        drop_tables()


@pytest.fixture
def response_helper():
    """Simple response helper for integration tests."""

    class ResponseHelper:
        @staticmethod
        def assert_json_response(response, expected_status=200):
            assert response.status_code == expected_status, response.get_data(
                as_text=True
            )
            return response.get_json()

    return ResponseHelper()
