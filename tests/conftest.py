"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import os
import pytest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture(scope="session")
def test_database():
    """
    Session-scoped fixture that manages the test database.

    Uses TEST_DATABASE_URL when set and reachable, otherwise starts a
    PostgreSQL container with testcontainers and creates the tables.
    """
    from tests import check_db_available, SKIP_DB_TESTS

    if SKIP_DB_TESTS:
        pytest.skip("DB tests disabled via SKIP_DB_TESTS")

    external_url = os.environ.get("TEST_DATABASE_URL")
    if external_url:
        if check_db_available():
            from sqlalchemy import create_engine
            from database.models import Base
            Base.metadata.create_all(create_engine(external_url))
            yield external_url
            return
        else:
            pytest.skip("External database not available")

    try:
        from testcontainers.postgres import PostgresContainer

        postgres = PostgresContainer(
            image="postgres:16-alpine",
            username="testuser",
            password="testpass",
            dbname="tenderscout_test",
        )
        postgres.start()
    except Exception as e:
        pytest.skip(f"Could not start test database container: {e}")

    try:
        db_url = postgres.get_connection_url()

        from sqlalchemy import create_engine
        from database.models import Base
        Base.metadata.create_all(create_engine(db_url))

        print(f"\n✓ Test database started: {db_url}")
        yield db_url
    finally:
        postgres.stop()
        print("\n✓ Test database stopped")


@pytest.fixture
def db_session(test_database):
    """A Session on the test database; all tables are emptied afterwards."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from database.models import Base

    engine = create_engine(test_database)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()
        engine.dispose()
