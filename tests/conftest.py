"""
Pytest configuration and fixtures.

Database fixtures use an in-memory SQLite database created fresh for each
test. Shared factories live in tests/fixtures/matching_fixtures.py.
"""

import pytest

from core.config_loader import MatchingConfig
from core.matcher import ExpertMatchingService
from database.repository import MatchingRepository
from tests.fixtures.matching_fixtures import (
    FIXED_NOW,
    create_test_engine,
    create_test_session_factory,
)


@pytest.fixture
def db_engine():
    engine = create_test_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_test_session_factory(db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repo(db_session):
    return MatchingRepository(db_session)


@pytest.fixture
def matching_config():
    return MatchingConfig()


@pytest.fixture
def matching_service(repo, matching_config):
    return ExpertMatchingService(repo, matching_config, clock=lambda: FIXED_NOW)
