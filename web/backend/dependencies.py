#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache
from typing import Generator

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from core.matcher import ExpertMatchingService
from database.repository import MatchingRepository
from .config import get_config


class DatabaseManager:
    """Engine and session factory for the API process."""

    def __init__(self, url: str):
        self.engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_size=10,
            max_overflow=20
        )
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a database session.

        Uncommitted work is rolled back when the session closes; routes
        commit explicitly after mutations.
        """
        session = self.SessionLocal()
        try:
            yield session
        finally:
            session.close()


@lru_cache()
def get_db_manager() -> DatabaseManager:
    """Created on first use so importing the app does not open a pool."""
    return DatabaseManager(get_config().database.url)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session from the shared pool."""
    yield from get_db_manager().get_session()


def get_matching_service(db: Session = Depends(get_db)) -> ExpertMatchingService:
    """Matching service bound to the request's session."""
    return ExpertMatchingService(MatchingRepository(db), get_config().matching)
