"""
Factories and database helpers shared by the matching tests.
"""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.models import Base, Expert, ServiceRequest

# Reference "now" injected into the matching service clock
FIXED_NOW = datetime(2026, 3, 2, 12, 0, 0, tzinfo=timezone.utc)

SHANGHAI = (31.2304, 121.4737)


def create_test_engine():
    """In-memory SQLite engine with working SAVEPOINTs.

    pysqlite's own transaction handling breaks nested transactions, so
    BEGIN is emitted by SQLAlchemy instead.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    return engine


def create_test_session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def build_expert(**overrides) -> Expert:
    """Unsaved Expert with every scoring field set explicitly."""
    fields = dict(
        id=str(uuid.uuid4()),
        personal_name="Test Expert",
        registration_status="APPROVED",
        is_available=True,
        work_status="IDLE",
        rushing_started_at=None,
        membership_level="STANDARD",
        years_of_experience=5,
        skill_tags=["PLC", "Siemens"],
        professional_field=None,
        services_offered=None,
        certifications=None,
        avg_rating=None,
        total_reviews=0,
        service_radius=None,
        current_location=None,
        location_lat=None,
        location_lng=None,
        last_location_update_at=None,
    )
    fields.update(overrides)
    return Expert(**fields)


def build_request(**overrides) -> ServiceRequest:
    """Unsaved OPEN public ServiceRequest."""
    fields = dict(
        id=str(uuid.uuid4()),
        title="PLC repair",
        description="Production line PLC fault",
        status="OPEN",
        required_skills=["PLC", "Siemens"],
        location_lat=None,
        location_lng=None,
        service_location=None,
        is_public=True,
    )
    fields.update(overrides)
    return ServiceRequest(**fields)


def add_expert(session, **overrides) -> Expert:
    expert = build_expert(**overrides)
    session.add(expert)
    session.flush()
    return expert


def add_request(session, **overrides) -> ServiceRequest:
    request = build_request(**overrides)
    session.add(request)
    session.flush()
    return request


def add_strong_expert(session, **overrides) -> Expert:
    """Co-located, fully skilled expert: IDLE total is 94.5."""
    fields = dict(
        personal_name="Strong Expert",
        location_lat=SHANGHAI[0],
        location_lng=SHANGHAI[1],
        years_of_experience=5,
        avg_rating=4.5,
        total_reviews=10,
    )
    fields.update(overrides)
    return add_expert(session, **fields)


def add_weak_expert(session, **overrides) -> Expert:
    """Unrelated skills, no location: base score 31.0 (BOOKED total 31.0)."""
    fields = dict(
        personal_name="Weak Expert",
        work_status="BOOKED",
        years_of_experience=0,
        skill_tags=["Welding"],
    )
    fields.update(overrides)
    return add_expert(session, **fields)


def add_open_request(session, **overrides) -> ServiceRequest:
    fields = dict(location_lat=SHANGHAI[0], location_lng=SHANGHAI[1])
    fields.update(overrides)
    return add_request(session, **fields)


def hours_ago(hours: float) -> datetime:
    return FIXED_NOW - timedelta(hours=hours)
