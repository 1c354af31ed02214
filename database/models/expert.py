import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, TIMESTAMP, Boolean, Integer, Numeric, JSON, Index, func

from .base import Base
from .enums import RegistrationStatus, ExpertWorkStatus, MembershipLevel


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Expert(Base):
    """
    An individual service provider that can be paired with service requests.

    Read-mostly from the engine's point of view: scoring only reads these
    fields, the surrounding application owns their updates.
    """
    __tablename__ = 'individual_experts'

    id = Column(String(36), primary_key=True, default=_new_id)
    personal_name = Column(Text, nullable=False)
    registration_status = Column(String(20), nullable=False, default=RegistrationStatus.PENDING.value)

    # Availability and queue position
    is_available = Column(Boolean, nullable=False, default=True)
    work_status = Column(String(20), nullable=False, default=ExpertWorkStatus.IDLE.value)
    rushing_started_at = Column(TIMESTAMP(timezone=True), nullable=True)
    membership_level = Column(String(20), nullable=False, default=MembershipLevel.STANDARD.value)

    # Profile used for skill and keyword relevance
    years_of_experience = Column(Integer, nullable=True)
    skill_tags = Column(JSON, default=list)
    professional_field = Column(Text, nullable=True)
    services_offered = Column(Text, nullable=True)
    certifications = Column(JSON, nullable=True)

    # Aggregated from service records
    avg_rating = Column(Numeric(3, 2, asdecimal=False), nullable=True)
    total_reviews = Column(Integer, nullable=False, default=0)

    # Location; service_radius is in km, NULL means no limit
    service_radius = Column(Integer, nullable=True)
    current_location = Column(Text, nullable=True)
    location_lat = Column(Numeric(10, 7, asdecimal=False), nullable=True)
    location_lng = Column(Numeric(10, 7, asdecimal=False), nullable=True)
    last_location_update_at = Column(TIMESTAMP(timezone=True), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow)

    __table_args__ = (
        Index('idx_expert_eligible', 'registration_status', 'is_available'),
        Index('idx_expert_work_status', 'work_status', 'rushing_started_at'),
    )

    def __repr__(self) -> str:
        return f"<Expert {self.id} {self.personal_name!r} {self.work_status}>"
