from sqlalchemy import Column, String, TIMESTAMP, ForeignKey, Boolean, Numeric, JSON, UniqueConstraint, Index, func
from sqlalchemy.orm import relationship

from .base import Base
from .enums import MatchSource, MatchStatus
from .expert import _new_id, _utcnow


class ExpertMatchResult(Base):
    """
    A scored pairing between one expert and one service request.

    Tracks:
    - Total score and per-factor weighted contributions
    - Where the pairing came from (automatic, platform, buyer)
    - View/dismiss lifecycle
    - Notification bookkeeping for both sides

    At most one row exists per (expert_id, service_request_id); the unique
    constraint is what makes concurrent matching runs safe.
    """
    __tablename__ = 'expert_match_results'

    id = Column(String(36), primary_key=True, default=_new_id)
    expert_id = Column(String(36), ForeignKey('individual_experts.id', ondelete='CASCADE'), nullable=False)
    service_request_id = Column(String(36), ForeignKey('service_requests.id', ondelete='CASCADE'), nullable=False)

    match_source = Column(String(50), nullable=False, default=MatchSource.AI_MATCHED.value)
    total_score = Column(Numeric(5, 2, asdecimal=False), nullable=False)
    score_breakdown = Column(JSON, default=dict)
    # NULL means the pair is not geo-comparable, which is not the same as 0 km
    distance_km = Column(Numeric(10, 2, asdecimal=False), nullable=True)

    status = Column(String(20), nullable=False, default=MatchStatus.NEW.value)

    expert_notified = Column(Boolean, nullable=False, default=False)
    expert_notified_at = Column(TIMESTAMP(timezone=True), nullable=True)
    requester_notified = Column(Boolean, nullable=False, default=False)
    requester_notified_at = Column(TIMESTAMP(timezone=True), nullable=True)

    expert_viewed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    requester_viewed_at = Column(TIMESTAMP(timezone=True), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow)

    expert = relationship("Expert")
    service_request = relationship("ServiceRequest")

    __table_args__ = (
        UniqueConstraint('expert_id', 'service_request_id', name='uq_expert_match_pair'),
        Index('idx_expert_match_expert', 'expert_id', 'status'),
        Index('idx_expert_match_request', 'service_request_id'),
        Index('idx_expert_match_score', 'total_score'),
        Index('idx_expert_match_notified', 'expert_notified'),
    )

    def __repr__(self) -> str:
        return (f"<ExpertMatchResult {self.id} expert={self.expert_id} "
                f"request={self.service_request_id} score={self.total_score} {self.status}>")
