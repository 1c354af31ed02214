from sqlalchemy import Column, String, Text, TIMESTAMP, Boolean, Numeric, JSON, Index, func

from .base import Base
from .enums import ServiceRequestStatus
from .expert import _new_id, _utcnow


class ServiceRequest(Base):
    """A buyer's request for on-site service. Only OPEN requests are matchable."""
    __tablename__ = 'service_requests'

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=ServiceRequestStatus.DRAFT.value)
    required_skills = Column(JSON, default=list)
    location_lat = Column(Numeric(10, 7, asdecimal=False), nullable=True)
    location_lng = Column(Numeric(10, 7, asdecimal=False), nullable=True)
    service_location = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow)

    __table_args__ = (
        Index('idx_service_request_status', 'status', 'is_public'),
    )

    def __repr__(self) -> str:
        return f"<ServiceRequest {self.id} {self.title!r} {self.status}>"
