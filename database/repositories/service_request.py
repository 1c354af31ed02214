from typing import List, Optional

from sqlalchemy import select

from database.models import ServiceRequest, ServiceRequestStatus
from database.repositories.base import BaseRepository


class ServiceRequestRepository(BaseRepository):
    model = ServiceRequest

    def find_open(self, request_id: str) -> Optional[ServiceRequest]:
        stmt = select(ServiceRequest).where(
            ServiceRequest.id == request_id,
            ServiceRequest.status == ServiceRequestStatus.OPEN.value
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def find_open_public(self, request_id: Optional[str] = None) -> List[ServiceRequest]:
        stmt = select(ServiceRequest).where(
            ServiceRequest.status == ServiceRequestStatus.OPEN.value,
            ServiceRequest.is_public.is_(True)
        )
        if request_id is not None:
            stmt = stmt.where(ServiceRequest.id == request_id)

        stmt = stmt.order_by(ServiceRequest.created_at, ServiceRequest.id)
        return list(self.db.execute(stmt).scalars().all())
