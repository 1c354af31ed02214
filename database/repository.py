import logging
from typing import List, Optional, Dict, Any, Iterable

from sqlalchemy.orm import Session

from database.models import (
    Expert, ServiceRequest, ExpertMatchResult, ExpertWorkStatus
)
from database.repositories import ExpertRepository, ServiceRequestRepository, MatchRepository

logger = logging.getLogger(__name__)


class MatchingRepository:
    """
    Persistence boundary consumed by the matching engine.

    Thin facade over the per-table repositories so the engine depends on a
    single object bound to one Session. Nothing here commits; the unit of
    work that owns the Session decides when to commit.
    """

    def __init__(self, db: Session):
        self.db = db
        self.experts = ExpertRepository(db)
        self.requests = ServiceRequestRepository(db)
        self.matches = MatchRepository(db)

    # --- Service requests ---

    def get_request(self, request_id: str) -> Optional[ServiceRequest]:
        return self.requests.get_by_id(request_id)

    def find_open_request(self, request_id: str) -> Optional[ServiceRequest]:
        return self.requests.find_open(request_id)

    def find_open_public_requests(self, request_id: Optional[str] = None) -> List[ServiceRequest]:
        return self.requests.find_open_public(request_id)

    # --- Experts ---

    def get_expert(self, expert_id: str) -> Optional[Expert]:
        return self.experts.get_by_id(expert_id)

    def find_eligible_experts(
        self,
        work_status: Optional[ExpertWorkStatus] = None,
        exclude_off_duty: bool = False,
        search_order: bool = False
    ) -> List[Expert]:
        return self.experts.find_eligible(
            work_status=work_status,
            exclude_off_duty=exclude_off_duty,
            search_order=search_order
        )

    def find_rushing_experts(self) -> List[Expert]:
        return self.experts.find_rushing()

    # --- Matches ---

    def exists_match(self, expert_id: str, request_id: str) -> bool:
        return self.matches.exists(expert_id, request_id)

    def matched_expert_ids(self, request_id: str) -> set:
        return self.matches.existing_expert_ids(request_id)

    def get_match(self, match_id: str) -> Optional[ExpertMatchResult]:
        return self.matches.get_by_id(match_id)

    def get_match_for_pair(self, expert_id: str, request_id: str) -> Optional[ExpertMatchResult]:
        return self.matches.get_for_pair(expert_id, request_id)

    def create_match(self, fields: Dict[str, Any]) -> Optional[ExpertMatchResult]:
        return self.matches.create_if_absent(fields)

    def update_match(self, match_id: str, **fields) -> Optional[ExpertMatchResult]:
        match = self.matches.get_by_id(match_id)
        if match is None:
            return None
        return self.matches.update(match, fields)

    def bulk_update_matches(
        self,
        match_ids: Optional[Iterable[str]] = None,
        expert_id: Optional[str] = None,
        request_id: Optional[str] = None,
        **fields
    ) -> int:
        return self.matches.bulk_update(
            fields, match_ids=match_ids, expert_id=expert_id, request_id=request_id
        )

    def query_matches_for_expert(
        self,
        expert_id: str,
        statuses: Iterable[Any],
        limit: int = 50
    ) -> List[ExpertMatchResult]:
        return self.matches.for_expert(expert_id, statuses, limit)

    def query_matches_for_request(self, request_id: str, limit: int = 50) -> List[ExpertMatchResult]:
        return self.matches.for_request(request_id, limit)

    def query_pending_notifications(
        self,
        expert_id: Optional[str] = None,
        limit: int = 100
    ) -> List[ExpertMatchResult]:
        return self.matches.pending_notifications(expert_id, limit)
