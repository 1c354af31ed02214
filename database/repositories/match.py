import logging
from typing import List, Optional, Any, Dict, Iterable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from database.models import ExpertMatchResult, enum_value
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class MatchRepository(BaseRepository):
    model = ExpertMatchResult

    def get_for_pair(self, expert_id: str, request_id: str) -> Optional[ExpertMatchResult]:
        stmt = select(ExpertMatchResult).where(
            ExpertMatchResult.expert_id == expert_id,
            ExpertMatchResult.service_request_id == request_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def exists(self, expert_id: str, request_id: str) -> bool:
        stmt = select(ExpertMatchResult.id).where(
            ExpertMatchResult.expert_id == expert_id,
            ExpertMatchResult.service_request_id == request_id
        ).limit(1)
        return self.db.execute(stmt).first() is not None

    def existing_expert_ids(self, request_id: str) -> set:
        stmt = select(ExpertMatchResult.expert_id).where(
            ExpertMatchResult.service_request_id == request_id
        )
        return set(self.db.execute(stmt).scalars().all())

    def create_if_absent(self, fields: Dict[str, Any]) -> Optional[ExpertMatchResult]:
        """Insert a match inside a SAVEPOINT.

        Returns None when the (expert, request) pair already exists; the
        enclosing transaction and any other pending work are left intact.
        """
        match = ExpertMatchResult(**{k: enum_value(v) for k, v in fields.items()})
        try:
            with self.db.begin_nested():
                self.db.add(match)
                self.db.flush()
        except IntegrityError:
            logger.warning(
                f"Match for expert {fields.get('expert_id')} / request "
                f"{fields.get('service_request_id')} already exists, skipping"
            )
            return None
        return match

    def update(self, match: ExpertMatchResult, fields: Dict[str, Any]) -> ExpertMatchResult:
        for key, value in fields.items():
            setattr(match, key, enum_value(value))
        self.db.flush()
        return match

    def bulk_update(
        self,
        fields: Dict[str, Any],
        match_ids: Optional[Iterable[str]] = None,
        expert_id: Optional[str] = None,
        request_id: Optional[str] = None
    ) -> int:
        stmt = update(ExpertMatchResult)
        has_filter = False

        if match_ids is not None:
            ids = list(match_ids)
            if not ids:
                return 0
            stmt = stmt.where(ExpertMatchResult.id.in_(ids))
            has_filter = True
        if expert_id is not None:
            stmt = stmt.where(ExpertMatchResult.expert_id == expert_id)
            has_filter = True
        if request_id is not None:
            stmt = stmt.where(ExpertMatchResult.service_request_id == request_id)
            has_filter = True

        if not has_filter:
            raise ValueError("bulk_update requires at least one filter")

        values = {k: enum_value(v) for k, v in fields.items()}
        result = self.db.execute(stmt.values(**values).execution_options(synchronize_session="fetch"))
        return result.rowcount

    def for_expert(self, expert_id: str, statuses: Iterable[Any], limit: int) -> List[ExpertMatchResult]:
        stmt = (
            select(ExpertMatchResult)
            .where(
                ExpertMatchResult.expert_id == expert_id,
                ExpertMatchResult.status.in_([enum_value(s) for s in statuses])
            )
            .order_by(ExpertMatchResult.total_score.desc(), ExpertMatchResult.created_at.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def for_request(self, request_id: str, limit: int) -> List[ExpertMatchResult]:
        stmt = (
            select(ExpertMatchResult)
            .where(ExpertMatchResult.service_request_id == request_id)
            .order_by(ExpertMatchResult.total_score.desc(), ExpertMatchResult.created_at.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def pending_notifications(self, expert_id: Optional[str], limit: int) -> List[ExpertMatchResult]:
        stmt = select(ExpertMatchResult).where(ExpertMatchResult.expert_notified.is_(False))
        if expert_id is not None:
            stmt = stmt.where(ExpertMatchResult.expert_id == expert_id)
        stmt = stmt.order_by(ExpertMatchResult.created_at.asc(), ExpertMatchResult.id).limit(limit)
        return list(self.db.execute(stmt).scalars().all())
