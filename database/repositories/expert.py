import logging
from typing import List, Optional

from sqlalchemy import select, case

from database.models import (
    Expert, RegistrationStatus, ExpertWorkStatus, MEMBERSHIP_RANK, enum_value
)
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def membership_rank_expr():
    """SQL expression ranking membership tiers numerically (text order is not tier order)."""
    return case(
        {level.value: rank for level, rank in MEMBERSHIP_RANK.items()},
        value=Expert.membership_level,
        else_=0,
    )


def work_status_priority_expr():
    """RUSHING first, then IDLE, then everything else."""
    return case(
        {ExpertWorkStatus.RUSHING.value: 0, ExpertWorkStatus.IDLE.value: 1},
        value=Expert.work_status,
        else_=2,
    )


class ExpertRepository(BaseRepository):
    model = Expert

    def find_eligible(
        self,
        work_status: Optional[ExpertWorkStatus] = None,
        exclude_off_duty: bool = False,
        search_order: bool = False
    ) -> List[Expert]:
        """Approved and available experts, optionally narrowed by work status.

        With search_order the pool is ordered RUSHING, IDLE, others, then by
        rating descending with unrated experts last.
        """
        stmt = select(Expert).where(
            Expert.registration_status == RegistrationStatus.APPROVED.value,
            Expert.is_available.is_(True)
        )

        if work_status is not None:
            stmt = stmt.where(Expert.work_status == enum_value(work_status))
        elif exclude_off_duty:
            stmt = stmt.where(Expert.work_status != ExpertWorkStatus.OFF_DUTY.value)

        if search_order:
            stmt = stmt.order_by(
                work_status_priority_expr(),
                Expert.avg_rating.desc().nulls_last(),
                Expert.id
            )
        else:
            stmt = stmt.order_by(Expert.created_at, Expert.id)

        return list(self.db.execute(stmt).scalars().all())

    def find_rushing(self) -> List[Expert]:
        """RUSHING experts, longest-waiting first, then higher membership tier."""
        stmt = (
            select(Expert)
            .where(
                Expert.work_status == ExpertWorkStatus.RUSHING.value,
                Expert.registration_status == RegistrationStatus.APPROVED.value,
                Expert.is_available.is_(True)
            )
            .order_by(
                Expert.rushing_started_at.asc().nulls_last(),
                membership_rank_expr().desc(),
                Expert.id
            )
        )
        return list(self.db.execute(stmt).scalars().all())
