#!/usr/bin/env python3
"""
Expert Matching Service - decides which (expert, service request) pairings
to surface, how strongly, and when.

Operations:
1. Single-request run: score every eligible expert against one OPEN request
2. Manual pairing and push: explicit human decisions, no score threshold
3. RUSHING sweep: periodic pass pairing RUSHING experts with open public
   requests under a lowered threshold
4. Lifecycle: view, dismiss, notification bookkeeping

Every operation reads fresh state through the MatchingRepository. The
existence check before each create is an optimization; the uniqueness
constraint on (expert_id, service_request_id) is what prevents duplicates
when runs overlap.
"""
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Union
import logging

from database.repository import MatchingRepository
from database.models import (
    Expert, ServiceRequest, ExpertMatchResult,
    ExpertWorkStatus, MatchSide, MatchSource, MatchStatus,
    ServiceRequestStatus, enum_value
)
from core.config_loader import MatchingConfig
from core.exceptions import (
    ExpertNotFoundError, MatchConflictError, MatchNotFoundError,
    ServiceRequestNotFoundError, ServiceRequestNotOpenError
)
from core.matcher import lifecycle
from core.matcher.dto import (
    AutoMatchResult, ExpertSearchResult, PushResult, RequestOpenedResult
)
from core.scorer import compose_score, MatchScore

logger = logging.getLogger(__name__)

ACTIVE_MATCH_STATUSES = (MatchStatus.NEW, MatchStatus.VIEWED)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _matches_keyword(expert: Expert, keyword: str) -> bool:
    needle = keyword.lower()
    fields = [expert.personal_name, expert.professional_field, expert.services_offered]
    fields.extend(expert.skill_tags or [])
    return any(needle in str(value).lower() for value in fields if value)


class ExpertMatchingService:
    """
    Matching orchestrator.

    Owns the score thresholds and the dedup policy; delegates scoring to
    core.scorer and persistence to the repository. Nothing here commits;
    callers wrap each operation in a unit of work.
    """

    def __init__(
        self,
        repo: MatchingRepository,
        config: MatchingConfig,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            repo: MatchingRepository bound to the caller's session
            config: MatchingConfig with thresholds and the scoring tables
            clock: Time source for availability freshness and timestamps
        """
        self.repo = repo
        self.config = config
        self.clock = clock or _utcnow

    # --- Scoring ---

    def calculate_match_score(self, expert: Expert, request: ServiceRequest) -> MatchScore:
        return compose_score(expert, request, self.config.scorer, now=self.clock())

    def _match_fields(
        self,
        expert: Expert,
        request: ServiceRequest,
        score: MatchScore,
        source: MatchSource
    ) -> dict:
        return {
            "expert_id": expert.id,
            "service_request_id": request.id,
            "match_source": source,
            "total_score": score.total_score,
            "score_breakdown": score.breakdown.to_dict(),
            "distance_km": score.distance_km,
            "status": MatchStatus.NEW,
            "expert_notified": False,
            "requester_notified": False,
        }

    def _score_and_create(
        self,
        expert: Expert,
        request: ServiceRequest,
        source: MatchSource,
        min_score: Optional[float]
    ) -> Optional[ExpertMatchResult]:
        """Score the pair and create it if it clears min_score (None = no threshold).

        Returns None when below threshold or when another writer created the
        pair first.
        """
        score = self.calculate_match_score(expert, request)
        if min_score is not None and score.total_score < min_score:
            logger.debug(
                f"Expert {expert.id} scored {score.total_score} for request {request.id}, "
                f"below threshold {min_score}"
            )
            return None
        return self.repo.create_match(self._match_fields(expert, request, score, source))

    # --- Single-request run ---

    def run_matching_for_request(self, request_id: str) -> List[ExpertMatchResult]:
        """
        Match all eligible experts against one OPEN request.

        Returns:
            Newly created matches; empty when the request is missing or not OPEN
        """
        request = self.repo.find_open_request(request_id)
        if request is None:
            logger.info(f"Service request {request_id} not found or not open, skipping matching")
            return []

        already_matched = self.repo.matched_expert_ids(request.id)
        experts = self.repo.find_eligible_experts()

        created: List[ExpertMatchResult] = []
        for expert in experts:
            if expert.id in already_matched:
                continue
            match = self._score_and_create(
                expert, request, MatchSource.AI_MATCHED, self.config.min_match_score
            )
            if match is not None:
                created.append(match)

        logger.info(
            f"Matching for request {request_id}: {len(experts)} eligible experts, "
            f"{len(created)} new matches"
        )
        return created

    # --- Explicit pairings ---

    def _repush(self, match: ExpertMatchResult, source: MatchSource) -> ExpertMatchResult:
        return self.repo.update_match(match.id, **lifecycle.apply_repush(match, source))

    def _create_or_repush(
        self,
        expert: Expert,
        request: ServiceRequest,
        source: MatchSource
    ) -> Optional[ExpertMatchResult]:
        existing = self.repo.get_match_for_pair(expert.id, request.id)
        if existing is not None:
            return self._repush(existing, source)

        match = self._score_and_create(expert, request, source, min_score=None)
        if match is None:
            # Lost a race with a concurrent writer; treat it as a re-push
            existing = self.repo.get_match_for_pair(expert.id, request.id)
            if existing is not None:
                return self._repush(existing, source)
        return match

    def create_manual_match(
        self,
        expert_id: str,
        request_id: str,
        source: Union[MatchSource, str] = MatchSource.PLATFORM_RECOMMENDED
    ) -> ExpertMatchResult:
        """
        Pair one expert with one request regardless of score.

        The request does not need to be OPEN. An existing pairing is
        re-pushed instead of duplicated.

        Raises:
            ServiceRequestNotFoundError, ExpertNotFoundError
            MatchConflictError: the pair was written concurrently and could not be re-read
        """
        source = MatchSource(source)
        request = self.repo.get_request(request_id)
        if request is None:
            raise ServiceRequestNotFoundError(request_id)
        expert = self.repo.get_expert(expert_id)
        if expert is None:
            raise ExpertNotFoundError(expert_id)

        match = self._create_or_repush(expert, request, source)
        if match is None:
            raise MatchConflictError(expert_id, request_id)
        logger.info(f"Manual match {match.id}: expert {expert_id} -> request {request_id} ({source.value})")
        return match

    def push_to_experts(
        self,
        request_id: str,
        expert_ids: Iterable[str],
        source: Union[MatchSource, str] = MatchSource.PLATFORM_RECOMMENDED
    ) -> PushResult:
        """
        Push an OPEN request to specific experts.

        Raises:
            ServiceRequestNotFoundError: request id does not resolve
            ServiceRequestNotOpenError: request is not OPEN
        """
        source = MatchSource(source)
        request = self.repo.get_request(request_id)
        if request is None:
            raise ServiceRequestNotFoundError(request_id)
        if request.status != ServiceRequestStatus.OPEN:
            raise ServiceRequestNotOpenError(request_id, request.status)

        result = PushResult()
        for expert_id in expert_ids:
            expert = self.repo.get_expert(expert_id)
            if expert is None:
                logger.warning(f"Push for request {request_id}: expert {expert_id} not found")
                result.failed += 1
                continue

            match = self._create_or_repush(expert, request, source)
            if match is None:
                result.failed += 1
                continue
            result.success += 1
            result.matches.append(match)

        logger.info(
            f"Pushed request {request_id} to experts: {result.success} succeeded, {result.failed} failed"
        )
        return result

    # --- RUSHING sweep ---

    def get_rushing_experts(self) -> List[Expert]:
        return self.repo.find_rushing_experts()

    def auto_match_rushing_experts(self, service_request_id: Optional[str] = None) -> AutoMatchResult:
        """
        Pair RUSHING experts with open public requests.

        Longest-waiting experts go first, higher membership tiers break ties.
        The threshold is lowered by rushing_score_offset. Safe to call
        repeatedly: existing pairs are skipped.

        Args:
            service_request_id: Restrict the sweep to one request
        """
        experts = self.repo.find_rushing_experts()
        requests = self.repo.find_open_public_requests(service_request_id)
        threshold = self.config.rushing_min_score

        result = AutoMatchResult(
            experts_processed=len(experts),
            requests_processed=len(requests)
        )
        if not experts or not requests:
            logger.info(
                f"Rushing sweep: {len(experts)} rushing experts, {len(requests)} open requests, nothing to do"
            )
            return result

        for expert in experts:
            for request in requests:
                if self.repo.exists_match(expert.id, request.id):
                    continue
                match = self._score_and_create(expert, request, MatchSource.AI_MATCHED, threshold)
                if match is not None:
                    result.matches.append(match)

        result.matches_created = len(result.matches)
        logger.info(
            f"Rushing sweep: {result.experts_processed} experts x {result.requests_processed} requests, "
            f"{result.matches_created} new matches"
        )
        return result

    def handle_request_opened(self, request_id: str) -> RequestOpenedResult:
        """Run single-request matching, then the rushing sweep scoped to the same request."""
        matches = self.run_matching_for_request(request_id)
        rushing = self.auto_match_rushing_experts(service_request_id=request_id)
        return RequestOpenedResult(matches=matches, rushing=rushing)

    # --- Search ---

    def search_experts(
        self,
        request_id: str,
        keyword: Optional[str] = None,
        work_status: Optional[Union[ExpertWorkStatus, str]] = None,
        min_score: float = 0,
        limit: Optional[int] = None
    ) -> List[ExpertSearchResult]:
        """
        Rank candidate experts for a request without creating matches.

        The candidate pool is ordered RUSHING, IDLE, others, then by rating;
        `limit` caps that pool before scoring. Results are then filtered by
        min_score and sorted by score descending.

        Raises:
            ServiceRequestNotFoundError
        """
        request = self.repo.get_request(request_id)
        if request is None:
            raise ServiceRequestNotFoundError(request_id)

        if limit is None:
            limit = self.config.default_search_limit
        limit = max(1, min(int(limit), self.config.max_search_limit))

        status = ExpertWorkStatus(enum_value(work_status).upper()) if work_status else None
        candidates = self.repo.find_eligible_experts(
            work_status=status,
            exclude_off_duty=status is None,
            search_order=True
        )
        if keyword and keyword.strip():
            candidates = [e for e in candidates if _matches_keyword(e, keyword.strip())]
        candidates = candidates[:limit]

        already_matched = self.repo.matched_expert_ids(request.id)
        results = []
        for expert in candidates:
            score = self.calculate_match_score(expert, request)
            if score.total_score < min_score:
                continue
            results.append(ExpertSearchResult(
                expert=expert,
                score=score.total_score,
                breakdown=score.breakdown.to_dict(),
                distance_km=score.distance_km,
                has_existing_match=expert.id in already_matched
            ))

        results.sort(key=lambda r: r.score, reverse=True)
        return results

    # --- Queries ---

    def get_matches_for_expert(self, expert_id: str, limit: Optional[int] = None) -> List[ExpertMatchResult]:
        return self.repo.query_matches_for_expert(
            expert_id, ACTIVE_MATCH_STATUSES, limit or self.config.match_list_limit
        )

    def get_matches_for_request(self, request_id: str, limit: Optional[int] = None) -> List[ExpertMatchResult]:
        return self.repo.query_matches_for_request(request_id, limit or self.config.match_list_limit)

    def get_pending_notifications(
        self,
        expert_id: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[ExpertMatchResult]:
        return self.repo.query_pending_notifications(
            expert_id, limit or self.config.pending_notification_limit
        )

    # --- Lifecycle ---

    def _get_match_or_raise(self, match_id: str) -> ExpertMatchResult:
        match = self.repo.get_match(match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        return match

    def mark_as_viewed(self, match_id: str, viewer: Union[MatchSide, str]) -> ExpertMatchResult:
        match = self._get_match_or_raise(match_id)
        return self.repo.update_match(match.id, **lifecycle.apply_view(match, viewer, self.clock()))

    def accept_match(self, match_id: str) -> ExpertMatchResult:
        """Expert accepts a NEW or VIEWED match. Raises MatchStateError otherwise."""
        match = self._get_match_or_raise(match_id)
        match = self.repo.update_match(match.id, **lifecycle.apply_accept(match))
        logger.info(f"Match {match.id} accepted by expert {match.expert_id}")
        return match

    def dismiss_match(self, match_id: str) -> ExpertMatchResult:
        match = self._get_match_or_raise(match_id)
        return self.repo.update_match(match.id, **lifecycle.apply_dismiss(match))

    def mark_as_notified(
        self,
        match_ids: Iterable[str],
        side: Union[MatchSide, str] = MatchSide.EXPERT
    ) -> int:
        """Bulk-set the notified flag and timestamp for one side. Returns rows updated."""
        ids = list(match_ids)
        if not ids:
            return 0
        side = lifecycle.as_side(side)
        updated = self.repo.bulk_update_matches(
            match_ids=ids, **lifecycle.notified_fields(side, self.clock())
        )
        logger.info(f"Marked {updated} matches as notified ({side.value} side)")
        return updated
