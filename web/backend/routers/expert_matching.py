#!/usr/bin/env python3
"""
Expert matching endpoints - run, push, search and manage expert/request pairings.

Every route works on one request-scoped session; mutating routes commit
before responding.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.matcher import ExpertMatchingService
from database.models import ExpertWorkStatus, MatchSource
from ..dependencies import get_matching_service
from ..models.requests import PushRequest, ViewRequest, MarkNotifiedRequest
from ..models.responses import (
    AutoMatchResponse,
    ExpertSearchItem,
    ExpertSearchResponse,
    MarkNotifiedResponse,
    MatchListResponse,
    MatchResponse,
    PendingNotificationsResponse,
    PushResponse,
    RushingExpertsResponse,
)
from ..utils import expert_to_summary, match_to_item, match_to_pending

logger = logging.getLogger(__name__)

# Per client address, on the endpoints that score every eligible expert
MATCHING_RUN_RATE_LIMIT = "30/minute"

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/expert-matching", tags=["expert-matching"])


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"success": False, "error": str(exc), "type": "RateLimitExceeded"}
    )


def _commit(service: ExpertMatchingService) -> None:
    service.repo.db.commit()


def _match_list(matches) -> MatchListResponse:
    return MatchListResponse(
        success=True,
        count=len(matches),
        matches=[match_to_item(m) for m in matches]
    )


@router.get("/experts/{expert_id}/matches", response_model=MatchListResponse)
def get_expert_matches(
    expert_id: str,
    limit: int = Query(default=50, ge=1, le=200),
    service: ExpertMatchingService = Depends(get_matching_service)
):
    """Active (NEW or VIEWED) matches for an expert, best first."""
    return _match_list(service.get_matches_for_expert(expert_id, limit=limit))


@router.get("/service-requests/{request_id}/matches", response_model=MatchListResponse)
def get_request_matches(
    request_id: str,
    limit: int = Query(default=50, ge=1, le=200),
    service: ExpertMatchingService = Depends(get_matching_service)
):
    return _match_list(service.get_matches_for_request(request_id, limit=limit))


@router.post("/service-requests/{request_id}/run", response_model=MatchListResponse)
@limiter.limit(MATCHING_RUN_RATE_LIMIT)
def run_matching(
    request: Request,
    request_id: str,
    service: ExpertMatchingService = Depends(get_matching_service)
):
    """
    Match all eligible experts against an OPEN request.

    Returns only matches created by this run; a missing or non-open
    request yields an empty list.
    """
    matches = service.run_matching_for_request(request_id)
    _commit(service)
    return _match_list(matches)


@router.get("/search/{request_id}", response_model=ExpertSearchResponse)
def search_experts(
    request_id: str,
    keyword: Optional[str] = Query(default=None, description="Matches name, field, services or skill tags"),
    work_status: Optional[ExpertWorkStatus] = Query(default=None),
    min_score: float = Query(default=0),
    limit: int = Query(default=20, ge=1, le=100),
    service: ExpertMatchingService = Depends(get_matching_service)
):
    """Rank candidate experts for a request without creating matches."""
    results = service.search_experts(
        request_id,
        keyword=keyword,
        work_status=work_status,
        min_score=min_score,
        limit=limit
    )
    return ExpertSearchResponse(
        success=True,
        count=len(results),
        results=[
            ExpertSearchItem(
                expert=expert_to_summary(r.expert),
                score=r.score,
                breakdown=r.breakdown,
                distance_km=r.distance_km,
                has_existing_match=r.has_existing_match
            )
            for r in results
        ]
    )


@router.post("/manual/{request_id}/{expert_id}", response_model=MatchResponse)
def create_manual_match(
    request_id: str,
    expert_id: str,
    service: ExpertMatchingService = Depends(get_matching_service)
):
    """Pair an expert with a request regardless of score (platform recommendation)."""
    match = service.create_manual_match(expert_id, request_id, MatchSource.PLATFORM_RECOMMENDED)
    _commit(service)
    return MatchResponse(success=True, match=match_to_item(match))


@router.post("/push/{request_id}", response_model=PushResponse)
def push_to_experts(
    request_id: str,
    body: PushRequest,
    service: ExpertMatchingService = Depends(get_matching_service)
):
    """Push an OPEN request to specific experts. Unknown experts are counted as failed."""
    result = service.push_to_experts(request_id, body.expert_ids, body.source)
    _commit(service)
    return PushResponse(
        success=True,
        pushed=result.success,
        failed=result.failed,
        matches=[match_to_item(m) for m in result.matches]
    )


@router.post("/auto-match-rushing", response_model=AutoMatchResponse)
@limiter.limit(MATCHING_RUN_RATE_LIMIT)
def auto_match_rushing(
    request: Request,
    service_request_id: Optional[str] = Query(default=None, description="Restrict to one request"),
    service: ExpertMatchingService = Depends(get_matching_service)
):
    result = service.auto_match_rushing_experts(service_request_id)
    _commit(service)
    return AutoMatchResponse(
        success=True,
        message="Auto-matching completed",
        experts_processed=result.experts_processed,
        requests_processed=result.requests_processed,
        matches_created=result.matches_created
    )


@router.get("/rushing-experts", response_model=RushingExpertsResponse)
def get_rushing_experts(service: ExpertMatchingService = Depends(get_matching_service)):
    """RUSHING experts, longest-waiting first."""
    experts = service.get_rushing_experts()
    return RushingExpertsResponse(
        success=True,
        count=len(experts),
        experts=[expert_to_summary(e) for e in experts]
    )


@router.get("/pending-notifications", response_model=PendingNotificationsResponse)
def get_pending_notifications(
    expert_id: Optional[str] = Query(default=None, description="Filter by expert ID"),
    service: ExpertMatchingService = Depends(get_matching_service)
):
    matches = service.get_pending_notifications(expert_id)
    return PendingNotificationsResponse(
        success=True,
        count=len(matches),
        notifications=[match_to_pending(m) for m in matches]
    )


@router.post("/mark-notified", response_model=MarkNotifiedResponse)
def mark_notified(
    body: MarkNotifiedRequest,
    service: ExpertMatchingService = Depends(get_matching_service)
):
    updated = service.mark_as_notified(body.match_ids, body.side)
    _commit(service)
    return MarkNotifiedResponse(
        success=True,
        updated=updated,
        message=f"Marked {updated} matches as notified"
    )


@router.post("/{match_id}/view", response_model=MatchResponse)
def mark_viewed(
    match_id: str,
    body: ViewRequest,
    service: ExpertMatchingService = Depends(get_matching_service)
):
    match = service.mark_as_viewed(match_id, body.viewer)
    _commit(service)
    return MatchResponse(success=True, match=match_to_item(match))


@router.post("/{match_id}/accept", response_model=MatchResponse)
def accept_match(
    match_id: str,
    service: ExpertMatchingService = Depends(get_matching_service)
):
    """Expert accepts a NEW or VIEWED match (400 otherwise)."""
    match = service.accept_match(match_id)
    _commit(service)
    return MatchResponse(success=True, match=match_to_item(match))


@router.post("/{match_id}/dismiss", response_model=MatchResponse)
def dismiss_match(
    match_id: str,
    service: ExpertMatchingService = Depends(get_matching_service)
):
    """Dismiss a match. Accepted matches cannot be dismissed."""
    match = service.dismiss_match(match_id)
    _commit(service)
    return MatchResponse(success=True, match=match_to_item(match))
