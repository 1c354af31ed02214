#!/usr/bin/env python3
"""
Conversion helpers from ORM rows to API response models.
"""

from decimal import Decimal
from typing import Optional, Any, Dict
from datetime import datetime

from core.scorer import ScoreBreakdown
from database.models import MATCH_SOURCE_LABELS, MatchSource

from .models.responses import ExpertSummary, MatchResultItem, PendingNotificationItem


def safe_float(value: Optional[Any], default: Optional[float] = None) -> Optional[float]:
    """Convert Decimal/int/float to float, passing None through as default."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return float(value)
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def breakdown_to_dict(data: Optional[Dict[str, Any]]) -> Dict[str, float]:
    """Stored score_breakdown JSON as a full breakdown (missing factors read as 0)."""
    if not data:
        return {}
    return ScoreBreakdown.from_dict(data).to_dict()


def source_label(source: Optional[str]) -> str:
    try:
        return MATCH_SOURCE_LABELS[MatchSource(source)]
    except ValueError:
        return "Unknown"


def expert_to_summary(expert) -> ExpertSummary:
    return ExpertSummary(
        id=expert.id,
        personal_name=expert.personal_name,
        work_status=expert.work_status,
        membership_level=expert.membership_level,
        professional_field=expert.professional_field,
        skill_tags=list(expert.skill_tags or []),
        years_of_experience=expert.years_of_experience,
        avg_rating=safe_float(expert.avg_rating),
        total_reviews=expert.total_reviews or 0,
        service_radius=expert.service_radius,
        current_location=expert.current_location,
        rushing_started_at=format_datetime(expert.rushing_started_at),
    )


def match_to_item(match) -> MatchResultItem:
    return MatchResultItem(
        id=match.id,
        expert_id=match.expert_id,
        expert_name=match.expert.personal_name if match.expert else None,
        service_request_id=match.service_request_id,
        service_request_title=match.service_request.title if match.service_request else None,
        match_source=match.match_source,
        match_source_label=source_label(match.match_source),
        total_score=safe_float(match.total_score, 0.0),
        score_breakdown=breakdown_to_dict(match.score_breakdown),
        distance_km=safe_float(match.distance_km),
        status=match.status,
        expert_notified=bool(match.expert_notified),
        requester_notified=bool(match.requester_notified),
        expert_viewed_at=format_datetime(match.expert_viewed_at),
        requester_viewed_at=format_datetime(match.requester_viewed_at),
        created_at=format_datetime(match.created_at),
    )


def match_to_pending(match) -> PendingNotificationItem:
    return PendingNotificationItem(
        id=match.id,
        expert_id=match.expert_id,
        expert_name=match.expert.personal_name if match.expert else None,
        service_request_id=match.service_request_id,
        service_request_title=match.service_request.title if match.service_request else None,
        total_score=safe_float(match.total_score, 0.0),
        match_source=match.match_source,
        created_at=format_datetime(match.created_at),
    )
