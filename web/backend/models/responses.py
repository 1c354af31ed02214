#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict


class ExpertSummary(BaseModel):
    """Public view of an expert used in search and rushing lists."""
    id: str
    personal_name: Optional[str]
    work_status: Optional[str]
    membership_level: Optional[str]
    professional_field: Optional[str]
    skill_tags: List[str] = Field(default_factory=list)
    years_of_experience: Optional[int]
    avg_rating: Optional[float]
    total_reviews: int = 0
    service_radius: Optional[int]
    current_location: Optional[str]
    rushing_started_at: Optional[str]


class MatchResultItem(BaseModel):
    """A persisted expert/request pairing."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "expert_id": "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
                "expert_name": "Li Wei",
                "service_request_id": "6ba7b811-9dad-11d1-80b4-00c04fd430c8",
                "service_request_title": "S7-1500 PLC commissioning",
                "match_source": "AI_MATCHED",
                "match_source_label": "AI Matched",
                "total_score": 87.5,
                "score_breakdown": {
                    "location_score": 25.0,
                    "skill_score": 20.0,
                    "experience_score": 9.0,
                    "availability_score": 7.5,
                    "rating_score": 9.6,
                    "keyword_score": 20.0,
                    "work_status_bonus": 15.0
                },
                "distance_km": 3.2,
                "status": "NEW",
                "expert_notified": False,
                "requester_notified": False,
                "expert_viewed_at": None,
                "requester_viewed_at": None,
                "created_at": "2026-02-01T12:00:00"
            }
        }
    )

    id: str
    expert_id: str
    expert_name: Optional[str]
    service_request_id: str
    service_request_title: Optional[str]
    match_source: str
    match_source_label: str
    total_score: float = Field(le=100)
    score_breakdown: Dict[str, float] = Field(default_factory=dict)
    distance_km: Optional[float]
    status: str
    expert_notified: bool
    requester_notified: bool
    expert_viewed_at: Optional[str]
    requester_viewed_at: Optional[str]
    created_at: Optional[str]


class MatchListResponse(BaseModel):
    success: bool
    count: int
    matches: List[MatchResultItem]


class MatchResponse(BaseModel):
    success: bool
    match: MatchResultItem


class PushResponse(BaseModel):
    success: bool
    pushed: int = Field(description="Experts paired or re-pushed")
    failed: int = Field(description="Experts that could not be resolved")
    matches: List[MatchResultItem]


class AutoMatchResponse(BaseModel):
    success: bool
    message: str
    experts_processed: int
    requests_processed: int
    matches_created: int


class ExpertSearchItem(BaseModel):
    expert: ExpertSummary
    score: float
    breakdown: Dict[str, float]
    distance_km: Optional[float]
    has_existing_match: bool


class ExpertSearchResponse(BaseModel):
    success: bool
    count: int
    results: List[ExpertSearchItem]


class RushingExpertsResponse(BaseModel):
    success: bool
    count: int
    experts: List[ExpertSummary]


class PendingNotificationItem(BaseModel):
    id: str
    expert_id: str
    expert_name: Optional[str]
    service_request_id: str
    service_request_title: Optional[str]
    total_score: float
    match_source: str
    created_at: Optional[str]


class PendingNotificationsResponse(BaseModel):
    success: bool
    count: int
    notifications: List[PendingNotificationItem]


class MarkNotifiedResponse(BaseModel):
    success: bool
    updated: int
    message: str
