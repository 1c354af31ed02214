#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field
from typing import List

from database.models import MatchSide, MatchSource


class PushRequest(BaseModel):
    """Push a service request to specific experts."""
    expert_ids: List[str] = Field(..., min_length=1, description="Target expert IDs")
    source: MatchSource = Field(
        default=MatchSource.PLATFORM_RECOMMENDED,
        description="Source of the push (PLATFORM_RECOMMENDED, BUYER_SPECIFIED)"
    )


class ViewRequest(BaseModel):
    """Record that one side of a pairing viewed the match."""
    viewer: MatchSide = Field(..., description="expert or requester")


class MarkNotifiedRequest(BaseModel):
    match_ids: List[str] = Field(..., description="Match IDs to mark as notified")
    side: MatchSide = Field(default=MatchSide.EXPERT, description="expert or requester")
