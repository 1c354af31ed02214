#!/usr/bin/env python3
"""
Result DTOs returned by the ExpertMatchingService.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional

from database.models import Expert, ExpertMatchResult


@dataclass
class PushResult:
    """Outcome of pushing a request to a batch of experts.

    Missing experts are counted in `failed`; they never abort the batch.
    """
    success: int = 0
    failed: int = 0
    matches: List[ExpertMatchResult] = field(default_factory=list)


@dataclass
class AutoMatchResult:
    """Totals for one RUSHING sweep."""
    experts_processed: int = 0
    requests_processed: int = 0
    matches_created: int = 0
    matches: List[ExpertMatchResult] = field(default_factory=list)


@dataclass
class ExpertSearchResult:
    expert: Expert
    score: float
    breakdown: Dict[str, Any]
    distance_km: Optional[float] = None
    has_existing_match: bool = False


@dataclass
class RequestOpenedResult:
    """Single-request run followed by the rushing sweep scoped to the same request."""
    matches: List[ExpertMatchResult] = field(default_factory=list)
    rushing: AutoMatchResult = field(default_factory=AutoMatchResult)

    @property
    def total_created(self) -> int:
        return len(self.matches) + self.rushing.matches_created
