#!/usr/bin/env python3
"""
Scoring Models - Data structures for composed match scores.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class FactorScores:
    """Raw factor sub-scores, each in [0, 100]."""
    location: float
    skill: float
    experience: float
    availability: float
    rating: float
    keyword: float


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-factor contribution to the total (sub-score * weight / 100) plus the raw work-status bonus."""
    location_score: float
    skill_score: float
    experience_score: float
    availability_score: float
    rating_score: float
    keyword_score: float
    work_status_bonus: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ScoreBreakdown':
        data = data or {}
        return cls(**{name: float(data.get(name, 0.0)) for name in cls.__dataclass_fields__})


@dataclass(frozen=True)
class MatchScore:
    """Composer output for one (expert, request) pair."""
    total_score: float
    base_score: float
    breakdown: ScoreBreakdown
    factors: FactorScores
    membership_bonus: float
    distance_km: Optional[float] = None
