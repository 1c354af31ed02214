#!/usr/bin/env python3
"""
Scoring Module - pure scoring of (expert, request) pairs.

Public API:
- compose_score: Combine factor scores and bonuses into a MatchScore
- haversine_km: Great-circle distance helper
- MatchScore, ScoreBreakdown, FactorScores: Result dataclasses

Modules:
- geo.py: Great-circle distance
- factors.py: The six factor scorers (location, skill, experience,
  availability, rating, keyword)
- composer.py: Weighted composition plus work-status and membership bonuses
- models.py: Result dataclasses
"""

from core.scorer.models import FactorScores, ScoreBreakdown, MatchScore
from core.scorer.geo import haversine_km
from core.scorer.composer import compose_score

__all__ = ['compose_score', 'haversine_km', 'MatchScore', 'ScoreBreakdown', 'FactorScores']
