#!/usr/bin/env python3
"""
Score Composer - weighted blend of factor scores plus priority bonuses.

total = min(max_total, weighted_average(factors) + work_status_bonus + membership_bonus)

There is no lower clamp: an OFF_DUTY expert can score far
below zero, and callers filter by threshold.
"""

import logging
from datetime import datetime
from typing import Optional

from core.config_loader import ScoringConfig
from core.scorer import factors
from core.scorer.models import FactorScores, ScoreBreakdown, MatchScore
from database.models import enum_value

logger = logging.getLogger(__name__)


def _contribution(raw: float, weight: float) -> float:
    return factors.round_half_up(raw * weight) / 100


def work_status_bonus(expert, config: ScoringConfig) -> float:
    status = enum_value(expert.work_status) if expert.work_status else None
    return config.work_status_bonus.get(status, 0.0) if status else 0.0


def membership_bonus(expert, config: ScoringConfig) -> float:
    level = enum_value(expert.membership_level) if expert.membership_level else None
    return config.membership_bonus.get(level, 0.0) if level else 0.0


def compose_score(
    expert,
    request,
    config: ScoringConfig,
    now: Optional[datetime] = None
) -> MatchScore:
    """Score one (expert, request) pair.

    Args:
        expert: Expert-like object (ORM row or any object with the same attributes)
        request: ServiceRequest-like object
        config: Weight and bonus tables
        now: Reference time for availability freshness (defaults to current UTC)

    Returns:
        MatchScore with total (2 decimals), breakdown and distance
    """
    loc, distance_km = factors.location_score(expert, request)
    raw = FactorScores(
        location=loc,
        skill=factors.skill_score(expert, request),
        experience=factors.experience_score(expert),
        availability=factors.availability_score(expert, now=now),
        rating=factors.rating_score(expert),
        keyword=factors.keyword_score(expert, request),
    )

    w = config.weights
    base = (
        raw.location * w.location
        + raw.skill * w.skill
        + raw.experience * w.experience
        + raw.availability * w.availability
        + raw.rating * w.rating
        + raw.keyword * w.keyword
    ) / 100

    status_bonus = work_status_bonus(expert, config)
    tier_bonus = membership_bonus(expert, config)
    total = min(config.max_total_score, base + status_bonus + tier_bonus)

    breakdown = ScoreBreakdown(
        location_score=_contribution(raw.location, w.location),
        skill_score=_contribution(raw.skill, w.skill),
        experience_score=_contribution(raw.experience, w.experience),
        availability_score=_contribution(raw.availability, w.availability),
        rating_score=_contribution(raw.rating, w.rating),
        keyword_score=_contribution(raw.keyword, w.keyword),
        work_status_bonus=status_bonus,
    )

    logger.debug(
        f"Expert {getattr(expert, 'id', None)} x request {getattr(request, 'id', None)}: "
        f"base={base:.2f}, status_bonus={status_bonus}, tier_bonus={tier_bonus}, total={total:.2f}"
    )

    return MatchScore(
        total_score=round(total, 2),
        base_score=round(base, 2),
        breakdown=breakdown,
        factors=raw,
        membership_bonus=tier_bonus,
        distance_km=distance_km,
    )
