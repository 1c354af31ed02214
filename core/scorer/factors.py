#!/usr/bin/env python3
"""
Factor Scorers - independent sub-scores for an (expert, request) pair.

Each scorer maps one aspect of the pairing to a value in [0, 100]:
- Location: distance bands, hard zero outside the expert's service radius
- Skill: share of required skills covered by the expert's skill tags
- Experience: step function on years of experience
- Availability: availability flag plus freshness of the last location signal
- Rating: average rating discounted by review-count confidence
- Keyword: share of the expert's profile tokens found in the request text

Missing optional data degrades to a neutral default, never to an error.
"""

import math
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Set, Tuple

from core.scorer.geo import haversine_km

# Upper bounds are exclusive: a distance of exactly 50 km scores 90
LOCATION_BANDS: Tuple[Tuple[float, float], ...] = (
    (50, 100),
    (100, 90),
    (200, 70),
    (500, 50),
    (1000, 30),
)
LOCATION_FAR_SCORE = 10
LOCATION_UNKNOWN_SCORE = 50

SKILL_NO_REQUIREMENT_SCORE = 70
SKILL_NO_PROFILE_SCORE = 30

EXPERIENCE_STEPS: Tuple[Tuple[int, float], ...] = (
    (10, 100),
    (7, 90),
    (5, 80),
    (3, 60),
    (1, 40),
)
EXPERIENCE_FLOOR_SCORE = 20

# (hours since last signal, score)
AVAILABILITY_FRESHNESS: Tuple[Tuple[float, float], ...] = (
    (1, 100),
    (4, 90),
    (12, 70),
    (24, 50),
)
AVAILABILITY_STALE_SCORE = 30
AVAILABILITY_NO_SIGNAL_SCORE = 50

RATING_NO_DATA_SCORE = 50
RATING_FULL_CONFIDENCE_REVIEWS = 10

KEYWORD_NO_TEXT_SCORE = 50
KEYWORD_NO_PROFILE_SCORE = 30
KEYWORD_FLOOR_SCORE = 20
KEYWORD_MIN_TOKEN_LENGTH = 3

_TOKEN_SPLIT = re.compile(r"[\s,;]+")


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def _as_list(value) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v]


def location_score(expert, request) -> Tuple[float, Optional[float]]:
    """Score proximity. Returns (score, distance_km); distance is None when not geo-comparable."""
    coords = (expert.location_lat, expert.location_lng, request.location_lat, request.location_lng)
    if any(c is None for c in coords):
        return LOCATION_UNKNOWN_SCORE, None

    distance_km = haversine_km(
        float(expert.location_lat),
        float(expert.location_lng),
        float(request.location_lat),
        float(request.location_lng),
    )

    radius = expert.service_radius
    if radius and distance_km > radius:
        return 0, distance_km

    for upper_km, score in LOCATION_BANDS:
        if distance_km < upper_km:
            return score, distance_km
    return LOCATION_FAR_SCORE, distance_km


def skill_score(expert, request) -> float:
    required = [s.lower() for s in _as_list(request.required_skills)]
    if not required:
        return SKILL_NO_REQUIREMENT_SCORE

    expert_skills = [s.lower() for s in _as_list(expert.skill_tags)]
    if not expert_skills:
        return SKILL_NO_PROFILE_SCORE

    matched = sum(
        1 for req in required
        if any(req in skill or skill in req for skill in expert_skills)
    )
    return round_half_up(matched / len(required) * 100)


def experience_score(expert) -> float:
    years = expert.years_of_experience or 0
    for min_years, score in EXPERIENCE_STEPS:
        if years >= min_years:
            return score
    return EXPERIENCE_FLOOR_SCORE


def availability_score(expert, now: Optional[datetime] = None) -> float:
    if not expert.is_available:
        return 0

    last_signal = expert.last_location_update_at
    if last_signal is None:
        return AVAILABILITY_NO_SIGNAL_SCORE

    now = now or datetime.now(timezone.utc)
    if last_signal.tzinfo is None:
        last_signal = last_signal.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    hours_since = (now - last_signal).total_seconds() / 3600
    for max_hours, score in AVAILABILITY_FRESHNESS:
        if hours_since < max_hours:
            return score
    return AVAILABILITY_STALE_SCORE


def rating_score(expert) -> float:
    """Average rating scaled to 100, discounted until the expert has enough reviews.

    5.0 with 10+ reviews scores exactly 100; 5.0 with 2 reviews scores 76.
    """
    rating = expert.avg_rating
    reviews = expert.total_reviews or 0
    if not rating or reviews <= 0:
        return RATING_NO_DATA_SCORE

    confidence = min(reviews / RATING_FULL_CONFIDENCE_REVIEWS, 1.0)
    adjusted = float(rating) * (0.7 + 0.3 * confidence)
    return round_half_up(adjusted / 5 * 100)


def tokenize(texts: Iterable[str]) -> Set[str]:
    tokens: Set[str] = set()
    for text in texts:
        for token in _TOKEN_SPLIT.split(text.lower()):
            if len(token) >= KEYWORD_MIN_TOKEN_LENGTH:
                tokens.add(token)
    return tokens


def request_text(request) -> str:
    parts = [request.title or "", request.description or ""] + _as_list(request.required_skills)
    return " ".join(p for p in parts if p).lower()


def expert_profile_texts(expert) -> List[str]:
    return (
        _as_list(expert.skill_tags)
        + _as_list(expert.professional_field)
        + _as_list(expert.services_offered)
        + _as_list(expert.certifications)
    )


def keyword_score(expert, request) -> float:
    haystack = request_text(request)
    if not haystack.strip():
        return KEYWORD_NO_TEXT_SCORE

    needles = tokenize(expert_profile_texts(expert))
    if not needles:
        return KEYWORD_NO_PROFILE_SCORE

    matched = sum(1 for token in needles if token in haystack)
    return max(KEYWORD_FLOOR_SCORE, round_half_up(matched / len(needles) * 100))
