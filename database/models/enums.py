"""
String enums shared by the ORM models and the matching engine.

Values are stored as plain text columns, so members compare equal to
their raw string values.
"""

from enum import Enum


class RegistrationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ExpertWorkStatus(str, Enum):
    RUSHING = "RUSHING"
    IDLE = "IDLE"
    BOOKED = "BOOKED"
    IN_SERVICE = "IN_SERVICE"
    OFF_DUTY = "OFF_DUTY"


class MembershipLevel(str, Enum):
    STANDARD = "STANDARD"
    SILVER = "SILVER"
    GOLD = "GOLD"
    DIAMOND = "DIAMOND"


# Ordering used by the rushing queue (higher tier first)
MEMBERSHIP_RANK = {
    MembershipLevel.STANDARD: 0,
    MembershipLevel.SILVER: 1,
    MembershipLevel.GOLD: 2,
    MembershipLevel.DIAMOND: 3,
}


class ServiceRequestStatus(str, Enum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class MatchSource(str, Enum):
    AI_MATCHED = "AI_MATCHED"
    PLATFORM_RECOMMENDED = "PLATFORM_RECOMMENDED"
    BUYER_SPECIFIED = "BUYER_SPECIFIED"


MATCH_SOURCE_LABELS = {
    MatchSource.AI_MATCHED: "AI Matched",
    MatchSource.PLATFORM_RECOMMENDED: "Platform Recommended",
    MatchSource.BUYER_SPECIFIED: "Buyer Specified",
}


class MatchStatus(str, Enum):
    NEW = "NEW"
    VIEWED = "VIEWED"
    APPLIED = "APPLIED"
    DISMISSED = "DISMISSED"


class MatchSide(str, Enum):
    """Which party of a pairing an action refers to."""
    EXPERT = "expert"
    REQUESTER = "requester"


def enum_value(value) -> str:
    """Return the raw string of an enum member (or pass a string through)."""
    return value.value if isinstance(value, Enum) else value
