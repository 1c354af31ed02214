from .base import Base
from .enums import (
    RegistrationStatus,
    ExpertWorkStatus,
    MembershipLevel,
    MEMBERSHIP_RANK,
    ServiceRequestStatus,
    MatchSource,
    MATCH_SOURCE_LABELS,
    MatchStatus,
    MatchSide,
    enum_value,
)
from .expert import Expert
from .service_request import ServiceRequest
from .match import ExpertMatchResult

__all__ = [
    'Base',
    'RegistrationStatus',
    'ExpertWorkStatus',
    'MembershipLevel',
    'MEMBERSHIP_RANK',
    'ServiceRequestStatus',
    'MatchSource',
    'MATCH_SOURCE_LABELS',
    'MatchStatus',
    'MatchSide',
    'enum_value',
    'Expert',
    'ServiceRequest',
    'ExpertMatchResult',
]
