"""
Match lifecycle transitions.

    NEW -> VIEWED -> APPLIED
    NEW | VIEWED -> DISMISSED

Each helper looks at the current row and returns the field changes to
persist; none of them touch the database. VIEWED is sticky: a later view
by either side only records that side's timestamp. APPLIED (the expert
accepted the pairing) and DISMISSED are terminal. An APPLIED match cannot
be dismissed.
"""

from datetime import datetime
from typing import Any, Dict, Union

from core.exceptions import MatchStateError
from database.models import MatchSide, MatchSource, MatchStatus, enum_value

ACCEPTABLE_STATUSES = (MatchStatus.NEW, MatchStatus.VIEWED)


def as_side(viewer: Union[MatchSide, str]) -> MatchSide:
    if isinstance(viewer, MatchSide):
        return viewer
    return MatchSide(str(viewer).lower())


def apply_view(match, viewer: Union[MatchSide, str], now: datetime) -> Dict[str, Any]:
    side = as_side(viewer)
    changes: Dict[str, Any] = {f"{side.value}_viewed_at": now}
    if match.status == MatchStatus.NEW:
        changes["status"] = MatchStatus.VIEWED
    return changes


def apply_accept(match) -> Dict[str, Any]:
    """Expert accepts the pairing. Only NEW or VIEWED matches can be accepted.

    Raises:
        MatchStateError
    """
    if match.status not in ACCEPTABLE_STATUSES:
        raise MatchStateError(match.id, enum_value(match.status), "accept")
    return {"status": MatchStatus.APPLIED}


def apply_dismiss(match) -> Dict[str, Any]:
    """
    Raises:
        MatchStateError: the match was already accepted
    """
    if match.status == MatchStatus.APPLIED:
        raise MatchStateError(match.id, enum_value(match.status), "dismiss")
    return {"status": MatchStatus.DISMISSED}


def apply_repush(match, source: Union[MatchSource, str]) -> Dict[str, Any]:
    """Re-push an existing pairing: new source, expert notification pending again."""
    return {
        "match_source": MatchSource(source),
        "expert_notified": False,
        "expert_notified_at": None,
    }


def notified_fields(side: Union[MatchSide, str], now: datetime) -> Dict[str, Any]:
    side = as_side(side)
    return {
        f"{side.value}_notified": True,
        f"{side.value}_notified_at": now,
    }
