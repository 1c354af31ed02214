"""
Error taxonomy for the matching engine.

NotFound and InvalidState are surfaced to the caller as distinct
rejections. Partial push failures are reported in the result, not raised.
"""


class MatchingError(Exception):
    """Base exception for matching engine errors."""
    pass


class NotFoundError(MatchingError):
    """An id did not resolve to an entity."""
    pass


class ServiceRequestNotFoundError(NotFoundError):
    def __init__(self, request_id: str):
        super().__init__(f"Service request {request_id} not found")
        self.request_id = request_id


class ExpertNotFoundError(NotFoundError):
    def __init__(self, expert_id: str):
        super().__init__(f"Expert {expert_id} not found")
        self.expert_id = expert_id


class MatchNotFoundError(NotFoundError):
    def __init__(self, match_id: str):
        super().__init__(f"Match {match_id} not found")
        self.match_id = match_id


class InvalidStateError(MatchingError):
    """The entity exists but is not in a state the operation accepts."""
    pass


class ServiceRequestNotOpenError(InvalidStateError):
    def __init__(self, request_id: str, status: str):
        super().__init__(f"Service request {request_id} is not open (status: {status})")
        self.request_id = request_id
        self.status = status


class MatchStateError(InvalidStateError):
    def __init__(self, match_id: str, status: str, action: str):
        super().__init__(f"Cannot {action} match {match_id} with status {status}")
        self.match_id = match_id
        self.status = status
        self.action = action


class MatchConflictError(MatchingError):
    """A concurrent writer holds the (expert, request) pair and the row could not be read back."""

    def __init__(self, expert_id: str, request_id: str):
        super().__init__(f"Match for expert {expert_id} and request {request_id} is being written concurrently")
        self.expert_id = expert_id
        self.request_id = request_id
