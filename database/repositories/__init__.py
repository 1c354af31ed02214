from database.repositories.base import BaseRepository
from database.repositories.expert import ExpertRepository
from database.repositories.service_request import ServiceRequestRepository
from database.repositories.match import MatchRepository

__all__ = [
    'BaseRepository',
    'ExpertRepository',
    'ServiceRequestRepository',
    'MatchRepository',
]
