#!/usr/bin/env python3
"""
Matching Module - orchestration of expert/request pairings.

Public API:
- ExpertMatchingService: single-request runs, pushes, RUSHING sweep, lifecycle
- PushResult, AutoMatchResult, ExpertSearchResult, RequestOpenedResult: result DTOs

Modules:
- service.py: ExpertMatchingService
- lifecycle.py: NEW -> VIEWED -> APPLIED, and dismissal, transitions
- dto.py: Result dataclasses
"""

from core.matcher.dto import AutoMatchResult, ExpertSearchResult, PushResult, RequestOpenedResult
from core.matcher.service import ExpertMatchingService

__all__ = [
    'ExpertMatchingService',
    'PushResult',
    'AutoMatchResult',
    'ExpertSearchResult',
    'RequestOpenedResult',
]
