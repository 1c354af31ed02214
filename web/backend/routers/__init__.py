"""API route handlers."""

from .expert_matching import router as expert_matching_router, add_rate_limit_handlers
