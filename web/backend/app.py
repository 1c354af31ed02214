#!/usr/bin/env python3
"""
Expert Matching API - FastAPI Application

HTTP surface over the matching engine.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI, HTTPException

from core.exceptions import MatchingError
from .config import get_config
from .exceptions import (
    matching_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import expert_matching_router, add_rate_limit_handlers

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Expert Matching API",
    description="Scores, pairs and tracks experts against open service requests",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure rate limiting
add_rate_limit_handlers(app)

# Register exception handlers
app.add_exception_handler(MatchingError, matching_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(expert_matching_router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "expert-matching"}


def main():
    """Run the web server."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    config = get_config()

    logger.info(f"Starting Expert Matching API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
