#!/usr/bin/env python3
"""
Test suite for the expert matching engine.

    # Run all tests
    python -m pytest tests/ -v

    # Using unittest
    python -m unittest discover tests -v

Database-backed tests run against an in-memory SQLite database (see
tests/conftest.py and tests/fixtures/matching_fixtures.py); no external
services are needed.
"""
