"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

# Set required environment variables before importing app modules
# These are required for config.py to load properly
os.environ.setdefault('RUNTIME_ENVIRONMENT', 'TEST')
os.environ.setdefault('DB_URL', 'sqlite+aiosqlite:///:memory:')
os.environ.setdefault('DEFAULT_CURRENCY', 'INR')
os.environ.setdefault('DEFAULT_CAP_PERCENT', '20')
os.environ.setdefault('COOKIE_SECURE', 'false')
os.environ.setdefault('LOG_MASK_SECRETS', 'true')

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from models.base import Base
import models  # noqa: F401  (registers every table on Base.metadata)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def engine():
    """Create in-memory SQLite database."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create database session."""
    session = Session(engine)
    yield session
    session.rollback()
    session.close()


# ============================================================================
# Pricing Fixtures
# ============================================================================

@pytest.fixture
def now():
    """Fixed evaluation instant."""
    return datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

