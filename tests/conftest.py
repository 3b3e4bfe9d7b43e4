# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides an in-memory Supabase fake and stores bound to it
# - Provides a TestClient whose stores all use the fake
# - Mints Supabase-style HS256 tokens for authenticated requests
# =============================================================================

import os
import time
import uuid

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("ADMIN_USER_IDS", "00000000-0000-4000-8000-00000000a0a0")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.config import settings
from app.dependencies import get_supabase_client
from app.main import app
from core.services import (
    CollaborationStore,
    LabRequestStore,
    LabStore,
    TeamStore,
)
from tests.fakes import FakeSupabase

CONFIGURED_ADMIN_ID = "00000000-0000-4000-8000-00000000a0a0"


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def fake_db():
    """Fresh in-memory Supabase per test."""
    return FakeSupabase()


@pytest.fixture
def lab_store(fake_db):
    return LabStore(fake_db)


@pytest.fixture
def team_store(fake_db):
    return TeamStore(fake_db)


@pytest.fixture
def lab_request_store(fake_db):
    return LabRequestStore(fake_db)


@pytest.fixture
def collaboration_store(fake_db):
    return CollaborationStore(fake_db)


# =============================================================================
# HTTP Fixtures
# =============================================================================

@pytest.fixture
def client(fake_db):
    """TestClient with every store bound to fake_db."""
    app.dependency_overrides[get_supabase_client] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_token():
    """
    Build a signed Supabase-style access token.

    Usage:
        token = make_token(user_id, role="admin")
    """
    def _make(user_id: str, role: str | None = None, email: str | None = None, expires_in: int = 3600) -> str:
        payload = {
            "sub": user_id,
            "aud": "authenticated",
            "exp": int(time.time()) + expires_in,
            "email": email,
            "app_metadata": {"role": role} if role else {},
        }
        return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")

    return _make


@pytest.fixture
def user_id():
    return str(uuid.uuid4())


@pytest.fixture
def user_headers(make_token, user_id):
    """Authorization header for a regular user."""
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def admin_headers(make_token):
    """Authorization header for an admin (role claim)."""
    return {"Authorization": f"Bearer {make_token(str(uuid.uuid4()), role='admin')}"}


@pytest.fixture
def configured_admin_headers(make_token):
    """Authorization header for a user listed in ADMIN_USER_IDS (no role claim)."""
    return {"Authorization": f"Bearer {make_token(CONFIGURED_ADMIN_ID)}"}


# =============================================================================
# Payload Fixtures
# =============================================================================

@pytest.fixture
def lab_payload():
    """A complete, valid lab creation payload."""
    return {
        "name": "Lab X",
        "labManager": "Dr. Ada Byron",
        "contactEmail": "ada@labx.org",
        "city": "Lyon",
        "country": "France",
        "offersLabSpace": True,
        "photos": [{"name": "Bench", "url": "https://cdn.glass.bio/bench.jpg"}],
        "partnerLogos": [{"name": "Partner", "url": "https://cdn.glass.bio/partner.png"}],
        "compliance": ["ISO 9001"],
        "complianceDocs": [{"name": "ISO cert", "url": "https://cdn.glass.bio/iso.pdf"}],
        "publications": [{"title": "Folding at scale", "url": "https://doi.org/10.1/abc"}],
        "patents": [],
        "equipment": ["Centrifuge", "PCR"],
        "priorityEquipment": ["PCR"],
        "focusAreas": ["Genomics"],
        "offers": ["Monthly rent", "Day rate"],
    }


@pytest.fixture
def team_payload():
    """A complete, valid team creation payload."""
    return {
        "name": "Protein Folding Group",
        "descriptionShort": "We fold proteins.",
        "website": "folding.example.org",
        "equipment": ["Centrifuge", "PCR"],
        "priorityEquipment": ["PCR"],
        "techniques": [{"name": "Cryo-EM", "description": "Single particle analysis"}],
        "focusAreas": ["Structural biology"],
        "members": [
            {"name": "Zoe", "role": "Postdoc"},
            {"name": "Ada", "role": "PI", "isLead": True, "email": "ada@folding.org"},
        ],
        "photos": [{"name": "Team", "url": "https://cdn.glass.bio/team.jpg"}],
    }
