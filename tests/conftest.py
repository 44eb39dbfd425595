"""Shared fixtures for the API tests."""

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from contentscale.app.core.config import Settings
from contentscale.app.main import create_app

VALID_API_KEY = "test-api-key-123"


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, analysis_delay_seconds=0)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def api_headers() -> Dict[str, str]:
    return {"x-api-key": VALID_API_KEY}


@pytest.fixture
def consultation_payload() -> Dict[str, Any]:
    return {
        "category": "marketing",
        "businessName": "Acme Bakery",
        "industry": "Food & Beverage",
        "description": "Neighbourhood bakery looking to grow online orders.",
        "specificChallenges": ["Low website traffic", "No email list"],
        "goals": ["Double online orders"],
        "timeline": "3-6_months",
        "budget": "5k-15k",
    }


@pytest.fixture
def profile_payload() -> Dict[str, Any]:
    return {
        "name": "Acme Bakery",
        "industry": "Food & Beverage",
        "size": "small",
        "description": "Family-run bakery with two locations.",
        "challenges": ["Seasonal demand"],
        "goals": ["Open a third location"],
    }
