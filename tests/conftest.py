"""Pytest fixtures for testing"""

import pytest
from fastapi.testclient import TestClient
from payoff_planner.api.main import create_app
from payoff_planner.api.dependencies import get_advisory_client
from payoff_planner.domain.exceptions import AdvisoryAPIError
from payoff_planner.domain.models import Card
from tests.fakes import FakeAdvisoryClient


@pytest.fixture
def card_a() -> Card:
    """High-APR, higher-balance card"""
    return Card(id="card_a", name="Card A", balance=1000.0, apr=20.0, min_payment=25.0)


@pytest.fixture
def card_b() -> Card:
    """Low-APR, lower-balance card"""
    return Card(id="card_b", name="Card B", balance=500.0, apr=10.0, min_payment=15.0)


@pytest.fixture
def two_cards(card_a: Card, card_b: Card) -> list[Card]:
    return [card_a, card_b]


@pytest.fixture
def failing_advisory() -> FakeAdvisoryClient:
    """Advisory process that cannot be reached"""
    return FakeAdvisoryClient(error=AdvisoryAPIError("Advisory API unreachable: connection refused"))


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client whose advisory process is always unreachable"""
    app = create_app()
    app.dependency_overrides[get_advisory_client] = lambda: FakeAdvisoryClient(
        error=AdvisoryAPIError("Advisory API unreachable: connection refused")
    )
    return TestClient(app)
