"""
E2E tests running the real advisory client against the mock advisory server.

The mock server is mounted in-process through httpx.ASGITransport, so the full
path is exercised: prompt building, chat-completions envelope, code-fence
stripping, validation and fallback.

Mock behaviors (query parameter on the endpoint):
- comply: policy-compliant plan in a ```json fence
- wrong_policy: same numbers, mismatched policy echo
- garbage: prose instead of JSON
"""

import httpx
import pytest
from mock_servers.advisory_server.main import app as mock_advisory_app
from payoff_planner.domain.advisory import get_advisory_plan
from payoff_planner.domain.allocation import allocate
from payoff_planner.domain.models import Card, FinancialProfile, Policy
from payoff_planner.infrastructure.clients.advisory import AdvisoryClient


def _advisory_client(behavior: str) -> AdvisoryClient:
    return AdvisoryClient(
        endpoint=f"http://mock-advisory/v1/chat/completions?behavior={behavior}",
        transport=httpx.ASGITransport(app=mock_advisory_app),
    )


@pytest.fixture
def household_cards() -> list[Card]:
    return [
        Card(id="visa", name="Visa", balance=4200.0, apr=27.5, min_payment=120.0, credit_limit=6000.0),
        Card(id="store", name="Store Card", balance=650.0, apr=22.0, min_payment=35.0, credit_limit=1000.0),
        Card(id="amex", name="Amex", balance=2100.0, apr=18.9, min_payment=60.0, credit_limit=10000.0),
    ]


@pytest.mark.integration
@pytest.mark.parametrize("policy", [Policy.AVALANCHE, Policy.SNOWBALL, Policy.EVEN])
async def test_compliant_plan_accepted(household_cards, policy):
    profile = FinancialProfile(monthly_net_income=600.0, strategy=policy)

    result = await get_advisory_plan(household_cards, profile, 12, _advisory_client("comply"))
    expected = allocate(household_cards, 600.0, policy, 12)

    assert result.policy_used == Policy.ADVISORY
    assert result.is_valid is True
    assert result.analysis == f"Minimums first, surplus by {policy.value}."
    assert [a.total_payment for a in result.allocations] == pytest.approx(
        [a.total_payment for a in expected.allocations]
    )
    assert result.projections == expected.projections


@pytest.mark.integration
async def test_mismatched_policy_falls_back(household_cards):
    profile = FinancialProfile(monthly_net_income=600.0, strategy=Policy.SNOWBALL)

    result = await get_advisory_plan(household_cards, profile, 6, _advisory_client("wrong_policy"))

    assert result.policy_used == Policy.SNOWBALL
    assert "declared policy 'avalanche'" in result.warnings[-1]


@pytest.mark.integration
async def test_unparseable_answer_falls_back(household_cards):
    profile = FinancialProfile(monthly_net_income=600.0)

    result = await get_advisory_plan(household_cards, profile, 6, _advisory_client("garbage"))
    expected = allocate(household_cards, 600.0, Policy.AVALANCHE, 6)

    assert result.allocations == expected.allocations
    assert result.warnings == expected.warnings + [
        "Advisory connection failed, used deterministic avalanche policy."
    ]
