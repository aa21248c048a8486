"""Unit tests for plan orchestration"""

import pytest
from payoff_planner.domain.allocation import allocate
from payoff_planner.domain.models import FinancialProfile, Policy
from payoff_planner.domain.planner import build_plan, resolve_policy


def test_resolve_policy_precedence():
    profile = FinancialProfile(monthly_net_income=100.0, strategy=Policy.SNOWBALL)

    assert resolve_policy(profile, Policy.EVEN) == Policy.EVEN
    assert resolve_policy(profile) == Policy.SNOWBALL
    assert resolve_policy(FinancialProfile(monthly_net_income=100.0)) == Policy.AVALANCHE


async def test_deterministic_policy_uses_profile_budget(two_cards):
    profile = FinancialProfile(monthly_net_income=100.0, strategy=Policy.SNOWBALL)

    result = await build_plan(two_cards, profile, horizon_months=4)

    assert result == allocate(two_cards, 100.0, Policy.SNOWBALL, 4)


async def test_advisory_routes_through_adapter(two_cards, failing_advisory):
    profile = FinancialProfile(monthly_net_income=100.0, strategy=Policy.EVEN)

    result = await build_plan(two_cards, profile, Policy.ADVISORY, 4, advisory_client=failing_advisory)

    assert len(failing_advisory.calls) == 1
    assert result.policy_used == Policy.EVEN
    assert result.warnings[-1] == "Advisory connection failed, used deterministic even policy."


async def test_advisory_requires_client(two_cards):
    profile = FinancialProfile(monthly_net_income=100.0)

    with pytest.raises(ValueError):
        await build_plan(two_cards, profile, Policy.ADVISORY)
