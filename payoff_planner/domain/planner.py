"""Plan orchestration - routes a request to the deterministic engine or the advisory adapter"""

from typing import Optional, Sequence
from payoff_planner.domain.advisory import AdvisoryPlanSource, get_advisory_plan
from payoff_planner.domain.allocation import DEFAULT_HORIZON_MONTHS, allocate
from payoff_planner.domain.models import Card, FinancialProfile, OptimizationResult, Policy


def resolve_policy(profile: FinancialProfile, policy: Optional[Policy] = None) -> Policy:
    """Explicit policy first, then the profile's declared strategy, then avalanche"""
    return policy or profile.strategy or Policy.AVALANCHE


async def build_plan(
    cards: Sequence[Card],
    profile: FinancialProfile,
    policy: Optional[Policy] = None,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    advisory_client: Optional[AdvisoryPlanSource] = None,
) -> OptimizationResult:
    """
    Produce this month's plan plus its projection.

    The advisory policy delegates to the adapter, which pins the advisory
    process to the profile's declared strategy. Every other policy runs the
    allocation engine directly against the profile's monthly budget.

    Raises:
        ValueError: advisory policy requested without an advisory client
    """
    resolved = resolve_policy(profile, policy)

    if resolved == Policy.ADVISORY:
        if advisory_client is None:
            raise ValueError("advisory policy requires an advisory client")
        return await get_advisory_plan(cards, profile, horizon_months, advisory_client)

    return allocate(cards, profile.monthly_net_income, resolved, horizon_months)
