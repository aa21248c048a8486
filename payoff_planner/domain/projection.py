"""Multi-month payoff projection - compounds interest and replays the monthly budget"""

from typing import List, Sequence
from payoff_planner.domain.models import Card, Policy, ProjectionPoint

# Leftover below one cent is floating-point residue, not budget
SURPLUS_TOLERANCE = 0.01


def priority_order(cards: Sequence[Card], balances: Sequence[float], policy: Policy) -> List[int]:
    """
    Indices of cards in the order surplus cash should reach them.

    - snowball: lowest balance first
    - avalanche (and anything else): highest APR first

    Both sorts are stable, so ties keep the caller's card order.
    """
    indices = range(len(cards))
    if policy == Policy.SNOWBALL:
        return sorted(indices, key=lambda i: balances[i])
    return sorted(indices, key=lambda i: cards[i].apr, reverse=True)


def project(
    cards: Sequence[Card],
    monthly_budget: float,
    policy: Policy,
    horizon_months: int,
) -> List[ProjectionPoint]:
    """
    Simulate the payoff trajectory month by month.

    Each month:
    1. Accrue APR interest on every card with a balance
    2. Pay each card's minimum (capped at its balance)
    3. Spread whatever budget is left according to the policy

    Interest is always derived from APR here. A card's monthly_interest_amount
    is a single-month estimate and is not compounded into the trajectory.

    Returns:
        horizon_months + 1 points; point 0 is the untouched starting balances.
    """
    balances = [card.balance for card in cards]
    points = [_snapshot(0, cards, balances, 0.0)]

    for month in range(1, horizon_months + 1):
        interest_paid = 0.0
        for i, card in enumerate(cards):
            if balances[i] > 0:
                interest = balances[i] * card.apr / 100 / 12
                balances[i] += interest
                interest_paid += interest

        budget_left = monthly_budget
        for i, card in enumerate(cards):
            if balances[i] > 0:
                payment = min(balances[i], card.min_payment)
                balances[i] -= payment
                budget_left -= payment

        if budget_left > 0:
            _distribute_surplus(cards, balances, budget_left, policy)

        points.append(_snapshot(month, cards, balances, interest_paid))

    return points


def _distribute_surplus(cards: Sequence[Card], balances: List[float], leftover: float, policy: Policy) -> None:
    active = [i for i in range(len(cards)) if balances[i] > 0]
    if not active:
        return

    if policy == Policy.EVEN:
        share = leftover / len(active)
        for i in active:
            balances[i] -= min(balances[i], share)
        return

    for i in priority_order(cards, balances, policy):
        if leftover <= SURPLUS_TOLERANCE:
            break
        if balances[i] <= 0:
            continue
        payment = min(balances[i], leftover)
        balances[i] -= payment
        leftover -= payment


def _snapshot(month: int, cards: Sequence[Card], balances: Sequence[float], interest_paid: float) -> ProjectionPoint:
    floored = [max(0.0, balance) for balance in balances]
    return ProjectionPoint(
        month=month,
        total_balance=sum(floored),
        total_interest_paid=interest_paid,
        card_balances={card.id: balance for card, balance in zip(cards, floored)},
    )
