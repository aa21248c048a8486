"""Single-month allocation engine - core business logic for payment recommendations"""

import math
from typing import List, Sequence
from payoff_planner.domain.models import Allocation, Card, OptimizationResult, Policy
from payoff_planner.domain.projection import priority_order, project

DEFAULT_HORIZON_MONTHS = 12

# Above 30% utilization starts to hurt a credit score
UTILIZATION_WARNING_RATIO = 0.30


def monthly_interest(card: Card) -> float:
    """Interest expected this month: the card's override when set, otherwise APR / 12"""
    if card.monthly_interest_amount is not None and card.monthly_interest_amount > 0:
        return card.monthly_interest_amount
    return card.balance * card.apr / 100 / 12


def apply_projected_metrics(card: Card, allocation: Allocation) -> Allocation:
    """
    Fill in the post-payment view of a card for this month.

    The payment lands before interest posts, so the month's interest is added
    back on top of the paid-down balance. Safe spend is the amount of new
    purchases that keeps the balance from growing: payment minus interest.
    """
    interest = monthly_interest(card)
    allocation.projected_interest = interest
    allocation.remaining_balance_after_payment = max(0.0, card.balance - allocation.total_payment + interest)
    allocation.projected_available_credit = max(
        0.0, (card.credit_limit or 0.0) - allocation.remaining_balance_after_payment
    )
    allocation.max_safe_spend = max(0, math.floor(allocation.total_payment - interest))
    return allocation


def utilization_warnings(cards: Sequence[Card]) -> List[str]:
    """Warn about every card whose balance uses more than 30% of its limit"""
    warnings = []
    for card in cards:
        limit = card.credit_limit or 0.0
        if limit > 0 and card.balance / limit > UTILIZATION_WARNING_RATIO:
            utilization = card.balance / limit * 100
            warnings.append(
                f"High utilization: {card.name} is at {utilization:.1f}% utilization. "
                f"Aim for under 30% for a healthier credit score."
            )
    return warnings


def allocate(
    cards: Sequence[Card],
    budget: float,
    policy: Policy,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> OptimizationResult:
    """
    Main entry point: split this month's budget across cards.

    Flow:
    1. Every card gets its minimum, even if that overdraws the budget
    2. Surplus goes out per policy (even split, or greedy by APR / balance)
    3. Interest, available credit and safe spend are projected per card
    4. Projections cover the next horizon_months under the same policy

    A budget that cannot cover the minimums is still allocated; the result is
    flagged invalid and remaining_cash goes negative by the shortfall.
    """
    total_min_payments = sum(card.min_payment for card in cards)
    warnings: List[str] = []
    is_valid = True

    if total_min_payments > budget:
        is_valid = False
        warnings.append(
            f"Deficit: total minimum payments (${total_min_payments:,.2f}) exceed the "
            f"available budget (${budget:,.2f}) by ${total_min_payments - budget:,.2f}."
        )

    remaining_cash = budget
    allocations = []
    for card in cards:
        remaining_cash -= card.min_payment
        allocations.append(
            Allocation(
                card_id=card.id,
                min_payment=card.min_payment,
                extra_payment=0.0,
                total_payment=card.min_payment,
                remaining_balance_after_payment=max(0.0, card.balance - card.min_payment),
            )
        )

    if remaining_cash > 0 and allocations:
        if policy == Policy.EVEN:
            remaining_cash = _distribute_even(allocations, remaining_cash)
        else:
            remaining_cash = _distribute_greedy(cards, allocations, remaining_cash, policy)

    for card, allocation in zip(cards, allocations):
        apply_projected_metrics(card, allocation)

    warnings.extend(utilization_warnings(cards))

    return OptimizationResult(
        allocations=allocations,
        total_available_for_debt=budget,
        total_min_payments=total_min_payments,
        remaining_cash=remaining_cash,
        policy_used=policy,
        is_valid=is_valid,
        warnings=warnings,
        projections=project(cards, budget, policy, horizon_months),
    )


def _distribute_even(allocations: List[Allocation], remaining_cash: float) -> float:
    # Same share for every card, floored to the cent; a small card can be overpaid
    share = math.floor(remaining_cash / len(allocations) * 100) / 100
    for allocation in allocations:
        allocation.extra_payment += share
        allocation.total_payment += share
        allocation.remaining_balance_after_payment = max(0.0, allocation.remaining_balance_after_payment - share)
    return max(0.0, remaining_cash - share * len(allocations))


def _distribute_greedy(
    cards: Sequence[Card],
    allocations: List[Allocation],
    remaining_cash: float,
    policy: Policy,
) -> float:
    balances = [card.balance for card in cards]
    for i in priority_order(cards, balances, policy):
        if remaining_cash <= 0:
            break

        residual = cards[i].balance - allocations[i].min_payment
        if residual > 0:
            payment = min(remaining_cash, residual)
            allocations[i].extra_payment += payment
            allocations[i].total_payment += payment
            allocations[i].remaining_balance_after_payment -= payment
            remaining_cash -= payment

    return remaining_cash
