"""Advisory plan adapter - clamps and validates externally proposed payment plans"""

import json
import logging
import statistics
from typing import Any, Dict, List, Optional, Protocol, Sequence
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from payoff_planner.domain.allocation import allocate, apply_projected_metrics, utilization_warnings
from payoff_planner.domain.exceptions import AdvisoryAPIError
from payoff_planner.domain.models import Allocation, Card, FinancialProfile, OptimizationResult, Policy
from payoff_planner.domain.projection import project

# Extras at or below one cent are rounding noise, not a policy decision
EXTRA_PAYMENT_EPSILON = 0.01
APR_TOLERANCE = 0.1
EVEN_SPREAD_TOLERANCE = 0.10

SYSTEM_PROMPT = """
You are a debt repayment allocation engine.
You always output one valid JSON object only. No markdown formatting, no explanations outside the JSON, no extra top-level fields.
Your goal is to allocate a monthly budget across a list of credit cards.
Constraint 1: You MUST cover the minimum payment for every card whenever the budget allows it.
Constraint 2: The total of all recommended payments CANNOT exceed the available budget.
Constraint 3: Never recommend a negative payment or more than a card's balance.
Constraint 4: The "strategyUsed" field MUST repeat the requested policy exactly.
Constraint 5: Surplus above the minimums MUST follow the requested policy's pattern.
"""

POLICY_PATTERNS = {
    Policy.AVALANCHE: (
        "after minimums, send all surplus to the card with the highest APR until its balance is paid, "
        "then continue with the next highest APR"
    ),
    Policy.SNOWBALL: (
        "after minimums, send all surplus to the card with the lowest balance until it is paid, "
        "then continue with the next lowest balance"
    ),
    Policy.EVEN: "after minimums, split the surplus equally across all cards",
}


class AdvisoryPlanSource(Protocol):
    """Anything that can turn prompts into a parsed JSON plan proposal"""

    async def request_plan(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        ...


class ProposedPayment(BaseModel):
    """One card's payment as proposed by the advisory process"""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    card_id: str = Field(..., alias="cardId")
    recommended_payment: float = Field(..., alias="recommendedPayment", allow_inf_nan=False)
    reasoning: Optional[str] = None


class AdvisoryProposal(BaseModel):
    """Expected advisory response: {strategyUsed, allocations, analysis}"""

    model_config = ConfigDict(populate_by_name=True)

    strategy_used: Optional[str] = Field(None, alias="strategyUsed")
    allocations: List[ProposedPayment] = Field(default_factory=list)
    analysis: Optional[str] = None


def build_advisory_request(cards: Sequence[Card], profile: FinancialProfile) -> Dict[str, Any]:
    """
    Canonical request payload.

    Cards are sorted by id so the same card set always produces the same
    payload, whatever order the caller supplied them in.
    """
    policy = Policy.deterministic(profile.strategy)
    budget = profile.monthly_net_income
    return {
        "profile": {"monthlyNetIncome": budget, "strategy": policy.value},
        "cards": [_card_payload(card) for card in sorted(cards, key=lambda c: c.id)],
        "availableForDebt": budget,
    }


def build_user_prompt(payload: Dict[str, Any]) -> str:
    """Instruction for one plan; the payload is serialized on a single "Data:" line"""
    policy = Policy(payload["profile"]["strategy"])
    budget = payload["availableForDebt"]
    return f"""
Analyze this financial data and recommend payments using the "{policy.value}" policy.
Data: {json.dumps(payload, sort_keys=True)}

Return a JSON object with this exact structure and no other top-level fields:
{{
  "strategyUsed": "{policy.value}",
  "allocations": [
    {{ "cardId": "string", "recommendedPayment": number, "reasoning": "short string" }}
  ],
  "analysis": "short summary of the plan"
}}

Ensure sum of recommendedPayment <= {budget}.
Ensure recommendedPayment >= minPayment for each card when the budget allows.
Ensure recommendedPayment <= balance for each card.
Surplus pattern: {POLICY_PATTERNS[policy]}.
"""


def check_policy_compliance(cards: Sequence[Card], payments: Sequence[float], policy: Policy) -> Optional[str]:
    """
    Heuristic check that the surplus follows the policy's pattern.

    Only cards receiving more than a cent above their minimum are considered:
    - avalanche: the largest extra goes to a card within 0.1 APR points of the
      highest APR among them
    - snowball: the largest extra goes to the lowest balance among them
    - even: extras have a population std dev of at most 10% of their mean

    Returns:
        A description of the violation, or None when the plan complies
    """
    extras = [
        (card, payment - card.min_payment)
        for card, payment in zip(cards, payments)
        if payment - card.min_payment > EXTRA_PAYMENT_EPSILON
    ]
    if not extras:
        return None

    top_card, _ = max(extras, key=lambda item: item[1])

    if policy == Policy.AVALANCHE:
        highest_apr = max(card.apr for card, _ in extras)
        if highest_apr - top_card.apr > APR_TOLERANCE:
            return (
                f"largest extra payment went to {top_card.name} at {top_card.apr}% APR "
                f"while {highest_apr}% APR was available"
            )

    elif policy == Policy.SNOWBALL:
        lowest_balance = min(card.balance for card, _ in extras)
        if top_card.balance > lowest_balance:
            return (
                f"largest extra payment went to {top_card.name} with balance {top_card.balance:,.2f} "
                f"while a balance of {lowest_balance:,.2f} was smaller"
            )

    elif policy == Policy.EVEN:
        amounts = [extra for _, extra in extras]
        mean = statistics.fmean(amounts)
        spread = statistics.pstdev(amounts)
        if spread > EVEN_SPREAD_TOLERANCE * mean:
            return f"extra payments vary by {spread:,.2f} around a mean of {mean:,.2f}"

    return None


async def get_advisory_plan(
    cards: Sequence[Card],
    profile: FinancialProfile,
    horizon_months: int,
    client: AdvisoryPlanSource,
) -> OptimizationResult:
    """
    Ask the advisory process for a plan and accept it only if it is safe.

    Pipeline:
    1. Transport or parse failure -> deterministic fallback
    2. Clamp every payment up to the card's minimum (missing cards pay minimum)
    3. Budget / minimum bounds -> warnings only
    4. Declared policy must echo the requested one -> otherwise fallback
    5. Surplus must follow the policy pattern -> otherwise fallback

    Fallbacks are the exact allocate() result for the requested policy plus
    one warning naming the failed check. Never raises for advisory failures.
    """
    policy = Policy.deterministic(profile.strategy)
    budget = profile.monthly_net_income
    payload = build_advisory_request(cards, profile)

    try:
        raw = await client.request_plan(SYSTEM_PROMPT, build_user_prompt(payload))
        proposal = AdvisoryProposal.model_validate(raw)
    except (AdvisoryAPIError, ValidationError) as e:
        return _fallback(
            cards, budget, policy, horizon_months,
            warning=f"Advisory connection failed, used deterministic {policy.value} policy.",
            reason=str(e),
        )
    except Exception as e:
        logging.error(f"Unexpected advisory error: {e}", extra={"step": "advisory_request"})
        return _fallback(
            cards, budget, policy, horizon_months,
            warning=f"Advisory connection failed, used deterministic {policy.value} policy.",
            reason=f"unexpected: {e!r}",
        )

    # First proposal per card wins
    proposed: Dict[str, ProposedPayment] = {}
    for item in proposal.allocations:
        proposed.setdefault(item.card_id, item)

    # Safety clamp: never below the required minimum
    payments = []
    for card in cards:
        item = proposed.get(card.id)
        raw_payment = item.recommended_payment if item else card.min_payment
        payments.append(max(raw_payment, card.min_payment))

    total_used = sum(payments)
    total_min_payments = sum(card.min_payment for card in cards)
    is_valid = total_used <= budget and total_used >= total_min_payments

    warnings: List[str] = []
    if total_used > budget:
        warnings.append(
            f"Advisory plan allocates ${total_used:,.2f}, exceeding the ${budget:,.2f} budget."
        )
    # Unreachable after the clamp above; kept as the lower budget bound
    if total_used < total_min_payments:
        warnings.append(
            f"Advisory plan allocates ${total_used:,.2f}, below the ${total_min_payments:,.2f} in minimum payments."
        )

    if proposal.strategy_used != policy.value:
        return _fallback(
            cards, budget, policy, horizon_months,
            warning=(
                f"Advisory plan declared policy '{proposal.strategy_used}' instead of '{policy.value}', "
                f"used deterministic {policy.value} policy."
            ),
            reason="policy_echo_mismatch",
        )

    violation = check_policy_compliance(cards, payments, policy)
    if violation:
        return _fallback(
            cards, budget, policy, horizon_months,
            warning=(
                f"Advisory plan did not follow the {policy.value} pattern ({violation}), "
                f"used deterministic {policy.value} policy."
            ),
            reason="policy_pattern_mismatch",
        )

    allocations = []
    for card, payment in zip(cards, payments):
        item = proposed.get(card.id)
        allocation = Allocation(
            card_id=card.id,
            min_payment=card.min_payment,
            extra_payment=payment - card.min_payment,
            total_payment=payment,
            remaining_balance_after_payment=0.0,
            notes=(item.reasoning if item and item.reasoning else "Advisory recommendation"),
        )
        allocations.append(apply_projected_metrics(card, allocation))

    warnings.extend(utilization_warnings(cards))

    logging.info(
        "Advisory plan accepted",
        extra={"step": "advisory_accepted", "policy": policy.value, "card_count": len(cards)},
    )

    return OptimizationResult(
        allocations=allocations,
        total_available_for_debt=budget,
        total_min_payments=total_min_payments,
        remaining_cash=budget - total_used,
        policy_used=Policy.ADVISORY,
        is_valid=is_valid,
        warnings=warnings,
        projections=project(cards, budget, policy, horizon_months),
        analysis=proposal.analysis,
    )


def _fallback(
    cards: Sequence[Card],
    budget: float,
    policy: Policy,
    horizon_months: int,
    warning: str,
    reason: str,
) -> OptimizationResult:
    logging.warning(
        "Advisory plan rejected",
        extra={"step": "advisory_fallback", "policy": policy.value, "reason": reason},
    )
    result = allocate(cards, budget, policy, horizon_months)
    result.warnings.append(warning)
    return result


def _card_payload(card: Card) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": card.id,
        "name": card.name,
        "balance": card.balance,
        "apr": card.apr,
        "minPayment": card.min_payment,
        "creditLimit": card.credit_limit,
        "dueDate": card.due_date,
    }
    if card.monthly_interest_amount is not None:
        payload["monthlyInterestAmount"] = card.monthly_interest_amount
    return payload
