"""POST /v1/plan - monthly payment plan endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from payoff_planner.api.v1.schemas import PlanRequest, PlanResponse
from payoff_planner.api.dependencies import get_advisory_client, get_request_id
from payoff_planner.infrastructure.clients.advisory import AdvisoryClient
from payoff_planner.domain.planner import build_plan, resolve_policy
from payoff_planner.infrastructure.observability.metrics import record_plan
from payoff_planner.infrastructure.observability.logging import log_plan

router = APIRouter()


@router.post("/plan", response_model=PlanResponse)
async def create_plan(
    request_body: PlanRequest,
    request: Request,
    advisory_client: AdvisoryClient = Depends(get_advisory_client),
):
    """
    Allocate this month's budget and project the payoff trajectory.

    Flow:
    1. Resolve the policy (explicit, then profile strategy, then avalanche)
    2. Run the allocation engine, or the advisory adapter for "advisory"
    3. Record metrics and logs
    4. Return allocations, warnings and projections
    """
    start_time = time.time()
    request_id = get_request_id(request)

    cards = [card.to_domain() for card in request_body.cards]
    profile = request_body.profile.to_domain()
    requested_policy = resolve_policy(profile, request_body.policy)

    try:
        result = await build_plan(
            cards,
            profile,
            policy=request_body.policy,
            horizon_months=request_body.horizon_months,
            advisory_client=advisory_client,
        )

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_plan(requested_policy.value, result.policy_used.value, result.is_valid)
    log_plan(
        request_id,
        requested_policy.value,
        result.policy_used.value,
        result.is_valid,
        len(cards),
        duration_ms,
    )

    return PlanResponse.from_domain(result)
