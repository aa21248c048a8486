"""POST /v1/projection - multi-month payoff trajectory"""

from fastapi import APIRouter

from payoff_planner.api.v1.schemas import ProjectionRequest, ProjectionResponse, ProjectionPointSchema
from payoff_planner.domain.projection import project

router = APIRouter()


@router.post("/projection", response_model=ProjectionResponse)
def create_projection(request_body: ProjectionRequest):
    """
    Simulate balances month by month without allocating the current month.

    Returns:
        horizon_months + 1 points, month 0 being the submitted balances
    """
    cards = [card.to_domain() for card in request_body.cards]
    points = project(cards, request_body.monthly_budget, request_body.policy, request_body.horizon_months)

    return ProjectionResponse(
        policy=request_body.policy,
        projections=[ProjectionPointSchema.from_domain(p) for p in points],
    )
