"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from payoff_planner.config import settings
from payoff_planner.domain.models import (
    Allocation,
    Card,
    FinancialProfile,
    OptimizationResult,
    Policy,
    ProjectionPoint,
)

# Twenty-five years of monthly points is plenty for any card payoff
MAX_HORIZON_MONTHS = 300


class CardSchema(BaseModel):
    """Credit card as submitted by the card-management collaborator"""

    id: str = Field(..., min_length=1, description="Stable card identifier")
    name: str = Field(..., min_length=1, description="Display label")
    balance: float = Field(..., ge=0, description="Current owed amount")
    apr: float = Field(..., ge=0, description="Annual percentage rate in percentage points")
    min_payment: float = Field(..., ge=0, description="Minimum payment this cycle")
    due_date: str = ""
    credit_limit: float = Field(0.0, ge=0, description="0 when the limit is not tracked")
    monthly_interest_amount: Optional[float] = Field(None, ge=0)

    def to_domain(self) -> Card:
        return Card(**self.model_dump())


class ProfileSchema(BaseModel):
    """Monthly debt budget and declared policy"""

    monthly_net_income: float = Field(..., description="Total monthly budget for debt repayment")
    strategy: Optional[Policy] = None

    def to_domain(self) -> FinancialProfile:
        return FinancialProfile(monthly_net_income=self.monthly_net_income, strategy=self.strategy)


class PlanRequest(BaseModel):
    """Request body for POST /v1/plan"""

    cards: List[CardSchema]
    profile: ProfileSchema
    policy: Optional[Policy] = None
    horizon_months: int = Field(default_factory=lambda: settings.default_horizon_months, ge=0, le=MAX_HORIZON_MONTHS)


class ProjectionRequest(BaseModel):
    """Request body for POST /v1/projection"""

    cards: List[CardSchema]
    monthly_budget: float
    policy: Policy = Policy.AVALANCHE
    horizon_months: int = Field(default_factory=lambda: settings.default_horizon_months, ge=0, le=MAX_HORIZON_MONTHS)


class AllocationSchema(BaseModel):
    """Recommended payment for one card"""

    card_id: str
    min_payment: float
    extra_payment: float
    total_payment: float
    remaining_balance_after_payment: float
    projected_available_credit: float
    projected_interest: float
    max_safe_spend: int
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, allocation: Allocation) -> "AllocationSchema":
        return cls(**vars(allocation))


class ProjectionPointSchema(BaseModel):
    """Balances at the end of one simulated month"""

    month: int
    total_balance: float
    total_interest_paid: float
    card_balances: Dict[str, float]

    @classmethod
    def from_domain(cls, point: ProjectionPoint) -> "ProjectionPointSchema":
        return cls(
            month=point.month,
            total_balance=point.total_balance,
            total_interest_paid=point.total_interest_paid,
            card_balances=dict(point.card_balances),
        )


class PlanResponse(BaseModel):
    """Response for POST /v1/plan"""

    allocations: List[AllocationSchema]
    total_available_for_debt: float
    total_min_payments: float
    remaining_cash: float
    policy_used: Policy
    is_valid: bool
    warnings: List[str]
    projections: List[ProjectionPointSchema]
    analysis: Optional[str] = None

    @classmethod
    def from_domain(cls, result: OptimizationResult) -> "PlanResponse":
        return cls(
            allocations=[AllocationSchema.from_domain(a) for a in result.allocations],
            total_available_for_debt=result.total_available_for_debt,
            total_min_payments=result.total_min_payments,
            remaining_cash=result.remaining_cash,
            policy_used=result.policy_used,
            is_valid=result.is_valid,
            warnings=list(result.warnings),
            projections=[ProjectionPointSchema.from_domain(p) for p in result.projections],
            analysis=result.analysis,
        )


class ProjectionResponse(BaseModel):
    """Response for POST /v1/projection"""

    policy: Policy
    projections: List[ProjectionPointSchema]
