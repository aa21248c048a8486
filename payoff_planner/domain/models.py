"""Domain models - pure Python dataclasses representing cards, budgets and plans"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Policy(str, Enum):
    """Surplus distribution policy"""

    AVALANCHE = "avalanche"  # highest APR first
    SNOWBALL = "snowball"  # lowest balance first
    EVEN = "even"  # uniform split
    ADVISORY = "advisory"  # external recommender with deterministic fallback

    @classmethod
    def deterministic(cls, policy: Optional["Policy"]) -> "Policy":
        """Resolve a declared policy to the deterministic policy that implements it"""
        if policy is None or policy == cls.ADVISORY:
            return cls.AVALANCHE
        return cls(policy)


@dataclass(frozen=True)
class Card:
    """Revolving credit account supplied by the card-management collaborator"""

    id: str
    name: str
    balance: float
    apr: float  # percentage points, e.g. 24.99
    min_payment: float
    due_date: str = ""  # display only
    credit_limit: float = 0.0  # 0 = not tracked
    monthly_interest_amount: Optional[float] = None  # single-month override


@dataclass(frozen=True)
class FinancialProfile:
    """Budget available for debt repayment this month"""

    monthly_net_income: float
    strategy: Optional[Policy] = None


@dataclass
class Allocation:
    """Recommended payment for one card this month"""

    card_id: str
    min_payment: float
    extra_payment: float
    total_payment: float
    remaining_balance_after_payment: float
    projected_available_credit: float = 0.0
    projected_interest: float = 0.0
    max_safe_spend: int = 0
    notes: Optional[str] = None


@dataclass
class ProjectionPoint:
    """Snapshot of all balances at the end of a simulated month"""

    month: int
    total_balance: float
    total_interest_paid: float
    card_balances: Dict[str, float]


@dataclass
class OptimizationResult:
    """Output of the allocation engine or the advisory adapter"""

    allocations: List[Allocation]
    total_available_for_debt: float
    total_min_payments: float
    remaining_cash: float
    policy_used: Policy
    is_valid: bool
    warnings: List[str] = field(default_factory=list)
    projections: List[ProjectionPoint] = field(default_factory=list)
    analysis: Optional[str] = None
