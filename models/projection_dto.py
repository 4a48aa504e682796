from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from models.budget import Goal


@dataclass(frozen=True)
class PayPeriod:
    start: date
    end: date


@dataclass(frozen=True)
class ForecastDiagnostic:
    """An input item that was left out of the forecast, and why."""
    item_kind: str  # "bill", "income" or "goal"
    item_id: str
    message: str


@dataclass(frozen=True)
class BillProjection:
    bill_id: str
    name: str
    amount: Decimal
    due_date: date
    is_in_current_cycle: bool
    needs_reservation: bool
    paid: bool = False


@dataclass(frozen=True)
class GoalProgress:
    goal: Goal
    progress_percent: float
    suggested_monthly_contribution: Decimal
    on_track: bool
    required_monthly: Optional[Decimal] = None

    @property
    def display_percent(self) -> float:
        return min(100.0, self.progress_percent)


@dataclass(frozen=True)
class ForecastOutput:
    current_balance: Decimal
    reserved_for_bills: Decimal
    discretionary: Decimal
    raw_discretionary: Decimal
    bills_due_now: Decimal
    current_cycle_income: Decimal
    next_pay_date: date
    cycle_length_days: int
    as_of: date
    monthly_bill_total: Decimal = Decimal("0.00")
    upcoming_bills: List[BillProjection] = field(default_factory=list)
    goals_progress: List[GoalProgress] = field(default_factory=list)
    diagnostics: List[ForecastDiagnostic] = field(default_factory=list)

    @property
    def has_shortfall(self) -> bool:
        return self.raw_discretionary < 0

    @property
    def shortfall(self) -> Decimal:
        return max(Decimal("0.00"), -self.raw_discretionary)

    @property
    def goals_on_track(self) -> int:
        return sum(1 for g in self.goals_progress if g.on_track)

    @property
    def total_goal_saved(self) -> Decimal:
        return sum((g.goal.current_amount for g in self.goals_progress), Decimal("0.00"))

    @property
    def total_goal_target(self) -> Decimal:
        return sum((g.goal.target_amount for g in self.goals_progress), Decimal("0.00"))
