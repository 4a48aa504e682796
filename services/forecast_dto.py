from dataclasses import dataclass
from typing import List, Optional

from utils.dates import format_date, format_relative_date
from utils.money import format_money


@dataclass
class BillDTO:
    """Single projected bill."""
    bill_id: str
    name: str
    amount: float
    due_date: str  # ISO format YYYY-MM-DD
    is_in_current_cycle: bool
    needs_reservation: bool
    paid: bool


@dataclass
class GoalProgressDTO:
    goal_id: str
    name: str
    target_amount: float
    current_amount: float
    deadline: Optional[str]
    progress_percent: float
    suggested_monthly_contribution: float
    required_monthly: Optional[float]
    on_track: bool


@dataclass
class DiagnosticDTO:
    item_kind: str
    item_id: str
    message: str


@dataclass
class ForecastResponseDTO:
    """Complete pay-cycle forecast response."""
    as_of: str  # ISO format
    next_pay_date: str  # ISO format
    cycle_length_days: int
    current_balance: float
    current_cycle_income: float
    bills_due_now: float
    reserved_for_bills: float
    raw_discretionary: float
    discretionary: float
    monthly_bill_total: float
    upcoming_bills: List[BillDTO]
    goals_progress: List[GoalProgressDTO]
    diagnostics: List[DiagnosticDTO]

    @classmethod
    def from_forecast(cls, forecast):
        """Convert ForecastOutput to JSON-serializable DTO."""
        return cls(
            as_of=forecast.as_of.isoformat(),
            next_pay_date=forecast.next_pay_date.isoformat(),
            cycle_length_days=forecast.cycle_length_days,
            current_balance=float(forecast.current_balance),
            current_cycle_income=float(forecast.current_cycle_income),
            bills_due_now=float(forecast.bills_due_now),
            reserved_for_bills=float(forecast.reserved_for_bills),
            raw_discretionary=float(forecast.raw_discretionary),
            discretionary=float(forecast.discretionary),
            monthly_bill_total=float(forecast.monthly_bill_total),
            upcoming_bills=[
                BillDTO(
                    bill_id=b.bill_id,
                    name=b.name,
                    amount=float(b.amount),
                    due_date=b.due_date.isoformat(),
                    is_in_current_cycle=b.is_in_current_cycle,
                    needs_reservation=b.needs_reservation,
                    paid=b.paid,
                )
                for b in forecast.upcoming_bills
            ],
            goals_progress=[
                GoalProgressDTO(
                    goal_id=g.goal.id,
                    name=g.goal.name,
                    target_amount=float(g.goal.target_amount),
                    current_amount=float(g.goal.current_amount),
                    deadline=g.goal.deadline.isoformat() if g.goal.deadline else None,
                    progress_percent=round(g.progress_percent, 2),
                    suggested_monthly_contribution=float(g.suggested_monthly_contribution),
                    required_monthly=(
                        float(g.required_monthly) if g.required_monthly is not None else None
                    ),
                    on_track=g.on_track,
                )
                for g in forecast.goals_progress
            ],
            diagnostics=[
                DiagnosticDTO(item_kind=d.item_kind, item_id=d.item_id, message=d.message)
                for d in forecast.diagnostics
            ],
        )


@dataclass
class ForecastSummaryDTO:
    """Display-ready strings for the dashboard header cards."""
    discretionary: str
    reserved_for_bills: str
    shortfall: Optional[str]
    status: str
    next_payday: str
    next_pay_date: str
    goals_on_track: str
    warnings: List[str]

    @classmethod
    def from_forecast(cls, forecast, currency="USD"):
        total_goals = len(forecast.goals_progress)
        return cls(
            discretionary=format_money(forecast.discretionary, currency),
            reserved_for_bills=format_money(forecast.reserved_for_bills, currency),
            shortfall=format_money(forecast.shortfall, currency) if forecast.has_shortfall else None,
            status="On Track" if forecast.discretionary > 0 else "Needs Attention",
            next_payday=format_relative_date(forecast.next_pay_date, forecast.as_of),
            next_pay_date=format_date(forecast.next_pay_date),
            goals_on_track=f"{forecast.goals_on_track} of {total_goals} on track",
            warnings=[
                f"{d.item_kind} {d.item_id} was left out: {d.message}"
                for d in forecast.diagnostics
            ],
        )
