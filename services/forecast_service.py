### Forecast service combines balance, recurring income and bills into a safe-to-spend figure for the current pay cycle.
import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from models.errors import InvalidRule, InvalidSettings
from models.projection_dto import ForecastDiagnostic, ForecastOutput, GoalProgress
from services.bill_projector import monthly_bill_total, project_bills
from services.income_aggregator import current_cycle_income
from services.recurrence import (
    MONTHLY_PERIOD_DAYS,
    catch_up,
    cycle_window_end,
    next_occurrence,
    period_length_days,
)
from utils.money import CENTS, to_money

logger = logging.getLogger(__name__)

# Flat share of discretionary suggested for every goal.
GOAL_CONTRIBUTION_SHARE = Decimal("0.10")

ZERO = Decimal("0.00")


def calculate_next_pay_date(pay_settings, as_of: date) -> date:
    """First pay date after ``last_pay_date`` that is on or after ``as_of``."""
    if pay_settings is None or pay_settings.last_pay_date is None:
        raise InvalidSettings("pay settings have no last pay date")

    try:
        first = next_occurrence(pay_settings.last_pay_date, pay_settings.pay_frequency)
        return catch_up(first, pay_settings.pay_frequency, as_of)
    except InvalidRule as e:
        raise InvalidSettings(f"invalid pay frequency: {e}") from e


def calculate_cycle_length(pay_settings, as_of: date) -> int:
    """Pay cycle window length in days; the window must fit in the calendar."""
    try:
        cycle_length_days = period_length_days(pay_settings.pay_frequency)
        cycle_window_end(as_of, cycle_length_days)
    except InvalidRule as e:
        raise InvalidSettings(f"invalid pay frequency: {e}") from e
    return cycle_length_days


def calculate_goal_progress(goal, discretionary: Decimal, as_of: date) -> GoalProgress:
    target = to_money(goal.target_amount)
    current = to_money(goal.current_amount)
    suggested = (discretionary * GOAL_CONTRIBUTION_SHARE).quantize(CENTS, rounding=ROUND_HALF_UP)
    progress = float(current / target * 100)

    if goal.deadline is None:
        return GoalProgress(
            goal=goal,
            progress_percent=progress,
            suggested_monthly_contribution=suggested,
            on_track=True,
        )

    days_left = Decimal((goal.deadline - as_of).days)
    months_remaining = max(Decimal(1), days_left / MONTHLY_PERIOD_DAYS)
    required = ((target - current) / months_remaining).quantize(CENTS, rounding=ROUND_HALF_UP)

    return GoalProgress(
        goal=goal,
        progress_percent=progress,
        suggested_monthly_contribution=suggested,
        on_track=suggested >= required,
        required_monthly=required,
    )


def build_forecast(forecast_input) -> ForecastOutput:
    """
    Assemble the forecast for one snapshot.

    Malformed bills, income sources and goals are left out of the figures
    and listed in ``diagnostics``. Missing or broken pay settings raise
    InvalidSettings since no pay cycle can be derived.
    """
    as_of = forecast_input.as_of or date.today()
    settings = forecast_input.pay_settings

    next_pay_date = calculate_next_pay_date(settings, as_of)
    cycle_length_days = calculate_cycle_length(settings, as_of)

    upcoming_bills, diagnostics = project_bills(
        forecast_input.bill_list, as_of, next_pay_date, cycle_length_days
    )
    income, income_diagnostics = current_cycle_income(
        forecast_input.income_list, as_of, cycle_length_days
    )
    diagnostics.extend(income_diagnostics)

    bills_due_now = sum((b.amount for b in upcoming_bills if b.is_in_current_cycle), ZERO)
    reserved_for_bills = sum((b.amount for b in upcoming_bills if b.needs_reservation), ZERO)

    current_balance = to_money(forecast_input.current_balance)
    raw_discretionary = current_balance + income - bills_due_now - reserved_for_bills
    discretionary = max(ZERO, raw_discretionary)

    goals_progress = []
    for goal in forecast_input.goal_list:
        if to_money(goal.target_amount) <= 0:
            logger.warning("Skipping goal %s (%s): non-positive target", goal.id, goal.name)
            diagnostics.append(ForecastDiagnostic(
                item_kind="goal",
                item_id=goal.id,
                message=f"target amount must be positive, got {goal.target_amount}",
            ))
            continue
        goals_progress.append(calculate_goal_progress(goal, discretionary, as_of))

    logger.info(
        "Forecast as of %s: next pay %s, discretionary %s (raw %s), %d diagnostics",
        as_of, next_pay_date, discretionary, raw_discretionary, len(diagnostics),
    )

    return ForecastOutput(
        current_balance=current_balance,
        reserved_for_bills=reserved_for_bills,
        discretionary=discretionary,
        raw_discretionary=raw_discretionary,
        bills_due_now=bills_due_now,
        current_cycle_income=income,
        next_pay_date=next_pay_date,
        cycle_length_days=cycle_length_days,
        as_of=as_of,
        monthly_bill_total=monthly_bill_total(forecast_input.bill_list),
        upcoming_bills=upcoming_bills,
        goals_progress=goals_progress,
        diagnostics=diagnostics,
    )
