"""
Bill Projector: rolls recurring expenses forward and classifies them
against the current pay cycle.
"""
import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from models.budget import BIWEEKLY, CUSTOM, MONTHLY, WEEKLY
from models.errors import InvalidRule
from models.projection_dto import BillProjection, ForecastDiagnostic
from services.recurrence import catch_up, cycle_window_end, validate_rule
from utils.money import CENTS, to_money

logger = logging.getLogger(__name__)

# Bills page "total monthly" multipliers.
MONTHLY_MULTIPLIERS = {
    WEEKLY: Decimal("4.33"),
    BIWEEKLY: Decimal("2.17"),
    MONTHLY: Decimal("1"),
}


def project_bills(bills, as_of: date, next_pay_date: date, cycle_length_days: int):
    """
    Project every bill to its first due date on or after ``as_of``.

    Returns ``(projections, diagnostics)``. Projections are sorted by due date;
    ``sorted`` is stable so bills due the same day keep their input order.
    Bills with a malformed rule are skipped and reported in ``diagnostics``.
    """
    cycle_end = cycle_window_end(as_of, cycle_length_days)
    projections = []
    diagnostics = []

    for bill in bills:
        try:
            due = catch_up(bill.due_date, bill.rule, as_of)
        except InvalidRule as e:
            logger.warning("Skipping bill %s (%s): %s", bill.id, bill.name, e)
            diagnostics.append(ForecastDiagnostic(item_kind="bill", item_id=bill.id, message=str(e)))
            continue

        projections.append(BillProjection(
            bill_id=bill.id,
            name=bill.name,
            amount=to_money(bill.amount),
            due_date=due,
            is_in_current_cycle=due < cycle_end,
            needs_reservation=due > next_pay_date,
            paid=bill.paid,
        ))

    return sorted(projections, key=lambda p: p.due_date), diagnostics


def monthly_bill_total(bills) -> Decimal:
    """Every bill normalized to a monthly amount; malformed bills are left out."""
    total = Decimal("0")
    for bill in bills:
        try:
            validate_rule(bill.rule)
        except InvalidRule:
            continue

        if bill.rule.frequency == CUSTOM:
            multiplier = Decimal(30) / Decimal(bill.rule.custom_interval_days)
        else:
            multiplier = MONTHLY_MULTIPLIERS[bill.rule.frequency]
        total += to_money(bill.amount) * multiplier

    return total.quantize(CENTS, rounding=ROUND_HALF_UP)
