"""
Income Aggregator: recurring income landing inside the current pay cycle.
"""
import logging
from datetime import date
from decimal import Decimal

from models.errors import InvalidRule
from models.projection_dto import ForecastDiagnostic
from services.recurrence import catch_up, cycle_window_end
from utils.money import to_money

logger = logging.getLogger(__name__)


def current_cycle_income(income, as_of: date, cycle_length_days: int):
    """
    Sum income whose next occurrence (caught up to ``as_of``) falls strictly
    before ``as_of + cycle_length_days``.

    Returns ``(total, diagnostics)``; sources with a malformed rule
    contribute nothing and are reported.
    """
    window_end = cycle_window_end(as_of, cycle_length_days)
    total = Decimal("0.00")
    diagnostics = []

    for source in income:
        try:
            occurs = catch_up(source.next_occurrence, source.rule, as_of)
        except InvalidRule as e:
            logger.warning("Skipping income %s (%s): %s", source.id, source.source, e)
            diagnostics.append(ForecastDiagnostic(item_kind="income", item_id=source.id, message=str(e)))
            continue

        if occurs < window_end:
            total += to_money(source.amount)

    return total, diagnostics
