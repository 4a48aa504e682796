"""
Recurrence Calculator: next occurrence and pay cycle length for a rule.

Pure functions; every step returns a new date.
"""
from datetime import date, timedelta
from typing import List

from models.budget import BIWEEKLY, CUSTOM, FREQUENCIES, MONTHLY, WEEKLY, RecurrenceRule
from models.errors import InvalidRule
from models.projection_dto import PayPeriod
from utils.dates import add_months

MAX_CATCH_UP_STEPS = 10_000

# Fixed approximation used only to size the current cycle window.
MONTHLY_PERIOD_DAYS = 30

_FIXED_INTERVAL_DAYS = {WEEKLY: 7, BIWEEKLY: 14}


def validate_rule(rule: RecurrenceRule) -> None:
    if rule is None:
        raise InvalidRule("missing recurrence rule")

    if rule.frequency not in FREQUENCIES:
        raise InvalidRule(f"unknown frequency {rule.frequency!r}", rule)

    if rule.frequency == CUSTOM:
        interval = rule.custom_interval_days
        if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
            raise InvalidRule(
                f"custom rule needs a positive interval, got {interval!r}", rule
            )


def next_occurrence(anchor: date, rule: RecurrenceRule) -> date:
    """Return the first occurrence strictly after ``anchor``."""
    validate_rule(rule)

    try:
        if rule.frequency == MONTHLY:
            return add_months(anchor, 1)
        if rule.frequency == CUSTOM:
            return anchor + timedelta(days=rule.custom_interval_days)
        return anchor + timedelta(days=_FIXED_INTERVAL_DAYS[rule.frequency])
    except (OverflowError, ValueError) as e:
        raise InvalidRule(
            f"next occurrence after {anchor.isoformat()} is out of range", rule
        ) from e


def period_length_days(rule: RecurrenceRule) -> int:
    validate_rule(rule)

    if rule.frequency == MONTHLY:
        return MONTHLY_PERIOD_DAYS
    if rule.frequency == CUSTOM:
        return rule.custom_interval_days
    return _FIXED_INTERVAL_DAYS[rule.frequency]


def cycle_window_end(as_of: date, cycle_length_days: int) -> date:
    """Exclusive end of the current cycle window starting at ``as_of``."""
    try:
        return as_of + timedelta(days=cycle_length_days)
    except OverflowError as e:
        raise InvalidRule(
            f"a {cycle_length_days}-day cycle from {as_of.isoformat()} is out of range"
        ) from e


def catch_up(anchor: date, rule: RecurrenceRule, as_of: date) -> date:
    """
    Roll ``anchor`` forward to the first occurrence on or after ``as_of``.

    An anchor already on or after ``as_of`` is returned unchanged. Gives up
    with InvalidRule after MAX_CATCH_UP_STEPS steps.
    """
    validate_rule(rule)

    current = anchor
    for _ in range(MAX_CATCH_UP_STEPS):
        if current >= as_of:
            return current
        current = next_occurrence(current, rule)

    if current >= as_of:
        return current
    raise InvalidRule(
        f"no occurrence on or after {as_of.isoformat()} within "
        f"{MAX_CATCH_UP_STEPS} steps of {anchor.isoformat()}",
        rule,
    )


def pay_periods(last_pay_date: date, rule: RecurrenceRule, periods: int = 3) -> List[PayPeriod]:
    """Consecutive pay cycles starting at ``last_pay_date``."""
    schedule = []
    start = last_pay_date
    for _ in range(periods):
        end = next_occurrence(start, rule)
        schedule.append(PayPeriod(start=start, end=end))
        start = end
    return schedule
