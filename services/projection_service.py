import os
from datetime import date

from db import get_db
from models.budget import (
    ForecastInput,
    Goal,
    PaySettings,
    RecurrenceRule,
    RecurringExpense,
    RecurringIncome,
)
from models.errors import InvalidRule, InvalidSettings
from models.projection_dto import ForecastOutput
from repositories.budget_repository import (
    get_current_balance,
    get_goals,
    get_pay_settings,
    get_recurring_expenses,
    get_recurring_income,
)
from services.forecast_service import build_forecast
from services.recurrence import pay_periods
from utils.dates import parse_date
from utils.money import to_money

DEFAULT_USER = os.getenv("BUDGET_DEFAULT_USER", "local")


def _rule(row) -> RecurrenceRule:
    return RecurrenceRule(frequency=row["frequency"], custom_interval_days=row["custom_days"])


def _pay_settings(row) -> PaySettings:
    if row is None:
        raise InvalidSettings("pay settings have not been configured")

    raw_last_pay = row["last_pay_date"]
    if raw_last_pay in (None, ""):
        last_pay_date = None
    else:
        try:
            last_pay_date = parse_date(raw_last_pay)
        except ValueError as e:
            raise InvalidSettings(f"last pay date is unparseable: {raw_last_pay!r}") from e

    return PaySettings(
        pay_frequency=RecurrenceRule(
            frequency=row["pay_frequency"],
            custom_interval_days=row["custom_days"],
        ),
        last_pay_date=last_pay_date,
    )


def _load_snapshot(conn, user_id, as_of):
    settings_row = get_pay_settings(conn, user_id)
    income = [
        RecurringIncome(
            id=r["id"],
            amount=to_money(r["amount"]),
            rule=_rule(r),
            next_occurrence=r["next_date"],
            source=r["source"],
        )
        for r in get_recurring_income(conn, user_id)
    ]
    bills = [
        RecurringExpense(
            id=r["id"],
            name=r["name"],
            amount=to_money(r["amount"]),
            rule=_rule(r),
            due_date=r["due_date"],
            paid=bool(r["is_paid"]),
            last_paid_date=r["last_paid_date"],
        )
        for r in get_recurring_expenses(conn, user_id)
    ]
    goals = [
        Goal(
            id=r["id"],
            name=r["name"],
            target_amount=to_money(r["target_amount"]),
            current_amount=to_money(r["current_amount"]),
            deadline=r["deadline"],
            notes=r["notes"],
        )
        for r in get_goals(conn, user_id)
    ]

    return ForecastInput(
        current_balance=to_money(get_current_balance(conn, user_id)),
        pay_settings=_pay_settings(settings_row),
        income_list=income,
        bill_list=bills,
        goal_list=goals,
        as_of=as_of or date.today(),
    ), settings_row


def load_forecast_input(conn, user_id=DEFAULT_USER, as_of=None) -> ForecastInput:
    """Read one user's stored records into an immutable forecast snapshot."""
    return _load_snapshot(conn, user_id, as_of)[0]


def calculate_forecast(user_id=DEFAULT_USER, as_of=None, conn=None) -> ForecastOutput:
    """Forecast from the store as of ``as_of`` (today by default).

    Opens and closes a database connection on the caller's behalf unless
    one is passed in. No writes.
    """
    own_conn = conn is None
    if own_conn:
        conn = get_db()
    try:
        forecast_input = load_forecast_input(conn, user_id=user_id, as_of=as_of)
    finally:
        if own_conn:
            conn.close()

    return build_forecast(forecast_input)


def calculate_forecast_with_currency(user_id=DEFAULT_USER, as_of=None, conn=None,
                                     default_currency="USD"):
    """Like calculate_forecast, also returning the user's display currency.

    Settings and records are read through a single connection.
    """
    own_conn = conn is None
    if own_conn:
        conn = get_db()
    try:
        forecast_input, settings_row = _load_snapshot(conn, user_id, as_of)
    finally:
        if own_conn:
            conn.close()

    currency = settings_row.get("default_currency") or default_currency
    return build_forecast(forecast_input), currency


def upcoming_pay_periods(user_id=DEFAULT_USER, periods=3, conn=None):
    """The next ``periods`` pay cycles starting at the stored last pay date."""
    own_conn = conn is None
    if own_conn:
        conn = get_db()
    try:
        settings = _pay_settings(get_pay_settings(conn, user_id))
    finally:
        if own_conn:
            conn.close()

    if settings.last_pay_date is None:
        raise InvalidSettings("pay settings have no last pay date")
    try:
        return pay_periods(settings.last_pay_date, settings.pay_frequency, periods)
    except InvalidRule as e:
        raise InvalidSettings(f"invalid pay frequency: {e}") from e
