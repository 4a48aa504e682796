"""Forecast assembly: discretionary, reservations, goals and failure modes."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from models.budget import (
    ForecastInput,
    Goal,
    PaySettings,
    RecurrenceRule,
    RecurringExpense,
    RecurringIncome,
)
from models.errors import InvalidSettings
from services.forecast_service import build_forecast, calculate_next_pay_date

AS_OF = date(2025, 3, 10)
BIWEEKLY = RecurrenceRule("biweekly")


@pytest.fixture()
def pay_settings():
    # last paid a week ago -> next payday Mar 17
    return PaySettings(pay_frequency=BIWEEKLY, last_pay_date=AS_OF - timedelta(days=7))


def _forecast(pay_settings, balance="0", bills=(), income=(), goals=(), as_of=AS_OF):
    return build_forecast(ForecastInput(
        current_balance=Decimal(balance),
        pay_settings=pay_settings,
        income_list=list(income),
        bill_list=list(bills),
        goal_list=list(goals),
        as_of=as_of,
    ))


def test_bill_due_this_cycle(pay_settings):
    bill = RecurringExpense(
        id="internet", name="Internet", amount=Decimal("200"),
        rule=BIWEEKLY, due_date=AS_OF + timedelta(days=3),
    )

    forecast = _forecast(pay_settings, balance="1000", bills=[bill])

    assert forecast.next_pay_date == date(2025, 3, 17)
    assert forecast.bills_due_now == Decimal("200.00")
    assert forecast.reserved_for_bills == Decimal("0.00")
    assert forecast.discretionary == Decimal("800.00")
    assert forecast.raw_discretionary == Decimal("800.00")
    assert not forecast.has_shortfall


def test_bill_beyond_cycle_is_reserved(pay_settings):
    bill = RecurringExpense(
        id="rent", name="Rent", amount=Decimal("1500"),
        rule=RecurrenceRule("monthly"), due_date=AS_OF + timedelta(days=40),
    )

    forecast = _forecast(pay_settings, balance="0", bills=[bill])
    projection = forecast.upcoming_bills[0]

    assert not projection.is_in_current_cycle
    assert projection.needs_reservation
    assert forecast.reserved_for_bills == Decimal("1500.00")
    assert forecast.raw_discretionary == Decimal("-1500.00")
    assert forecast.discretionary == Decimal("0.00")
    assert forecast.has_shortfall
    assert forecast.shortfall == Decimal("1500.00")


def test_goal_behind_schedule(pay_settings):
    goal = Goal(
        id="trip", name="Trip", target_amount=Decimal("1200"),
        current_amount=Decimal("300"), deadline=AS_OF + timedelta(days=90),
    )

    forecast = _forecast(pay_settings, balance="600", goals=[goal])
    progress = forecast.goals_progress[0]

    assert forecast.discretionary == Decimal("600.00")
    assert progress.suggested_monthly_contribution == Decimal("60.00")
    assert progress.required_monthly == Decimal("300.00")
    assert progress.progress_percent == pytest.approx(25.0)
    assert progress.on_track is False


def test_zero_interval_income_does_not_block_forecast(pay_settings):
    income = [
        RecurringIncome(id="broken", amount=Decimal("500"),
                        rule=RecurrenceRule("custom", 0), next_occurrence=AS_OF),
        RecurringIncome(id="salary", amount=Decimal("1000"),
                        rule=BIWEEKLY, next_occurrence=date(2025, 3, 14)),
    ]

    forecast = _forecast(pay_settings, income=income)

    assert forecast.current_cycle_income == Decimal("1000.00")
    assert forecast.discretionary == Decimal("1000.00")
    assert [(d.item_kind, d.item_id) for d in forecast.diagnostics] == [("income", "broken")]


def test_malformed_bill_is_reported(pay_settings):
    bills = [
        RecurringExpense(id="bad", name="Bad", amount=Decimal("75"),
                         rule=RecurrenceRule("fortnightly"), due_date=AS_OF),
        RecurringExpense(id="good", name="Good", amount=Decimal("25"),
                         rule=BIWEEKLY, due_date=AS_OF),
    ]

    forecast = _forecast(pay_settings, balance="100", bills=bills)

    assert [b.bill_id for b in forecast.upcoming_bills] == ["good"]
    assert forecast.diagnostics[0].item_id == "bad"
    assert forecast.discretionary == Decimal("75.00")


def test_discretionary_is_clamped_raw_value(pay_settings):
    bills = [
        RecurringExpense(id="a", name="A", amount=Decimal("120.50"),
                         rule=BIWEEKLY, due_date=AS_OF + timedelta(days=1)),
        RecurringExpense(id="b", name="B", amount=Decimal("300"),
                         rule=RecurrenceRule("monthly"), due_date=AS_OF + timedelta(days=20)),
    ]
    income = [RecurringIncome(id="pay", amount=Decimal("50"), rule=BIWEEKLY,
                              next_occurrence=AS_OF + timedelta(days=7))]

    for balance in ("0", "100", "370.50", "1000"):
        forecast = _forecast(pay_settings, balance=balance, bills=bills, income=income)

        expected_raw = (
            forecast.current_balance + forecast.current_cycle_income
            - forecast.bills_due_now - forecast.reserved_for_bills
        )
        assert forecast.raw_discretionary == expected_raw
        assert forecast.discretionary == max(Decimal("0"), expected_raw)


def test_due_now_and_reserved_partition_projected_bills(pay_settings):
    bills = [
        RecurringExpense(id="soon", name="Soon", amount=Decimal("40"),
                         rule=RecurrenceRule("monthly"), due_date=AS_OF + timedelta(days=2)),
        RecurringExpense(id="later", name="Later", amount=Decimal("60"),
                         rule=RecurrenceRule("monthly"), due_date=AS_OF + timedelta(days=20)),
    ]

    forecast = _forecast(pay_settings, balance="500", bills=bills)

    in_cycle = sum(b.amount for b in forecast.upcoming_bills if b.is_in_current_cycle)
    reserved = sum(b.amount for b in forecast.upcoming_bills if b.needs_reservation)
    assert forecast.bills_due_now == in_cycle == Decimal("40.00")
    assert forecast.reserved_for_bills == reserved == Decimal("60.00")
    assert forecast.bills_due_now + forecast.reserved_for_bills == sum(
        b.amount for b in forecast.upcoming_bills
    )


def test_goal_without_deadline_is_always_on_track(pay_settings):
    goal = Goal(id="rainy-day", name="Rainy day", target_amount=Decimal("10000"),
                current_amount=Decimal("0"))

    forecast = _forecast(pay_settings, balance="0", goals=[goal])
    progress = forecast.goals_progress[0]

    assert progress.on_track is True
    assert progress.required_monthly is None
    assert progress.suggested_monthly_contribution == Decimal("0.00")


def test_overfunded_goal_progress_is_uncapped(pay_settings):
    goal = Goal(id="car", name="Car", target_amount=Decimal("1000"), current_amount=Decimal("1500"))

    progress = _forecast(pay_settings, goals=[goal]).goals_progress[0]

    assert progress.progress_percent == pytest.approx(150.0)
    assert progress.display_percent == 100.0


def test_past_deadline_uses_one_month(pay_settings):
    goal = Goal(id="late", name="Late", target_amount=Decimal("500"),
                current_amount=Decimal("200"), deadline=AS_OF - timedelta(days=10))

    progress = _forecast(pay_settings, balance="5000", goals=[goal]).goals_progress[0]

    assert progress.required_monthly == Decimal("300.00")
    assert progress.suggested_monthly_contribution == Decimal("500.00")
    assert progress.on_track


def test_every_goal_gets_the_same_suggestion(pay_settings):
    goals = [
        Goal(id="a", name="A", target_amount=Decimal("100")),
        Goal(id="b", name="B", target_amount=Decimal("9000"), deadline=AS_OF + timedelta(days=365)),
    ]

    forecast = _forecast(pay_settings, balance="333.33", goals=goals)

    suggestions = {g.suggested_monthly_contribution for g in forecast.goals_progress}
    assert suggestions == {Decimal("33.33")}
    assert forecast.goals_on_track == 1
    assert forecast.total_goal_target == Decimal("9100.00")


def test_non_positive_goal_target_is_reported(pay_settings):
    goal = Goal(id="empty", name="Empty", target_amount=Decimal("0"))

    forecast = _forecast(pay_settings, goals=[goal])

    assert forecast.goals_progress == []
    assert forecast.diagnostics[0].item_kind == "goal"


def test_missing_last_pay_date_fails_forecast():
    settings = PaySettings(pay_frequency=BIWEEKLY, last_pay_date=None)
    with pytest.raises(InvalidSettings):
        _forecast(settings)


def test_malformed_pay_frequency_fails_forecast():
    settings = PaySettings(pay_frequency=RecurrenceRule("custom", 0), last_pay_date=AS_OF)
    with pytest.raises(InvalidSettings):
        _forecast(settings)


@pytest.mark.parametrize("interval", [5_000_000, 10**12])
def test_pay_interval_past_the_calendar_fails_forecast(interval):
    settings = PaySettings(pay_frequency=RecurrenceRule("custom", interval), last_pay_date=AS_OF)
    with pytest.raises(InvalidSettings):
        _forecast(settings)


def test_pay_cycle_window_past_the_calendar_fails_forecast():
    # Next payday lands in year 8214; the window from as_of runs past 9999.
    settings = PaySettings(pay_frequency=RecurrenceRule("custom", 3_000_000), last_pay_date=date(1, 1, 1))
    assert calculate_next_pay_date(settings, AS_OF).year > 8000
    with pytest.raises(InvalidSettings):
        _forecast(settings)


def test_stale_last_pay_date_is_caught_up():
    settings = PaySettings(pay_frequency=BIWEEKLY, last_pay_date=date(2020, 1, 3))

    next_pay = calculate_next_pay_date(settings, AS_OF)

    assert AS_OF <= next_pay < AS_OF + timedelta(days=14)
    assert (next_pay - date(2020, 1, 3)).days % 14 == 0


def test_paid_today_means_next_payday_is_a_full_cycle_away():
    settings = PaySettings(pay_frequency=RecurrenceRule("weekly"), last_pay_date=AS_OF)
    assert calculate_next_pay_date(settings, AS_OF) == AS_OF + timedelta(days=7)


def test_monthly_pay_uses_thirty_day_window():
    settings = PaySettings(pay_frequency=RecurrenceRule("monthly"), last_pay_date=date(2025, 2, 28))

    forecast = _forecast(settings)

    assert forecast.next_pay_date == date(2025, 3, 28)
    assert forecast.cycle_length_days == 30


def test_as_of_defaults_to_today(pay_settings):
    forecast = build_forecast(ForecastInput(current_balance=Decimal("10"), pay_settings=pay_settings))
    assert forecast.as_of == date.today()


def test_forecast_does_not_touch_inputs(pay_settings):
    bills = [RecurringExpense(id="x", name="X", amount=Decimal("10"),
                              rule=BIWEEKLY, due_date=date(2024, 1, 1))]

    _forecast(pay_settings, bills=bills)

    assert bills[0].due_date == date(2024, 1, 1)
    assert len(bills) == 1
