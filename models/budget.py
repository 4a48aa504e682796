from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

WEEKLY = "weekly"
BIWEEKLY = "biweekly"
MONTHLY = "monthly"
CUSTOM = "custom"

FREQUENCIES = (WEEKLY, BIWEEKLY, MONTHLY, CUSTOM)


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: str
    custom_interval_days: Optional[int] = None  # required iff frequency == "custom"


@dataclass(frozen=True)
class RecurringIncome:
    id: str
    amount: Decimal
    rule: RecurrenceRule
    next_occurrence: date
    source: str = ""


@dataclass(frozen=True)
class RecurringExpense:
    """A recurring bill. ``due_date`` is the stored (possibly stale) due date."""
    id: str
    name: str
    amount: Decimal
    rule: RecurrenceRule
    due_date: date
    paid: bool = False
    last_paid_date: Optional[date] = None


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    deadline: Optional[date] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PaySettings:
    pay_frequency: RecurrenceRule
    last_pay_date: Optional[date]


@dataclass(frozen=True)
class ForecastInput:
    """Everything the engine needs for one forecast. ``as_of`` defaults to today."""
    current_balance: Decimal
    pay_settings: PaySettings
    income_list: List[RecurringIncome] = field(default_factory=list)
    bill_list: List[RecurringExpense] = field(default_factory=list)
    goal_list: List[Goal] = field(default_factory=list)
    as_of: Optional[date] = None
