from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from models.budget import (
    ForecastInput,
    Goal,
    PaySettings,
    RecurrenceRule,
    RecurringExpense,
    RecurringIncome,
)
from utils.money import to_money


class MoneyModel(BaseModel):
    """Accepts money as a number or a string like "$1,200.50"."""

    @field_validator("amount", "current_balance", "target_amount", "current_amount",
                     mode="before", check_fields=False)
    @classmethod
    def coerce_money(cls, value):
        return to_money(value)


# Rules are not validated here; the engine owns every bound on them,
# including intervals too large for the calendar. A bad bill or income rule
# becomes a diagnostic and a bad pay rule a 409.
class RuleIn(BaseModel):
    frequency: str
    custom_days: Optional[int] = None

    def to_rule(self) -> RecurrenceRule:
        return RecurrenceRule(frequency=self.frequency, custom_interval_days=self.custom_days)


class IncomeIn(MoneyModel):
    id: str
    source: str = ""
    amount: Decimal = Field(ge=0)
    rule: RuleIn
    next_date: date


class BillIn(MoneyModel):
    id: str
    name: str
    amount: Decimal = Field(ge=0)
    rule: RuleIn
    due_date: date
    is_paid: bool = False
    last_paid_date: Optional[date] = None


class GoalIn(MoneyModel):
    id: str
    name: str
    target_amount: Decimal = Field(gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    deadline: Optional[date] = None
    notes: Optional[str] = None


class PaySettingsIn(BaseModel):
    pay_frequency: RuleIn
    last_pay_date: Optional[date] = None


class ForecastRequest(MoneyModel):
    current_balance: Decimal
    pay_settings: PaySettingsIn
    income: List[IncomeIn] = []
    bills: List[BillIn] = []
    goals: List[GoalIn] = []
    as_of: Optional[date] = None

    def to_input(self) -> ForecastInput:
        return ForecastInput(
            current_balance=self.current_balance,
            pay_settings=PaySettings(
                pay_frequency=self.pay_settings.pay_frequency.to_rule(),
                last_pay_date=self.pay_settings.last_pay_date,
            ),
            income_list=[
                RecurringIncome(
                    id=i.id,
                    amount=i.amount,
                    rule=i.rule.to_rule(),
                    next_occurrence=i.next_date,
                    source=i.source,
                )
                for i in self.income
            ],
            bill_list=[
                RecurringExpense(
                    id=b.id,
                    name=b.name,
                    amount=b.amount,
                    rule=b.rule.to_rule(),
                    due_date=b.due_date,
                    paid=b.is_paid,
                    last_paid_date=b.last_paid_date,
                )
                for b in self.bills
            ],
            goal_list=[
                Goal(
                    id=g.id,
                    name=g.name,
                    target_amount=g.target_amount,
                    current_amount=g.current_amount,
                    deadline=g.deadline,
                    notes=g.notes,
                )
                for g in self.goals
            ],
            as_of=self.as_of,
        )
