"""
Data models for the mess ledger
"""
from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from utils import ZERO, to_decimal


def _coerce(obj, *names: str) -> None:
    # frozen dataclasses: normalize numeric fields in place
    for name in names:
        object.__setattr__(obj, name, to_decimal(getattr(obj, name)))


@dataclass(frozen=True)
class Member:
    """Mess member"""
    id: str
    display_name: str


@dataclass(frozen=True)
class Period:
    """One accounting month"""
    id: str
    is_active: bool = True
    name: str = ""  # e.g., "January 2024"


@dataclass(frozen=True)
class MealRecord:
    """Meals one member took on one day; fractional units are allowed"""
    period_id: str
    member_id: str
    date: str  # YYYY-MM-DD
    breakfast: Decimal = ZERO
    lunch: Decimal = ZERO
    dinner: Decimal = ZERO

    def __post_init__(self):
        _coerce(self, "breakfast", "lunch", "dinner")

    @property
    def units(self) -> Decimal:
        return self.breakfast + self.lunch + self.dinner


@dataclass(frozen=True)
class Deposit:
    """Cash a member paid into the mess"""
    period_id: str
    member_id: str
    amount: Decimal
    date: str
    note: str = ""

    def __post_init__(self):
        _coerce(self, "amount")


@dataclass(frozen=True)
class MealCost:
    """Grocery spending for the whole mess; member_id is the purchaser"""
    period_id: str
    member_id: str
    amount: Decimal
    date: str
    description: str = ""

    def __post_init__(self):
        _coerce(self, "amount")


@dataclass(frozen=True)
class OtherCost:
    """Non-meal cost: split across the roster when shared, else charged to member_id"""
    period_id: str
    member_id: str
    amount: Decimal
    is_shared: bool
    date: str = ""
    description: str = ""

    def __post_init__(self):
        _coerce(self, "amount")


@dataclass(frozen=True)
class PeriodSummary:
    """Collective totals for one period"""
    period_id: str
    mess_balance: Decimal
    total_deposit: Decimal
    total_meals: Decimal
    total_meal_cost: Decimal
    meal_rate: Decimal
    total_individual_cost: Decimal
    total_shared_cost: Decimal
    period_name: str = "Current Month"


@dataclass(frozen=True)
class MemberBalance:
    """One member's settlement row; positive balance is credit, negative is owed"""
    member_id: str
    display_name: str
    total_meals: Decimal
    total_deposit: Decimal
    meal_cost: Decimal
    individual_cost: Decimal
    shared_cost: Decimal
    balance: Decimal


@dataclass(frozen=True)
class UnattributedAmounts:
    """
    Money that moves the mess balance without landing on any member row.

    off_roster_deposit / off_roster_meal_cost / off_roster_individual_cost:
        records of members missing from the roster (e.g. removed members)
    undistributed_shared_cost: shared costs when the roster is empty
    unallocated_meal_cost: meal costs of a period with zero logged meals
    """
    off_roster_deposit: Decimal = ZERO
    off_roster_meal_cost: Decimal = ZERO
    off_roster_individual_cost: Decimal = ZERO
    undistributed_shared_cost: Decimal = ZERO
    unallocated_meal_cost: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        """Contribution to the mess balance; sum(balances) + net == mess_balance"""
        return (
            self.off_roster_deposit
            - self.off_roster_meal_cost
            - self.off_roster_individual_cost
            - self.undistributed_shared_cost
            - self.unallocated_meal_cost
        )


@dataclass
class MessMonth:
    """All records of one mess for one period"""
    mess_name: str
    period: Period
    members: List[Member]
    meals: List[MealRecord] = field(default_factory=list)
    deposits: List[Deposit] = field(default_factory=list)
    meal_costs: List[MealCost] = field(default_factory=list)
    other_costs: List[OtherCost] = field(default_factory=list)
    version: int = 1
