import pytest

from models import Deposit, MealCost, MealRecord, Member, MessMonth, OtherCost, Period


P = "2024-01"


def meal(member_id, units, date="2024-01-01", period_id=P):
    """One record carrying all units as lunch"""
    return MealRecord(period_id=period_id, member_id=member_id, date=date, lunch=units)


def deposit(member_id, amount, date="2024-01-01"):
    return Deposit(period_id=P, member_id=member_id, amount=amount, date=date)


def meal_cost(member_id, amount, date="2024-01-01"):
    return MealCost(period_id=P, member_id=member_id, amount=amount, date=date)


def other_cost(member_id, amount, is_shared):
    return OtherCost(period_id=P, member_id=member_id, amount=amount, is_shared=is_shared, date="2024-01-05")


@pytest.fixture
def alice():
    return Member(id="alice", display_name="Alice")


@pytest.fixture
def bob():
    return Member(id="bob", display_name="Bob")


@pytest.fixture
def carol():
    return Member(id="carol", display_name="Carol")


@pytest.fixture
def basic_month(alice, bob):
    """Alice 20 meals / 500 deposit, Bob 10 meals / 300 deposit, 300 meal cost"""
    return MessMonth(
        mess_name="Green House",
        period=Period(id=P, name="January 2024"),
        members=[alice, bob],
        meals=[meal("alice", 12, "2024-01-01"), meal("alice", 8, "2024-01-02"), meal("bob", 10)],
        deposits=[deposit("alice", 500), deposit("bob", 300)],
        meal_costs=[meal_cost("bob", 300)],
        other_costs=[],
    )
