"""
Business logic and computations for the mess ledger.

Every function here is pure: it reads the records it is given and returns new
value objects. Amounts are Decimal and are never rounded here; display code
rounds through utils.round_money.
"""
from __future__ import annotations
from decimal import Context, Decimal, ROUND_HALF_EVEN, localcontext
from functools import wraps
from typing import Dict, Iterable, List, Set, Tuple

from models import (
    Deposit,
    MealCost,
    MealRecord,
    Member,
    MemberBalance,
    MessMonth,
    OtherCost,
    PeriodSummary,
    UnattributedAmounts,
)
from utils import ZERO, to_decimal

# Fixed arithmetic context so results don't depend on the caller's decimal settings.
ENGINE_CONTEXT = Context(prec=28, rounding=ROUND_HALF_EVEN)


def _in_engine_context(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        with localcontext(ENGINE_CONTEXT):
            return fn(*args, **kwargs)
    return wrapper


def meal_units(record: MealRecord) -> Decimal:
    """Total meal units in one record (breakfast + lunch + dinner)"""
    return record.units


def deposit_contribution(d: Deposit) -> Decimal:
    """Deposit amount counted by the ledger; non-positive deposits count as zero"""
    return d.amount if d.amount > 0 else ZERO


def resolve_roster(members: Iterable[Member]) -> List[Member]:
    """
    Collapse the roster to one entry per member id, keeping first-seen order.
    A repeated id keeps its position but takes the last display name.
    """
    by_id: Dict[str, Member] = {}
    for m in members:
        by_id[m.id] = m
    return list(by_id.values())


def _shared_total(other_costs: Iterable[OtherCost]) -> Decimal:
    return sum((c.amount for c in other_costs if c.is_shared), ZERO)


def _shared_per_member(total_shared: Decimal, roster_size: int) -> Decimal:
    # empty roster: shared cost stays on the mess balance, see compute_unattributed
    return total_shared / roster_size if roster_size > 0 else ZERO


@_in_engine_context
def compute_period_summary(
    period_id: str,
    meals: Iterable[MealRecord],
    deposits: Iterable[Deposit],
    meal_costs: Iterable[MealCost],
    other_costs: Iterable[OtherCost],
    period_name: str = "",
) -> PeriodSummary:
    """
    Compute the collective totals for one period.

    Deposits and meals of every member count, including members no longer on
    the roster. meal_rate is total meal cost over total meal units, or 0 when
    no meals were logged; the meal cost still reduces the mess balance then.
    """
    other_costs = list(other_costs)

    total_deposit = sum((deposit_contribution(d) for d in deposits), ZERO)
    total_meals = sum((meal_units(m) for m in meals), ZERO)
    total_meal_cost = sum((c.amount for c in meal_costs), ZERO)
    meal_rate = total_meal_cost / total_meals if total_meals > 0 else ZERO

    total_individual = sum((c.amount for c in other_costs if not c.is_shared), ZERO)
    total_shared = _shared_total(other_costs)

    mess_balance = total_deposit - total_meal_cost - total_individual - total_shared

    return PeriodSummary(
        period_id=period_id,
        period_name=period_name or "Current Month",
        mess_balance=mess_balance,
        total_deposit=total_deposit,
        total_meals=total_meals,
        total_meal_cost=total_meal_cost,
        meal_rate=meal_rate,
        total_individual_cost=total_individual,
        total_shared_cost=total_shared,
    )


@_in_engine_context
def compute_member_balances(
    roster: Iterable[Member],
    meals: Iterable[MealRecord],
    deposits: Iterable[Deposit],
    other_costs: Iterable[OtherCost],
    meal_rate: Decimal,
) -> List[MemberBalance]:
    """
    Compute one balance row per roster member, in roster order.

    Each member pays meals * meal_rate (purchasers included), their own
    individual costs, and an equal share of the shared costs. Records of
    members outside the roster produce no row.
    """
    meal_rate = to_decimal(meal_rate)
    members = resolve_roster(roster)
    other_costs = list(other_costs)

    meals_by = {m.id: ZERO for m in members}
    deposit_by = {m.id: ZERO for m in members}
    individual_by = {m.id: ZERO for m in members}

    for r in meals:
        if r.member_id in meals_by:
            meals_by[r.member_id] += meal_units(r)
    for d in deposits:
        if d.member_id in deposit_by:
            deposit_by[d.member_id] += deposit_contribution(d)
    for c in other_costs:
        if not c.is_shared and c.member_id in individual_by:
            individual_by[c.member_id] += c.amount

    # computed once so every member carries the identical value
    shared = _shared_per_member(_shared_total(other_costs), len(members))

    out = []
    for m in members:
        meal_cost = meals_by[m.id] * meal_rate
        balance = deposit_by[m.id] - meal_cost - individual_by[m.id] - shared
        out.append(
            MemberBalance(
                member_id=m.id,
                display_name=m.display_name,
                total_meals=meals_by[m.id],
                total_deposit=deposit_by[m.id],
                meal_cost=meal_cost,
                individual_cost=individual_by[m.id],
                shared_cost=shared,
                balance=balance,
            )
        )
    return out


@_in_engine_context
def compute_unattributed(
    roster: Iterable[Member],
    meals: Iterable[MealRecord],
    deposits: Iterable[Deposit],
    meal_costs: Iterable[MealCost],
    other_costs: Iterable[OtherCost],
    meal_rate: Decimal,
) -> UnattributedAmounts:
    """
    Itemize the part of the mess balance that no member row accounts for.
    sum(b.balance for b in balances) + result.net == summary.mess_balance
    """
    meal_rate = to_decimal(meal_rate)
    ids: Set[str] = {m.id for m in roster}
    meals = list(meals)
    other_costs = list(other_costs)

    total_meals = sum((meal_units(r) for r in meals), ZERO)
    off_meals = sum((meal_units(r) for r in meals if r.member_id not in ids), ZERO)
    unallocated = ZERO
    if not total_meals > 0:
        unallocated = sum((c.amount for c in meal_costs), ZERO)

    return UnattributedAmounts(
        off_roster_deposit=sum(
            (deposit_contribution(d) for d in deposits if d.member_id not in ids), ZERO
        ),
        off_roster_meal_cost=off_meals * meal_rate,
        off_roster_individual_cost=sum(
            (c.amount for c in other_costs if not c.is_shared and c.member_id not in ids), ZERO
        ),
        undistributed_shared_cost=ZERO if ids else _shared_total(other_costs),
        unallocated_meal_cost=unallocated,
    )


def compute_month(month: MessMonth) -> Tuple[PeriodSummary, List[MemberBalance]]:
    """Compute the period summary and the member balance sheet for a month"""
    summary = compute_period_summary(
        month.period.id,
        month.meals,
        month.deposits,
        month.meal_costs,
        month.other_costs,
        period_name=month.period.name,
    )
    balances = compute_member_balances(
        month.members,
        month.meals,
        month.deposits,
        month.other_costs,
        summary.meal_rate,
    )
    return summary, balances
