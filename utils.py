"""
Utility functions for the mess ledger
"""
from __future__ import annotations
import os
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def to_decimal(x: Number) -> Decimal:
    """
    Convert a number to Decimal without picking up binary float noise.
    Floats go through repr() so 0.1 becomes Decimal("0.1").
    Raises ValueError for values that are not finite numbers.
    """
    if isinstance(x, bool):
        raise ValueError(f"not a number: {x!r}")
    if isinstance(x, Decimal):
        d = x
    else:
        s = repr(x) if isinstance(x, float) else str(x)
        try:
            d = Decimal(s.strip())
        except InvalidOperation:
            raise ValueError(f"not a number: {x!r}") from None
    if not d.is_finite():
        raise ValueError(f"not a finite number: {x!r}")
    return d


def round_money(amount: Number, places: int = 2) -> Decimal:
    """
    Round a money amount for display. This is the only place amounts are rounded;
    the engine returns unrounded values.
    """
    d = to_decimal(amount)
    q = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # wide enough for every digit left of the point
        ctx.prec = max(28, d.adjusted() + places + 2)
        return d.quantize(q, rounding=ROUND_HALF_UP)


def format_number(num: Number, places: int = 2) -> str:
    """Format with thousands separators and at most `places` decimals, trailing zeros dropped"""
    s = f"{round_money(num, places):,.{places}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return "0" if s == "-0" else s


def format_money(amount: Number, currency: str = "BDT", places: int = 2) -> str:
    """Format a money amount for display, e.g. 'BDT 1,234.5'"""
    return f"{currency} {format_number(amount, places)}"


def app_dir() -> str:
    """
    Get application data directory: ~/.mess_ledger (or $MESS_LEDGER_HOME).
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("MESS_LEDGER_HOME") or os.path.expanduser("~/.mess_ledger")
    os.makedirs(path, exist_ok=True)
    return path
