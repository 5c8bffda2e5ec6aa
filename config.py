"""
Configuration and month file loading/saving for the mess ledger.

This module is the record boundary: month files and CSV rows are validated here
once with pydantic row models, so the computations can assume well-formed records.
"""
from __future__ import annotations
import json
import logging
import os
from dataclasses import asdict
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional, Type

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, StrictBool, ValidationError

from models import Deposit, MealCost, MealRecord, Member, MessMonth, OtherCost, Period
from utils import app_dir, parse_date, to_decimal

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# table name -> record type, in file order
RECORD_TABLES: Dict[str, Type] = {
    "meals": MealRecord,
    "deposits": Deposit,
    "meal_costs": MealCost,
    "other_costs": OtherCost,
}


class RecordValidationError(ValueError):
    """A month file or CSV row that does not match the record contract"""


class SettingsError(ValueError):
    """A settings file that cannot be used"""


def _iso_date(v: str) -> str:
    v = v.strip()
    if v:
        try:
            parse_date(v)
        except ValueError:
            raise ValueError(f"expected YYYY-MM-DD, got {v!r}") from None
    return v


# numeric fields go through to_decimal so floats and strings behave the same everywhere
Amount = Annotated[Decimal, BeforeValidator(to_decimal)]
Text = Annotated[str, Field(min_length=1)]
IsoDate = Annotated[str, Field(min_length=1), AfterValidator(_iso_date)]
OptionalIsoDate = Annotated[str, AfterValidator(_iso_date)]


class _Row(BaseModel):
    model_config = ConfigDict(extra="forbid")


class MemberRow(_Row):
    id: Text
    display_name: Text


class PeriodRow(_Row):
    id: Text
    is_active: StrictBool = True
    name: str = ""


class _PeriodRecordRow(_Row):
    period_id: Text
    member_id: Text


class MealRow(_PeriodRecordRow):
    date: IsoDate
    breakfast: Amount = Decimal("0")
    lunch: Amount = Decimal("0")
    dinner: Amount = Decimal("0")


class DepositRow(_PeriodRecordRow):
    amount: Amount
    date: IsoDate
    note: str = ""


class MealCostRow(_PeriodRecordRow):
    amount: Amount
    date: IsoDate
    description: str = ""


class OtherCostRow(_PeriodRecordRow):
    amount: Amount
    is_shared: StrictBool
    date: OptionalIsoDate = ""
    description: str = ""


ROW_MODELS: Dict[Type, Type[BaseModel]] = {
    Member: MemberRow,
    Period: PeriodRow,
    MealRecord: MealRow,
    Deposit: DepositRow,
    MealCost: MealCostRow,
    OtherCost: OtherCostRow,
}


class MonthHeader(BaseModel):
    """Top level of a month file; rows are validated one by one afterwards"""
    model_config = ConfigDict(extra="forbid")

    version: int = SCHEMA_VERSION
    mess_name: str = ""
    period: Dict[str, Any]
    members: List[Any] = []
    meals: List[Any] = []
    deposits: List[Any] = []
    meal_costs: List[Any] = []
    other_costs: List[Any] = []


class Settings(BaseModel):
    """Display settings"""
    currency: str = "BDT"
    decimal_places: int = Field(default=2, ge=0, le=10)


def describe_errors(err: ValidationError) -> str:
    """Turn a pydantic ValidationError into one line naming the offending fields"""
    missing, unknown, other = [], [], []
    for e in err.errors():
        name = ".".join(str(p) for p in e["loc"])
        if e["type"] == "missing":
            missing.append(name)
        elif e["type"] == "extra_forbidden":
            unknown.append(name)
        else:
            other.append(f"{name or 'input'}: {e['msg']}")
    parts = []
    if unknown:
        parts.append(f"unknown field(s) {', '.join(unknown)}")
    if missing:
        parts.append(f"missing field(s) {', '.join(missing)}")
    return "; ".join(parts + other)


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from JSON file; defaults when the file is missing"""
    if path is None:
        path = os.path.join(app_dir(), "settings.json")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("no settings file at %s, using defaults", path)
        return Settings()
    except json.JSONDecodeError as e:
        raise SettingsError(f"{path}: {e}") from e
    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"{path}: {describe_errors(e)}") from e


def build_record(cls: Type, row: Any, table: str, index: int, period_id: str):
    """
    Build one record of `cls` from a plain dict, filling period_id from the month.
    Anything that does not match the row model raises RecordValidationError.
    """
    model = ROW_MODELS[cls]
    if isinstance(row, dict) and "period_id" in model.model_fields:
        row = {"period_id": period_id, **row}
    try:
        checked = model.model_validate(row)
    except ValidationError as e:
        raise RecordValidationError(f"{table}[{index}]: {describe_errors(e)}") from e
    data = checked.model_dump()
    if "period_id" in data and data["period_id"] != period_id:
        raise RecordValidationError(
            f"{table}[{index}]: period_id {data['period_id']!r} does not match month {period_id!r}"
        )
    return cls(**data)


def _plain(value: Any) -> Any:
    # JSON has no Decimal; keep full precision as a string
    return str(value) if isinstance(value, Decimal) else value


def month_to_dict(month: MessMonth) -> dict:
    """Convert MessMonth object to dictionary for JSON serialization"""
    d = {
        "version": month.version,
        "mess_name": month.mess_name,
        "period": asdict(month.period),
        "members": [asdict(m) for m in month.members],
    }
    for table in RECORD_TABLES:
        d[table] = [
            {k: _plain(v) for k, v in asdict(r).items()} for r in getattr(month, table)
        ]
    return d


def dict_to_month(d: Any) -> MessMonth:
    """Convert dictionary from JSON to MessMonth object, validating every record"""
    try:
        header = MonthHeader.model_validate(d)
    except ValidationError as e:
        raise RecordValidationError(f"month: {describe_errors(e)}") from e
    if header.version != SCHEMA_VERSION:
        raise RecordValidationError(f"unsupported month file version {header.version!r}")

    period = build_record(Period, header.period, "period", 0, "")
    members = [
        build_record(Member, m, "members", i, period.id)
        for i, m in enumerate(header.members)
    ]
    tables = {
        table: [
            build_record(cls, row, table, i, period.id)
            for i, row in enumerate(getattr(header, table))
        ]
        for table, cls in RECORD_TABLES.items()
    }
    return MessMonth(
        mess_name=header.mess_name,
        period=period,
        members=members,
        version=header.version,
        **tables,
    )


def load_month(path: str) -> MessMonth:
    """Load a month file"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    month = dict_to_month(data)
    logger.info(
        "loaded month %s (%d members, %d meal records) from %s",
        month.period.id, len(month.members), len(month.meals), path,
    )
    return month


def save_month(month: MessMonth, path: str) -> None:
    """Save a month file"""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(month_to_dict(month), f, ensure_ascii=False, indent=2)
    logger.info("saved month %s to %s", month.period.id, path)
