"""
CSV export and import functionality for the mess ledger record tables
"""
from __future__ import annotations
import csv
import logging
from dataclasses import asdict, fields
from typing import List, Sequence

from config import RECORD_TABLES, RecordValidationError, build_record

logger = logging.getLogger(__name__)

_TRUE = {"true", "yes", "1", "shared"}
_FALSE = {"false", "no", "0", "individual"}


def _columns(kind: str) -> List[str]:
    try:
        cls = RECORD_TABLES[kind]
    except KeyError:
        raise ValueError(f"unknown record table {kind!r}; expected one of {', '.join(RECORD_TABLES)}") from None
    return [f.name for f in fields(cls)]


def export_records_to_csv(kind: str, records: Sequence, filepath: str) -> None:
    """
    Export one record table (meals, deposits, meal_costs, other_costs) to CSV.
    Columns are the record fields in declaration order.
    """
    columns = _columns(kind)
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(columns)
        for r in records:
            d = asdict(r)
            row = []
            for c in columns:
                v = d[c]
                if isinstance(v, bool):
                    v = "true" if v else "false"
                row.append(v)
            writer.writerow(row)
    logger.info("exported %d %s rows to %s", len(records), kind, filepath)


def _parse_bool(value: str, kind: str, index: int) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise RecordValidationError(f"{kind}[{index}]: cannot read {value!r} as true/false")


def import_records_from_csv(kind: str, filepath: str, period_id: str) -> list:
    """
    Import one record table from CSV for the given period.
    Rows without a period_id column value are assigned to `period_id`;
    empty optional cells take the field default.
    """
    columns = _columns(kind)
    cls = RECORD_TABLES[kind]
    records = []

    with open(filepath, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)
        for i, raw in enumerate(reader):
            row = {}
            for k, v in raw.items():
                if k is None:
                    raise RecordValidationError(f"{kind}[{i}]: more cells than columns")
                k = k.strip()
                v = (v or "").strip()
                if v == "" and k in columns:
                    # let the dataclass default apply; required fields are reported below
                    continue
                row[k] = v
            if "is_shared" in row:
                row["is_shared"] = _parse_bool(row["is_shared"], kind, i)
            records.append(build_record(cls, row, kind, i, period_id))

    logger.info("imported %d %s rows from %s", len(records), kind, filepath)
    return records
