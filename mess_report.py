"""
Mess ledger month report
- Load one month file (members, meals, deposits, meal costs, other costs).
- Log the month summary and every member's balance.
- Optionally write an Excel report and the record tables as CSV.

Run:
  mess-report month.json --excel report.xlsx --csv-dir exports/

Dependencies:
  pip install openpyxl
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from computations import compute_month, compute_unattributed
from config import RECORD_TABLES, RecordValidationError, SettingsError, load_month, load_settings
from csv_handler import export_records_to_csv
from excel_export import export_month_excel
from utils import format_money, format_number

logger = logging.getLogger("mess_report")


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="mess-report", description="Compute a mess month summary")
    p.add_argument("month", help="month file (JSON)")
    p.add_argument("--excel", metavar="PATH", help="write an Excel report")
    p.add_argument("--csv-dir", metavar="DIR", help="write the record tables as CSV files")
    p.add_argument("--settings", metavar="PATH", help="settings file (default: app data dir)")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the report runner"""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        settings = load_settings(args.settings)
        month = load_month(args.month)
    except (OSError, json.JSONDecodeError, RecordValidationError, SettingsError) as e:
        logger.error("cannot load %s: %s", args.month, e)
        return 1

    summary, balances = compute_month(month)
    extra = compute_unattributed(
        month.members, month.meals, month.deposits, month.meal_costs, month.other_costs, summary.meal_rate
    )

    def money(v):
        return format_money(v, settings.currency, settings.decimal_places)

    logger.info("%s / %s", month.mess_name or "Mess", summary.period_name)
    logger.info(
        "deposit %s, meals %s, meal cost %s, meal rate %s",
        money(summary.total_deposit),
        format_number(summary.total_meals),
        money(summary.total_meal_cost),
        money(summary.meal_rate),
    )
    logger.info(
        "individual cost %s, shared cost %s, mess balance %s",
        money(summary.total_individual_cost),
        money(summary.total_shared_cost),
        money(summary.mess_balance),
    )
    if extra.net:
        logger.info("not on any member row: %s", money(extra.net))
    for b in balances:
        logger.info(
            "%s: meals %s, deposit %s, meal cost %s, individual %s, shared %s, balance %s",
            b.display_name,
            format_number(b.total_meals),
            money(b.total_deposit),
            money(b.meal_cost),
            money(b.individual_cost),
            money(b.shared_cost),
            money(b.balance),
        )

    try:
        if args.excel:
            export_month_excel(month, args.excel, settings.decimal_places)
        if args.csv_dir:
            os.makedirs(args.csv_dir, exist_ok=True)
            for table in RECORD_TABLES:
                export_records_to_csv(table, getattr(month, table), os.path.join(args.csv_dir, f"{table}.csv"))
    except OSError as e:
        logger.error("export failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
