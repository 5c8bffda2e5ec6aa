"""
Excel export functionality for the mess ledger month report
"""
from __future__ import annotations
import logging
from typing import Dict

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import MessMonth
from computations import compute_month, compute_unattributed, meal_units
from utils import ZERO, round_money

logger = logging.getLogger(__name__)

MONEY_FORMAT = "0.00"


def _style_header(ws, row=1, color="4F81BD"):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor=color)
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            v = cell.value
            if v is None:
                continue
            s = str(v)
            max_len = max(max_len, len(s))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _table_sheet(wb, title, headers, rows, money_cols=(), color="4F81BD"):
    ws = wb.create_sheet(title)
    ws.append(headers)
    _style_header(ws, 1, color)
    ws.freeze_panes = "A2"
    for row in rows:
        ws.append(row)
    for r in range(2, ws.max_row + 1):
        for c in money_cols:
            ws.cell(r, c).number_format = MONEY_FORMAT
    _autosize_columns(ws)
    return ws


def export_month_excel(month: MessMonth, filepath: str, places: int = 2) -> None:
    """
    Export a month report to an Excel file with sheets:
    - Summary (collective totals)
    - Members Summary (one balance row per member)
    - Deposits, Meal Costs, Other Costs, Daily Meals (raw records)
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    summary, balances = compute_month(month)
    extra = compute_unattributed(
        month.members, month.meals, month.deposits, month.meal_costs, month.other_costs, summary.meal_rate
    )
    names: Dict[str, str] = {m.id: m.display_name for m in month.members}

    def name(member_id: str) -> str:
        return names.get(member_id, "Unknown")

    def money(v):
        return float(round_money(v, places))

    totals = [
        ["Total Deposit", money(summary.total_deposit)],
        ["Total Meal Cost", money(summary.total_meal_cost)],
        ["Meal Rate", money(summary.meal_rate)],
        ["Total Individual Cost", money(summary.total_individual_cost)],
        ["Total Shared Cost", money(summary.total_shared_cost)],
        ["Member Balances", money(sum((b.balance for b in balances), ZERO))],
        ["Unattributed", money(extra.net)],
        ["Mess Balance", money(summary.mess_balance)],
    ]
    ws = _table_sheet(
        wb,
        "Summary",
        ["Item", "Value"],
        [
            ["Mess", month.mess_name],
            ["Month", summary.period_name],
            ["Total Meals", float(summary.total_meals)],
        ] + totals,
    )
    for r in range(ws.max_row - len(totals) + 1, ws.max_row + 1):
        ws.cell(r, 2).number_format = MONEY_FORMAT
    ws.cell(ws.max_row, 1).font = Font(bold=True)

    _table_sheet(
        wb,
        "Members Summary",
        ["Member", "Total Meals", "Total Deposit", "Meal Cost", "Shared Cost", "Individual Cost", "Balance"],
        [
            [
                b.display_name,
                float(b.total_meals),
                money(b.total_deposit),
                money(b.meal_cost),
                money(b.shared_cost),
                money(b.individual_cost),
                money(b.balance),
            ]
            for b in balances
        ],
        money_cols=range(3, 8),
    )

    _table_sheet(
        wb,
        "Deposits",
        ["Date", "Member", "Amount", "Note"],
        [[d.date, name(d.member_id), money(d.amount), d.note] for d in month.deposits],
        money_cols=(3,),
        color="22C55E",
    )

    _table_sheet(
        wb,
        "Meal Costs",
        ["Date", "Added By", "Description", "Amount"],
        [[c.date, name(c.member_id), c.description, money(c.amount)] for c in month.meal_costs],
        money_cols=(4,),
        color="F59E0B",
    )

    _table_sheet(
        wb,
        "Other Costs",
        ["Date", "Added By", "Description", "Type", "Amount"],
        [
            [c.date, name(c.member_id), c.description, "Shared" if c.is_shared else "Individual", money(c.amount)]
            for c in month.other_costs
        ],
        money_cols=(5,),
        color="6366F1",
    )

    meals = sorted(month.meals, key=lambda m: (m.date, name(m.member_id)))
    _table_sheet(
        wb,
        "Daily Meals",
        ["Date", "Member", "Breakfast", "Lunch", "Dinner", "Total"],
        [
            [m.date, name(m.member_id), float(m.breakfast), float(m.lunch), float(m.dinner), float(meal_units(m))]
            for m in meals
        ],
    )

    wb.save(filepath)
    logger.info("wrote month report for %s to %s", summary.period_id, filepath)
