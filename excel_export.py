"""
Excel export functionality for Trip Splitter
"""
from __future__ import annotations
import logging
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from computations import activity_shares, compute_transfers, reconcile, total_participants
from currency import DEFAULT_CONVERTER, CurrencyConverter
from csv_handler import BASE_HEADERS, TRAILING_HEADERS
from errors import NoDataError
from models import Activity, Family

logger = logging.getLogger(__name__)

MONEY_FORMAT = "0.00"


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
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
            if cell.value is not None:
                max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _write_activities_sheet(ws, families, activities, results, converter):
    names = {f.id: f.name for f in families}

    balance = ["Balance:"] + [None] * len(families)
    for r in results:
        balance += [r.family_name, r.net_amount]
    ws.append(balance)
    ws.cell(1, 1).font = Font(bold=True)
    for i in range(len(families)):
        ws.cell(1, len(families) + 3 + 2 * i).number_format = MONEY_FORMAT

    header = list(BASE_HEADERS)
    for f in families:
        header += [f.name, None]
    ws.append(header + TRAILING_HEADERS[:2])
    _style_header(ws, 2)

    sub_header = [None] * len(BASE_HEADERS)
    for _ in families:
        sub_header += ["People", "Share"]
    ws.append(sub_header)
    _style_header(ws, 3)
    ws.freeze_panes = "A4"

    for a in activities:
        shares = activity_shares(a, converter)
        row = [a.date, a.name, a.currency.value, a.cost, names.get(a.paid_by, "")]
        for f in families:
            row += [a.participant_count(f.id), shares.get(f.id, 0.0)]
        row += [converter.to_canonical(a.cost, a.currency), total_participants(a)]
        ws.append(row)

    # formats: amount, shares, CAD total
    money_cols = [4] + [len(BASE_HEADERS) + 2 + 2 * i for i in range(len(families))]
    money_cols.append(len(BASE_HEADERS) + 2 * len(families) + 1)
    for r in range(4, ws.max_row + 1):
        for c in money_cols:
            ws.cell(r, c).number_format = MONEY_FORMAT
    _autosize_columns(ws)


def export_excel(
    families: List[Family],
    activities: List[Activity],
    filepath: str,
    converter: CurrencyConverter = DEFAULT_CONVERTER,
) -> None:
    """
    Export trip to Excel file with sheets:
    - Activities, laid out like the CSV export
    - Summary
    - Transfers
    """
    if not families or not activities:
        raise NoDataError(
            "Nothing to export: need at least one family and one activity",
            {"families": len(families), "activities": len(activities)},
        )

    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)
    results = reconcile(families, activities, converter)

    _write_activities_sheet(wb.create_sheet("Activities"), families, activities, results, converter)

    # Summary sheet
    ws = wb.create_sheet("Summary")
    ws.append(["Family", "Paid (CAD)", "Owed (CAD)", "Net (Paid-Owed)"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for r in results:
        ws.append([r.family_name, r.total_paid, r.total_owed, r.net_amount])
    for row in range(2, ws.max_row + 1):
        for c in range(2, 5):
            ws.cell(row, c).number_format = MONEY_FORMAT
    _autosize_columns(ws)

    # Transfers sheet
    ws = wb.create_sheet("Transfers")
    ws.append(["From (Debtor)", "To (Creditor)", "Amount (CAD)"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for debtor, creditor, amount in compute_transfers(results):
        ws.append([debtor, creditor, amount])
    for row in range(2, ws.max_row + 1):
        ws.cell(row, 3).number_format = MONEY_FORMAT
    _autosize_columns(ws)

    wb.save(filepath)
    logger.info("Exported Excel workbook to %s", filepath)
