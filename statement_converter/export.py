"""Excel output for a parsed statement (pandas + openpyxl)."""

from __future__ import annotations

import logging
import os
from typing import Iterable, List

import pandas as pd
from openpyxl.styles import Border, Font, Side
from openpyxl.styles.differential import DifferentialStyle
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.filters import AutoFilter
from openpyxl.worksheet.table import Table, TableColumn, TableStyleInfo

from .core import compute_statement_fingerprint
from .models import ParsedTransaction, ParseResult, TransactionType

logger = logging.getLogger(__name__)


# ----------------------------
# CONFIG
# ----------------------------

TRANSACTIONS_SHEET = "Transaction Data"
SUMMARY_SHEET = "Summary"
TABLE_NAME = "TransactionData"
COLUMNS = [
    "T/N",
    "Date",
    "Transaction Type",
    "Description",
    "Amount",
    "Category",
    "Merchant",
    "Subscription",
    "Confidence",
    "ID",
    "Raw Text",
]
ACCOUNTING_FORMAT = "#,##0.00_-;[Red]-#,##0.00_-;\"-\"??_-;_-@_-"
MIN_COL_WIDTH = 10
MAX_COL_WIDTH = 60


# ----------------------------
# Utilities
# ----------------------------

def ensure_folder(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def make_unique_path(path: str) -> str:
    """If path exists, append ' (2)', ' (3)'... before extension."""
    if not os.path.exists(path):
        return path

    base, ext = os.path.splitext(path)
    n = 2
    while True:
        candidate = f"{base} ({n}){ext}"
        if not os.path.exists(candidate):
            return candidate
        n += 1


def _signed_major(t: ParsedTransaction) -> float:
    value = t.amount_minor_units / 100
    return -value if t.type == TransactionType.DEBIT else value


def transactions_to_dataframe(transactions: Iterable[ParsedTransaction]) -> pd.DataFrame:
    """One row per transaction; debits carry a negative Amount."""
    records = []
    for n, t in enumerate(transactions, start=1):
        records.append(
            {
                "T/N": n,
                "Date": t.date,
                "Transaction Type": t.type.value.title(),
                "Description": t.description,
                "Amount": _signed_major(t),
                "Category": t.category or "",
                "Merchant": t.merchant or "",
                "Subscription": bool(t.is_subscription),
                "Confidence": t.confidence,
                "ID": t.id,
                "Raw Text": t.raw_text,
            }
        )
    df = pd.DataFrame(records, columns=COLUMNS)
    df["Date"] = pd.to_datetime(df["Date"], format="%Y-%m-%d", errors="coerce")
    df["Amount"] = pd.to_numeric(df["Amount"], errors="coerce")
    return df


def _summary_rows(result: ParseResult) -> List[List[object]]:
    debits = sum(t.amount_minor_units for t in result.transactions if t.type == TransactionType.DEBIT)
    credits = sum(t.amount_minor_units for t in result.transactions if t.type == TransactionType.CREDIT)
    period = result.statement_period
    rows: List[List[object]] = [
        ["Bank", result.bank_name or ""],
        ["Account Number", result.account_number or ""],
        ["Period From", period.start if period else ""],
        ["Period To", period.end if period else ""],
        ["Total Transactions", result.total_transactions],
        ["Total Debits", debits / 100],
        ["Total Credits", credits / 100],
        ["Subscriptions", sum(1 for t in result.transactions if t.is_subscription)],
        ["Fingerprint", compute_statement_fingerprint(result.transactions) or ""],
    ]
    for err in result.errors:
        rows.append(["Warning", err])
    return rows


def _autosize(ws) -> None:
    for col_idx in range(1, ws.max_column + 1):
        col_letter = get_column_letter(col_idx)
        max_len = 0
        for row_idx in range(1, ws.max_row + 1):
            val = ws.cell(row=row_idx, column=col_idx).value
            if val is None:
                continue
            if hasattr(val, "strftime"):
                s = val.strftime("%d/%m/%Y")
            elif isinstance(val, str) and val.startswith("="):
                continue
            else:
                s = str(val)
            max_len = max(max_len, len(s))
        ws.column_dimensions[col_letter].width = min(MAX_COL_WIDTH, max(MIN_COL_WIDTH, max_len + 2))


def save_result_to_excel(result: ParseResult, output_path: str, overwrite: bool = False) -> str:
    """
    Write the transactions as an Excel table plus a summary sheet.

    Returns the path actually written, which differs from ``output_path``
    when a file already exists there and ``overwrite`` is not set.
    """
    if not result.transactions:
        raise ValueError("No transactions found!")

    df = transactions_to_dataframe(result.transactions)
    path = output_path if overwrite else make_unique_path(output_path)
    ensure_folder(os.path.dirname(path))

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        wb = writer.book

        df.to_excel(writer, index=False, sheet_name=TRANSACTIONS_SHEET)
        ws = writer.sheets[TRANSACTIONS_SHEET]

        period = ""
        if result.statement_period:
            period = f"{result.statement_period.start} - {result.statement_period.end}"
        for hdr in (ws.oddHeader, ws.evenHeader, ws.firstHeader):
            hdr.left.text = result.bank_name or ""
            hdr.center.text = TRANSACTIONS_SHEET
            hdr.right.text = period

        borderless_side = Side(style=None)
        borderless_dxf = DifferentialStyle(
            border=Border(left=borderless_side, right=borderless_side, top=borderless_side, bottom=borderless_side)
        )
        borderless_dxf_id = wb._differential_styles.add(borderless_dxf)

        last_row = ws.max_row
        last_col = ws.max_column
        if last_row >= 2 and last_col >= 1:
            table = Table(displayName=TABLE_NAME, ref=f"A1:{get_column_letter(last_col)}{last_row}")
            table.tableColumns = [TableColumn(id=idx, name=header) for idx, header in enumerate(df.columns, start=1)]
            table.tableStyleInfo = TableStyleInfo(
                name="TableStyleLight1",
                showFirstColumn=False,
                showLastColumn=False,
                showRowStripes=False,
                showColumnStripes=False,
            )
            table.totalsRowShown = False
            table.autoFilter = AutoFilter(ref=table.ref)
            table.headerRowBorderDxfId = borderless_dxf_id
            table.tableBorderDxfId = borderless_dxf_id
            ws.add_table(table)

        header_to_col = {
            ws.cell(row=1, column=c).value: c for c in range(1, last_col + 1) if ws.cell(row=1, column=c).value
        }
        date_col = header_to_col.get("Date")
        amt_col = header_to_col.get("Amount")
        for r in range(2, last_row + 1):
            if date_col:
                ws.cell(row=r, column=date_col).number_format = "dd/mm/yyyy"
            if amt_col:
                ws.cell(row=r, column=amt_col).number_format = ACCOUNTING_FORMAT
        tn_col = header_to_col.get("T/N")
        if tn_col:
            ws.column_dimensions[get_column_letter(tn_col)].hidden = True
        ws.freeze_panes = "A2"
        _autosize(ws)

        ws_summary = wb.create_sheet(SUMMARY_SHEET)
        ws_summary.append(["Field", "Value"])
        for row in _summary_rows(result):
            ws_summary.append(row)
        for cell in ws_summary[1]:
            cell.font = Font(bold=True)
        _autosize(ws_summary)

    logger.info("Wrote %d transactions to '%s'", result.total_transactions, path)
    return path
