from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

# Column x positions (points). Amount and balance are right-aligned.
X_DATE = 40
X_CODE = 118
X_DESC = 150
X_AMOUNT_RIGHT = 440
X_BALANCE_RIGHT = 530
LINE_STEP = 14
TOP_Y = 810
BOTTOM_Y = 70


@dataclass
class Row:
    date: str
    description: str
    amount: str
    balance: str = ""
    code: str = ""


@dataclass
class StatementFixture:
    name: str
    header_lines: List[str]
    rows: List[Row]
    footer_lines: List[str] = field(default_factory=list)


FIXTURES: Dict[str, StatementFixture] = {
    "generic": StatementFixture(
        name="generic",
        header_lines=[
            "Example Credit Union",
            "Statement Period: 01/05/2025 to 31/05/2025",
            "Account Number: 12345678",
            "Date Description Amount Balance",
        ],
        rows=[
            Row("01/05/2025", "TESCO STORES 3297", "45.20", "954.80"),
            Row("03/05/2025", "NETFLIX.COM", "9.99", "944.81"),
            Row("05/05/2025", "STARBUCKS LONDON", "4.50", "940.31"),
            Row("15/05/2025", "SALARY ACME LTD", "2,500.00", "3,440.31"),
        ],
        footer_lines=["Closing balance 3,440.31"],
    ),
    "hsbc": StatementFixture(
        name="hsbc",
        header_lines=[
            "HSBC UK Bank plc",
            "Your Statement",
            "Account Number 87654321",
            "1 April 2025 to 30 April 2025",
            "Date Payment type and details Paid out Paid in Balance",
        ],
        rows=[
            Row("01 Apr 2025", "BALANCE BROUGHT FORWARD", "", "1,000.00"),
            Row("02 Apr 2025", "TESCO STORES", "20.00", "980.00", code="VIS"),
            Row("", "BT GROUP PLC", "35.00", "945.00", code="DD"),
            Row("05 Apr 2025", "ACME PAYROLL", "1,500.00", "2,445.00", code="CR"),
        ],
        footer_lines=["BALANCE CARRIED FORWARD 2,445.00"],
    ),
    "chase": StatementFixture(
        name="chase",
        header_lines=[
            "JPMorgan Chase Bank, N.A.",
            "Account Number: 000000123456789",
            "Statement Period: 05/01/2025 to 05/31/2025",
            "TRANSACTION DETAIL",
        ],
        rows=[
            Row("05/02", "STARBUCKS STORE 1234", "5.75", "1,994.25"),
            Row("05/09", "DIRECT DEP ACME CORP PAYROLL", "1,800.00", "3,794.25"),
            Row("05/20", "SPOTIFY USA", "10.99", "3,783.26"),
        ],
        footer_lines=["Ending Balance 3,783.26"],
    ),
}


def _draw_row(c: canvas.Canvas, y: float, row: Row) -> None:
    if row.date:
        c.drawString(X_DATE, y, row.date)
    if row.code:
        c.drawString(X_CODE, y, row.code)
    c.drawString(X_DESC, y, row.description)
    if row.amount:
        c.drawRightString(X_AMOUNT_RIGHT, y, row.amount)
    if row.balance:
        c.drawRightString(X_BALANCE_RIGHT, y, row.balance)


def write_statement_pdf(path: Path, fixture: StatementFixture, rows_per_page: int = 0) -> Path:
    """Render a fixture as a text PDF; ``rows_per_page`` > 0 forces page breaks."""
    path.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(path), pagesize=A4)
    c.setFont("Courier", 10)

    y = TOP_Y
    for line in fixture.header_lines:
        c.drawString(36, y, line)
        y -= LINE_STEP

    on_page = 0
    for row in fixture.rows:
        if y < BOTTOM_Y or (rows_per_page and on_page >= rows_per_page):
            c.showPage()
            c.setFont("Courier", 10)
            y = TOP_Y
            on_page = 0
        _draw_row(c, y, row)
        y -= LINE_STEP
        on_page += 1

    for line in fixture.footer_lines:
        c.drawString(36, y - 6, line)
        y -= LINE_STEP
    c.save()
    return path


def generate_all(out_dir: str = "tests/fixtures_synthetic") -> List[Tuple[str, Path]]:
    root = Path(out_dir)
    written = []
    for name, fixture in FIXTURES.items():
        written.append((name, write_statement_pdf(root / f"{name}_statement.pdf", fixture)))
    return written


if __name__ == "__main__":
    for name, path in generate_all():
        print(f"{name}: {path}")
