import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

import pandas as pd

from statement_converter.cli import main
from statement_converter.models import TransactionType
from statement_converter.pdf import parse_statement_pdf, read_pdf_pages
from statement_converter.rules import DEFAULT_RULES_NAME
from tools.generate_statement_fixtures import FIXTURES, write_statement_pdf


class TestSyntheticStatements(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls._tmp = tempfile.TemporaryDirectory()
        root = Path(cls._tmp.name)
        cls.paths = {name: write_statement_pdf(root / f"{name}.pdf", fixture) for name, fixture in FIXTURES.items()}
        cls.split_path = write_statement_pdf(root / "generic_split.pdf", FIXTURES["generic"], rows_per_page=2)

    @classmethod
    def tearDownClass(cls):
        cls._tmp.cleanup()

    def test_generic_statement(self):
        result = parse_statement_pdf(str(self.paths["generic"]))
        self.assertEqual(result.errors, [])
        self.assertEqual(result.bank_name, "Unknown Bank")
        self.assertEqual(result.account_number, "12345678")
        self.assertEqual(result.total_transactions, 4)
        salary = result.transactions[0]
        self.assertEqual((salary.description, salary.amount_minor_units), ("SALARY ACME LTD", 250000))
        self.assertEqual(salary.type, TransactionType.CREDIT)
        self.assertEqual(result.transactions[-1].date, "2025-05-01")

    def test_rows_split_across_pages(self):
        self.assertEqual(len(read_pdf_pages(str(self.split_path))), 2)
        result = parse_statement_pdf(str(self.split_path))
        self.assertEqual(result.total_transactions, 4)

    def test_hsbc_same_day_rows(self):
        result = parse_statement_pdf(str(self.paths["hsbc"]))
        self.assertEqual(result.bank_name, "HSBC")
        self.assertEqual(result.account_number, "87654321")
        self.assertEqual(result.statement_period.to_dict(), {"from": "2025-04-01", "to": "2025-04-30"})
        self.assertEqual(
            [(t.date, t.description) for t in result.transactions],
            [
                ("2025-04-05", "ACME PAYROLL"),
                ("2025-04-02", "TESCO STORES"),
                ("2025-04-02", "BT GROUP PLC"),
            ],
        )
        self.assertEqual(result.transactions[0].type, TransactionType.CREDIT)
        self.assertEqual(result.transactions[2].type, TransactionType.DEBIT)

    def test_chase_month_first_dates(self):
        result = parse_statement_pdf(str(self.paths["chase"]))
        self.assertEqual(result.bank_name, "Chase")
        self.assertEqual(result.statement_period.to_dict(), {"from": "2025-05-01", "to": "2025-05-31"})
        self.assertEqual([t.date for t in result.transactions], ["2025-05-20", "2025-05-09", "2025-05-02"])
        self.assertEqual(result.transactions[1].type, TransactionType.CREDIT)

    def test_page_cap_on_pdf(self):
        result = parse_statement_pdf(str(self.split_path), max_pages=1)
        self.assertEqual(result.total_transactions, 2)
        self.assertTrue(any("more than 1 pages" in e for e in result.errors))

    def test_unreadable_pdf(self):
        bad = Path(self._tmp.name) / "not_a_pdf.pdf"
        bad.write_text("plain text, not a PDF")
        result = parse_statement_pdf(str(bad))
        self.assertEqual(result.transactions, [])
        self.assertTrue(result.errors[0].startswith("Failed to parse PDF"))


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.pdf = str(write_statement_pdf(Path(self.tmp.name) / "generic.pdf", FIXTURES["generic"]))

    def test_json_output(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            code = main([self.pdf, "--json"])
        self.assertEqual(code, 0)
        payload = json.loads(buf.getvalue())
        self.assertEqual(payload["totalTransactions"], 4)
        self.assertEqual(payload["bankName"], "Unknown Bank")

    def _run_json(self, *extra):
        buf = io.StringIO()
        with redirect_stdout(buf):
            code = main([self.pdf, "--json", *extra])
        self.assertEqual(code, 0)
        return {t["description"]: t for t in json.loads(buf.getvalue())["transactions"]}

    def test_rules_file_beside_pdf_is_used(self):
        self.assertEqual(self._run_json()["TESCO STORES 3297"]["category"], "groceries")
        rules_path = os.path.join(self.tmp.name, f"{DEFAULT_RULES_NAME}.csv")
        pd.DataFrame(
            [{"Priority": "1", "Category": "shopping", "Match Type": "startswith", "Pattern": "tesco", "Direction": "", "Active": "TRUE"}]
        ).to_csv(rules_path, index=False)
        self.assertEqual(self._run_json()["TESCO STORES 3297"]["category"], "shopping")

    def test_explicit_rules_file_wins(self):
        pd.DataFrame(
            [{"Priority": "1", "Category": "shopping", "Match Type": "contains", "Pattern": "tesco", "Active": "TRUE"}]
        ).to_csv(os.path.join(self.tmp.name, f"{DEFAULT_RULES_NAME}.csv"), index=False)
        explicit = os.path.join(self.tmp.name, "mine.csv")
        pd.DataFrame(
            [{"Priority": "1", "Category": "home_garden", "Match Type": "contains", "Pattern": "tesco", "Active": "TRUE"}]
        ).to_csv(explicit, index=False)
        self.assertEqual(self._run_json("--rules", explicit)["TESCO STORES 3297"]["category"], "home_garden")

    def test_excel_output(self):
        out = os.path.join(self.tmp.name, "result.xlsx")
        with redirect_stdout(io.StringIO()):
            code = main([self.pdf, "-o", out])
        self.assertEqual(code, 0)
        self.assertTrue(os.path.exists(out))

    def test_missing_file(self):
        self.assertEqual(main([os.path.join(self.tmp.name, "missing.pdf")]), 1)


if __name__ == "__main__":
    unittest.main()
