import unittest
from datetime import date

from statement_converter.banks import BankId, get_profile
from statement_converter.extract import (
    MAX_LINE_LENGTH,
    extract_account_number,
    extract_statement_period,
    extract_transactions,
    iter_pattern_matches,
)
from statement_converter.models import TransactionType

GENERIC = get_profile(BankId.GENERIC)

GENERIC_TEXT = "\n".join(
    [
        "Example Credit Union",
        "Statement Period: 01/05/2025 to 31/05/2025",
        "Account Number: 12345678",
        "Date  Description  Amount  Balance",
        "01/05/2025  TESCO STORES 3297  45.20  954.80",
        "03/05/2025  NETFLIX.COM  9.99  944.81",
        "15/05/2025  SALARY ACME LTD  2,500.00  3,444.81",
        "Closing Balance 1,203.44",
    ]
)


class TestGenericExtraction(unittest.TestCase):
    def test_rows_amounts_and_dates(self):
        outcome = extract_transactions(GENERIC_TEXT, GENERIC)
        rows = outcome.rows
        self.assertEqual([r.description for r in rows], ["TESCO STORES 3297", "NETFLIX.COM", "SALARY ACME LTD"])
        self.assertEqual([r.amount_minor_units for r in rows], [4520, 999, 250000])
        self.assertEqual([r.date for r in rows], ["2025-05-01", "2025-05-03", "2025-05-15"])
        self.assertFalse(outcome.used_fallback)
        self.assertEqual(outcome.pattern_used, "generic_slash_date")

    def test_types_from_balance_and_keywords(self):
        rows = extract_transactions(GENERIC_TEXT, GENERIC).rows
        self.assertEqual(
            [r.type for r in rows],
            [TransactionType.DEBIT, TransactionType.DEBIT, TransactionType.CREDIT],
        )

    def test_ids_are_unique(self):
        rows = extract_transactions(GENERIC_TEXT, GENERIC).rows
        ids = [r.id for r in rows]
        self.assertEqual(len(ids), len(set(ids)))
        for i in ids:
            self.assertTrue(i.startswith("txn_"))

    def test_noise_rows_are_dropped(self):
        text = "\n".join(
            [
                "01/05/2025  Opening Balance  100.00",
                "02/05/2025  Balance brought forward  100.00",
                "03/05/2025  Sub total  55.00",
                "04/05/2025  TotalEnergies Fuel  55.00",
            ]
        )
        rows = extract_transactions(text, GENERIC).rows
        self.assertEqual([r.description for r in rows], ["TotalEnergies Fuel"])

    def test_duplicate_rows_are_dropped(self):
        line = "01/05/2025  TESCO STORES 3297  45.20"
        rows = extract_transactions(f"{line}\n{line}\n", GENERIC).rows
        self.assertEqual(len(rows), 1)

    def test_explicit_indicator_and_sign(self):
        text = "\n".join(
            [
                "01/05/2025  ACME REFUND  10.00 DR",
                "02/05/2025  MYSTERY TRANSFER  12.00 CR",
                "03/05/2025  CARD PURCHASE  (7.50)",
            ]
        )
        rows = extract_transactions(text, GENERIC).rows
        self.assertEqual(
            [r.type for r in rows],
            [TransactionType.DEBIT, TransactionType.CREDIT, TransactionType.DEBIT],
        )
        self.assertEqual(rows[2].amount_minor_units, 750)

    def test_unparseable_dates_are_tallied(self):
        text = "31/02/2025  BAD DATE ROW  10.00\n01/03/2025  GOOD ROW  11.00"
        outcome = extract_transactions(text, GENERIC)
        self.assertEqual([r.description for r in outcome.rows], ["GOOD ROW"])
        self.assertEqual(outcome.unparseable_dates, 1)
        self.assertTrue(any("unparseable date" in w for w in outcome.warnings))

    def test_short_description_lowers_confidence(self):
        rows = extract_transactions("01/05/2025  ABC  10.00\n02/05/2025  ABCD SHOP  10.00", GENERIC).rows
        self.assertAlmostEqual(rows[0].extraction_factor, 0.8)
        self.assertAlmostEqual(rows[1].extraction_factor, 1.0)

    def test_unmatched_lookalike_lines_warn(self):
        text = "Paid on 01/05/2025 amount 10.00 ref A\nPaid on 02/05/2025 amount 12.00 ref B"
        outcome = extract_transactions(text, GENERIC)
        self.assertEqual(outcome.rows, [])
        self.assertTrue(any("look like transactions" in w for w in outcome.warnings))


class TestProfileExtraction(unittest.TestCase):
    def test_same_day_rows_inherit_date(self):
        text = "\n".join(
            [
                "02 Apr 2025  VIS  TESCO STORES  20.00  980.00",
                "DD  BT GROUP PLC  35.00  945.00",
                "05 Apr 2025  CR  ACME PAYROLL  1,500.00  2,445.00",
            ]
        )
        rows = extract_transactions(text, get_profile(BankId.HSBC)).rows
        self.assertEqual([r.date for r in rows], ["2025-04-02", "2025-04-02", "2025-04-05"])
        self.assertEqual([r.pattern for r in rows], ["hsbc_dated_row", "hsbc_same_day_row", "hsbc_dated_row"])
        self.assertEqual(rows[1].type, TransactionType.DEBIT)
        self.assertEqual(rows[2].type, TransactionType.CREDIT)

    def test_line_matched_by_two_variants_is_kept_once(self):
        text = "02 Apr 2025  TESCO STORES  DEB  20.00  980.00\n03 Apr 2025  SHOP  5.00  975.00"
        rows = extract_transactions(text, get_profile(BankId.LLOYDS)).rows
        self.assertEqual(
            [(r.description, r.pattern, r.amount_minor_units) for r in rows],
            [("TESCO STORES", "lloyds_row", 2000), ("SHOP", "lloyds_plain_row", 500)],
        )

    def test_card_negative_amount_is_credit(self):
        text = "\n".join(
            [
                "Jan 05  PAYMENT RECEIVED THANK YOU  -500.00",
                "Jan 06  SHELL OIL 1234  45.00",
                "Jan 10  MEMBERSHIP REWARDS FEE  12.00",
            ]
        )
        rows = extract_transactions(text, get_profile(BankId.AMEX)).rows
        self.assertEqual([r.description for r in rows], ["PAYMENT RECEIVED THANK YOU", "SHELL OIL 1234"])
        self.assertEqual([r.type for r in rows], [TransactionType.CREDIT, TransactionType.DEBIT])
        self.assertEqual(rows[0].amount_minor_units, 50000)

    def test_yearless_dates_use_statement_period(self):
        text = "28 Dec  CARD PAYMENT TO SHOP  12.00  988.00\n03 Jan  CARD PAYMENT TO CAFE  3.00  985.00"
        period = (date(2024, 12, 15), date(2025, 1, 14))
        rows = extract_transactions(text, get_profile(BankId.BARCLAYS), period=period).rows
        self.assertEqual([r.date for r in rows], ["2024-12-28", "2025-01-03"])

    def test_us_profile_reads_month_first(self):
        rows = extract_transactions("05/02  STARBUCKS STORE 1234  5.75  1,994.25", get_profile(BankId.CHASE), period=(date(2025, 5, 1), date(2025, 5, 31))).rows
        self.assertEqual(rows[0].date, "2025-05-02")

    def test_fallback_patterns_are_penalised(self):
        text = "2025-05-01  COFFEE SHOP  3.20\n2025-05-02  BOOK SHOP  8.00"
        outcome = extract_transactions(text, get_profile(BankId.BARCLAYS))
        self.assertTrue(outcome.used_fallback)
        self.assertEqual(outcome.pattern_used, "fallback_iso_date")
        self.assertEqual(len(outcome.rows), 2)
        self.assertAlmostEqual(outcome.rows[0].extraction_factor, 0.6)

    def test_whole_unit_fallback(self):
        outcome = extract_transactions("01/05/2025  MARKET STALL  12", GENERIC)
        self.assertEqual(outcome.pattern_used, "fallback_whole_units")
        self.assertEqual(outcome.rows[0].amount_minor_units, 1200)


class TestMatchingAndMetadata(unittest.TestCase):
    def test_overlong_lines_are_skipped(self):
        rx = GENERIC.transaction_patterns[0].regex
        long_line = "01/05/2025  " + "X" * MAX_LINE_LENGTH + "  10.00"
        short_line = "01/05/2025  SHORT  10.00"
        matches = list(iter_pattern_matches(rx, f"{long_line}\n{short_line}"))
        self.assertEqual([line_no for line_no, _ in matches], [1])

    def test_account_number_and_period(self):
        self.assertEqual(extract_account_number(GENERIC_TEXT, GENERIC), "12345678")
        self.assertEqual(extract_statement_period(GENERIC_TEXT, GENERIC), (date(2025, 5, 1), date(2025, 5, 31)))

    def test_uk_period_with_month_names(self):
        text = "Your statement\n1 April 2025 to 30 April 2025\nAccount Number 87654321"
        hsbc = get_profile(BankId.HSBC)
        self.assertEqual(extract_statement_period(text, hsbc), (date(2025, 4, 1), date(2025, 4, 30)))
        self.assertEqual(extract_account_number(text, hsbc), "87654321")

    def test_missing_metadata_is_none(self):
        self.assertIsNone(extract_account_number("nothing here", GENERIC))
        self.assertIsNone(extract_statement_period("nothing here", GENERIC))


if __name__ == "__main__":
    unittest.main()
