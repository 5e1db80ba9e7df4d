import unittest
from datetime import date

from statement_converter.normalise import (
    format_date,
    format_minor_units,
    infer_year,
    is_iso_date,
    is_negative_amount,
    parse_amount,
    parse_date,
)


class TestParseAmount(unittest.TestCase):
    def test_valid_amounts(self):
        cases = [
            ("45.20", 4520),
            ("£1,234.56", 123456),
            ("$ 9.99", 999),
            ("(12.34)", -1234),
            ("(£12.34)", -1234),
            ("12.34-", -1234),
            ("-5", -500),
            ("5", 500),
            ("1,234", 123400),
            ("1.234,56", 123456),
            ("12,50", 1250),
            ("GBP 7.10", 710),
            ("0.005", 1),
            ("+3.00", 300),
        ]
        for raw, expected in cases:
            with self.subTest(raw=raw):
                self.assertEqual(parse_amount(raw), expected)

    def test_invalid_amounts_return_none(self):
        for raw in (None, "", "   ", "abc", "12.3.4x", "-", "()"):
            with self.subTest(raw=raw):
                self.assertIsNone(parse_amount(raw))

    def test_negative_markers(self):
        self.assertTrue(is_negative_amount("-12.00"))
        self.assertTrue(is_negative_amount("12.00-"))
        self.assertTrue(is_negative_amount("(12.00)"))
        self.assertFalse(is_negative_amount("12.00"))
        self.assertFalse(is_negative_amount(""))

    def test_minor_units_round_trip(self):
        for minor in (0, 1, 99, 100, 4520, 123456, 99999999):
            with self.subTest(minor=minor):
                self.assertEqual(parse_amount(format_minor_units(minor)), minor)
        self.assertEqual(format_minor_units(4520), "45.20")
        self.assertEqual(format_minor_units(-5), "-0.05")


class TestFormatDate(unittest.TestCase):
    def test_numeric_order_by_magnitude(self):
        self.assertEqual(format_date("01/15/2024"), "2024-01-15")
        self.assertEqual(format_date("15/01/2024"), "2024-01-15")
        self.assertEqual(format_date("15/01/2024", day_first=False), "2024-01-15")

    def test_numeric_order_by_preference(self):
        self.assertEqual(format_date("01/05/2025"), "2025-01-05")
        self.assertEqual(format_date("01/05/2025", day_first=True), "2025-05-01")
        self.assertEqual(format_date("01/05/24"), "2024-01-05")

    def test_month_names(self):
        cases = [
            ("15 January 2024", "2024-01-15"),
            ("1st Feb 2024", "2024-02-01"),
            ("03 Sept 2023", "2023-09-03"),
            ("Jan 5, 2024", "2024-01-05"),
            ("March 9 2024", "2024-03-09"),
            ("02 Apr 25", "2025-04-02"),
            ("02APR25", "2025-04-02"),
        ]
        for raw, expected in cases:
            with self.subTest(raw=raw):
                self.assertEqual(format_date(raw), expected)

    def test_iso_passthrough(self):
        self.assertEqual(format_date("2024-03-09"), "2024-03-09")

    def test_unrecognised_is_returned_unchanged(self):
        self.assertEqual(format_date("not a date"), "not a date")
        self.assertEqual(format_date("31/02/2024"), "31/02/2024")
        self.assertEqual(format_date(None), "")
        self.assertFalse(is_iso_date(format_date("not a date")))

    def test_yearless_uses_explicit_year(self):
        self.assertEqual(format_date("05 Mar", year=2023), "2023-03-05")
        self.assertEqual(format_date("Mar 5", year=2023), "2023-03-05")
        self.assertEqual(format_date("03/05", year=2023), "2023-03-05")

    def test_yearless_uses_statement_period(self):
        period = (date(2024, 12, 15), date(2025, 1, 14))
        self.assertEqual(format_date("28 Dec", period=period), "2024-12-28")
        self.assertEqual(format_date("03 Jan", period=period), "2025-01-03")

    def test_yearless_defaults_to_current_year(self):
        parsed = parse_date("01 Jan")
        self.assertIsNotNone(parsed)
        self.assertEqual(parsed.year, date.today().year)

    def test_infer_year_out_of_period_picks_nearest(self):
        period = (date(2024, 12, 15), date(2025, 1, 14))
        self.assertEqual(infer_year(12, 1, period), 2024)
        self.assertEqual(infer_year(2, 1, period), 2025)


class TestIsIsoDate(unittest.TestCase):
    def test_values(self):
        self.assertTrue(is_iso_date("2024-02-29"))
        self.assertFalse(is_iso_date("2023-02-29"))
        self.assertFalse(is_iso_date("29/02/2024"))
        self.assertFalse(is_iso_date(""))


if __name__ == "__main__":
    unittest.main()
