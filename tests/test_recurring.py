import unittest

from statement_converter.models import Frequency, ParsedTransaction, TransactionType
from statement_converter.recurring import (
    apply_recurring_flags,
    classify_interval,
    detect_recurring_transactions,
    recurring_key,
)


def _txn(n, date, description="GYM DIRECT DEBIT", amount=2999, is_subscription=False):
    return ParsedTransaction(
        id=f"txn_{n:04d}",
        date=date,
        description=description,
        amount_minor_units=amount,
        type=TransactionType.DEBIT,
        raw_text=description,
        is_subscription=is_subscription,
    )


class TestRecurringDetection(unittest.TestCase):
    def test_monthly_group_is_flagged(self):
        txns = [_txn(1, "2025-01-01"), _txn(2, "2025-02-01"), _txn(3, "2025-03-03")]
        recurring = detect_recurring_transactions(txns)
        info = recurring[recurring_key("GYM DIRECT DEBIT", 2999)]
        self.assertEqual(info.frequency, Frequency.MONTHLY)
        self.assertEqual(info.confidence, 0.9)
        self.assertEqual(info.occurrences, 3)
        self.assertEqual(apply_recurring_flags(txns, recurring), 3)
        self.assertTrue(all(t.is_subscription for t in txns))

    def test_irregular_group_is_not_flagged(self):
        txns = [_txn(1, "2025-01-01"), _txn(2, "2025-01-11"), _txn(3, "2025-02-20"), _txn(4, "2025-03-04")]
        recurring = detect_recurring_transactions(txns)
        info = recurring[recurring_key("GYM DIRECT DEBIT", 2999)]
        self.assertEqual(info.frequency, Frequency.IRREGULAR)
        self.assertEqual(apply_recurring_flags(txns, recurring), 0)
        self.assertFalse(any(t.is_subscription for t in txns))

    def test_single_occurrences_are_ignored(self):
        txns = [_txn(1, "2025-01-01"), _txn(2, "2025-02-01", description="ONE OFF SHOP")]
        self.assertEqual(detect_recurring_transactions(txns), {})

    def test_unparseable_dates_are_ignored(self):
        txns = [_txn(1, "2025-01-01"), _txn(2, "not a date")]
        self.assertEqual(detect_recurring_transactions(txns), {})

    def test_flags_are_never_removed(self):
        txns = [_txn(1, "2025-01-01", is_subscription=True), _txn(2, "2025-01-11"), _txn(3, "2025-02-20")]
        apply_recurring_flags(txns, detect_recurring_transactions(txns))
        self.assertTrue(txns[0].is_subscription)
        self.assertFalse(txns[1].is_subscription)

    def test_interval_bands(self):
        cases = [
            (7, Frequency.WEEKLY),
            (14, Frequency.BIWEEKLY),
            (31, Frequency.MONTHLY),
            (91, Frequency.QUARTERLY),
            (365, Frequency.YEARLY),
            (50, Frequency.IRREGULAR),
        ]
        for days, expected in cases:
            with self.subTest(days=days):
                self.assertEqual(classify_interval(days)[0], expected)

    def test_key_rounds_amount_to_whole_units(self):
        self.assertEqual(recurring_key("Spotify P1234", 999), ("spotify p1234", 10))
        self.assertEqual(recurring_key("Spotify", 1050), ("spotify", 11))
        self.assertEqual(recurring_key("A" * 30, 100)[0], "a" * 20)
        self.assertEqual(recurring_key("Spotify", 999), recurring_key("SPOTIFY", 1001))


if __name__ == "__main__":
    unittest.main()
