import math
import unittest

from statement_converter.layout import (
    PAGE_BREAK,
    cluster_runs_by_y,
    iter_lines,
    meaningful_length,
    reconstruct_page,
    reconstruct_text,
)
from statement_converter.models import PositionedRun


def _row(y, *cells):
    return [PositionedRun(text=t, x=x, y=y, width=w) for t, x, w in cells]


class TestLayoutReconstruction(unittest.TestCase):
    def test_wide_gap_becomes_column_separator(self):
        runs = _row(700, ("01/05/2025", 40, 50), ("TESCO", 120, 25), ("STORES", 148, 30), ("45.20", 400, 25))
        self.assertEqual(reconstruct_page(runs), "01/05/2025  TESCO STORES  45.20")

    def test_rows_emitted_top_to_bottom(self):
        runs = _row(680, ("second", 40, 30)) + _row(700, ("first", 40, 25))
        self.assertEqual(reconstruct_page(runs), "first\nsecond")

    def test_small_y_jitter_stays_on_one_line(self):
        runs = [
            PositionedRun("NETFLIX.COM", 120, 700.4, 60),
            PositionedRun("03/05/2025", 40, 700.0, 50),
            PositionedRun("9.99", 400, 699.8, 20),
        ]
        lines = cluster_runs_by_y(runs)
        self.assertEqual(len(lines), 1)
        self.assertEqual([r.text for r in lines[0]], ["03/05/2025", "NETFLIX.COM", "9.99"])

    def test_missing_width_is_estimated(self):
        # 'AB' is estimated at 10 units wide, so x=53 leaves a 3 unit gap.
        runs = [PositionedRun("AB", 40, 500), PositionedRun("CD", 53, 500), PositionedRun("EF", 100, 500)]
        self.assertEqual(reconstruct_page(runs), "AB CD  EF")

    def test_unusable_runs_are_skipped(self):
        runs = [
            PositionedRun("", 10, 500),
            PositionedRun("   ", 20, 500),
            PositionedRun("nan", math.nan, 500),
            PositionedRun("ok", 40, 500, 10),
        ]
        self.assertEqual(reconstruct_page(runs), "ok")

    def test_pages_joined_with_page_break(self):
        page1 = _row(700, ("page", 40, 20), ("one", 62, 15))
        page2 = _row(700, ("page", 40, 20), ("two", 62, 15))
        text = reconstruct_text([page1, page2])
        self.assertEqual(text, f"page one\n{PAGE_BREAK}\npage two")
        self.assertEqual(list(iter_lines(text)), ["page one", "page two"])

    def test_reconstruction_is_stable(self):
        runs = _row(700, ("b", 80, 5), ("a", 40, 5)) + _row(650, ("c", 40, 5))
        shuffled = [runs[2], runs[0], runs[1]]
        self.assertEqual(reconstruct_page(runs), reconstruct_page(shuffled))
        self.assertEqual(reconstruct_text([runs]), reconstruct_text([runs]))

    def test_meaningful_length_ignores_padding_and_page_breaks(self):
        self.assertEqual(meaningful_length("  a  \n\f\n  b "), 3)
        self.assertEqual(meaningful_length(""), 0)


if __name__ == "__main__":
    unittest.main()
