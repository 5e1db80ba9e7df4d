"""Rebuild reading-order text from positioned PDF text runs.

Runs are clustered into visual rows by their y coordinate, rows are emitted
top-to-bottom and runs within a row left-to-right. A wide horizontal gap
between two runs is kept as a double space so that the description and amount
columns stay separable by the transaction patterns.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence

from .models import PositionedRun


# ----------------------------
# CONFIG
# ----------------------------

LINE_Y_TOLERANCE = 1.0
COLUMN_GAP = 10.0
# Used when the decoder gives no run width (roughly Helvetica 10pt).
AVG_GLYPH_WIDTH = 5.0
PAGE_BREAK = "\f"
COLUMN_SEPARATOR = "  "


def _run_end(run: PositionedRun) -> float:
    if run.width is not None and run.width >= 0:
        return run.x + run.width
    return run.x + len(run.text) * AVG_GLYPH_WIDTH


def _usable(run: PositionedRun) -> bool:
    if not run.text or not run.text.strip():
        return False
    return math.isfinite(run.x) and math.isfinite(run.y)


def cluster_runs_by_y(runs: Iterable[PositionedRun], y_tol: float = LINE_Y_TOLERANCE) -> List[List[PositionedRun]]:
    """
    Group runs into visual rows, highest row first (PDF y grows upward).
    """
    indexed = [(i, r) for i, r in enumerate(runs) if _usable(r)]
    # Index in the key keeps the ordering total, so equal inputs always give equal output.
    indexed.sort(key=lambda p: (-round(p[1].y, 3), p[1].x, p[0]))

    lines: List[List[PositionedRun]] = []
    cur: List[PositionedRun] = []
    cur_y: Optional[float] = None

    for _, r in indexed:
        if cur_y is None or abs(r.y - cur_y) <= y_tol:
            cur.append(r)
            if cur_y is None:
                cur_y = r.y
        else:
            lines.append(sorted(cur, key=lambda a: a.x))
            cur = [r]
            cur_y = r.y

    if cur:
        lines.append(sorted(cur, key=lambda a: a.x))
    return lines


def line_text(line_runs: Sequence[PositionedRun], column_gap: float = COLUMN_GAP) -> str:
    parts: List[str] = []
    prev: Optional[PositionedRun] = None
    for r in line_runs:
        text = r.text.strip()
        if prev is not None:
            gap = r.x - _run_end(prev)
            parts.append(COLUMN_SEPARATOR if gap > column_gap else " ")
        parts.append(text)
        prev = r
    return "".join(parts).rstrip()


def reconstruct_page(runs: Iterable[PositionedRun], y_tol: float = LINE_Y_TOLERANCE, column_gap: float = COLUMN_GAP) -> str:
    rows = cluster_runs_by_y(runs, y_tol=y_tol)
    return "\n".join(line_text(row, column_gap=column_gap) for row in rows)


def reconstruct_text(pages: Iterable[Iterable[PositionedRun]], y_tol: float = LINE_Y_TOLERANCE, column_gap: float = COLUMN_GAP) -> str:
    """Whole-document text; pages are separated by a line holding PAGE_BREAK."""
    page_texts = [reconstruct_page(p, y_tol=y_tol, column_gap=column_gap) for p in pages]
    return f"\n{PAGE_BREAK}\n".join(page_texts)


def meaningful_length(text: str) -> int:
    """Length of the text ignoring page markers and whitespace runs."""
    if not text:
        return 0
    return len(" ".join(text.replace(PAGE_BREAK, " ").split()))


def iter_lines(text: str) -> Iterable[str]:
    for raw in (text or "").split("\n"):
        if raw == PAGE_BREAK:
            continue
        yield raw
