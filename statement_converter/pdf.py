"""pdfplumber adapter: statement PDF -> pages of PositionedRun -> ParseResult."""

from __future__ import annotations

import logging
from typing import List, Optional

import pdfplumber

from .core import MAX_PAGES, parse_statement
from .models import ParseResult, PositionedRun

logger = logging.getLogger(__name__)


def _page_runs(page) -> List[PositionedRun]:
    words = page.extract_words(use_text_flow=False, keep_blank_chars=False) or []
    height = float(page.height)
    runs: List[PositionedRun] = []
    for w in words:
        text = w.get("text", "")
        if not text:
            continue
        x0 = float(w.get("x0", 0.0))
        x1 = float(w.get("x1", x0))
        # pdfplumber measures from the top of the page; runs use PDF space (y up).
        runs.append(PositionedRun(text=text, x=x0, y=height - float(w.get("bottom", 0.0)), width=max(0.0, x1 - x0)))
    return runs


def read_pdf_pages(pdf_path: str, max_pages: Optional[int] = MAX_PAGES) -> List[List[PositionedRun]]:
    """
    Read every page (up to ``max_pages + 1``, so the caller can tell the
    statement was truncated) as a list of positioned word runs.
    """
    pages: List[List[PositionedRun]] = []
    with pdfplumber.open(pdf_path) as pdf:
        for i, page in enumerate(pdf.pages):
            if max_pages is not None and i > max_pages:
                break
            pages.append(_page_runs(page))
    logger.debug("Read %d pages from '%s'", len(pages), pdf_path)
    return pages


def parse_statement_pdf(pdf_path: str, **kwargs) -> ParseResult:
    """Open a statement PDF and parse it; unreadable files give an error result."""
    max_pages = kwargs.get("max_pages", MAX_PAGES)
    try:
        pages = read_pdf_pages(pdf_path, max_pages=max_pages)
    except Exception as e:
        logger.warning("Could not read PDF '%s': %s", pdf_path, e)
        return ParseResult(errors=[f"Failed to parse PDF: {e}"])
    return parse_statement(pages, **kwargs)
