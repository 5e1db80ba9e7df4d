# Version: 1.0
"""Statement parsing pipeline.

pages of positioned runs -> reading-order text -> bank detection -> metadata
-> row extraction -> classification (+ user rules) -> recurrence -> result.

``parse_statement`` never raises: any failure comes back as a ``ParseResult``
whose ``errors`` explain what went wrong.
"""

from __future__ import annotations

import hashlib
import itertools
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .banks import get_profile
from .classify import classify_transaction
from .detect import detect_bank
from .errors import EmptyDocumentError, NoTransactionsFoundError, StatementParseError
from .extract import (
    Deadline,
    ExtractedRow,
    extract_account_number,
    extract_statement_period,
    extract_transactions,
    period_to_model,
)
from .layout import meaningful_length, reconstruct_text
from .models import ParsedTransaction, ParseResult, PositionedRun
from .normalise import format_minor_units
from .recurring import apply_recurring_flags, detect_recurring_transactions
from .rules import apply_rules

logger = logging.getLogger(__name__)


# ----------------------------
# CONFIG
# ----------------------------

MIN_TEXT_LENGTH = 100
MAX_PAGES = 200
TIME_BUDGET_SECONDS = 30.0
LOW_CONFIDENCE_THRESHOLD = 0.7
MIN_VALID_CONFIDENCE = 0.5


# ----------------------------
# Helpers
# ----------------------------

def _final_confidence(classifier_confidence: float, extraction_factor: float) -> float:
    return round(min(1.0, max(0.0, classifier_confidence * extraction_factor)), 2)


def _to_transaction(row: ExtractedRow) -> ParsedTransaction:
    cls = classify_transaction(row.description, row.amount_minor_units, row.type)
    return ParsedTransaction(
        id=row.id,
        date=row.date,
        description=row.description,
        amount_minor_units=row.amount_minor_units,
        type=row.type,
        raw_text=row.raw_text,
        category=cls.category,
        merchant=cls.merchant,
        is_subscription=cls.is_subscription,
        confidence=_final_confidence(cls.confidence, row.extraction_factor),
    )


def _run_pipeline(text: str, result: ParseResult, warnings: List[str], rules: Optional[List[dict]], deadline: Deadline) -> None:
    length = meaningful_length(text)
    if length < MIN_TEXT_LENGTH:
        raise EmptyDocumentError(length, MIN_TEXT_LENGTH)

    profile = get_profile(detect_bank(text))
    result.bank_name = profile.display_name

    result.account_number = extract_account_number(text, profile)
    period = extract_statement_period(text, profile)
    result.statement_period = period_to_model(period)
    deadline.check()

    outcome = extract_transactions(text, profile, period=period, deadline=deadline)
    warnings.extend(outcome.warnings)
    if not outcome.rows:
        raise NoTransactionsFoundError(profile.display_name)

    transactions = [_to_transaction(row) for row in outcome.rows]
    if rules:
        n = apply_rules(transactions, rules)
        logger.debug("User rules recategorised %d transactions", n)

    recurring = detect_recurring_transactions(transactions)
    apply_recurring_flags(transactions, recurring)

    # ISO dates sort chronologically; sort is stable so same-day rows keep document order.
    transactions.sort(key=lambda t: t.date, reverse=True)

    low = sum(1 for t in transactions if t.confidence < LOW_CONFIDENCE_THRESHOLD)
    if low:
        warnings.append(f"{low} transactions have low confidence and may need manual review")

    result.transactions = transactions
    logger.info(
        "Parsed %d transactions from %s statement (pattern %s)",
        len(transactions),
        profile.display_name,
        outcome.pattern_used,
    )


# ----------------------------
# Public API
# ----------------------------

def parse_statement_text(
    text: str,
    *,
    rules: Optional[List[dict]] = None,
    time_budget: Optional[float] = TIME_BUDGET_SECONDS,
    warnings: Optional[List[str]] = None,
) -> ParseResult:
    """Parse already-reconstructed statement text."""
    result = ParseResult()
    warnings = list(warnings or [])
    try:
        _run_pipeline(text or "", result, warnings, rules, Deadline(time_budget))
    except StatementParseError as e:
        logger.warning("Statement not parsed: %s", e)
        result.transactions = []
        warnings.append(str(e))
    except Exception as e:
        logger.exception("Unexpected error while parsing statement")
        result.transactions = []
        warnings.append(f"Failed to parse PDF: {e}")
    result.errors = warnings
    return result


def parse_statement(
    pages: Iterable[Sequence[PositionedRun]],
    *,
    rules: Optional[List[dict]] = None,
    max_pages: int = MAX_PAGES,
    time_budget: Optional[float] = TIME_BUDGET_SECONDS,
) -> ParseResult:
    """
    Parse one statement from the positioned text runs of its pages.

    Pages beyond ``max_pages`` are dropped with a warning. ``rules`` is a list
    from ``rules.load_rules`` applied after the built-in classifier.
    """
    warnings: List[str] = []
    try:
        # Reads at most one page past the cap.
        page_list = list(itertools.islice(pages or [], max_pages + 1))
        if len(page_list) > max_pages:
            warnings.append(f"Statement has more than {max_pages} pages; only the first {max_pages} were parsed")
            page_list = page_list[:max_pages]
        text = reconstruct_text(page_list)
    except Exception as e:
        logger.exception("Could not reconstruct statement text")
        return ParseResult(errors=warnings + [f"Failed to parse PDF: {e}"])
    return parse_statement_text(text, rules=rules, time_budget=time_budget, warnings=warnings)


def validate_transactions(transactions: Iterable[ParsedTransaction]) -> Tuple[List[ParsedTransaction], List[ParsedTransaction]]:
    """Split into (valid, invalid); invalid ones are kept for manual review."""
    valid: List[ParsedTransaction] = []
    invalid: List[ParsedTransaction] = []
    for t in transactions:
        if t.date and t.description and t.amount_minor_units > 0 and t.confidence > MIN_VALID_CONFIDENCE:
            valid.append(t)
        else:
            invalid.append(t)
    return valid, invalid


def compute_statement_fingerprint(transactions: Iterable[ParsedTransaction]) -> Optional[str]:
    """Order-independent SHA-1 over the normalised rows; None for an empty statement."""

    def _norm_text(v) -> str:
        if v is None:
            return ""
        return " ".join(str(v).split()).upper().strip()

    rows: List[str] = []
    for t in transactions or []:
        if not isinstance(t, ParsedTransaction):
            continue
        rows.append(
            "|".join(
                [
                    (t.date or "").strip(),
                    _norm_text(t.type.value),
                    _norm_text(t.description),
                    format_minor_units(t.amount_minor_units),
                ]
            )
        )

    if not rows:
        return None

    rows.sort()
    payload = "\n".join(rows).encode("utf-8", errors="ignore")
    return hashlib.sha1(payload).hexdigest()
