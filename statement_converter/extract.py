"""Transaction row extraction.

Rows are matched one line at a time against the detected profile's patterns.
Every profile variant is run over the whole text; a line claimed by an earlier
variant is not offered to later ones. Candidates are then processed in
document order so that same-day rows can inherit the date above them and the
running balance can be followed from row to row.
"""

from __future__ import annotations

import hashlib
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from .banks import FALLBACK_PATTERNS, BankProfile, PatternSpec
from .errors import ParseTimeoutError
from .layout import iter_lines
from .models import StatementPeriod, TransactionType
from .normalise import Period, is_negative_amount, parse_amount, parse_date

logger = logging.getLogger(__name__)


# ----------------------------
# CONFIG
# ----------------------------

MAX_LINE_LENGTH = 300
NOISE_TERMS = ("balance", "total", "statement", "opening", "closing", "brought forward", "carried forward")
FALLBACK_PENALTY = 0.1
SHORT_DESCRIPTION_LENGTH = 3
SHORT_DESCRIPTION_FACTOR = 0.8
DEDUPE_DESCRIPTION_PREFIX = 20
# Fewer unmatched look-alike lines than this are not worth a warning.
LOOKALIKE_WARNING_MIN = 2


class Deadline:
    """Wall-clock budget shared by the stages of one parse."""

    def __init__(self, budget: Optional[float]):
        self.budget = budget
        self.expires_at = (time.monotonic() + budget) if budget else None

    def check(self) -> None:
        if self.expires_at is not None and time.monotonic() > self.expires_at:
            raise ParseTimeoutError(self.budget)


@dataclass
class ExtractedRow:
    id: str
    line_no: int
    date: str
    description: str
    amount_minor_units: int
    type: TransactionType
    raw_text: str
    extraction_factor: float
    pattern: str


@dataclass
class ExtractionOutcome:
    rows: List[ExtractedRow] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    pattern_used: Optional[str] = None
    used_fallback: bool = False
    unparseable_dates: int = 0
    unparseable_amounts: int = 0


# ----------------------------
# Helpers
# ----------------------------

_WS_RE = re.compile(r"\s+")
_LOOKALIKE_DATE_RE = re.compile(
    r"\b(?:\d{1,2}[/\-]\d{1,2}(?:[/\-]\d{2,4})?|\d{1,2}\.\d{1,2}\.\d{2,4}|\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}\s+(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*"
    r"|(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\s+\d{1,2})\b",
    re.IGNORECASE,
)
_LOOKALIKE_MONEY_RE = re.compile(r"\d\.\d{2}\b")


def _term_regex(terms: Sequence[str]) -> re.Pattern:
    alternatives = "|".join(re.escape(t) for t in sorted(set(terms), key=len, reverse=True))
    return re.compile(r"\b(?:" + alternatives + r")\b", re.IGNORECASE)


_GLOBAL_NOISE_RE = _term_regex(NOISE_TERMS)


def _noise_regex(profile: BankProfile) -> re.Pattern:
    if not profile.noise_terms:
        return _GLOBAL_NOISE_RE
    return _term_regex(NOISE_TERMS + tuple(profile.noise_terms))


def clean_description(raw: str) -> str:
    return _WS_RE.sub(" ", (raw or "").strip())


def make_transaction_id(seq: int, date_iso: str, amount_minor_units: int, description: str, raw_text: str) -> str:
    h = hashlib.sha1()
    h.update(f"{date_iso}|{amount_minor_units}|{description}|{raw_text}".encode("utf-8"))
    return f"txn_{seq:04d}_{h.hexdigest()[:10]}"


def iter_pattern_matches(
    pattern: re.Pattern,
    text: str,
    max_line_length: int = MAX_LINE_LENGTH,
    deadline: Optional[Deadline] = None,
) -> Iterator[Tuple[int, re.Match]]:
    """Yield (line number, match) for every line of ``text`` the pattern matches.

    Over-long lines are skipped rather than scanned.
    """
    for line_no, line in enumerate(iter_lines(text)):
        if deadline is not None:
            deadline.check()
        if not line.strip() or len(line) > max_line_length:
            continue
        m = pattern.search(line)
        if m:
            yield line_no, m


def _group(m: re.Match, name: str) -> Optional[str]:
    try:
        return m.group(name)
    except IndexError:
        return None


def _contains_term(text: str, terms: Sequence[str]) -> bool:
    low = text.lower()
    for term in terms:
        if re.search(r"\b" + re.escape(term.lower()) + r"\b", low):
            return True
    return False


def determine_type(
    m: re.Match,
    description: str,
    amount_raw: str,
    amount_minor_units: int,
    profile: BankProfile,
    previous_balance: Optional[int],
) -> TransactionType:
    """Pick debit/credit from the strongest cue available on the row."""
    indicator = (_group(m, "indicator") or "").upper()
    if indicator == "CR":
        return TransactionType.CREDIT
    if indicator == "DR":
        return TransactionType.DEBIT

    if is_negative_amount(amount_raw):
        # Card statements print payments and refunds as negative amounts.
        return TransactionType.CREDIT if profile.is_card else TransactionType.DEBIT

    balance_raw = _group(m, "balance")
    if balance_raw and previous_balance is not None:
        balance = parse_amount(balance_raw)
        if balance is not None:
            delta = balance - previous_balance
            if delta == amount_minor_units:
                return TransactionType.CREDIT
            if delta == -amount_minor_units:
                return TransactionType.DEBIT

    code = (_group(m, "code") or "").upper()
    if code and code in profile.credit_codes:
        return TransactionType.CREDIT

    if _contains_term(description, profile.credit_keywords):
        return TransactionType.CREDIT
    return TransactionType.DEBIT


def _is_lookalike(line: str) -> bool:
    return bool(_LOOKALIKE_DATE_RE.search(line) and _LOOKALIKE_MONEY_RE.search(line))


# ----------------------------
# Metadata
# ----------------------------

def extract_account_number(text: str, profile: BankProfile) -> Optional[str]:
    for rx in profile.account_patterns:
        m = rx.search(text or "")
        if m:
            value = m.group(1).strip()
            if value:
                return value
    return None


def extract_statement_period(text: str, profile: BankProfile) -> Optional[Period]:
    for rx in profile.period_patterns:
        m = rx.search(text or "")
        if not m:
            continue
        start = parse_date(m.group(1), day_first=profile.day_first)
        end = parse_date(m.group(2), day_first=profile.day_first)
        if start is None or end is None:
            continue
        if start > end:
            start, end = end, start
        return start, end
    return None


def period_to_model(period: Optional[Period]) -> Optional[StatementPeriod]:
    if not period or period[0] is None or period[1] is None:
        return None
    return StatementPeriod(start=period[0].isoformat(), end=period[1].isoformat())


# ----------------------------
# Extraction
# ----------------------------

@dataclass
class _VariantRun:
    rows: List[ExtractedRow] = field(default_factory=list)
    matched_lines: Set[int] = field(default_factory=set)
    unparseable_dates: int = 0
    unparseable_amounts: int = 0


def _collect_candidates(
    variants: Sequence[PatternSpec],
    text: str,
    deadline: Optional[Deadline],
) -> List[Tuple[int, re.Match, PatternSpec]]:
    claimed: Dict[int, Tuple[re.Match, PatternSpec]] = {}
    for spec in variants:
        for line_no, m in iter_pattern_matches(spec.regex, text, deadline=deadline):
            if line_no not in claimed:
                claimed[line_no] = (m, spec)
    return [(line_no, m, spec) for line_no, (m, spec) in sorted(claimed.items())]


def _run_variants(
    variants: Sequence[PatternSpec],
    text: str,
    profile: BankProfile,
    period: Optional[Period],
    factor: float,
    deadline: Optional[Deadline],
) -> _VariantRun:
    noise_re = _noise_regex(profile)
    run = _VariantRun()
    rows = run.rows
    seen: Set[Tuple[str, int, str]] = set()
    last_date: Optional[date] = None
    previous_balance: Optional[int] = None

    for line_no, m, spec in _collect_candidates(variants, text, deadline):
        if deadline is not None:
            deadline.check()
        run.matched_lines.add(line_no)

        description = clean_description(m.group("description"))
        if not description or noise_re.search(description):
            continue

        amount_raw = m.group("amount")
        signed = parse_amount(amount_raw)
        if signed is None:
            run.unparseable_amounts += 1
            logger.debug("Unparseable amount %r on line %d", amount_raw, line_no)
            continue
        amount = abs(signed)

        date_raw = _group(m, "date")
        if date_raw:
            parsed = parse_date(date_raw, day_first=profile.day_first, period=period)
        elif spec.inherits_date:
            parsed = last_date
        else:
            parsed = None
        if parsed is None:
            run.unparseable_dates += 1
            logger.debug("Unparseable date %r on line %d", date_raw, line_no)
            continue
        last_date = parsed

        txn_type = determine_type(m, description, amount_raw, amount, profile, previous_balance)
        balance_raw = _group(m, "balance")
        if balance_raw:
            balance = parse_amount(balance_raw)
            if balance is not None:
                previous_balance = balance

        date_iso = parsed.isoformat()
        key = (date_iso, amount, description.lower()[:DEDUPE_DESCRIPTION_PREFIX])
        if key in seen:
            continue
        seen.add(key)

        row_factor = factor
        if len(description) <= SHORT_DESCRIPTION_LENGTH:
            row_factor *= SHORT_DESCRIPTION_FACTOR

        raw_text = m.group(0).strip()
        rows.append(ExtractedRow(
            id=make_transaction_id(len(rows) + 1, date_iso, amount, description, raw_text),
            line_no=line_no,
            date=date_iso,
            description=description,
            amount_minor_units=amount,
            type=txn_type,
            raw_text=raw_text,
            extraction_factor=round(row_factor, 4),
            pattern=spec.name,
        ))

    return run


def _count_lookalikes(text: str, matched_lines: Set[int], noise_re: re.Pattern) -> int:
    count = 0
    for line_no, line in enumerate(iter_lines(text)):
        if line_no in matched_lines or len(line) > MAX_LINE_LENGTH:
            continue
        if noise_re.search(line):
            continue
        if _is_lookalike(line):
            count += 1
    return count


def extract_transactions(
    text: str,
    profile: BankProfile,
    period: Optional[Period] = None,
    deadline: Optional[Deadline] = None,
) -> ExtractionOutcome:
    """Run the profile's row patterns, then the generic fallbacks if they find nothing.

    The outcome carries the rows in document order plus human-readable
    warnings; it never raises for bad rows. ``ParseTimeoutError`` is the only
    exception that escapes.
    """
    outcome = ExtractionOutcome()

    decided = _run_variants(profile.transaction_patterns, text, profile, period, 1.0, deadline)
    matched = set(decided.matched_lines)
    if decided.rows:
        outcome.pattern_used = decided.rows[0].pattern
    else:
        for n, spec in enumerate(FALLBACK_PATTERNS, start=1):
            factor = max(0.0, 1.0 - FALLBACK_PENALTY * n)
            run = _run_variants((spec,), text, profile, period, factor, deadline)
            if run.rows:
                decided = run
                matched |= run.matched_lines
                outcome.pattern_used = spec.name
                outcome.used_fallback = True
                logger.info(
                    "No %s rows matched; fallback pattern %s found %d", profile.display_name, spec.name, len(run.rows)
                )
                break

    rows = decided.rows
    outcome.rows = rows
    outcome.unparseable_dates = decided.unparseable_dates
    outcome.unparseable_amounts = decided.unparseable_amounts

    if outcome.unparseable_dates:
        outcome.warnings.append(f"Skipped {outcome.unparseable_dates} rows with an unparseable date")
    if outcome.unparseable_amounts:
        outcome.warnings.append(f"Skipped {outcome.unparseable_amounts} rows with an unparseable amount")

    lookalikes = _count_lookalikes(text, matched, _noise_regex(profile))
    if lookalikes >= LOOKALIKE_WARNING_MIN:
        outcome.warnings.append(
            f"{lookalikes} lines look like transactions but did not match the {profile.display_name} layout"
        )

    logger.debug(
        "Extracted %d rows (pattern=%s, fallback=%s)", len(rows), outcome.pattern_used, outcome.used_fallback
    )
    return outcome
