"""Bank statement profiles.

Each supported layout is one immutable ``BankProfile``: the indicators used to
recognise it, the ordered transaction row patterns (most specific first), and
the patterns for the account number and statement period. Profiles are
module-level constants and are never mutated.

Row patterns are matched one line at a time and use no nested quantifiers, so
a pathological line costs at most a polynomial scan of ``MAX_LINE_LENGTH``
characters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Pattern, Tuple


class BankId(str, Enum):
    HSBC = "hsbc"
    HALIFAX = "halifax"
    LLOYDS = "lloyds"
    STARLING = "starling"
    NATWEST = "natwest"
    SANTANDER = "santander"
    MONZO = "monzo"
    NATIONWIDE = "nationwide"
    BARCLAYS = "barclays"
    AMEX = "amex"
    CHASE = "chase"
    BOFA = "bofa"
    WELLS_FARGO = "wellsfargo"
    CAPITAL_ONE = "capitalone"
    CITI = "citi"
    GENERIC = "generic"


@dataclass(frozen=True)
class PatternSpec:
    """One transaction row layout.

    Named groups: ``date``, ``description``, ``amount`` (required, except
    ``date`` when ``inherits_date`` is set), ``indicator`` (CR/DR marker),
    ``code`` (bank type code) and ``balance`` (running balance).
    """

    name: str
    regex: Pattern
    inherits_date: bool = False


@dataclass(frozen=True)
class BankProfile:
    id: BankId
    display_name: str
    transaction_patterns: Tuple[PatternSpec, ...]
    account_patterns: Tuple[Pattern, ...]
    period_patterns: Tuple[Pattern, ...]
    indicators: Tuple[str, ...]
    day_first: bool = True
    is_card: bool = False
    noise_terms: Tuple[str, ...] = ()
    credit_keywords: Tuple[str, ...] = ()
    credit_codes: FrozenSet[str] = field(default_factory=frozenset)


# ----------------------------
# Regex building blocks
# ----------------------------

_FLAGS = re.IGNORECASE

_MON = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]{0,6}\.?"

# Money with pence/cents, optional thousands separators, sign, brackets or currency symbol.
MONEY = r"[-+]?\(?[£$€]?\s?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}\)?-?"
# Same, but the decimal part is optional (whole-unit layouts).
WHOLE_MONEY = r"[-+]?\(?[£$€]?\s?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{2})?\)?-?"

DATE_SLASH_Y4 = r"\d{1,2}/\d{1,2}/\d{4}"
DATE_SLASH_Y2 = r"\d{1,2}/\d{1,2}/\d{2}"
DATE_SLASH_ANY = r"\d{1,2}[/.\-]\d{1,2}[/.\-](?:\d{4}|\d{2})"
DATE_SLASH_NO_YEAR = r"\d{1,2}/\d{1,2}"
DATE_DAY_MON_YEAR = r"\d{1,2}(?:st|nd|rd|th)?\s+" + _MON + r"\s+(?:\d{4}|\d{2})"
# Day and month only; a following year belongs to DATE_DAY_MON_YEAR.
DATE_DAY_MON = r"\d{1,2}(?:st|nd|rd|th)?\s+" + _MON + r"(?!\s+(?:\d{4}|\d{2})\s)"
DATE_MON_DAY = _MON + r"\s+\d{1,2}"
# A lone transaction date, not the first of a transaction/posting date pair.
DATE_MON_DAY_SOLO = DATE_MON_DAY + r"(?!\s+" + _MON + r"\s+\d)"
DATE_ISO = r"\d{4}-\d{2}-\d{2}"

_DESC = r"(?P<description>\S.*?)"
_INDICATOR = r"(?:\s*(?P<indicator>CR|DR)\b)?"
_BALANCE = r"(?:\s+(?P<balance>" + MONEY + r")(?:\s*(?:CR|DR|OD)\b)?)?"


def _row(
    date: Optional[str],
    money: str = MONEY,
    balance: bool = True,
    code_before: Optional[str] = None,
    code_after: Optional[str] = None,
    second_date: Optional[str] = None,
) -> Pattern:
    parts = [r"^\s*"]
    if date:
        parts.append(r"(?P<date>" + date + r")\s+")
    if second_date:
        parts.append(r"(?:" + second_date + r")\s+")
    if code_before:
        parts.append(r"(?P<code>" + code_before + r")\s+")
    parts.append(_DESC)
    if code_after:
        parts.append(r"\s+(?P<code>" + code_after + r")")
    parts.append(r"\s+(?P<amount>" + money + r")")
    parts.append(_INDICATOR)
    if balance:
        parts.append(_BALANCE)
    parts.append(r"\s*$")
    return re.compile("".join(parts), _FLAGS)


def _rx(pattern: str) -> Pattern:
    return re.compile(pattern, _FLAGS)


# ----------------------------
# Shared metadata / keyword sets
# ----------------------------

_UK_ACCOUNT = (
    _rx(r"Account\s+(?:Number|No\.?)[:\s]*(\d{8})\b"),
    _rx(r"Sort\s+Code[:\s]*\d{2}-\d{2}-\d{2}\s+Account\s+(?:Number|No\.?)[:\s]*(\d{8})"),
)
_UK_PERIOD = (
    _rx(r"(\d{1,2}(?:st|nd|rd|th)?\s+[A-Za-z]{3,9}\s+\d{4})\s+(?:to|-)\s+(\d{1,2}(?:st|nd|rd|th)?\s+[A-Za-z]{3,9}\s+\d{4})"),
    _rx(r"(\d{2}/\d{2}/\d{4})\s*(?:to|-)\s*(\d{2}/\d{2}/\d{4})"),
)
_US_ACCOUNT = (
    _rx(r"Account\s+Number[:\s]*([X*\d][X*\d \-]{2,24}\d)"),
    _rx(r"Acct(?:\s+No\.?)?[:\s]*([X*\d][X*\d\-]{2,24}\d)"),
)
_US_PERIOD = (
    _rx(r"Statement\s+Period[:\s]*(\d{1,2}/\d{1,2}/\d{2,4})\s*(?:to|-|through)?\s*(\d{1,2}/\d{1,2}/\d{2,4})"),
    _rx(r"([A-Za-z]{3,9}\s+\d{1,2},\s+\d{4})\s+(?:through|to|-)\s+([A-Za-z]{3,9}\s+\d{1,2},\s+\d{4})"),
    _rx(r"(\d{1,2}/\d{1,2}/\d{2,4})\s+(?:through|to|-)\s+(\d{1,2}/\d{1,2}/\d{2,4})"),
)
_CARD_ACCOUNT = (
    _rx(r"Account\s+(?:Number|Ending)(?:\s+in)?[:\s]*([X*\d][X*\d \-]{2,24}\d)"),
    _rx(r"Card\s+(?:Number|Ending)(?:\s+in)?[:\s]*([X*\d][X*\d \-]{2,24}\d)"),
)

_CARD_NOISE = ("membership", "annual fee", "minimum payment", "payment due", "credit limit", "available credit")

_UK_CREDIT_KEYWORDS = (
    "refund",
    "salary",
    "payroll",
    "interest paid",
    "bank credit",
    "cash credit",
    "transfer from",
    "payment from",
    "automated credit",
)
_US_CREDIT_KEYWORDS = (
    "deposit",
    "direct dep",
    "payroll",
    "refund",
    "interest paid",
    "transfer from",
    "zelle from",
)
_CARD_CREDIT_KEYWORDS = ("payment", "refund", "credit adjustment", "returned", "autopay")

# Type codes printed beside each row (HSBC, Halifax/Lloyds, NatWest exports)
_UK_CODES = r"VIS|DD|DR|CR|BP|SO|ATM|CHQ|BGC|FPI|FPO|TFR|DEB|CHG|PAY|CPT|BAC|DPC|POS|D/D|S/O|\)\)\)"
_UK_CREDIT_CODES = frozenset({"CR", "BGC", "FPI", "BAC"})


# ----------------------------
# Profiles
# ----------------------------

GENERIC_PATTERNS = (
    PatternSpec("generic_slash_date", _row(DATE_SLASH_ANY)),
)

# Tried in order when a profile's own patterns find nothing; most specific first.
FALLBACK_PATTERNS = (
    PatternSpec("fallback_day_month_year", _row(DATE_DAY_MON_YEAR)),
    PatternSpec("fallback_day_month", _row(DATE_DAY_MON)),
    PatternSpec("fallback_month_day", _row(DATE_MON_DAY_SOLO)),
    PatternSpec("fallback_iso_date", _row(DATE_ISO)),
    PatternSpec("fallback_slash_date", _row(DATE_SLASH_ANY)),
    PatternSpec(
        "fallback_whole_units",
        _row(r"\d{1,2}[/.\-]\d{1,2}(?:[/.\-](?:\d{4}|\d{2}))?", money=WHOLE_MONEY, balance=False),
    ),
)


PROFILES: Dict[BankId, BankProfile] = {}


def _register(profile: BankProfile) -> BankProfile:
    PROFILES[profile.id] = profile
    return profile


_register(BankProfile(
    id=BankId.HSBC,
    display_name="HSBC",
    transaction_patterns=(
        PatternSpec("hsbc_dated_row", _row(DATE_DAY_MON_YEAR, code_before=_UK_CODES)),
        PatternSpec("hsbc_same_day_row", _row(None, code_before=_UK_CODES), inherits_date=True),
    ),
    account_patterns=_UK_ACCOUNT,
    period_patterns=_UK_PERIOD,
    indicators=("hsbc", "hsbc uk", "hsbc bank"),
    credit_keywords=_UK_CREDIT_KEYWORDS,
    credit_codes=_UK_CREDIT_CODES,
))

_register(BankProfile(
    id=BankId.HALIFAX,
    display_name="Halifax",
    transaction_patterns=(
        PatternSpec("halifax_row", _row(DATE_DAY_MON_YEAR, code_after=_UK_CODES)),
        PatternSpec("halifax_slash_row", _row(DATE_SLASH_ANY, code_after=_UK_CODES)),
    ),
    account_patterns=_UK_ACCOUNT,
    period_patterns=_UK_PERIOD,
    indicators=("halifax",),
    credit_keywords=_UK_CREDIT_KEYWORDS,
    credit_codes=_UK_CREDIT_CODES,
))

_register(BankProfile(
    id=BankId.LLOYDS,
    display_name="Lloyds Bank",
    transaction_patterns=(
        PatternSpec("lloyds_row", _row(DATE_DAY_MON_YEAR, code_after=_UK_CODES)),
        PatternSpec("lloyds_plain_row", _row(DATE_DAY_MON_YEAR)),
    ),
    account_patterns=_UK_ACCOUNT,
    period_patterns=_UK_PERIOD,
    indicators=("lloyds bank", "lloyds"),
    credit_keywords=_UK_CREDIT_KEYWORDS,
    credit_codes=_UK_CREDIT_CODES,
))

_register(BankProfile(
    id=BankId.STARLING,
    display_name="Starling Bank",
    transaction_patterns=(
        PatternSpec("starling_row", _row(DATE_SLASH_Y4)),
    ),
    account_patterns=_UK_ACCOUNT,
    period_patterns=(_rx(r"Summary\s+(\d{2}/\d{2}/\d{4})\s*-\s*(\d{2}/\d{2}/\d{4})"),) + _UK_PERIOD,
    indicators=("starling bank", "starling"),
    credit_keywords=_UK_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.NATWEST,
    display_name="NatWest",
    transaction_patterns=(
        PatternSpec("natwest_export_row", _row(DATE_DAY_MON_YEAR, code_before=_UK_CODES)),
        PatternSpec("natwest_table_row", _row(DATE_DAY_MON)),
    ),
    account_patterns=_UK_ACCOUNT,
    period_patterns=(
        _rx(r"Period\s+Covered\s+(\d{2}\s+[A-Za-z]{3}\s+\d{4})\s+to\s+(\d{2}\s+[A-Za-z]{3}\s+\d{4})"),
        _rx(r"Showing:\s*(\d{2}\s+[A-Za-z]{3}\s+\d{4})\s+to\s+(\d{2}\s+[A-Za-z]{3}\s+\d{4})"),
    ) + _UK_PERIOD,
    indicators=("national westminster bank", "natwest", "nat west"),
    credit_keywords=_UK_CREDIT_KEYWORDS,
    credit_codes=_UK_CREDIT_CODES,
))

_register(BankProfile(
    id=BankId.SANTANDER,
    display_name="Santander",
    transaction_patterns=(
        PatternSpec("santander_ordinal_row", _row(r"\d{1,2}(?:st|nd|rd|th)\s+" + _MON)),
        PatternSpec("santander_slash_row", _row(DATE_SLASH_Y4)),
    ),
    account_patterns=_UK_ACCOUNT,
    period_patterns=_UK_PERIOD,
    indicators=("santander", "santander uk", "abbygb2l"),
    credit_keywords=_UK_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.MONZO,
    display_name="Monzo",
    transaction_patterns=(
        PatternSpec("monzo_row", _row(DATE_SLASH_Y4)),
    ),
    account_patterns=_UK_ACCOUNT,
    period_patterns=_UK_PERIOD,
    indicators=("monzo", "monzo bank", "monzgb2l"),
    credit_keywords=_UK_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.NATIONWIDE,
    display_name="Nationwide",
    transaction_patterns=(
        PatternSpec("nationwide_row", _row(DATE_DAY_MON)),
        PatternSpec("nationwide_dated_row", _row(DATE_DAY_MON_YEAR)),
    ),
    account_patterns=_UK_ACCOUNT,
    period_patterns=_UK_PERIOD,
    indicators=("nationwide", "flexbasic"),
    credit_keywords=_UK_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.BARCLAYS,
    display_name="Barclays",
    transaction_patterns=(
        PatternSpec("barclays_row", _row(DATE_DAY_MON)),
        PatternSpec("barclays_dated_row", _row(DATE_DAY_MON_YEAR)),
    ),
    account_patterns=_UK_ACCOUNT,
    period_patterns=(
        _rx(r"(\d{1,2}\s+[A-Za-z]{3}\s+\d{4})\s*-\s*(\d{1,2}\s+[A-Za-z]{3}\s+\d{4})"),
    ) + _UK_PERIOD,
    indicators=("barclays", "barclays bank", "bukbgb22"),
    credit_keywords=_UK_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.AMEX,
    display_name="American Express",
    transaction_patterns=(
        PatternSpec("amex_us_row", _row(r"\d{2}/\d{2}/\d{2}\*?", balance=False)),
        PatternSpec("amex_uk_row", _row(DATE_MON_DAY, second_date=DATE_MON_DAY, balance=False)),
        PatternSpec("amex_single_date_row", _row(DATE_MON_DAY_SOLO, balance=False)),
    ),
    account_patterns=_CARD_ACCOUNT,
    period_patterns=_UK_PERIOD + _US_PERIOD,
    indicators=("american express", "americanexpress", "amex"),
    day_first=False,
    is_card=True,
    noise_terms=_CARD_NOISE,
    credit_keywords=_CARD_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.CHASE,
    display_name="Chase",
    transaction_patterns=(
        PatternSpec("chase_dated_row", _row(DATE_SLASH_Y4)),
        PatternSpec("chase_activity_row", _row(DATE_SLASH_NO_YEAR)),
    ),
    account_patterns=_US_ACCOUNT,
    period_patterns=_US_PERIOD,
    indicators=("chase", "jpmorgan", "jp morgan"),
    day_first=False,
    credit_keywords=_US_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.BOFA,
    display_name="Bank of America",
    transaction_patterns=(
        PatternSpec("bofa_short_year_row", _row(DATE_SLASH_Y2)),
        PatternSpec("bofa_dated_row", _row(DATE_SLASH_Y4)),
    ),
    account_patterns=_US_ACCOUNT,
    period_patterns=_US_PERIOD,
    indicators=("bank of america", "bankofamerica", "bofa"),
    day_first=False,
    credit_keywords=_US_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.WELLS_FARGO,
    display_name="Wells Fargo",
    transaction_patterns=(
        PatternSpec("wellsfargo_row", _row(DATE_SLASH_NO_YEAR)),
        PatternSpec("wellsfargo_dated_row", _row(DATE_SLASH_Y4)),
    ),
    account_patterns=_US_ACCOUNT,
    period_patterns=_US_PERIOD,
    indicators=("wells fargo", "wellsfargo"),
    day_first=False,
    credit_keywords=_US_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.CAPITAL_ONE,
    display_name="Capital One",
    transaction_patterns=(
        PatternSpec("capitalone_two_date_row", _row(DATE_MON_DAY, second_date=DATE_MON_DAY, balance=False)),
        PatternSpec("capitalone_row", _row(DATE_MON_DAY_SOLO, balance=False)),
        PatternSpec("capitalone_slash_row", _row(DATE_SLASH_Y4)),
    ),
    account_patterns=_CARD_ACCOUNT + _US_ACCOUNT,
    period_patterns=_US_PERIOD,
    indicators=("capital one", "capitalone"),
    day_first=False,
    is_card=True,
    noise_terms=_CARD_NOISE,
    credit_keywords=_CARD_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.CITI,
    display_name="Citibank",
    transaction_patterns=(
        PatternSpec("citi_row", _row(DATE_SLASH_NO_YEAR)),
        PatternSpec("citi_dated_row", _row(DATE_SLASH_Y4)),
    ),
    account_patterns=_US_ACCOUNT,
    period_patterns=_US_PERIOD,
    indicators=("citibank", "citi", "citicorp"),
    day_first=False,
    credit_keywords=_US_CREDIT_KEYWORDS,
))

_register(BankProfile(
    id=BankId.GENERIC,
    display_name="Unknown Bank",
    transaction_patterns=GENERIC_PATTERNS,
    account_patterns=(_rx(r"(?:Account|Acct)(?:\s+(?:Number|No\.?))?[:\s]*(\d{4,20})"),),
    period_patterns=(
        _rx(r"(?:Statement\s+)?Period[:\s]*(\d{1,2}/\d{1,2}/\d{2,4})\s*(?:to|-)?\s*(\d{1,2}/\d{1,2}/\d{2,4})"),
    ) + _UK_PERIOD,
    indicators=(),
    credit_keywords=("refund", "salary", "payroll", "deposit", "payment received", "transfer from", "interest paid"),
))


# Detection priority; GENERIC is never matched by indicator.
DETECTION_ORDER: Tuple[BankId, ...] = tuple(b for b in PROFILES if b is not BankId.GENERIC)


def get_profile(bank_id: BankId | str) -> BankProfile:
    try:
        return PROFILES[BankId(bank_id)]
    except ValueError:
        return PROFILES[BankId.GENERIC]
