"""Amount and date normalisation.

Nothing in here raises on bad input: amounts come back as ``None`` and dates
that match no known layout are handed back unchanged so the caller can decide
how to treat them.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable, List, Optional, Tuple


_MONTH_NAME_TO_NUM = {
    "JANUARY": 1,
    "FEBRUARY": 2,
    "MARCH": 3,
    "APRIL": 4,
    "MAY": 5,
    "JUNE": 6,
    "JULY": 7,
    "AUGUST": 8,
    "SEPTEMBER": 9,
    "OCTOBER": 10,
    "NOVEMBER": 11,
    "DECEMBER": 12,
}

_MONTH_ABBR_TO_NUM = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

Period = Tuple[Optional[date], Optional[date]]


# ----------------------------
# Amounts
# ----------------------------

_CURRENCY_RE = re.compile(r"(?:GBP|USD|EUR|[£$€¥])", re.IGNORECASE)
_PLAIN_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")
_THOUSANDS_COMMA_RE = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?")
_DECIMAL_COMMA_RE = re.compile(r"\d+,\d{1,2}")
_THOUSANDS_DOT_RE = re.compile(r"\d{1,3}(?:\.\d{3}){2,}")


def _normalise_separators(s: str) -> str:
    if "," in s and "." in s:
        # Whichever separator comes last is the decimal point.
        if s.rfind(",") > s.rfind("."):
            return s.replace(".", "").replace(",", ".")
        return s.replace(",", "")
    if "," in s:
        if _THOUSANDS_COMMA_RE.fullmatch(s):
            return s.replace(",", "")
        if _DECIMAL_COMMA_RE.fullmatch(s):
            return s.replace(",", ".")
        return s.replace(",", "")
    if _THOUSANDS_DOT_RE.fullmatch(s):
        return s.replace(".", "")
    return s


def parse_amount(raw: Optional[str]) -> Optional[int]:
    """Parse a money string into signed integer minor units.

    '45.20' -> 4520, '5' -> 500 (no decimal point means whole units),
    '(£12.34)' / '-12.34' / '12.34-' -> -1234, '1.234,56' -> 123456.
    Returns None when the string is not a number.
    """
    if raw is None:
        return None
    s = str(raw).strip()
    if not s:
        return None

    neg = False
    if s.startswith("(") and s.endswith(")"):
        neg = True
        s = s[1:-1].strip()

    s = _CURRENCY_RE.sub("", s)
    s = s.replace(" ", "").replace("\u00a0", "").replace("\u2212", "-")

    if s.startswith("(") and s.endswith(")"):
        neg = True
        s = s[1:-1]
    if s.endswith("-"):
        neg = True
        s = s[:-1]
    if s.startswith("-"):
        neg = True
        s = s[1:]
    elif s.startswith("+"):
        s = s[1:]

    if not s:
        return None

    s = _normalise_separators(s)
    if not _PLAIN_NUMBER_RE.fullmatch(s):
        return None

    try:
        val = Decimal(s)
    except InvalidOperation:
        return None

    minor = int((val * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return -minor if neg else minor


def is_negative_amount(raw: Optional[str]) -> bool:
    s = (raw or "").strip()
    if not s:
        return False
    if s.startswith("(") and s.endswith(")"):
        return True
    s = _CURRENCY_RE.sub("", s).strip().replace("\u2212", "-")
    return s.startswith("-") or s.endswith("-") or (s.startswith("(") and s.endswith(")"))


def format_minor_units(minor: int) -> str:
    """4520 -> '45.20'."""
    sign = "-" if minor < 0 else ""
    whole, frac = divmod(abs(int(minor)), 100)
    return f"{sign}{whole}.{frac:02d}"


# ----------------------------
# Dates
# ----------------------------

def _month_num(token: str) -> Optional[int]:
    t = (token or "").strip().rstrip(".").upper()
    if not t:
        return None
    if t in _MONTH_NAME_TO_NUM:
        return _MONTH_NAME_TO_NUM[t]
    if len(t) >= 3 and t[:3] in _MONTH_ABBR_TO_NUM:
        # Accept 'Sept' and similar, but not random words starting 'Mar...'
        if len(t) == 3 or any(name.startswith(t) for name in _MONTH_NAME_TO_NUM):
            return _MONTH_ABBR_TO_NUM[t[:3]]
    return None


def _expand_year(y: int) -> int:
    return (2000 + y) if y < 100 else y


def _order_day_month(first: int, second: int, day_first: bool) -> Optional[Tuple[int, int]]:
    """Return (day, month) for a numeric pair, using magnitude before preference."""
    if first > 12 and second > 12:
        return None
    if first > 12:
        return first, second
    if second > 12:
        return second, first
    return (first, second) if day_first else (second, first)


def _safe_date(y: int, m: int, d: int) -> Optional[date]:
    try:
        return date(y, m, d)
    except ValueError:
        return None


def infer_year(month: int, day: int, period: Optional[Period] = None, last_date: Optional[date] = None) -> Optional[int]:
    """Pick a year for a year-less date, preferring one inside the statement period."""
    start, end = period if period else (None, None)
    candidate_years: List[int] = []
    if start:
        candidate_years.append(start.year)
    if end and end.year not in candidate_years:
        candidate_years.append(end.year)
    if not candidate_years and last_date:
        candidate_years.append(last_date.year)
    if not candidate_years:
        candidate_years.append(date.today().year)

    candidates = [d for d in (_safe_date(y, month, day) for y in candidate_years) if d]
    if not candidates:
        return None

    if start and end:
        for d in candidates:
            if start <= d <= end:
                return d.year
        candidates.sort(key=lambda d: min(abs((d - start).days), abs((d - end).days)))
    return candidates[0].year


_Handler = Callable[[re.Match, bool, Optional[int], Optional[Period]], Optional[date]]


def _iso(m: re.Match, day_first: bool, year: Optional[int], period: Optional[Period]) -> Optional[date]:
    return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _numeric_with_year(m: re.Match, day_first: bool, year: Optional[int], period: Optional[Period]) -> Optional[date]:
    pair = _order_day_month(int(m.group(1)), int(m.group(2)), day_first)
    if pair is None:
        return None
    d, mon = pair
    return _safe_date(_expand_year(int(m.group(3))), mon, d)


def _numeric_no_year(m: re.Match, day_first: bool, year: Optional[int], period: Optional[Period]) -> Optional[date]:
    pair = _order_day_month(int(m.group(1)), int(m.group(2)), day_first)
    if pair is None:
        return None
    d, mon = pair
    y = year if year is not None else infer_year(mon, d, period)
    return _safe_date(y, mon, d) if y else None


def _day_month_name(m: re.Match, day_first: bool, year: Optional[int], period: Optional[Period]) -> Optional[date]:
    mon = _month_num(m.group(2))
    if not mon:
        return None
    d = int(m.group(1))
    y_txt = m.group(3) if m.re.groups >= 3 else None
    if y_txt:
        y = _expand_year(int(y_txt))
    else:
        y = year if year is not None else infer_year(mon, d, period)
    return _safe_date(y, mon, d) if y else None


def _month_name_day(m: re.Match, day_first: bool, year: Optional[int], period: Optional[Period]) -> Optional[date]:
    mon = _month_num(m.group(1))
    if not mon:
        return None
    d = int(m.group(2))
    if m.group(3):
        y = int(m.group(3))
    else:
        y = year if year is not None else infer_year(mon, d, period)
    return _safe_date(y, mon, d) if y else None


# Evaluated top to bottom; the first pattern that matches decides.
DATE_RULES: List[Tuple[str, re.Pattern, _Handler]] = [
    ("iso", re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), _iso),
    ("mm/dd/yy", re.compile(r"^(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{2})$"), _numeric_with_year),
    ("mm/dd/yyyy", re.compile(r"^(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{4})$"), _numeric_with_year),
    (
        "dd month yyyy",
        re.compile(r"^(\d{1,2})(?:st|nd|rd|th)?[\s\-]+([A-Za-z]{3,9})\.?,?[\s\-]+(\d{4}|\d{2})$", re.IGNORECASE),
        _day_month_name,
    ),
    (
        "mon dd",
        re.compile(r"^([A-Za-z]{3,9})\.?\s+(\d{1,2})(?:st|nd|rd|th)?(?:,?\s+(\d{4}))?$", re.IGNORECASE),
        _month_name_day,
    ),
    ("dd mon", re.compile(r"^(\d{1,2})(?:st|nd|rd|th)?[\s\-]+([A-Za-z]{3,9})\.?$", re.IGNORECASE), _day_month_name),
    ("ddmonyy", re.compile(r"^(\d{2})([A-Za-z]{3})(\d{2})$"), _day_month_name),
    ("mm/dd", re.compile(r"^(\d{1,2})[/.\-](\d{1,2})$"), _numeric_no_year),
]


def parse_date(raw: Optional[str], day_first: bool = False, year: Optional[int] = None, period: Optional[Period] = None) -> Optional[date]:
    s = re.sub(r"\s+", " ", (raw or "").strip())
    if not s:
        return None
    for _name, rx, handler in DATE_RULES:
        m = rx.match(s)
        if m:
            return handler(m, day_first, year, period)
    return None


def format_date(raw: Optional[str], day_first: bool = False, year: Optional[int] = None, period: Optional[Period] = None) -> str:
    """Normalise a statement date to ISO-8601.

    Numeric dates are read month-first unless the first group is above 12,
    the second group is above 12 (forcing the other order), or ``day_first``
    is set. Year-less dates take ``year``, else a year that lands inside
    ``period``, else the current year. Unrecognised strings come back as-is.
    """
    parsed = parse_date(raw, day_first=day_first, year=year, period=period)
    if parsed is None:
        return raw if raw is not None else ""
    return parsed.isoformat()


_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_iso_date(value: Optional[str]) -> bool:
    if not value or not _ISO_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True
