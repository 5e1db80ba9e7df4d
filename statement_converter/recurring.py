from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Tuple

from .models import Frequency, ParsedTransaction, RecurringInfo
from .normalise import parse_date

logger = logging.getLogger(__name__)


# ----------------------------
# CONFIG
# ----------------------------

KEY_DESCRIPTION_PREFIX = 20
MIN_OCCURRENCES = 2
SUBSCRIPTION_CONFIDENCE_THRESHOLD = 0.7
IRREGULAR_CONFIDENCE = 0.5

# (frequency, centre in days, tolerance in days, confidence); first band containing the mean wins.
FREQUENCY_BANDS: Tuple[Tuple[Frequency, int, int, float], ...] = (
    (Frequency.YEARLY, 365, 15, 0.9),
    (Frequency.QUARTERLY, 90, 7, 0.85),
    (Frequency.MONTHLY, 30, 3, 0.9),
    (Frequency.BIWEEKLY, 14, 2, 0.85),
    (Frequency.WEEKLY, 7, 1, 0.85),
)

RecurringKey = Tuple[str, int]


def recurring_key(description: str, amount_minor_units: int) -> RecurringKey:
    """Description prefix plus amount rounded to whole major units."""
    rounded = int((Decimal(int(amount_minor_units)) / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return (description or "").lower()[:KEY_DESCRIPTION_PREFIX], rounded


def classify_interval(mean_days: float) -> Tuple[Frequency, float]:
    for frequency, centre, tolerance, confidence in FREQUENCY_BANDS:
        if centre - tolerance <= mean_days <= centre + tolerance:
            return frequency, confidence
    return Frequency.IRREGULAR, IRREGULAR_CONFIDENCE


def _as_date(value: str):
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return parse_date(value)


def detect_recurring_transactions(transactions: Iterable[ParsedTransaction]) -> Dict[RecurringKey, RecurringInfo]:
    """
    Group transactions by (description prefix, rounded amount) and band the
    mean gap between consecutive dates. Groups with fewer than two dated
    members are left out; irregular groups are reported with low confidence.
    """
    groups: Dict[RecurringKey, List[date]] = OrderedDict()
    for t in transactions:
        d = _as_date(t.date)
        if d is None:
            continue
        groups.setdefault(recurring_key(t.description, t.amount_minor_units), []).append(d)

    result: Dict[RecurringKey, RecurringInfo] = OrderedDict()
    for key, dates in groups.items():
        if len(dates) < MIN_OCCURRENCES:
            continue
        dates.sort()
        intervals = [(b - a).days for a, b in zip(dates, dates[1:])]
        mean = sum(intervals) / len(intervals)
        frequency, confidence = classify_interval(mean)
        result[key] = RecurringInfo(frequency=frequency, confidence=confidence, occurrences=len(dates))
        logger.debug("Recurring group %r: %s (mean %.1f days)", key, frequency.value, mean)
    return result


def apply_recurring_flags(
    transactions: Iterable[ParsedTransaction],
    recurring: Dict[RecurringKey, RecurringInfo],
    threshold: float = SUBSCRIPTION_CONFIDENCE_THRESHOLD,
) -> int:
    """Mark members of confident recurring groups as subscriptions. Returns how many changed."""
    changed = 0
    for t in transactions:
        info = recurring.get(recurring_key(t.description, t.amount_minor_units))
        if info is None or info.frequency == Frequency.IRREGULAR or info.confidence <= threshold:
            continue
        if not t.is_subscription:
            t.is_subscription = True
            changed += 1
    return changed
