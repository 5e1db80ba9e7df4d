from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from .banks import DETECTION_ORDER, PROFILES, BankId

logger = logging.getLogger(__name__)


# ----------------------------
# CONFIG
# ----------------------------

# The statement header; bank names found here win over mentions further down.
HEADER_WINDOW = 500
# Shorter indicators keep word boundaries even in the whole-document pass
# ('citi' in 'electricity', 'chase' in 'purchase').
MIN_SUBSTRING_INDICATOR_LENGTH = 6


_NON_WORD_RE = re.compile(r"[^\w\s]+")
_WS_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    s = (text or "").lower()
    s = _NON_WORD_RE.sub(" ", s)
    s = s.replace("_", " ")
    return _WS_RE.sub(" ", s).strip()


def _word_match(indicator: str, haystack: str) -> bool:
    return re.search(r"\b" + re.escape(indicator) + r"\b", haystack) is not None


def _first_match(haystack: str, use_substring: bool, order: Iterable[BankId]) -> Optional[BankId]:
    for bank_id in order:
        for raw_indicator in PROFILES[bank_id].indicators:
            indicator = normalize_text(raw_indicator)
            if not indicator:
                continue
            if use_substring and len(indicator) >= MIN_SUBSTRING_INDICATOR_LENGTH:
                if indicator in haystack:
                    return bank_id
            elif _word_match(indicator, haystack):
                return bank_id
    return None


def detect_bank(text: str, header_window: int = HEADER_WINDOW) -> BankId:
    """Best-effort bank detection.

    First pass looks only at the statement header with word-boundary matching,
    so transaction descriptions that mention another bank cannot win. Second
    pass searches the whole document by substring, for statements that only
    name the bank in a footer. Falls back to GENERIC.
    """
    normalized = normalize_text(text)
    if not normalized:
        return BankId.GENERIC

    header = normalized[:header_window]
    found = _first_match(header, use_substring=False, order=DETECTION_ORDER)
    if found is not None:
        logger.debug("Bank detected from header: %s", found.value)
        return found

    found = _first_match(normalized, use_substring=True, order=DETECTION_ORDER)
    if found is not None:
        logger.debug("Bank detected from document body: %s", found.value)
        return found

    logger.debug("No bank indicator found; using generic profile")
    return BankId.GENERIC
