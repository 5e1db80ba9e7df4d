from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, List, Optional, Tuple

from .categories import MERCHANT_DATABASE, TRANSACTION_CATEGORIES
from .models import TransactionType


# ----------------------------
# CONFIG
# ----------------------------

MERCHANT_CONFIDENCE = 0.95
KEYWORD_CONFIDENCE = 0.8
SUBSCRIPTION_PHRASE_CONFIDENCE = 0.7
SMALL_AMOUNT_CONFIDENCE = 0.6
LARGE_HOUSING_CONFIDENCE = 0.85
INCOME_DEFAULT_CONFIDENCE = 0.7
DEFAULT_CONFIDENCE = 0.5

SMALL_AMOUNT_MINOR = 1000  # 10.00
LARGE_AMOUNT_MINOR = 100000  # 1,000.00
TRANSFER_MATERIALITY_MINOR = 50000  # 500.00

# Keys this short only match as whole words ('ee' must not hit 'coffee').
SHORT_KEY_LENGTH = 4


@dataclass(frozen=True)
class Classification:
    category: str
    confidence: float
    is_subscription: bool = False
    parent_category: Optional[str] = None
    merchant: Optional[str] = None
    rule: str = "default"


# ----------------------------
# Helpers
# ----------------------------

@lru_cache(maxsize=None)
def _key_regex(key: str) -> re.Pattern:
    escaped = re.escape(key.lower())
    if len(key) <= SHORT_KEY_LENGTH:
        # Whole word, plural allowed ('game' / 'games', not 'endgame').
        return re.compile(r"(?<!\w)" + escaped + r"s?(?!\w)")
    return re.compile(escaped)


def contains_key(text: str, key: str) -> bool:
    return _key_regex(key).search(text) is not None


def _result(category: str, confidence: float, rule: str, is_subscription: bool = False, merchant: Optional[str] = None) -> Classification:
    info = TRANSACTION_CATEGORIES.get(category)
    return Classification(
        category=category,
        confidence=confidence,
        is_subscription=is_subscription,
        parent_category=info.parent if info else None,
        merchant=merchant,
        rule=rule,
    )


# ----------------------------
# Rules
# ----------------------------

_Rule = Callable[[str, int, TransactionType], Optional[Classification]]

# (pattern, category, confidence, minimum amount in minor units)
INCOME_RULES: Tuple[Tuple[re.Pattern, str, float, Optional[int]], ...] = (
    (re.compile(r"salary|payroll|wage|compensation"), "salary", 0.9, None),
    (re.compile(r"dividend|interest|capital gain"), "investment_income", 0.85, None),
    (re.compile(r"transfer|deposit|payment"), "transfers", 0.8, TRANSFER_MATERIALITY_MINOR),
)

SUBSCRIPTION_PHRASES_RE = re.compile(r"monthly subscription|annual subscription|recurring payment|membership|premium")
HOUSING_RE = re.compile(r"\b(?:rent|mortgage|lease)\b")


def merchant_rule(desc: str, amount: int, txn_type: TransactionType) -> Optional[Classification]:
    for key, info in MERCHANT_DATABASE.items():
        if contains_key(desc, key):
            return _result(
                info.subcategory or info.category,
                MERCHANT_CONFIDENCE,
                "merchant",
                is_subscription=info.is_subscription,
                merchant=info.name,
            )
    return None


def income_rule(desc: str, amount: int, txn_type: TransactionType) -> Optional[Classification]:
    if txn_type != TransactionType.CREDIT:
        return None
    for rx, category, confidence, min_amount in INCOME_RULES:
        if rx.search(desc) and (min_amount is None or amount > min_amount):
            return _result(category, confidence, "income")
    return _result("income", INCOME_DEFAULT_CONFIDENCE, "income")


def keyword_rule(desc: str, amount: int, txn_type: TransactionType) -> Optional[Classification]:
    for category in TRANSACTION_CATEGORIES.values():
        for keyword in category.keywords:
            if contains_key(desc, keyword):
                return _result(category.id, KEYWORD_CONFIDENCE, "keyword")
    return None


def subscription_rule(desc: str, amount: int, txn_type: TransactionType) -> Optional[Classification]:
    if SUBSCRIPTION_PHRASES_RE.search(desc):
        return _result("entertainment", SUBSCRIPTION_PHRASE_CONFIDENCE, "subscription", is_subscription=True)
    return None


def amount_rule(desc: str, amount: int, txn_type: TransactionType) -> Optional[Classification]:
    if amount < SMALL_AMOUNT_MINOR:
        return _result("coffee_tea", SMALL_AMOUNT_CONFIDENCE, "amount")
    if amount > LARGE_AMOUNT_MINOR and HOUSING_RE.search(desc):
        return _result("rent_mortgage", LARGE_HOUSING_CONFIDENCE, "amount", is_subscription=True)
    return None


# Evaluated top to bottom; the first rule that returns a result decides.
CLASSIFICATION_RULES: List[Tuple[str, _Rule]] = [
    ("merchant", merchant_rule),
    ("income", income_rule),
    ("keyword", keyword_rule),
    ("subscription", subscription_rule),
    ("amount", amount_rule),
]


def classify_transaction(description: str, amount_minor_units: int, txn_type: TransactionType | str) -> Classification:
    """
    Categorise one transaction. Never fails: anything no rule claims is 'other'.
    """
    desc = (description or "").lower()
    amount = abs(int(amount_minor_units or 0))
    txn_type = TransactionType(txn_type)
    for _name, rule in CLASSIFICATION_RULES:
        found = rule(desc, amount, txn_type)
        if found is not None:
            return found
    return _result("other", DEFAULT_CONFIDENCE, "default")
