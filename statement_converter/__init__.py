"""Bank statement PDF -> categorised transaction list."""

from .banks import BankId, get_profile
from .classify import Classification, classify_transaction
from .core import compute_statement_fingerprint, parse_statement, parse_statement_text, validate_transactions
from .detect import detect_bank
from .layout import reconstruct_text
from .models import (
    Frequency,
    ParsedTransaction,
    ParseResult,
    PositionedRun,
    RecurringInfo,
    StatementPeriod,
    TransactionType,
)
from .normalise import format_date, parse_amount
from .recurring import apply_recurring_flags, detect_recurring_transactions

__version__ = "1.0.0"

__all__ = [
    "BankId",
    "Classification",
    "Frequency",
    "ParseResult",
    "ParsedTransaction",
    "PositionedRun",
    "RecurringInfo",
    "StatementPeriod",
    "TransactionType",
    "apply_recurring_flags",
    "classify_transaction",
    "compute_statement_fingerprint",
    "detect_bank",
    "detect_recurring_transactions",
    "format_date",
    "get_profile",
    "parse_amount",
    "parse_statement",
    "parse_statement_text",
    "reconstruct_text",
    "validate_transactions",
]
