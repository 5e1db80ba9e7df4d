"""Records passed between the pipeline stages.

Monetary values are integer minor units (pence, cents). Dates on parsed
transactions are ISO-8601 strings so results serialise without conversion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class Frequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    IRREGULAR = "irregular"


@dataclass(frozen=True)
class PositionedRun:
    """One text run from the PDF decoder (PDF space, y grows upward)."""

    text: str
    x: float
    y: float
    width: Optional[float] = None


@dataclass
class ParsedTransaction:
    id: str
    date: str
    description: str
    amount_minor_units: int
    type: TransactionType
    raw_text: str
    category: Optional[str] = None
    merchant: Optional[str] = None
    is_subscription: bool = False
    confidence: float = 0.0

    def __post_init__(self) -> None:
        if self.amount_minor_units < 0:
            raise ValueError(f"amount_minor_units must be >= 0, got {self.amount_minor_units}")
        self.confidence = min(1.0, max(0.0, float(self.confidence)))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "amountMinorUnits": self.amount_minor_units,
            "type": self.type.value,
            "category": self.category,
            "merchant": self.merchant,
            "isSubscription": self.is_subscription,
            "confidence": self.confidence,
            "rawText": self.raw_text,
        }


@dataclass(frozen=True)
class StatementPeriod:
    start: str
    end: str

    def to_dict(self) -> dict:
        return {"from": self.start, "to": self.end}


@dataclass(frozen=True)
class RecurringInfo:
    frequency: Frequency
    confidence: float
    occurrences: int = 0


@dataclass
class ParseResult:
    transactions: list[ParsedTransaction] = field(default_factory=list)
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    statement_period: Optional[StatementPeriod] = None
    errors: list[str] = field(default_factory=list)

    @property
    def total_transactions(self) -> int:
        return len(self.transactions)

    def to_dict(self) -> dict:
        return {
            "transactions": [t.to_dict() for t in self.transactions],
            "bankName": self.bank_name,
            "accountNumber": self.account_number,
            "statementPeriod": self.statement_period.to_dict() if self.statement_period else None,
            "totalTransactions": self.total_transactions,
            "errors": list(self.errors),
        }
