from __future__ import annotations


class StatementParseError(Exception):
    """Base class for conditions that end parsing of one statement."""


class EmptyDocumentError(StatementParseError):
    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"PDF appears to be empty or contains no readable text "
            f"({length} characters extracted, at least {minimum} required)"
        )


class NoTransactionsFoundError(StatementParseError):
    def __init__(self, bank_name: str):
        self.bank_name = bank_name
        super().__init__(
            f"No transactions found in the PDF ({bank_name} layout). Please check the format."
        )


class ParseTimeoutError(StatementParseError):
    def __init__(self, budget: float):
        self.budget = budget
        super().__init__(f"Statement parsing exceeded the time budget of {budget:g} seconds")
