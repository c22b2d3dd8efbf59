"""Custom exceptions for the EMI calculator."""

from typing import Dict, Optional


class EmiCalcError(Exception):
    """Base exception for all EMI calculator errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class LoanValidationError(EmiCalcError, ValueError):
    """Raised when raw loan inputs cannot be turned into ``LoanParameters``.

    ``errors`` maps each failing field name to its user-facing message.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid loan parameters: {fields}", details=self.errors)
