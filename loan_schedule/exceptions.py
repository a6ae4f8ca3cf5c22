"""Exception hierarchy for the loan schedule calculator."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict


class LoanScheduleError(Exception):
    """Base exception for all loan schedule errors."""


class InvalidLoanParameters(LoanScheduleError, ValueError):
    """Raised when a parameter violates its domain constraint.

    ``errors`` maps form field names (``amount``, ``rate``, ``years``,
    ``extra``, ``method``, ``frequency``) to user-facing messages.
    """

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = dict(errors)
        details = "; ".join(f"{key}: {message}" for key, message in self.errors.items())
        super().__init__(f"Invalid loan parameters ({details})")


class NonConvergenceError(LoanScheduleError):
    """Raised when the iteration cap is reached with a positive balance."""

    def __init__(self, periods: int, remaining_balance: Decimal) -> None:
        self.periods = periods
        self.remaining_balance = remaining_balance
        super().__init__(
            f"Loan does not pay off: {remaining_balance:.2f} still outstanding "
            f"after {periods} periods"
        )
