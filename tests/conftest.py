"""Shared fixtures.

Canonical loan: 100,000 at 5 % over one year, paid monthly.
"""

import logging
from decimal import Decimal

import pytest

from loan_schedule.data_models import LoanParameters, PaymentFrequency, RepaymentMethod


@pytest.fixture
def canonical_loan() -> LoanParameters:
    return LoanParameters(
        principal=Decimal("100000"),
        annual_rate=Decimal("5"),
        years=Decimal("1"),
        payments_per_year=PaymentFrequency.MONTHLY,
        extra_payment=Decimal("0"),
        method=RepaymentMethod.AMORTIZED,
    )


@pytest.fixture
def interest_free_loan() -> LoanParameters:
    """12,000 at 0 % over one year: 1,000 a month, no interest."""
    return LoanParameters(
        principal=Decimal("12000"),
        annual_rate=Decimal("0"),
        years=Decimal("1"),
    )


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
