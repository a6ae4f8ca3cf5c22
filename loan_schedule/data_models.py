"""Data models for the loan schedule calculator.

This module defines the enums and dataclasses used by the engine: the loan
parameters of a single calculation, the per-period schedule entries, the
payment information shown in the summary and the result object that bundles
them. All of them are frozen; a calculation never mutates its inputs or an
entry once it has been emitted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Tuple, Union

from .utils import round_half_up, to_decimal


class RepaymentMethod(str, Enum):
    """How each period's payment is split between principal and interest."""

    AMORTIZED = "amortized"
    EQUAL_PRINCIPAL = "equal_principal"
    INTEREST_ONLY = "interest_only"


class PaymentFrequency(IntEnum):
    """Supported numbers of payments per year."""

    MONTHLY = 12
    BIWEEKLY = 26
    WEEKLY = 52


@dataclass(frozen=True)
class LoanParameters:
    """Inputs of a single calculation.

    Attributes
    ----------
    principal: Decimal
        The loan amount.
    annual_rate: Decimal
        Nominal annual interest rate in percent (``5`` means 5 %).
    years: Decimal
        Nominal loan term in years. Fractions are allowed; the number of
        periods is rounded half up.
    payments_per_year: int
        One of 12, 26 or 52.
    extra_payment: Decimal
        Constant amount added to the principal reduction every period.
    method: RepaymentMethod
        The repayment method.

    Numeric values passed as ``int``, ``float`` or ``str`` are converted to
    ``Decimal`` on construction.
    """

    principal: Decimal
    annual_rate: Decimal
    years: Decimal
    payments_per_year: int = PaymentFrequency.MONTHLY
    extra_payment: Decimal = Decimal("0")
    method: RepaymentMethod = RepaymentMethod.AMORTIZED

    def __post_init__(self) -> None:
        for name in ("principal", "annual_rate", "years", "extra_payment"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        # "12" or Decimal("12.0") become 12; anything else is left for validation
        if not isinstance(self.payments_per_year, int):
            try:
                count = to_decimal(self.payments_per_year)
            except ValueError:
                return
            if count.is_finite() and count == count.to_integral_value():
                object.__setattr__(self, "payments_per_year", int(count))

    @property
    def periodic_rate(self) -> Decimal:
        if self.annual_rate > 0:
            return self.annual_rate / Decimal(100) / Decimal(self.payments_per_year)
        return Decimal("0")

    @property
    def total_periods(self) -> int:
        return max(1, int(round_half_up(self.years * Decimal(self.payments_per_year), 0)))


@dataclass(frozen=True)
class ScheduleEntry:
    """One period of the amortization schedule.

    ``payment`` always equals ``principal_payment + interest_payment`` and
    ``ending_balance`` is the outstanding balance after the payment.
    """

    period: int
    payment: Decimal
    principal_payment: Decimal
    interest_payment: Decimal
    ending_balance: Decimal


@dataclass(frozen=True)
class LevelPaymentInfo:
    """Payment information for the amortized method (constant payment)."""

    payment_per_period: Decimal
    base_payment: Decimal
    extra_payment: Decimal
    method: RepaymentMethod = field(default=RepaymentMethod.AMORTIZED, init=False)


@dataclass(frozen=True)
class VaryingPaymentInfo:
    """Payment information for methods whose payment changes over time."""

    method: RepaymentMethod
    first_payment: Decimal
    last_payment: Decimal
    extra_payment: Decimal


PaymentInfo = Union[LevelPaymentInfo, VaryingPaymentInfo]


@dataclass(frozen=True)
class LoanSummary:
    """Aggregate figures of a calculation."""

    payment_info: PaymentInfo
    total_paid: Decimal
    total_interest: Decimal
    total_principal: Decimal
    periods: int
    payoff_label: str


@dataclass(frozen=True)
class LoanCalculation:
    """The result of one calculation, owned by the caller."""

    parameters: LoanParameters
    schedule: Tuple[ScheduleEntry, ...]
    summary: LoanSummary
