"""Core calculation engine for the loan schedule calculator.

This module implements the three repayment methods (amortized, equal
principal and interest-only with an annual principal reduction). They share
one period loop that accrues interest, applies the per-method principal
reduction, clamps the balance and stops once the loan is paid off. Results
are returned as a ``LoanCalculation`` holding the schedule and its summary.

The engine is a pure function of its parameters: it keeps no state between
calls and may be used from several threads at once.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Dict, List, Tuple

from .data_models import (
    LevelPaymentInfo,
    LoanCalculation,
    LoanParameters,
    LoanSummary,
    PaymentInfo,
    RepaymentMethod,
    ScheduleEntry,
    VaryingPaymentInfo,
)
from .exceptions import NonConvergenceError
from .formatter import format_payoff_time
from .validation import validate_parameters

logger = logging.getLogger(__name__)

# Balances at or below this are treated as paid off.
PAYOFF_EPSILON = Decimal("0.01")

ZERO = Decimal("0")

# step(period, balance, interest) -> (payment, principal_payment)
PeriodStep = Callable[[int, Decimal, Decimal], Tuple[Decimal, Decimal]]


def max_iterations(total_periods: int) -> int:
    """Upper bound on the number of periods a schedule may run."""
    return total_periods * 2 + 10


def _calculate_annuity_payment(principal: Decimal, rate_per_period: Decimal, periods: int) -> Decimal:
    """Return the constant payment that amortizes ``principal``.

    The formula is:

        payment = P * i / (1 - (1 + i)^-n)

    where ``P`` is the principal, ``i`` is the periodic interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if periods <= 0:
        raise ValueError("Number of periods must be positive")
    if rate_per_period == 0:
        return principal / Decimal(periods)
    return principal * rate_per_period / (1 - (1 + rate_per_period) ** -periods)


def _run_periods(params: LoanParameters, step: PeriodStep) -> List[ScheduleEntry]:
    """Run the period loop shared by every repayment method.

    Interest accrues on the balance at the start of each period. The balance
    never goes negative, and anything at or below ``PAYOFF_EPSILON`` left
    after a payment is written off so the schedule ends exactly at zero.
    Hitting the iteration cap with a positive balance raises
    ``NonConvergenceError``.
    """
    rate = params.periodic_rate
    limit = max_iterations(params.total_periods)
    balance = params.principal
    period = 0
    schedule: List[ScheduleEntry] = []

    while balance > 0 and period < limit:
        period += 1
        interest = ZERO if rate == 0 else balance * rate
        payment, principal_payment = step(period, balance, interest)

        balance = max(ZERO, balance - principal_payment)
        if balance <= PAYOFF_EPSILON:
            balance = ZERO

        schedule.append(
            ScheduleEntry(
                period=period,
                payment=payment,
                principal_payment=principal_payment,
                interest_payment=interest,
                ending_balance=balance,
            )
        )

    if balance > 0:
        logger.warning(
            "Schedule did not converge: balance %.2f after %d periods",
            balance,
            period,
            extra={"method": params.method.value, "periods": period, "balance": balance},
        )
        raise NonConvergenceError(period, balance)
    return schedule


def _amortized(params: LoanParameters) -> Tuple[List[ScheduleEntry], PaymentInfo]:
    base_payment = _calculate_annuity_payment(
        params.principal, params.periodic_rate, params.total_periods
    )
    payment_with_extra = base_payment + params.extra_payment

    def step(period: int, balance: Decimal, interest: Decimal) -> Tuple[Decimal, Decimal]:
        payment = min(payment_with_extra, balance + interest)
        principal_payment = payment - interest
        if principal_payment > balance:
            principal_payment = balance
            payment = principal_payment + interest
        return payment, principal_payment

    schedule = _run_periods(params, step)
    info = LevelPaymentInfo(
        payment_per_period=payment_with_extra,
        base_payment=base_payment,
        extra_payment=params.extra_payment,
    )
    return schedule, info


def _equal_principal(params: LoanParameters) -> Tuple[List[ScheduleEntry], PaymentInfo]:
    principal_per_period = params.principal / Decimal(params.total_periods) + params.extra_payment

    def step(period: int, balance: Decimal, interest: Decimal) -> Tuple[Decimal, Decimal]:
        principal_payment = min(principal_per_period, balance)
        return principal_payment + interest, principal_payment

    schedule = _run_periods(params, step)
    return schedule, _varying_info(RepaymentMethod.EQUAL_PRINCIPAL, schedule, params)


def _interest_only(params: LoanParameters) -> Tuple[List[ScheduleEntry], PaymentInfo]:
    total_periods = params.total_periods
    per_year = params.payments_per_year
    full_years, remainder = divmod(total_periods, per_year)
    repayment_count = max(1, full_years + (1 if remainder > 0 else 0))
    planned_principal = params.principal / Decimal(repayment_count)
    extra = params.extra_payment

    # Year ends are counted from period 1, not from a calendar date.
    def step(period: int, balance: Decimal, interest: Decimal) -> Tuple[Decimal, Decimal]:
        principal_payment = ZERO
        if period % per_year == 0 or period == total_periods:
            principal_payment = min(planned_principal, balance)
        if extra > 0 and balance - principal_payment > 0:
            principal_payment += min(extra, balance - principal_payment)
        return interest + principal_payment, principal_payment

    schedule = _run_periods(params, step)
    return schedule, _varying_info(RepaymentMethod.INTEREST_ONLY, schedule, params)


def _varying_info(
    method: RepaymentMethod, schedule: List[ScheduleEntry], params: LoanParameters
) -> VaryingPaymentInfo:
    return VaryingPaymentInfo(
        method=method,
        first_payment=schedule[0].payment if schedule else ZERO,
        last_payment=schedule[-1].payment if schedule else ZERO,
        extra_payment=params.extra_payment,
    )


_METHODS: Dict[RepaymentMethod, Callable[[LoanParameters], Tuple[List[ScheduleEntry], PaymentInfo]]] = {
    RepaymentMethod.AMORTIZED: _amortized,
    RepaymentMethod.EQUAL_PRINCIPAL: _equal_principal,
    RepaymentMethod.INTEREST_ONLY: _interest_only,
}

_missing = set(RepaymentMethod) - set(_METHODS)
if _missing:
    raise RuntimeError(f"No calculation registered for {sorted(m.value for m in _missing)}")


def compute_schedule(params: LoanParameters) -> LoanCalculation:
    """Compute the amortization schedule and summary for a loan.

    Parameters
    ----------
    params: LoanParameters
        The loan parameters. They are validated again here; upstream
        validation is expected to have caught problems already.

    Returns
    -------
    LoanCalculation
        The schedule (one entry per period, ending at a zero balance) and
        the summary: payment information, totals and the payoff label.

    Raises
    ------
    InvalidLoanParameters
        If a parameter is outside its domain.
    NonConvergenceError
        If the loan is not paid off within the iteration cap.
    """
    validate_parameters(params)
    logger.debug(
        "Computing %s schedule: principal=%s rate=%s%% periods=%d extra=%s",
        params.method.value,
        params.principal,
        params.annual_rate,
        params.total_periods,
        params.extra_payment,
        extra={"method": params.method.value, "periods": params.total_periods},
    )

    schedule, payment_info = _METHODS[params.method](params)

    total_paid = sum((e.payment for e in schedule), ZERO)
    total_interest = sum((e.interest_payment for e in schedule), ZERO)
    total_principal = sum((e.principal_payment for e in schedule), ZERO)
    periods = len(schedule)

    summary = LoanSummary(
        payment_info=payment_info,
        total_paid=total_paid,
        total_interest=total_interest,
        total_principal=total_principal,
        periods=periods,
        payoff_label=format_payoff_time(periods, params.payments_per_year),
    )
    logger.debug(
        "Loan paid off after %d periods, total interest %.2f",
        periods,
        total_interest,
        extra={"method": params.method.value, "periods": periods, "balance": schedule[-1].ending_balance},
    )
    return LoanCalculation(parameters=params, schedule=tuple(schedule), summary=summary)
