"""Input validation for loan calculations.

``validate_inputs`` checks raw form values and returns per-field messages so
the front ends can show them next to the offending field. The engine runs the
same checks through ``validate_parameters`` before it starts computing.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Optional, Union

from .data_models import LoanParameters, PaymentFrequency, RepaymentMethod
from .exceptions import InvalidLoanParameters
from .utils import to_decimal

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    "amount": "请输入大于 0 的贷款金额。",
    "rate": "年利率需在 0% 至 100% 之间。",
    "years": "贷款年限需大于 0。",
    "extra": "额外还款需大于或等于 0。",
    "method": "请选择有效的还款方式。",
    "frequency": "请选择有效的还款频率。",
}

# Longest schedule accepted (100 years of weekly payments).
MAX_TOTAL_PERIODS = 5200

TERM_TOO_LONG = f"贷款期数不能超过 {MAX_TOTAL_PERIODS} 期。"

_VALID_FREQUENCIES = {int(f) for f in PaymentFrequency}


def _finite(value) -> Optional[Decimal]:
    try:
        number = to_decimal(value)
    except ValueError:
        return None
    return number if number.is_finite() else None


def resolve_method(method: Union[str, RepaymentMethod, None]) -> Optional[RepaymentMethod]:
    """Return the method named by ``method``; blank means amortized."""
    if isinstance(method, RepaymentMethod):
        return method
    if method is None or (isinstance(method, str) and method.strip() == ""):
        return RepaymentMethod.AMORTIZED
    try:
        return RepaymentMethod(method.strip())
    except (ValueError, AttributeError):
        return None


def validate_inputs(
    principal,
    annual_rate,
    years,
    extra_payment,
    method,
    payments_per_year=PaymentFrequency.MONTHLY,
) -> Dict[str, str]:
    """Validate raw inputs and return a mapping of field name to message.

    An empty mapping means every value is usable. A blank or ``None`` extra
    payment counts as zero. Terms longer than ``MAX_TOTAL_PERIODS`` periods
    are reported under ``years``.
    """
    errors: Dict[str, str] = {}

    amount = _finite(principal)
    if amount is None or amount <= 0:
        errors["amount"] = ERROR_MESSAGES["amount"]

    rate = _finite(annual_rate)
    if rate is None or rate < 0 or rate > 100:
        errors["rate"] = ERROR_MESSAGES["rate"]

    term = _finite(years)
    if term is None or term <= 0:
        errors["years"] = ERROR_MESSAGES["years"]

    if extra_payment is None or (isinstance(extra_payment, str) and extra_payment.strip() == ""):
        extra_payment = 0
    extra = _finite(extra_payment)
    if extra is None or extra < 0:
        errors["extra"] = ERROR_MESSAGES["extra"]

    if resolve_method(method) is None:
        errors["method"] = ERROR_MESSAGES["method"]

    frequency = _finite(payments_per_year)
    if (
        frequency is None
        or frequency != frequency.to_integral_value()
        or frequency not in _VALID_FREQUENCIES
    ):
        errors["frequency"] = ERROR_MESSAGES["frequency"]
        frequency = None

    if "years" not in errors and frequency is not None and term * frequency > MAX_TOTAL_PERIODS:
        errors["years"] = TERM_TOO_LONG

    return errors


def validate_parameters(params: LoanParameters) -> None:
    """Raise ``InvalidLoanParameters`` if ``params`` is outside its domain."""
    errors = validate_inputs(
        params.principal,
        params.annual_rate,
        params.years,
        params.extra_payment,
        params.method,
        params.payments_per_year,
    )
    if not isinstance(params.method, RepaymentMethod):
        errors.setdefault("method", ERROR_MESSAGES["method"])
    if errors:
        logger.warning("Rejected loan parameters: %s", ", ".join(sorted(errors)))
        raise InvalidLoanParameters(errors)
