from decimal import Decimal

import pytest

from loan_schedule.data_models import LoanParameters, RepaymentMethod
from loan_schedule.exceptions import InvalidLoanParameters
from loan_schedule.validation import (
    ERROR_MESSAGES,
    MAX_TOTAL_PERIODS,
    TERM_TOO_LONG,
    resolve_method,
    validate_inputs,
    validate_parameters,
)


class TestValidateInputs:
    def test_valid(self):
        assert validate_inputs("100000", "5", "30", "0", "amortized", "12") == {}

    def test_accepts_numbers(self):
        assert validate_inputs(100000, 5.5, 2.5, 0, RepaymentMethod.INTEREST_ONLY, 52) == {}

    @pytest.mark.parametrize("principal", ["0", "-10", "abc", "nan", "inf", None])
    def test_bad_amount(self, principal):
        errors = validate_inputs(principal, "5", "30", "0", "amortized")
        assert errors == {"amount": ERROR_MESSAGES["amount"]}

    @pytest.mark.parametrize("rate", ["-0.1", "100.01", "", "Infinity"])
    def test_bad_rate(self, rate):
        assert "rate" in validate_inputs("1000", rate, "30", "0", "amortized")

    @pytest.mark.parametrize("rate", ["0", "100"])
    def test_rate_bounds_inclusive(self, rate):
        assert validate_inputs("1000", rate, "30", "0", "amortized") == {}

    @pytest.mark.parametrize("years", ["0", "-1", "x"])
    def test_bad_years(self, years):
        assert validate_inputs("1000", "5", years, "0", "amortized") == {"years": ERROR_MESSAGES["years"]}

    def test_bad_extra(self):
        assert validate_inputs("1000", "5", "30", "-1", "amortized") == {"extra": ERROR_MESSAGES["extra"]}

    @pytest.mark.parametrize("extra", ["", "   ", None])
    def test_blank_extra_is_zero(self, extra):
        assert validate_inputs("1000", "5", "30", extra, "amortized") == {}

    def test_bad_method(self):
        assert validate_inputs("1000", "5", "30", "0", "balloon") == {"method": ERROR_MESSAGES["method"]}

    @pytest.mark.parametrize("frequency", ["4", "12.5", "", None])
    def test_bad_frequency(self, frequency):
        errors = validate_inputs("1000", "5", "30", "0", "amortized", frequency)
        assert errors == {"frequency": ERROR_MESSAGES["frequency"]}

    @pytest.mark.parametrize("frequency", ["12.0", "26", Decimal("52.00"), 12.0])
    def test_integral_frequency_accepted(self, frequency):
        assert validate_inputs("1000", "5", "1", "0", "amortized", frequency) == {}

    @pytest.mark.parametrize("years", ["1e30", "1e6", "100.01"])
    def test_term_too_long(self, years):
        errors = validate_inputs("1000", "5", years, "0", "amortized", 52)
        assert errors == {"years": TERM_TOO_LONG}

    def test_longest_term_accepted(self):
        assert MAX_TOTAL_PERIODS == 5200
        assert validate_inputs("1000", "5", "100", "0", "amortized", 52) == {}

    def test_term_not_checked_against_bad_frequency(self):
        errors = validate_inputs("1000", "5", "1e30", "0", "amortized", "12.5")
        assert errors == {"frequency": ERROR_MESSAGES["frequency"]}

    def test_collects_every_error(self):
        errors = validate_inputs("0", "101", "0", "-1", "?", "3")
        assert set(errors) == {"amount", "rate", "years", "extra", "method", "frequency"}


class TestResolveMethod:
    @pytest.mark.parametrize("value", ["", "  ", None])
    def test_blank_defaults_to_amortized(self, value):
        assert resolve_method(value) is RepaymentMethod.AMORTIZED

    def test_known_values(self):
        assert resolve_method(" equal_principal ") is RepaymentMethod.EQUAL_PRINCIPAL
        assert resolve_method(RepaymentMethod.INTEREST_ONLY) is RepaymentMethod.INTEREST_ONLY

    def test_unknown(self):
        assert resolve_method("EQUAL_PRINCIPAL") is None


class TestValidateParameters:
    def test_valid(self, canonical_loan):
        validate_parameters(canonical_loan)

    def test_method_must_be_enum(self):
        params = LoanParameters(principal=1000, annual_rate=5, years=1, method="")
        with pytest.raises(InvalidLoanParameters) as excinfo:
            validate_parameters(params)
        assert excinfo.value.errors == {"method": ERROR_MESSAGES["method"]}

    def test_message_lists_fields(self):
        params = LoanParameters(principal=Decimal("-1"), annual_rate=5, years=0)
        with pytest.raises(InvalidLoanParameters, match="amount") as excinfo:
            validate_parameters(params)
        assert set(excinfo.value.errors) == {"amount", "years"}

    def test_fractional_frequency(self):
        params = LoanParameters(principal=1000, annual_rate=5, years=1, payments_per_year=Decimal("12.5"))
        with pytest.raises(InvalidLoanParameters) as excinfo:
            validate_parameters(params)
        assert excinfo.value.errors == {"frequency": ERROR_MESSAGES["frequency"]}

    def test_integral_decimal_frequency(self):
        params = LoanParameters(principal=1000, annual_rate=5, years=1, payments_per_year=Decimal("12.0"))
        validate_parameters(params)
        assert params.payments_per_year == 12
