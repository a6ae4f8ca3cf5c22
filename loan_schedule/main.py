"""Command-line interface for the loan schedule calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules or only the summary
for the three repayment methods. Results can be printed to the terminal or
exported to CSV/JSON files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from .config import AppConfig
from .data_models import LoanCalculation, LoanParameters, PaymentFrequency, RepaymentMethod
from .engine import compute_schedule
from .exceptions import NonConvergenceError
from .export import export_to_csv, export_to_json
from .formatter import print_schedule, print_summary
from .logging import setup_logging
from .utils import decimal_from_str, to_decimal
from .validation import resolve_method, validate_inputs

logger = logging.getLogger(__name__)

FREQUENCIES = {
    "monthly": PaymentFrequency.MONTHLY,
    "biweekly": PaymentFrequency.BIWEEKLY,
    "weekly": PaymentFrequency.WEEKLY,
}

# Form field names reported by validation, mapped to the CLI options.
FIELD_OPTIONS = {
    "amount": "--principal",
    "rate": "--rate",
    "years": "--years",
    "extra": "--extra",
    "method": "--method",
    "frequency": "--frequency",
}


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000). Returns a float.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def build_parameters_from_options(
    principal: str,
    rate: float,
    years: float,
    frequency: str,
    method: str,
    extra: Optional[str] = None,
) -> LoanParameters:
    """Turn raw option values into validated ``LoanParameters``.

    Raises ``click.BadParameter`` naming every offending option.
    """
    principal_value = decimal_from_str(str(parse_amount(principal)))
    extra_value = decimal_from_str(str(parse_amount(extra))) if extra else to_decimal(0)
    payments_per_year = FREQUENCIES.get(frequency.lower(), frequency)

    errors = validate_inputs(principal_value, rate, years, extra_value, method, payments_per_year)
    if errors:
        hint = ", ".join(FIELD_OPTIONS[key] for key in errors)
        raise click.BadParameter(" ".join(errors.values()), param_hint=hint)

    return LoanParameters(
        principal=principal_value,
        annual_rate=to_decimal(rate),
        years=to_decimal(years),
        payments_per_year=int(payments_per_year),
        extra_payment=extra_value,
        method=resolve_method(method),
    )


def run_calculation(params: LoanParameters) -> LoanCalculation:
    try:
        return compute_schedule(params)
    except NonConvergenceError as exc:
        raise click.ClickException(f"Calculation warning: {exc}")


def loan_options(func):
    """Attach the loan parameter options shared by every command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts k/m suffixes)"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
        click.option("--years", "-y", "years", required=True, type=float, help="Loan term in years"),
        click.option(
            "--frequency",
            "-f",
            "frequency",
            type=click.Choice(list(FREQUENCIES)),
            default="monthly",
            show_default=True,
            help="Payment frequency",
        ),
        click.option(
            "--method",
            "-m",
            "method",
            type=click.Choice([m.value for m in RepaymentMethod]),
            default=RepaymentMethod.AMORTIZED.value,
            show_default=True,
            help="Repayment method",
        ),
        click.option("--extra", "-e", "extra", help="Extra principal paid every period"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--log-level", "log_level", default=None, help="Log level (defaults to $LOG_LEVEL or INFO)")
def cli(log_level: Optional[str]) -> None:
    """A command-line loan calculator for amortized, equal-principal and interest-only loans."""
    config = AppConfig.from_env()
    setup_logging(log_level or config.log_level, config.log_format)


@cli.command()
@loan_options
@click.option("--full", "full", is_flag=True, help="Print every row instead of the first 120")
@click.option("--output", "output", type=str, help="Output file path (.csv or .json)")
def schedule(
    principal: str,
    rate: float,
    years: float,
    frequency: str,
    method: str,
    extra: Optional[str],
    full: bool,
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    params = build_parameters_from_options(principal, rate, years, frequency, method, extra)
    calculation = run_calculation(params)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, calculation)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, calculation.schedule)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        logger.info("Exported %d rows to %s", len(calculation.schedule), path)
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(calculation.summary)
    rows = calculation.schedule
    max_rows = AppConfig.from_env().preview_rows
    if not full and len(rows) > max_rows:
        click.echo(f"Schedule has {len(rows)} rows; showing first {max_rows} rows.")
        rows = rows[:max_rows]
    print_schedule(rows)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: float,
    years: float,
    frequency: str,
    method: str,
    extra: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    params = build_parameters_from_options(principal, rate, years, frequency, method, extra)
    calculation = run_calculation(params)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension", param_hint="--output")
        export_to_json(path, calculation, include_schedule=False)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(calculation.summary)


if __name__ == "__main__":
    cli()
