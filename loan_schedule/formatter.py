"""Output helpers for the loan schedule calculator.

This module turns engine results into text: the payoff duration label, the
currency and payment descriptions used by the summary, and simple tabular
renderings of the summary and schedule for the terminal.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

import click

from .data_models import LevelPaymentInfo, LoanSummary, PaymentInfo, ScheduleEntry
from .utils import round_half_up

FREQUENCY_LABELS = {
    12: "月",
    26: "两周",
    52: "周",
}

LESS_THAN_ONE_PERIOD = "不足一个周期"

# Differences below this are not worth showing to the user.
DISPLAY_EPSILON = Decimal("0.01")


def format_payoff_time(periods: int, payments_per_year: int) -> str:
    """Describe how long ``periods`` payments take.

    Whole years come first (``"2年"``), followed by the leftover periods
    labelled by frequency: months for monthly, two-week periods for
    biweekly and weeks for weekly schedules. Anything else falls back to a
    generic ``"期"``. Zero periods yields ``"不足一个周期"``.

    >>> format_payoff_time(30, 12)
    '2年6个月'
    >>> format_payoff_time(52, 52)
    '1年'
    """
    years, remainder = divmod(periods, payments_per_year)

    if years == 0 and remainder == 0:
        return LESS_THAN_ONE_PERIOD

    parts = []
    if years > 0:
        parts.append(f"{years}年")
    if remainder > 0:
        if payments_per_year == 12:
            parts.append(f"{remainder}个月")
        elif payments_per_year == 26:
            parts.append(f"{remainder}个两周期")
        elif payments_per_year == 52:
            parts.append(f"{remainder}周")
        else:
            parts.append(f"{remainder}{FREQUENCY_LABELS.get(payments_per_year, '期')}")
    return "".join(parts)


def format_currency(value: Decimal) -> str:
    """Format ``value`` as yuan with thousands separators, e.g. ``¥1,234.50``."""
    rounded = round_half_up(Decimal(value))
    if rounded < 0:
        return f"-¥{-rounded:,.2f}"
    return f"¥{rounded:,.2f}"


def format_payment_info(info: PaymentInfo) -> str:
    """Describe the periodic payment of a calculation in one line."""
    if isinstance(info, LevelPaymentInfo):
        text = format_currency(info.payment_per_period)
        if info.extra_payment > DISPLAY_EPSILON:
            text += (
                f"（含基础 {format_currency(info.base_payment)}"
                f" + 额外 {format_currency(info.extra_payment)}）"
            )
        return text

    if abs(info.first_payment - info.last_payment) < DISPLAY_EPSILON:
        text = format_currency(info.first_payment)
    else:
        text = f"{format_currency(info.first_payment)} → {format_currency(info.last_payment)}"
    if info.extra_payment > DISPLAY_EPSILON:
        text += f"（含每期额外 {format_currency(info.extra_payment)}）"
    return text


def print_summary(summary: LoanSummary) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Payment            : {format_payment_info(summary.payment_info)}")
    click.echo(f"Total paid         : {format_currency(summary.total_paid)}")
    click.echo(f"Total interest     : {format_currency(summary.total_interest)}")
    click.echo(f"Payoff time        : {summary.payoff_label}")
    click.echo(f"Payments made      : {summary.periods}")
    click.echo("-" * 72)


def print_schedule(schedule: Iterable[ScheduleEntry]) -> None:
    """Print the amortization schedule as a tab separated table."""
    headers = ["Period", "Payment", "Principal", "Interest", "Balance"]
    click.echo("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.period),
            f"{round_half_up(entry.payment):.2f}",
            f"{round_half_up(entry.principal_payment):.2f}",
            f"{round_half_up(entry.interest_payment):.2f}",
            f"{round_half_up(entry.ending_balance):.2f}",
        ]
        click.echo("\t".join(row))
