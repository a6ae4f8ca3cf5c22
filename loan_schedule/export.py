"""Export helpers for loan schedules.

The CSV layout is the one spreadsheet users already import: a Chinese header
row, comma separated values with two decimals and no thousands separators,
rows joined by ``\\n`` without a trailing newline, encoded as UTF-8 with a
byte-order mark so Excel picks the right encoding.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .data_models import LevelPaymentInfo, LoanCalculation, ScheduleEntry
from .utils import round_half_up

CSV_HEADER = ["期数", "当期还款", "本金", "利息", "剩余本金"]
CSV_ENCODING = "utf-8-sig"


def format_number(value: Decimal) -> str:
    """Two decimals, halves rounded up, no grouping."""
    return f"{round_half_up(value):.2f}"


def schedule_to_rows(schedule: Iterable[ScheduleEntry]) -> List[List[str]]:
    rows = [list(CSV_HEADER)]
    for e in schedule:
        rows.append(
            [
                str(e.period),
                format_number(e.payment),
                format_number(e.principal_payment),
                format_number(e.interest_payment),
                format_number(e.ending_balance),
            ]
        )
    return rows


def schedule_to_csv(schedule: Iterable[ScheduleEntry]) -> str:
    """Return the schedule as CSV text (without the byte-order mark)."""
    return "\n".join(",".join(row) for row in schedule_to_rows(schedule))


def schedule_to_csv_bytes(schedule: Iterable[ScheduleEntry]) -> bytes:
    """Return the CSV download body, UTF-8 encoded with a byte-order mark."""
    return schedule_to_csv(schedule).encode(CSV_ENCODING)


def csv_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"loan_schedule_{today.isoformat()}.csv"


def export_to_csv(path: Path, schedule: Iterable[ScheduleEntry]) -> None:
    """Export schedule to a CSV file."""
    path.write_bytes(schedule_to_csv_bytes(schedule))


def calculation_to_dict(calculation: LoanCalculation) -> Dict[str, Any]:
    """Convert a calculation into JSON-serialisable dictionaries."""
    summary = calculation.summary
    info = summary.payment_info
    if isinstance(info, LevelPaymentInfo):
        payment_info: Dict[str, Any] = {
            "type": info.method.value,
            "payment_per_period": float(info.payment_per_period),
            "base_payment": float(info.base_payment),
            "extra_payment": float(info.extra_payment),
        }
    else:
        payment_info = {
            "type": info.method.value,
            "first_payment": float(info.first_payment),
            "last_payment": float(info.last_payment),
            "extra_payment": float(info.extra_payment),
        }
    return {
        "summary": {
            "payment_info": payment_info,
            "total_paid": float(summary.total_paid),
            "total_interest": float(summary.total_interest),
            "total_principal": float(summary.total_principal),
            "periods": summary.periods,
            "payoff_label": summary.payoff_label,
        },
        "schedule": [
            {
                "period": e.period,
                "payment": float(e.payment),
                "principal": float(e.principal_payment),
                "interest": float(e.interest_payment),
                "balance": float(e.ending_balance),
            }
            for e in calculation.schedule
        ],
    }


def export_to_json(path: Path, calculation: LoanCalculation, include_schedule: bool = True) -> None:
    """Export summary and (optionally) schedule to a JSON file."""
    data = calculation_to_dict(calculation)
    if not include_schedule:
        data.pop("schedule")
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
