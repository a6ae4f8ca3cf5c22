import logging

from flask import Flask, Response, render_template, request

from loan_schedule.config import AppConfig
from loan_schedule.data_models import LoanParameters, PaymentFrequency, RepaymentMethod
from loan_schedule.engine import compute_schedule
from loan_schedule.exceptions import InvalidLoanParameters, NonConvergenceError
from loan_schedule.export import csv_filename, schedule_to_csv_bytes
from loan_schedule.formatter import FREQUENCY_LABELS, format_currency, format_payment_info
from loan_schedule.logging import setup_logging
from loan_schedule.utils import to_decimal
from loan_schedule.validation import resolve_method, validate_inputs

logger = logging.getLogger(__name__)

METHOD_LABELS = {
    RepaymentMethod.AMORTIZED.value: "等额本息",
    RepaymentMethod.EQUAL_PRINCIPAL.value: "等额本金",
    RepaymentMethod.INTEREST_ONLY.value: "先息后本（每年还本）",
}

DEFAULT_FORM = {
    "amount": "",
    "rate": "",
    "years": "",
    "frequency": str(int(PaymentFrequency.MONTHLY)),
    "method": RepaymentMethod.AMORTIZED.value,
    "extra": "",
}


def _form_values(form) -> dict:
    values = dict(DEFAULT_FORM)
    for key in values:
        values[key] = form.get(key, values[key]).strip()
    return values


def _form_to_parameters(values: dict) -> LoanParameters:
    """Validate the submitted form and build ``LoanParameters``.

    Raises ``InvalidLoanParameters`` carrying per-field messages.
    """
    extra = values["extra"] or "0"
    errors = validate_inputs(
        values["amount"],
        values["rate"],
        values["years"],
        extra,
        values["method"],
        values["frequency"],
    )
    if errors:
        raise InvalidLoanParameters(errors)
    return LoanParameters(
        principal=values["amount"],
        annual_rate=values["rate"],
        years=values["years"],
        payments_per_year=int(to_decimal(values["frequency"])),
        extra_payment=extra,
        method=resolve_method(values["method"]),
    )


def create_app(config: AppConfig = None) -> Flask:
    config = config or AppConfig.from_env()
    app = Flask(__name__)
    app.config["ASSET_VERSION"] = config.asset_version
    app.config["PREVIEW_ROWS"] = config.preview_rows
    app.secret_key = config.secret_key

    @app.route("/", methods=["GET", "POST"])
    def index():
        values = dict(DEFAULT_FORM)
        calculation = None
        errors = {}
        warning = None
        show_full_schedule = False

        if request.method == "POST" and request.form.get("action", "run") != "reset":
            values = _form_values(request.form)
            show_full_schedule = request.form.get("show_full_schedule") == "1"
            try:
                calculation = compute_schedule(_form_to_parameters(values))
            except InvalidLoanParameters as exc:
                errors = exc.errors
            except NonConvergenceError as exc:
                warning = str(exc)

        schedule = calculation.schedule if calculation else ()
        truncated = 0
        preview_rows = app.config["PREVIEW_ROWS"]
        if not show_full_schedule and len(schedule) > preview_rows:
            truncated = len(schedule) - preview_rows
            schedule = schedule[:preview_rows]

        status = 400 if errors else 200
        return (
            render_template(
                "index.html",
                values=values,
                errors=errors,
                warning=warning,
                calculation=calculation,
                schedule=schedule,
                truncated=truncated,
                show_full_schedule=show_full_schedule,
                method_labels=METHOD_LABELS,
                frequency_labels=FREQUENCY_LABELS,
                format_currency=format_currency,
                format_payment_info=format_payment_info,
                asset_version=app.config["ASSET_VERSION"],
            ),
            status,
        )

    @app.post("/export.csv")
    def export_csv():
        values = _form_values(request.form)
        try:
            calculation = compute_schedule(_form_to_parameters(values))
        except InvalidLoanParameters as exc:
            return {"errors": exc.errors}, 400
        except NonConvergenceError as exc:
            return {"warning": str(exc)}, 422
        filename = csv_filename()
        logger.info("CSV export of %d rows", len(calculation.schedule))
        return Response(
            schedule_to_csv_bytes(calculation.schedule),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    return app


app = create_app()


if __name__ == "__main__":
    config = AppConfig.from_env()
    setup_logging(config.log_level, config.log_format)
    logger.info("Starting loan schedule web app on port %d", config.port)
    app.run(host=config.host, port=config.port, debug=True)
