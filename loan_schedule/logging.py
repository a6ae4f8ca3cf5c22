"""Logging configuration for the loan schedule calculator.

The engine attaches loan context (``method``, ``periods``, ``balance``) to
its records through ``extra=``; the JSON format writes those fields out as
keys of their own so log pipelines can filter on them.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any, Optional

CONTEXT_FIELDS = ("method", "periods", "balance")

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure logging for the CLI and the web app.

    Parameters
    ----------
    level : str
        Log level name; unknown names fall back to INFO.
    format_type : str
        "standard" for one line per record or "json".
    stream : file-like, optional
        Where records go. Defaults to stderr so CSV or JSON written to
        stdout stays clean.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(log_level)

    for name in ("loan_schedule", "loan_schedule_web"):
        logging.getLogger(name).setLevel(log_level)

    # Flask's request log is noisy at INFO
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, loan context fields included."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = str(getattr(record, field))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)
