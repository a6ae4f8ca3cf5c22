"""Configuration management for the loan schedule calculator."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Settings shared by the CLI and the web app."""

    log_level: str = "INFO"
    log_format: str = "standard"
    secret_key: str = "dev-secret-key"
    asset_version: str = "1"
    host: str = "0.0.0.0"
    port: int = 8710
    preview_rows: int = 120

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create config from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
            secret_key=os.getenv("FLASK_SECRET_KEY", "dev-secret-key"),
            asset_version=os.getenv("ASSET_VERSION", "1"),
            host=os.getenv("LOAN_SCHEDULE_HOST", "0.0.0.0"),
            port=int(os.getenv("LOAN_SCHEDULE_PORT", "8710")),
            preview_rows=int(os.getenv("SCHEDULE_PREVIEW_ROWS", "120")),
        )
