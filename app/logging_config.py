"""Logging configuration.

Provides JSON-formatted logging for the benefit form compiler, the API and
the CLI.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

EXTRA_KEYS = ("request_id", "route", "remote_addr", "benefit_id", "field_name")


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in EXTRA_KEYS:
            if hasattr(record, k):
                payload[k] = getattr(record, k)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    log_file: str = None,
    log_level: str = None,
):
    """Configure logging with JSON formatter.

    Args:
        log_file: Path to log file. Defaults to BENEFIT_FORM_LOG_FILE env var
            or 'benefit_form_debug.log'.
        log_level: Log level. Defaults to BENEFIT_FORM_LOG_LEVEL env var or 'INFO'.
    """
    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JsonFormatter())

    # File handler for debugging (always append)
    log_file = log_file or os.getenv("BENEFIT_FORM_LOG_FILE", "benefit_form_debug.log")
    file_handler = logging.FileHandler(log_file, mode='a')
    file_handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    log_level = (log_level or os.getenv("BENEFIT_FORM_LOG_LEVEL", "INFO")).upper()
    root.setLevel(getattr(logging, log_level, logging.INFO))
    root.handlers = [console_handler, file_handler]
