"""
Structured logging for the dashboard.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional
from sentinel.config import get_config


config = get_config()


class StructuredFormatter(logging.Formatter):
    """Formats log records as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra"):
            log_obj.update(record.extra)

        return json.dumps(log_obj, default=str)


def setup_logging(name: str = __name__) -> logging.Logger:
    """Setup and return a configured logger."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, config.LOG_LEVEL))

    # Modules call this at import time; attach handlers only once
    if logger.handlers:
        return logger

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, config.LOG_LEVEL))
    console_handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
    logger.addHandler(console_handler)

    # File handler with structured JSON
    if config.LOG_FILE:
        file_handler = logging.FileHandler(config.LOG_FILE)
        file_handler.setLevel(getattr(logging, config.LOG_LEVEL))
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


def log_service_action(
    logger: logging.Logger,
    service_name: str,
    action: str,
    details: Optional[dict] = None,
) -> None:
    """Log a service action with context."""
    extra = {
        "service": service_name,
        "action": action,
    }
    if details:
        extra.update(details)

    logger.info(
        f"[{service_name}] {action}",
        extra={"extra": extra}
    )


def log_alert(
    logger: logging.Logger,
    alert_id: str,
    severity: str,
    po_number: str,
) -> None:
    """Log a newly raised alert."""
    extra = {
        "type": "alert",
        "alert_id": alert_id,
        "severity": severity,
        "po_number": po_number,
    }
    logger.warning(
        f"Alert raised: {alert_id} ({severity}) for {po_number}",
        extra={"extra": extra}
    )
