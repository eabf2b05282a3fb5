"""Logging configuration."""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from integration_hub.core.config import Settings, get_settings
from integration_hub.utils.crypto import MASK, is_sensitive_key


_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", "message",
}


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def __init__(self, service: str, environment: str):
        super().__init__()
        self.service = service
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
            "environment": self.environment,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields, never credentials
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = MASK if is_sensitive_key(key) else value

        return json.dumps(log_data, default=str)


def setup_logging(settings: Optional[Settings] = None):
    """Setup logging configuration."""
    settings = settings or get_settings()

    # Clear existing handlers
    logging.root.handlers = []

    handler = logging.StreamHandler(sys.stdout)

    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter(settings.service_name, settings.environment))
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )

    logging.root.setLevel(settings.log_level)
    logging.root.addHandler(handler)

    logging.getLogger("uvicorn").setLevel(settings.log_level)
    logging.getLogger("fastapi").setLevel(settings.log_level)

    # Reduce noise from external libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
