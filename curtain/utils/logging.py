"""Structured logging setup for hosts embedding the feature gate."""

import json
import logging
import sys
from typing import Optional

from curtain.core.config import get_settings


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        # Structured fields passed through ``extra=`` by the gate
        for attr in [
            "feature",
            "user",
            "operation",
            "error_code",
            "percentage",
        ]:
            if hasattr(record, attr):
                data[attr] = getattr(record, attr)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def setup_logging(level: Optional[str] = None) -> None:
    root = logging.getLogger()
    root.setLevel((level or get_settings().LOG_LEVEL).upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.handlers = [handler]
