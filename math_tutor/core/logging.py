"""Structured logging setup."""

import json
import logging
import sys

BASE_LOGGER = "math_tutor"

# Tutor context passed through `extra=` and copied into JSON records.
CONTEXT_FIELDS = ("request_type", "grade", "topic", "stream", "event_count", "error_id")


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value
        if record.exc_info and record.exc_info[0]:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, ensure_ascii=False)


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
) -> logging.Logger:
    """
    Configure the application logger.

    Args:
        level: log level name (DEBUG, INFO, WARNING, ERROR)
        json_format: emit one JSON object per line (recommended in production)
    """
    logger = logging.getLogger(BASE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # avoid duplicate handlers on reload
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper(), logging.INFO))

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

    logger.addHandler(handler)
    return logger

