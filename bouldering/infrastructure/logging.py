"""
Bouldering Logging

Architectural Intent:
- One handler on the ``bouldering`` logger; modules log through
  ``logging.getLogger(__name__)`` and never configure handlers themselves
- Event bus, outbox, cleanup and use-case code attach correlation fields
  with ``extra=`` (event_type, handler_index, tweet_id, outbox_id, prefixes);
  the JSON formatter lifts them to top-level keys so Cloud Logging can
  filter on them
- Level and format are chosen by the CLI (--verbose, --debug, --json-logs)

Design Decisions:
- Fields that every LogRecord carries are never treated as correlation
  fields; anything else set on the record is
- Values that JSON cannot encode are rendered with str()
"""

import json
import logging
import sys
from datetime import datetime, UTC
from typing import Any

LOGGER_NAME = "bouldering"

HUMAN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_STANDARD_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord(LOGGER_NAME, logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def correlation_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra=`` fields attached to *record*."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_RECORD_FIELDS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, correlation fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(correlation_fields(record))
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(
    level: int = logging.INFO,
    json_format: bool = False,
) -> logging.Logger:
    """Install the single stderr handler on the ``bouldering`` logger.

    Calling it again replaces the previous handler, so the CLI can switch
    level or format without duplicating output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(HUMAN_FORMAT))
    logger.addHandler(handler)
    return logger
