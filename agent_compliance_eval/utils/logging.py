"""
Structured JSON logging for Agent Compliance Eval.

Provides:
- JSON formatted output to stderr (stdout is reserved for user output)
- UTC timestamps
- Structured context fields via extra={"context": {...}}
- Redaction of customer data (e-mail addresses, card and account numbers)

Agent responses and customer messages can contain personal data, so every
record passes through CustomerDataRedactingFilter before it is written.

Examples:
    >>> from agent_compliance_eval.utils.logging import setup_logging, get_logger
    >>> setup_logging(verbose=True)
    >>> logger = get_logger("evaluator.runner")
    >>> logger.info("Batch finished", extra={"context": {"cases": 12}})
"""

import json
import logging
import re
import sys
from typing import Any

from agent_compliance_eval.utils.time import utc_timestamp


class JSONFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Fields: timestamp, level, component (logger name), message, plus
    context and batch_id when supplied through ``extra`` and exception when
    the record carries exc_info.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "context") and isinstance(record.context, dict):
            log_entry["context"] = record.context

        if hasattr(record, "batch_id"):
            log_entry["batch_id"] = record.batch_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


class CustomerDataRedactingFilter(logging.Filter):
    """
    Logging filter that masks customer data in messages, args and context.

    - E-mail addresses: "jane.doe@example.com" -> "j***@example.com"
    - Digit runs of 8 or more, optionally split by spaces or dashes (card,
      account and phone numbers): "4111 1111 1111 1234" -> "***1234"
    """

    REDACTION_PATTERNS = [
        (
            re.compile(
                r"\b([A-Za-z0-9])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b"
            ),
            lambda m: f"{m.group(1)}***@{m.group(2)}",
        ),
        (
            re.compile(r"\b\d(?:[ -]?\d){7,}\b"),
            lambda m: f"***{re.sub(r'[^0-9]', '', m.group(0))[-4:]}",
        ),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact the record in place; never drops it."""
        record.msg = self._redact(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._redact(str(v)) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._redact(str(arg)) for arg in record.args)

        if hasattr(record, "context") and isinstance(record.context, dict):
            record.context = self._redact_dict(record.context)

        return True

    def _redact(self, text: str) -> str:
        for pattern, replacement in self.REDACTION_PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def _redact_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        result = {}
        for key, value in data.items():
            if isinstance(value, str):
                result[key] = self._redact(value)
            elif isinstance(value, dict):
                result[key] = self._redact_dict(value)
            elif isinstance(value, list):
                result[key] = [
                    self._redact(v) if isinstance(v, str) else v for v in value
                ]
            else:
                result[key] = value
        return result


def setup_logging(verbose: bool = False, quiet_logs: bool = False) -> None:
    """
    Configure JSON logging to stderr on the root logger.

    Args:
        verbose: DEBUG level (dispatch decisions, quality gate results)
        quiet_logs: WARNING level, for machine-readable output modes.
            Ignored when verbose is set.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet_logs:
        level = logging.WARNING
    else:
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(CustomerDataRedactingFilter())

    root_logger.addHandler(handler)


def get_logger(component: str) -> logging.Logger:
    """Logger for a component name (e.g. "storage.db")."""
    return logging.getLogger(component)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    batch_id: str | None = None,
) -> None:
    """
    Log a message with structured context and an optional batch identifier.

    Example:
        >>> log_with_context(
        ...     logger,
        ...     logging.INFO,
        ...     "Case evaluated",
        ...     context={"scenario_id": "CS-REFUND-POLICY", "overall": "PASS"},
        ...     batch_id="2026-03-14T09:26:53Z",
        ... )
    """
    extra = {}

    if context is not None:
        extra["context"] = context

    if batch_id is not None:
        extra["batch_id"] = batch_id

    logger.log(level, message, extra=extra if extra else None)
