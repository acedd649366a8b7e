"""Structured audit logging."""

import logging
import os
import sys
import uuid
from contextlib import suppress
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict

SENSITIVE_KEYS = {"password", "token", "secret", "key", "salt", "nonce", "api_key"}
LOG_FILE_NAME = "lockbox.log"


def get_log_dir(base_dir: str | Path | None = None) -> Path:
    """Get normalized log directory path.

    Args:
        base_dir: Base directory for logs. If None, uses ~/.local/log

    Returns:
        Resolved Path object for log directory
    """
    if base_dir is None:
        base_dir = Path.home() / ".local" / "log"
    return Path(base_dir).resolve()


def create_secure_handler(
    log_path: Path, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    """Create a RotatingFileHandler whose file is not world readable.

    Args:
        log_path: Path to the log file
        max_bytes: Maximum size of each log file
        backup_count: Number of backup files to keep

    Returns:
        Configured RotatingFileHandler instance
    """
    os.makedirs(log_path.parent, mode=0o750, exist_ok=True)

    if not log_path.exists():
        log_path.touch(mode=0o640)
    if sys.platform != "win32":
        os.chmod(log_path, 0o640)

    return RotatingFileHandler(
        str(log_path), maxBytes=max_bytes, backupCount=backup_count
    )


def add_timestamp(
    _: structlog.BoundLogger, __: str, event_dict: EventDict
) -> EventDict:
    """Add ISO 8601 timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def sanitize_keys(
    event_dict: dict[str, Any], sensitive_keys: set[str]
) -> dict[str, Any]:
    """Redact sensitive keys, matching case-insensitively and recursing
    into nested dictionaries and lists.

    Args:
        event_dict: Dictionary to sanitize
        sensitive_keys: Set of keys to redact

    Returns:
        Sanitized copy of the dictionary
    """
    lowered = {sk.lower() for sk in sensitive_keys}

    def _sanitize_value(key: str, value: Any) -> Any:
        if key.lower() in lowered:
            return "***"
        if isinstance(value, dict):
            return sanitize_keys(value, sensitive_keys)
        if isinstance(value, list):
            return [_sanitize_value("", item) for item in value]
        return value

    return {k: _sanitize_value(k, v) for k, v in event_dict.items()}


def sanitize_event_dict(
    _: structlog.BoundLogger, __: str, event_dict: EventDict
) -> dict[str, Any]:
    """Mask sensitive values anywhere in the event."""
    return sanitize_keys(dict(event_dict), SENSITIVE_KEYS)


def setup_logging(
    *,
    log_level: str = "INFO",
    correlation_id: str | None = None,
    max_log_size: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 3,
    base_dir: str | Path | None = None,
) -> structlog.BoundLogger:
    """Configure structlog to write JSON lines to a rotating log file.

    Warnings and errors are also echoed to stderr.

    Args:
        log_level: Log level (default: INFO)
        correlation_id: Optional correlation ID tying one CLI run together
        max_log_size: Maximum size of a log file before rotation
        backup_count: Number of backup files to keep
        base_dir: Optional base directory for log files

    Returns:
        A logger; every event in this context carries the correlation ID
    """
    reset_logging()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            add_timestamp,
            sanitize_event_dict,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    log_file = get_log_dir(base_dir) / LOG_FILE_NAME
    file_handler = create_secure_handler(log_file, max_log_size, backup_count)
    file_handler.setFormatter(logging.Formatter("%(message)s"))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    structlog.contextvars.bind_contextvars(
        correlation_id=correlation_id or str(uuid.uuid4())
    )
    return structlog.get_logger()


def reset_logging() -> None:
    """Remove installed handlers and restore structlog defaults."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        with suppress(Exception):
            handler.close()
        root_logger.removeHandler(handler)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def get_logger() -> structlog.BoundLogger:
    """Get the audit logger."""
    return structlog.get_logger("lockbox.audit")


def audit_event(
    *,
    event_type: str,
    user: str,
    success: bool,
    details: dict[str, Any] | None = None,
    error: Exception | None = None,
) -> None:
    """Log an audit event.

    Args:
        event_type: Type of event (e.g., "vault.save")
        user: Actor performing the operation
        success: Whether the operation succeeded
        details: Optional event details
        error: Optional exception if operation failed
    """
    event: dict[str, Any] = {
        "event_type": str(getattr(event_type, "value", event_type)),
        "user": user,
        "success": success,
    }

    if details:
        event["details"] = sanitize_keys(details, SENSITIVE_KEYS)

    if error:
        event["error"] = {
            "type": type(error).__name__,
            "message": str(error),
        }
        kind = getattr(error, "kind", None)
        if kind is not None:
            event["error"]["kind"] = str(getattr(kind, "value", kind))

    logger = get_logger().bind(**event)
    if success:
        logger.info("audit_event")
    else:
        logger.error("audit_event")
