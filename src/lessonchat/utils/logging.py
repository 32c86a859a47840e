"""Structured logging setup for lessonchat.

Every event is one JSON line. Levels are used as follows:

- DEBUG: segment extraction, classification decisions, echo skips
- INFO: edit operations, undo/redo, reconciliations
- WARNING: degraded input (undecodable canvas payloads, stale anchors)
- ERROR: configuration failures

View logs with jq for readability::

    tail -f ~/.cache/lessonchat/logs/lessonchat.log | jq .
"""

import os
from pathlib import Path
from typing import Any, Optional, TextIO

import structlog


LOG_LEVEL_ENV = "LESSONCHAT_LOG_LEVEL"
VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_log_stream: Optional[TextIO] = None


def default_log_file() -> Path:
    """Location used when no log file is given."""
    return Path.home() / ".cache" / "lessonchat" / "logs" / "lessonchat.log"


def _level_from_env() -> str:
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    return level if level in VALID_LEVELS else "INFO"


def configure_logging(log_file: Optional[Path] = None) -> None:
    """
    Send structlog output to a JSON log file.

    May be called again with another path: loggers already obtained with
    ``get_logger`` switch to the new file and the previous one is closed.
    The level comes from LESSONCHAT_LOG_LEVEL (default INFO; unknown values
    fall back to INFO).

    Args:
        log_file: Log file path (default: ~/.cache/lessonchat/logs/lessonchat.log).
            Missing parent directories are created.

    Example:
        LESSONCHAT_LOG_LEVEL=DEBUG lessonchat --log-file /tmp/lc.log check lesson.txt
    """
    global _log_stream

    path = log_file if log_file is not None else default_log_file()
    path.parent.mkdir(parents=True, exist_ok=True)

    stream = open(path, "a", encoding="utf-8")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_from_env()),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=stream),
        # Module-level loggers must follow a later reconfiguration
        cache_logger_on_first_use=False,
    )

    if _log_stream is not None and not _log_stream.closed:
        _log_stream.close()
    _log_stream = stream


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("block_deleted", block_id="3f2a9c", index=2)
    """
    return structlog.get_logger(name)
