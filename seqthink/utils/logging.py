"""Structured logging utilities for SeqThink MCP.

Provides a consistent logging interface with:
- Structured JSON logging for production
- Human-readable format for development
- Context injection for session and tool tracking
- Log level configuration from environment/config

All sinks write to stderr or a file: stdout carries the stdio transport.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from loguru import Record

# Context variables for request tracking
_session_id: ContextVar[str | None] = ContextVar("session_id", default=None)
_tool_name: ContextVar[str | None] = ContextVar("tool_name", default=None)


class LogFormat(str, Enum):
    """Supported log output formats."""

    JSON = "json"
    TEXT = "text"


class LogLevel(str, Enum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def json_serializer(record: Record) -> str:
    """Serialize log record to JSON format.

    Args:
        record: Loguru record dictionary.

    Returns:
        JSON string representation of the log entry.

    """
    log_entry: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    if session_id := _session_id.get():
        log_entry["session_id"] = session_id
    if tool_name := _tool_name.get():
        log_entry["tool"] = tool_name

    if record.get("extra"):
        log_entry["extra"] = dict(record["extra"])

    if record["exception"]:
        exc_info = record["exception"]
        log_entry["exception"] = {
            "type": exc_info.type.__name__ if exc_info.type else None,
            "value": str(exc_info.value) if exc_info.value else None,
            "traceback": exc_info.traceback is not None,
        }

    return json.dumps(log_entry, default=str, ensure_ascii=False)


def _context_prefix() -> str:
    parts = []
    if tool_name := _tool_name.get():
        parts.append(f"tool={tool_name}")
    if session_id := _session_id.get():
        parts.append(f"sess={session_id[:8]}")
    return f"[{' '.join(parts)}] " if parts else ""


def _patch_record(record: Record) -> None:
    """Attach context prefix and JSON payload to every record."""
    record["extra"]["context"] = _context_prefix()


def _json_sink(message: Any) -> None:
    sys.stderr.write(json_serializer(message.record) + "\n")


TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{extra[context]}"
    "<level>{message}</level>"
)


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_format: LogFormat | str = LogFormat.TEXT,
    log_file: str | Path | None = None,
) -> None:
    """Configure loguru sinks for the server process.

    Args:
        level: Minimum log level.
        log_format: Output format (json or text).
        log_file: Optional file path for log output (JSON, rotated).

    """
    level = LogLevel(level.upper()) if isinstance(level, str) else level
    log_format = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format

    logger.remove()
    logger.configure(patcher=_patch_record)

    if log_format == LogFormat.JSON:
        logger.add(_json_sink, format="{message}", level=level.value)
    else:
        logger.add(sys.stderr, format=TEXT_FORMAT, level=level.value, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format="{message}",
            level=level.value,
            serialize=True,
            rotation="100 MB",
            retention="7 days",
            compression="gz",
        )


@contextmanager
def log_context(
    tool_name: str | None = None,
    session_id: str | None = None,
) -> Generator[None, None, None]:
    """Scope tool and session identifiers onto every log record.

    Example:
        with log_context(tool_name="submit_thought", session_id="abc123"):
            logger.info("Processing")  # Includes tool and session

    """
    tokens = []
    if tool_name:
        tokens.append(_tool_name.set(tool_name))
    if session_id:
        tokens.append(_session_id.set(session_id))
    try:
        yield
    finally:
        for token in reversed(tokens):
            token.var.reset(token)


def get_session_id() -> str | None:
    """Get the current session ID from context."""
    return _session_id.get()


def get_tool_name() -> str | None:
    """Get the current tool name from context."""
    return _tool_name.get()
