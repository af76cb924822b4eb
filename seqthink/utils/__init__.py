"""Utility modules for SeqThink MCP."""

from .errors import (
    PersistenceError,
    SeqThinkException,
    SessionNotFoundError,
    ToolExecutionError,
    ValidationError,
)
from .logging import configure_logging, log_context
from .session import SessionManager

__all__ = [
    "SeqThinkException",
    "ValidationError",
    "SessionNotFoundError",
    "PersistenceError",
    "ToolExecutionError",
    "SessionManager",
    "configure_logging",
    "log_context",
]
