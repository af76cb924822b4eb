"""Custom exceptions for SeqThink MCP."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydantic import ValidationError as PydanticValidationError


class SeqThinkException(Exception):
    """Base exception for SeqThink MCP."""

    pass


class ValidationError(SeqThinkException):
    """Raised when a tool input field is missing, mistyped or out of range.

    Carries the name of the first offending field so callers can point
    at it directly.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"Invalid {field}: {message}")

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError, prefix: str = "") -> ValidationError:
        """Build from the first error pydantic reports (fields validate in order)."""
        first = exc.errors()[0]
        path = prefix
        for part in first["loc"]:
            if isinstance(part, int):
                path += f"[{part}]"
            else:
                path = f"{path}.{part}" if path else str(part)
        return cls(path or "input", first["msg"])


class SessionNotFoundError(SeqThinkException):
    """Raised when a session ID is not found."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class PersistenceError(SeqThinkException):
    """Raised when a session record cannot be read from or written to disk."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Persistence failure for {path}: {message}")


class ToolExecutionError(Exception):
    """Raised when tool execution fails in MCP context.

    Provides structured error information that can be returned
    to the LLM client in a parseable format.
    """

    def __init__(
        self,
        tool_name: str,
        error_message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize tool execution error.

        Args:
            tool_name: Name of the tool that failed.
            error_message: Human-readable error message.
            details: Optional dictionary with additional error details.

        """
        self.tool_name = tool_name
        self.error_message = error_message
        self.details = details or {}
        super().__init__(f"Tool {tool_name} failed: {error_message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Failure envelope with the tool name and details.

        """
        return {
            "error": self.error_message,
            "status": "failed",
            "tool": self.tool_name,
            "details": self.details,
        }
