"""SeqThink MCP Configuration.

Centralized configuration management with environment variable support
and Docker secrets integration.

Usage:
    from seqthink.config import get_config
    print(get_config().server.name)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

DEFAULT_SESSIONS_DIR = Path.home() / ".seqthink" / "sessions"


def _get_env(key: str, default: str = "") -> str:
    """Get environment variable, treating empty string as unset.

    Also checks Docker secrets path for sensitive values.
    """
    secrets_path = f"/run/secrets/{key.lower()}"
    if os.path.isfile(secrets_path):
        try:
            with Path(secrets_path).open() as f:
                value = f.read().strip()
                if value:
                    return value
        except OSError:  # nosec B110
            pass  # Fall through to env var

    value = os.getenv(key, default)
    return value if value else default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value:
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Invalid integer for {key}: {value}, using default {default}")
    return default


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get environment variable as boolean."""
    value = _get_env(key, "").lower()
    if not value:
        return default
    return value in ("true", "1", "yes")


@dataclass(frozen=True)
class ServerConfig:
    """Server runtime configuration."""

    name: str = field(default_factory=lambda: _get_env("SERVER_NAME", "SeqThink-MCP"))
    transport: str = field(default_factory=lambda: _get_env("SERVER_TRANSPORT", "stdio"))
    host: str = field(default_factory=lambda: _get_env("SERVER_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _get_env_int("SERVER_PORT", 8000))


@dataclass(frozen=True)
class StorageConfig:
    """Session persistence configuration."""

    sessions_dir: str = field(
        default_factory=lambda: _get_env("SESSIONS_DIR", str(DEFAULT_SESSIONS_DIR))
    )

    def get_validated_sessions_dir(self) -> Path:
        """Validate and return the sessions directory (CWE-22 mitigation)."""
        from seqthink.utils.session_store import validate_storage_path

        try:
            return validate_storage_path(self.sessions_dir)
        except ValueError as e:
            logger.error(f"Invalid SESSIONS_DIR: {e}")
            logger.warning(f"Falling back to default sessions directory {DEFAULT_SESSIONS_DIR}")
            return DEFAULT_SESSIONS_DIR


@dataclass(frozen=True)
class InputLimitsConfig:
    """Input size limits (CWE-400 mitigation)."""

    max_problem_size: int = field(default_factory=lambda: _get_env_int("MAX_PROBLEM_SIZE", 50000))
    max_thought_size: int = field(default_factory=lambda: _get_env_int("MAX_THOUGHT_SIZE", 10000))
    max_thoughts_per_session: int = field(
        default_factory=lambda: _get_env_int("MAX_THOUGHTS_PER_SESSION", 1000)
    )


@dataclass(frozen=True)
class LoggingConfig:
    """Diagnostic logging configuration."""

    level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO").upper())
    log_format: str = field(default_factory=lambda: _get_env("LOG_FORMAT", "text").lower())
    log_file: str = field(default_factory=lambda: _get_env("LOG_FILE", ""))
    # Box-drawn rendering of each submitted thought
    render_thoughts: bool = field(default_factory=lambda: _get_env_bool("LOG_THOUGHTS", True))


@dataclass(frozen=True)
class Config:
    """Root configuration object."""

    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    input_limits: InputLimitsConfig = field(default_factory=InputLimitsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (for logging/debugging)."""
        return {
            "server": {
                "name": self.server.name,
                "transport": self.server.transport,
                "host": self.server.host,
                "port": self.server.port,
            },
            "storage": {
                "sessions_dir": self.storage.sessions_dir,
            },
            "input_limits": {
                "max_problem_size": self.input_limits.max_problem_size,
                "max_thought_size": self.input_limits.max_thought_size,
                "max_thoughts_per_session": self.input_limits.max_thoughts_per_session,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.log_format,
                "file": self.logging.log_file or None,
                "render_thoughts": self.logging.render_thoughts,
            },
        }


# Global config instance (lazy-loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration (for testing)."""
    global _config
    _config = Config()
    return _config
