"""Configuration management for StatusGate.

Supports layered configuration with priority: CLI args > ENV vars > .env file > defaults
"""

from __future__ import annotations

import logging
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

import platformdirs
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)

APP_NAME = "StatusGate"

MIN_PASSWORD_LENGTH = 6


def _get_default_data_dir() -> Path:
    """Get platform-appropriate default data directory using platformdirs.

    - macOS: ~/Library/Application Support/StatusGate
    - Windows: %APPDATA%/StatusGate
    - Linux: ~/.local/share/statusgate
    """
    return Path(platformdirs.user_data_dir(APP_NAME, APP_NAME))


def get_user_log_dir() -> Path:
    """Get platform-appropriate user logs directory."""
    return Path(platformdirs.user_log_dir(APP_NAME, APP_NAME))


class Settings(BaseSettings):
    """Application settings with layered configuration support.

    Configuration is loaded in the following priority (highest to lowest):
    1. CLI arguments (passed directly to Settings())
    2. Environment variables (prefixed with STATUSGATE_)
    3. .env file (if present in current directory)
    4. Default values

    Environment variables:
        STATUSGATE_PORT: Server port (default: 3000)
        STATUSGATE_MAX_FILE_MB: Largest accepted file in MiB (default: 16)
        STATUSGATE_MAX_FILES: Most files accepted per upload (default: 15)
        STATUSGATE_MANAGER_PASSWORD: Initial manager password when none is saved
        STATUSGATE_API_ID / STATUSGATE_API_HASH: Telegram API credentials
    """

    model_config = SettingsConfigDict(
        env_prefix="STATUSGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Server settings
    host: str = Field(default="127.0.0.1", description="Server host to bind to")
    port: int = Field(default=3000, ge=1, le=65535, description="Server port to bind to")
    debug: bool = Field(default=False, description="Expose error details in responses")

    # Paths
    data_dir: Path = Field(
        default_factory=_get_default_data_dir,
        description="Base directory for application data",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=True, description="Also log to a rotating file")
    log_file_max_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1024 * 1024,
        le=100 * 1024 * 1024,
        description="Maximum size of each log file before rotation",
    )
    log_file_backup_count: int = Field(default=5, ge=1, le=20)
    log_format: str = Field(
        default="text",
        description="Log format: 'text' for human-readable, 'json' for structured logging",
    )

    # Upload limits
    max_file_mb: int = Field(default=16, ge=1, le=2048, description="Largest file in MiB")
    max_files: int = Field(default=15, ge=1, le=100, description="Most files per upload")
    allowed_mime_prefixes: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["image/", "video/"],
        description="Accepted MIME type prefixes (comma-separated in env var)",
    )

    # Manager access
    manager_password: str = Field(
        default="",
        description="Initial manager password, used only when none has been saved",
    )

    # Messaging client
    api_id: int | None = Field(default=None, description="Telegram API ID")
    api_hash: str | None = Field(default=None, description="Telegram API hash")
    two_factor_password: str | None = Field(
        default=None,
        description="Cloud password used to finish pairing on 2FA-protected accounts",
    )
    broadcast_target: str = Field(
        default="me",
        description="Entity that receives status posts (username, link or 'me')",
    )
    print_qr_to_terminal: bool = Field(
        default=True,
        description="Print each pairing code to the console as a QR block",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is supported."""
        v_lower = v.lower()
        if v_lower not in {"text", "json"}:
            raise ValueError(f"Invalid log format: {v}. Must be one of: text, json")
        return v_lower

    @field_validator("allowed_mime_prefixes", mode="before")
    @classmethod
    def parse_mime_prefixes(cls, v: Any) -> list[str]:
        """Parse MIME prefixes from comma-separated string or list."""
        if isinstance(v, str):
            return [prefix.strip() for prefix in v.split(",") if prefix.strip()]
        if isinstance(v, list | tuple):
            return [str(prefix) for prefix in v]
        return []

    @property
    def max_file_bytes(self) -> int:
        return self.max_file_mb * 1024 * 1024

    @property
    def config_path(self) -> Path:
        """Path to the persisted manager config document."""
        return self.data_dir / "config.json"

    @property
    def session_path(self) -> Path:
        """Telethon session file (without the .session suffix)."""
        return self.data_dir / "session" / "statusgate"

    @property
    def log_dir(self) -> Path:
        return get_user_log_dir()

    @property
    def log_file_path(self) -> Path:
        return self.log_dir / "statusgate.log"

    def validate(self) -> list[str]:  # type: ignore[override]
        """Strict validation for startup - fails fast with all errors at once.

        Returns:
            List of error messages (empty if validation passes)
        """
        errors = []

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(dir=self.data_dir, delete=True):
                pass
        except PermissionError:
            errors.append(
                f"Cannot write to data directory: {self.data_dir}\n"
                f"  → Fix: Grant write permissions or use --data-dir"
            )
        except OSError as e:
            errors.append(f"Cannot use data directory: {self.data_dir} ({e})")

        if self.api_id is None or not self.api_hash:
            errors.append(
                "Telegram API credentials are missing\n"
                "  → Fix: Set STATUSGATE_API_ID and STATUSGATE_API_HASH "
                "(from https://my.telegram.org/apps)"
            )

        if self.manager_password and len(self.manager_password) < MIN_PASSWORD_LENGTH:
            errors.append(
                f"STATUSGATE_MANAGER_PASSWORD must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        if not self.allowed_mime_prefixes:
            errors.append("STATUSGATE_ALLOWED_MIME_PREFIXES must list at least one prefix")

        return errors

    def print_config(self) -> None:
        """Print current configuration to stdout."""
        print("StatusGate Configuration:")
        print(f"  Host: {self.host}")
        print(f"  Port: {self.port}")
        print(f"  Debug: {self.debug}")
        print(f"  Log Level: {self.log_level}")
        print(f"  Log Format: {self.log_format}")
        if self.log_to_file:
            print(f"  Log File: {self.log_file_path}")
        print(f"  Data Directory: {self.data_dir}")
        print(f"  Config File: {self.config_path}")
        print(f"  Max File Size: {self.max_file_mb} MB")
        print(f"  Max Files: {self.max_files}")
        print(f"  Allowed Types: {', '.join(self.allowed_mime_prefixes)}")
        print(f"  Broadcast Target: {self.broadcast_target}")
        print(f"  Telegram API ID: {self.api_id if self.api_id is not None else 'not set'}")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload settings,
    call reset_settings() first.
    """
    return Settings()


def reset_settings() -> None:
    """Clear settings cache to force reload on next get_settings() call."""
    get_settings.cache_clear()
