"""Engine configuration using pydantic-settings.

This module defines the EngineSettings class that reads configuration from
environment variables with the COPILOT_ENGINE_ prefix. Every field has a
default, so an engine can be constructed without any environment set.
"""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TIMEOUT_SECONDS = 5 * 60
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024

_VALID_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class EngineSettings(BaseSettings):
    """Copilot engine configuration from environment variables.

    All environment variables are prefixed with COPILOT_ENGINE_
    (e.g., COPILOT_ENGINE_TIMEOUT_SECONDS).
    """

    model_config = SettingsConfigDict(
        env_prefix="COPILOT_ENGINE_",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # Copilot CLI Configuration
    # -------------------------------------------------------------------------
    # Executable name or path of the Copilot CLI
    cli_command: str = "copilot"

    # Wall-clock limit for a single invocation
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    # Cap on combined stdout+stderr bytes read back from the process
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES

    # -------------------------------------------------------------------------
    # Logging Configuration
    # -------------------------------------------------------------------------
    log_level: str = "INFO"

    # Render log lines as JSON instead of the console format
    json_logs: bool = False

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("cli_command")
    @classmethod
    def validate_cli_command(cls, v: str) -> str:
        """Validate that the CLI command is not empty."""
        if not v or not v.strip():
            raise ValueError("cli_command cannot be empty")
        return v.strip()

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate that the timeout is positive."""
        if v < 1:
            raise ValueError("timeout_seconds must be at least 1")
        return v

    @field_validator("max_output_bytes")
    @classmethod
    def validate_max_output_bytes(cls, v: int) -> int:
        """Validate that the output cap is positive."""
        if v < 1:
            raise ValueError("max_output_bytes must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level and reject unknown names."""
        normalized = (v or "").strip().upper()
        if normalized not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(_VALID_LOG_LEVELS)}"
            )
        return normalized

    @property
    def log_level_number(self) -> int:
        """Numeric stdlib logging level for log_level."""
        return logging.getLevelName(self.log_level)


def get_settings() -> EngineSettings:
    """Create and return an EngineSettings instance.

    Returns:
        EngineSettings: Settings read from the current environment.

    Raises:
        pydantic.ValidationError: If a variable is set to an invalid value.
    """
    return EngineSettings()
