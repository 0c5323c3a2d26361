"""
api-base: Configuration
========================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading, validated once at import time.
How:   Pydantic Settings reads ``API_BASE_*`` environment variables (or a .env
       file), validates types/ranges, and exposes a singleton ``settings``.
Who:   Imported by the controller (error policy), logging setup and middleware.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the controller layer.

    Every value has a default that matches the documented behavior, so an
    application that never sets an environment variable gets the standard
    status codes and log output.
    """

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    # Comma-separated paths the request logging middleware does not log
    log_request_skip_paths: str = Field(default="/health")

    # ── Error policy ──────────────────────────────────────────────────────
    # What: Status for exceptions that match no rule in the exception policy
    # Default 400 keeps unclassified errors client-attributable; set to 500 to
    # treat them as server faults instead.
    unclassified_error_status: int = Field(default=400, ge=400, le=599)

    model_config = SettingsConfigDict(
        env_prefix="API_BASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @property
    def log_request_skip_paths_list(self) -> List[str]:
        """Splits the comma-separated skip list; blank entries are dropped."""
        return [p.strip() for p in self.log_request_skip_paths.split(",") if p.strip()]


# Singleton instance, imported throughout the package
settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings (usable as a FastAPI dependency)."""
    return settings
