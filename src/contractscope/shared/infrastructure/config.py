"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables and .env file.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="CONTRACTSCOPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = Field(default="development", description="Environment (development/production)")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="WARNING", description="Logging level")

    # Analysis
    root_field_marker: str = Field(
        default="$",
        description="Root segment used for mismatch field paths",
    )

    # Reports
    sarif_tool_name: str = Field(default="contractscope", description="SARIF driver name")
    sarif_tool_version: str = Field(default="0.1.0", description="SARIF driver version")

    # Logging / Privacy
    log_redaction_enabled: bool = Field(default=True, description="Enable PII redaction in logs")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env.lower() == "production"

    @model_validator(mode="after")
    def _validate_settings(self) -> "Settings":
        """Fail fast on values the analysis cannot work with."""
        if not self.root_field_marker.strip():
            raise ValueError("ROOT_FIELD_MARKER must not be empty (default: '$').")

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid LOG_LEVEL '{self.log_level}'. "
                f"Valid options: {', '.join(sorted(_LOG_LEVELS))}"
            )
        return self


# Global settings instance
settings = Settings()
