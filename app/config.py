"""Configuration management - loads environment variables into typed settings."""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from meeting_insights.core.config import DEFAULT_API_VERSION, DEFAULT_BASE_URL, DEFAULT_MODEL, AnalyzerConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    server_host: str = Field(default="127.0.0.1", description="Host for the server to listen on")
    server_port: int = Field(default=8000, description="Port for the server to listen on")

    # Persistence
    database_url: str = Field(
        description="SQLAlchemy async database URL (e.g., sqlite+aiosqlite:///./meetings.db)",
    )
    db_echo: str = Field(
        default="0",
        description="Echo SQL statements (1 = enabled, 0 = disabled)",
    )

    # Model Provider
    anthropic_api_key: str = Field(description="API key for the model provider")
    anthropic_base_url: str = Field(default=DEFAULT_BASE_URL, description="Base URL of the Messages API")
    anthropic_model: str = Field(default=DEFAULT_MODEL, description="Model used for transcript analysis")
    anthropic_version: str = Field(default=DEFAULT_API_VERSION, description="anthropic-version header value")
    analysis_max_tokens: int = Field(default=800, description="Maximum tokens in the model reply")
    analysis_temperature: float = Field(default=0.2, description="Sampling temperature for the model call")

    # Timeout Configuration
    upstream_timeout_s: float = Field(
        default=20.0,
        description="Total timeout for model provider requests (seconds)",
    )
    upstream_connect_timeout_s: float = Field(
        default=10.0,
        description="Connection timeout for model provider requests (seconds)",
    )

    # Security Configuration
    api_key: str | None = Field(
        default=None,
        description="API key for service authentication (optional). If set, requires Authorization: Bearer <API_KEY>",
    )
    allow_origins: str = Field(
        default="",
        description="CORS allowed origins (comma-separated list, empty = no CORS)",
    )
    max_body_bytes: int = Field(
        default=65_536,
        description="Maximum Content-Length accepted on POST /api/analyze",
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    @field_validator("upstream_timeout_s", "upstream_connect_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v

    @field_validator("database_url", "anthropic_api_key")
    @classmethod
    def validate_required(cls, v: str) -> str:
        """Reject empty values for required settings."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("analysis_max_tokens", "max_body_bytes")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Validate limit is positive."""
        if v <= 0:
            raise ValueError(f"Limit must be positive, got {v}")
        return v

    @field_validator("analysis_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Validate temperature is within the provider's range."""
        if not (0.0 <= v <= 1.0):
            raise ValueError(f"analysis_temperature must be between 0 and 1, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got {v}")
        return v.upper()

    @field_validator("db_echo")
    @classmethod
    def validate_boolean_string(cls, v: str) -> str:
        """Validate boolean string format."""
        v_lower = v.lower().strip()
        if v_lower not in ("0", "1", "true", "false", "yes", "no"):
            raise ValueError(f"Boolean field must be '0', '1', 'true', 'false', 'yes', or 'no', got {v}")
        return v

    @property
    def allow_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if not self.allow_origins:
            return []
        return [origin.strip() for origin in self.allow_origins.split(",") if origin.strip()]

    @property
    def db_echo_bool(self) -> bool:
        """Convert db_echo string to boolean."""
        return self.db_echo.lower().strip() in ("1", "true", "yes")

    def get_log_level(self) -> int:
        """Convert log level string to logging constant."""
        return getattr(logging, self.log_level, logging.INFO)

    def to_analyzer_config(self) -> AnalyzerConfig:
        """Build the library configuration used for model calls."""
        return AnalyzerConfig(
            api_key=self.anthropic_api_key,
            base_url=self.anthropic_base_url,
            model=self.anthropic_model,
            api_version=self.anthropic_version,
            max_tokens=self.analysis_max_tokens,
            temperature=self.analysis_temperature,
            timeout_s=self.upstream_timeout_s,
            connect_timeout_s=self.upstream_connect_timeout_s,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Settings are loaded from environment variables and .env file on first call.
    Subsequent calls return the cached instance.

    Raises:
        ValueError: If required settings are missing or invalid.

    Returns:
        Settings: The validated settings instance.
    """
    try:
        return Settings()
    except Exception as e:
        raise ValueError(
            f"Failed to load configuration: {e}\n"
            "Please check your .env file and ensure DATABASE_URL and ANTHROPIC_API_KEY are set."
        ) from e
