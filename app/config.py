"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are validated at startup. Invalid values cause the
    application to fail fast with clear error messages.
    """

    # API Settings
    api_title: str = Field(default="GST Case Search", description="API title")
    api_version: str = Field(default="1.0.0", description="API version")

    # Remote search API
    search_api_base_url: str | None = Field(
        default=None,
        description="Base URL of the remote search API (demo mode when unset)",
    )
    probe_timeout: float = Field(
        default=1.5,
        gt=0.0,
        le=30.0,
        description="Timeout in seconds for each provider probe attempt",
    )
    api_timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="Timeout in seconds for remote search API calls",
    )

    # Search behaviour
    cache_ttl: int = Field(
        default=300,
        ge=0,
        description="Search response cache TTL in seconds",
    )
    default_search_limit: int = Field(default=20, ge=1, le=200)
    max_search_limit: int = Field(default=100, ge=1, le=1000)
    default_suggest_limit: int = Field(default=8, ge=1, le=50)
    max_recent_searches: int = Field(
        default=10,
        ge=1,
        description="Number of recent searches kept in local storage",
    )
    max_query_history: int = Field(
        default=10,
        ge=1,
        description="Number of executed queries kept for diagnostics",
    )

    # Demo mode latency (mimics realistic response times)
    demo_search_delay_min: float = Field(default=0.2, ge=0.0)
    demo_search_delay_max: float = Field(default=0.5, ge=0.0)
    demo_suggest_delay: float = Field(default=0.1, ge=0.0)

    # Storage Settings
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory holding record and state files",
    )
    structured_store_file: str = Field(
        default="records.json",
        description="Structured record store (relational schema export)",
    )
    flat_store_file: str = Field(
        default="records_flat.json",
        description="Flat key-value record store (legacy offline cache)",
    )
    local_state_file: str = Field(
        default="local_state.json",
        description="Local key-value persistence (recent searches)",
    )

    # Logging Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("search_api_base_url")
    @classmethod
    def validate_base_url(cls, v: str | None) -> str | None:
        """Treat a blank URL as unset and strip any trailing slash."""
        if v is None or v.strip() == "":
            return None
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"search_api_base_url must start with http:// or https://, got '{v}'"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"log_level must be one of {valid_levels}, got '{v}'"
            )
        return v_upper

    @field_validator("data_dir", mode="before")
    @classmethod
    def validate_data_dir(cls, v) -> Path:
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v)
        return v

    def model_post_init(self, __context) -> None:
        """Additional validation after model initialization."""
        if self.demo_search_delay_min > self.demo_search_delay_max:
            raise ValueError(
                f"demo_search_delay_min ({self.demo_search_delay_min}) must be <= "
                f"demo_search_delay_max ({self.demo_search_delay_max})"
            )

        if self.default_search_limit > self.max_search_limit:
            raise ValueError(
                f"default_search_limit ({self.default_search_limit}) must be <= "
                f"max_search_limit ({self.max_search_limit})"
            )

    @property
    def structured_store_path(self) -> Path:
        return self.data_dir / self.structured_store_file

    @property
    def flat_store_path(self) -> Path:
        return self.data_dir / self.flat_store_file

    @property
    def local_state_path(self) -> Path:
        return self.data_dir / self.local_state_file


# Global settings instance, created lazily on first access
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings: The application settings

    Raises:
        ValueError: If settings validation fails
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


# Convenience function to reload settings (useful for testing)
def reload_settings() -> Settings:
    """Reload settings from environment.

    Returns:
        Settings: The reloaded application settings
    """
    global _settings
    _settings = Settings()
    return _settings
