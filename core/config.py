"""Configuration management using pydantic-settings."""
from typing import Literal
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Configuration priority (highest to lowest):
    1. Runtime environment variables
    2. .env file
    3. Defaults in this class

    Categories:
    - Secrets: Required from environment, never hardcoded
    - Chatwoot: Where the webhook comes from and where notes go
    - OneUptime: Optional static credentials (otherwise read from Chatwoot)
    - Workers: Poll and refresh intervals, HTTP timeouts
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================
    # SECRETS (Required from environment)
    # ============================================
    chatwoot_api_token: SecretStr = Field(
        ...,
        description="[REQUIRED] Chatwoot user access token (Profile Settings > Access Token)."
    )

    # ============================================
    # CHATWOOT
    # ============================================
    chatwoot_base_url: str = Field(
        ...,
        description="[REQUIRED] Chatwoot base URL (e.g., https://chat.example.com)"
    )
    chatwoot_account_id: str | None = Field(
        default=None,
        description=(
            "[OPTIONAL] Chatwoot account ID. "
            "When unset it is discovered from /api/v1/profile on first use."
        )
    )

    # ============================================
    # ONEUPTIME (Optional static override)
    # ============================================
    oneuptime_base_url: str | None = Field(
        default=None,
        description=(
            "[OPTIONAL] OneUptime base URL. When base URL, project ID and API key are all set "
            "they are used instead of the Chatwoot OneUptime integration settings."
        )
    )
    oneuptime_project_id: str | None = Field(
        default=None,
        description="[OPTIONAL] OneUptime project ID"
    )
    oneuptime_api_key: SecretStr | None = Field(
        default=None,
        description="[OPTIONAL] OneUptime project API key"
    )

    # ============================================
    # WORKERS
    # ============================================
    poll_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Interval between incident status polls (seconds)"
    )
    hook_refresh_seconds: float = Field(
        default=300.0,
        gt=0,
        description="How long OneUptime credentials read from Chatwoot are cached (seconds)"
    )
    http_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for every outbound HTTP call to Chatwoot or OneUptime (seconds)"
    )

    # Application Configuration
    app_name: str = Field(
        default="Chatwoot OneUptime Bridge",
        description="Application name"
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version"
    )
    port: int = Field(
        default=4000,
        description="HTTP port for the webhook listener"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("chatwoot_base_url", "oneuptime_base_url")
    @classmethod
    def strip_trailing_slashes(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return value.rstrip("/")

    @property
    def has_static_oneuptime_config(self) -> bool:
        """Whether OneUptime credentials are fully configured through the environment."""
        return bool(
            self.oneuptime_base_url
            and self.oneuptime_project_id
            and self.get_secret_value(self.oneuptime_api_key)
        )

    def get_secret_value(self, secret_field: SecretStr | None) -> str | None:
        """
        Safely extract a stripped string value from a SecretStr field.

        Args:
            secret_field: SecretStr field or None

        Returns:
            String value or None when unset or blank
        """
        if secret_field is None:
            return None
        value = secret_field.get_secret_value().strip()
        return value or None


# Global settings instance
settings = Settings()
