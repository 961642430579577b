"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = Field("Pet Claim Helper Back Office", alias="APP_NAME")
    api_v1_prefix: str = Field("/api/v1", alias="API_V1_PREFIX")

    # Service-role connection; bypasses row-level security.
    database_url: str = Field(..., alias="DATABASE_URL")
    # Anon-role connection; subject to row-level security.
    database_anon_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_ANON_URL", "VITE_DATABASE_ANON_URL"),
    )
    # Direct (non-pooled) connection used for DDL.
    database_direct_url: str | None = Field(default=None, alias="DATABASE_DIRECT_URL")

    sms_provider: str = Field("sns", alias="SMS_PROVIDER")
    dev_sms_echo: bool = Field(default=False, alias="DEV_SMS_ECHO")

    aws_region: str = Field(
        "us-east-1",
        validation_alias=AliasChoices("AWS_REGION", "AWS_DEFAULT_REGION"),
    )
    aws_access_key_id: str | None = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str | None = Field(
        default=None, alias="AWS_SECRET_ACCESS_KEY"
    )

    twilio_account_sid: str | None = Field(default=None, alias="TWILIO_ACCOUNT_SID")
    twilio_auth_token: str | None = Field(default=None, alias="TWILIO_AUTH_TOKEN")
    twilio_phone_number: str | None = Field(default=None, alias="TWILIO_PHONE_NUMBER")

    dose_token_ttl_hours: int = Field(24, alias="DOSE_TOKEN_TTL_HOURS")
    dose_link_base_url: str = Field(
        "https://pet-claim-helper.vercel.app/dose", alias="DOSE_LINK_BASE_URL"
    )
    # Reminder times and medication dates are wall-clock values in this zone.
    reminder_timezone: str = Field("America/Los_Angeles", alias="REMINDER_TIMEZONE")

    claim_iq_hosts: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "claimiq.petclaimhelper.com",
            "www.claimiq.petclaimhelper.com",
        ],
        alias="CLAIM_IQ_HOSTS",
    )

    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "https://pet-claim-helper.vercel.app",
        ],
        alias="CORS_ALLOW_ORIGINS",
    )

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    def model_post_init(self, __context: Any) -> None:
        """Fall back to the service-role URL when no anon URL is configured."""

        if not self.database_anon_url:
            object.__setattr__(self, "database_anon_url", self.database_url)

    @field_validator("claim_iq_hosts", "cors_allow_origins", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
