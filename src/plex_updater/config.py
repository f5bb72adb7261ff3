"""Configuration management for plex_updater."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from plex_updater.errors import ConfigurationError
from plex_updater.models import Channel

DEFAULT_RELEASE_FEED_URL = "https://plex.tv/api/downloads/1.json"


class Settings(BaseSettings):
    """Settings loaded once from environment variables and ``.env``.

    Instances are frozen; the coordinator receives one and never mutates it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Target container
    container_name: str = Field(default="plex", min_length=1, description="Docker container")
    docker_binary: str = Field(default="docker", description="Docker CLI executable")
    restart_timeout: int = Field(default=120, gt=0, description="Restart timeout (seconds)")

    # Plex server
    plex_channel: Channel = Field(default=Channel.STABLE, description="stable or beta")
    plex_token: SecretStr | None = Field(default=None, description="Plex auth token")
    plex_host: str = Field(default="localhost", description="Plex server host")
    plex_port: int = Field(default=32400, ge=1, le=65535, description="Plex server port")
    plex_platform: str = Field(default="Linux", description="Release feed platform key")
    release_feed_url: str = Field(default=DEFAULT_RELEASE_FEED_URL)
    http_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout (seconds)")

    # Drain policy
    sleep_interval: int = Field(default=300, gt=0, description="Seconds between session checks")
    max_attempts: int = Field(default=12, gt=0, description="Polls before forcing a restart")

    # Runtime
    lock_file: str = Field(default="/tmp/plex_update_check.lock")
    log_file: str | None = Field(default=None, description="Optional append-only log file")
    log_level: str = Field(default="INFO", description="Logging level")
    environment: str = Field(default="production", description="Environment name")
    fail_on_restart_error: bool = Field(
        default=True, description="Exit non-zero when the restart command fails"
    )

    @field_validator("plex_channel", mode="before")
    @classmethod
    def _parse_channel(cls, value: object) -> Channel:
        if isinstance(value, (str, Channel)):
            return Channel.parse(value)
        raise ValueError(f"Unsupported channel value: {value!r}")

    @field_validator("log_file", mode="before")
    @classmethod
    def _empty_log_file_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def token(self) -> str:
        """The Plex token as plain text, or an empty string."""
        if self.plex_token is None:
            return ""
        return self.plex_token.get_secret_value()

    @property
    def server_url(self) -> str:
        """Base URL of the local Plex server."""
        return f"http://{self.plex_host}:{self.plex_port}"

    def validate_for_run(self) -> None:
        """Check preconditions that must hold before any network call."""
        if self.plex_channel.requires_token and not self.token:
            raise ConfigurationError(
                f"PLEX_TOKEN must be set for the {self.plex_channel.value} channel"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises ConfigurationError when the environment holds invalid values.
    """
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
