"""Configuration management."""

import logging
import os
from datetime import timedelta
from functools import cache

from pydantic import ConfigDict, Field, computed_field
from pydantic_settings import BaseSettings

from .consts import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from .exceptions import ConfigError


class Config(BaseSettings):
    """Configuration for building token sources from the environment."""

    model_config = ConfigDict(
        env_prefix="GITHUB_APP_", case_sensitive=False, extra="ignore"
    )

    # GitHub App identity
    app_id: int | None = Field(default=None, description="Numeric GitHub App ID")
    client_id: str | None = Field(
        default=None, description="GitHub App Client ID (preferred over App ID)"
    )
    private_key: str | None = Field(
        default=None, description="PEM-encoded GitHub App private key"
    )
    private_key_path: str | None = Field(
        default=None, description="Path to the PEM private key file"
    )
    installation_id: int | None = Field(
        default=None, gt=0, description="GitHub App installation ID"
    )

    # Static token
    personal_access_token: str | None = Field(
        default=None, description="Personal access token, used instead of the App"
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="GitHub API base URL, or a GitHub Enterprise Server URL",
    )
    jwt_expiration_seconds: int = Field(
        default=600,
        description="Application JWT lifetime; outside (0, 600] falls back to 600",
    )
    timeout_seconds: int = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        le=300,
        description="HTTP request timeout in seconds",
    )
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
        description="Logging level",
    )

    @computed_field
    @property
    def identity(self) -> int | str | None:
        """Issuer identity: Client ID if set, otherwise App ID."""
        return self.client_id or self.app_id or None

    @computed_field
    @property
    def is_enterprise(self) -> bool:
        """True when base_url points somewhere other than api.github.com."""
        return self.base_url.rstrip("/") != DEFAULT_BASE_URL.rstrip("/")

    @property
    def jwt_expiration(self) -> timedelta:
        return timedelta(seconds=self.jwt_expiration_seconds)

    def load_private_key(self) -> bytes:
        """Return the private key from config or from private_key_path.

        Raises:
            ConfigError: If no key is configured or the key file can't be read.
        """
        if self.private_key:
            return self.private_key.encode()

        if not self.private_key_path:
            raise ConfigError(
                "No private key configured",
                suggestions=[
                    "Set GITHUB_APP_PRIVATE_KEY to the PEM key contents",
                    "Or set GITHUB_APP_PRIVATE_KEY_PATH to the key file",
                ],
            )

        key_path = os.path.expanduser(self.private_key_path)
        try:
            with open(key_path, "rb") as f:
                return f.read()
        except OSError as e:
            raise ConfigError(
                f"Private key file not readable: {self.private_key_path}",
                errors=[str(e)],
                suggestions=["Check the path and file permissions"],
                context={"private_key_path": self.private_key_path},
            ) from e

    def __repr__(self) -> str:
        return (
            f"Config(identity={self.identity!r}, "
            f"installation_id={self.installation_id!r}, "
            f"base_url='{self.base_url}', log_level='{self.log_level}')"
        )


@cache
def get_config() -> Config:
    """Get a cached Config instance."""
    return Config()


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure logging for the entire application"""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,  # Override any existing configuration
    )
    return logging.getLogger("github-app-auth")
