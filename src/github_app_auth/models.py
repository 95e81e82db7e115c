from datetime import UTC, datetime, timedelta
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .consts import BEARER_TOKEN_TYPE

# =============================================================================
# TOKEN
# =============================================================================
# Uniform output of every token source


class Token(BaseModel):
    """Bearer credential produced by a token source.

    Immutable once produced. ``expiry=None`` means the token never expires.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(
        ..., repr=False, description="Opaque bearer token value"
    )
    token_type: Literal["Bearer"] = Field(
        BEARER_TOKEN_TYPE, description="Token type, always Bearer"
    )
    expiry: datetime | None = Field(
        None, description="Expiry timestamp, None if the token never expires"
    )

    @field_validator("expiry")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def expired(self, leeway: timedelta = timedelta(0)) -> bool:
        """Check whether the token is expired, or will be within ``leeway``."""
        if self.expiry is None:
            return False
        return datetime.now(UTC) >= self.expiry - leeway

    def valid(self, leeway: timedelta = timedelta(0)) -> bool:
        """Check the token is non-empty and not expired."""
        return bool(self.access_token) and not self.expired(leeway)

    @property
    def authorization_header(self) -> str:
        """Value for the HTTP Authorization header."""
        return f"{self.token_type} {self.access_token}"


# =============================================================================
# INSTALLATION TOKEN REQUEST/RESPONSE
# =============================================================================
# Wire models for POST /app/installations/{id}/access_tokens


class InstallationPermissions(BaseModel):
    """Permissions granted to an installation access token.

    Values are GitHub access levels such as ``"read"`` or ``"write"``.
    Permissions GitHub adds later are accepted as extra keys.
    """

    model_config = ConfigDict(extra="allow")

    actions: str | None = None
    administration: str | None = None
    checks: str | None = None
    contents: str | None = None
    content_references: str | None = None
    deployments: str | None = None
    environments: str | None = None
    issues: str | None = None
    metadata: str | None = None
    packages: str | None = None
    pages: str | None = None
    pull_requests: str | None = None
    repository_announcement_banners: str | None = None
    repository_hooks: str | None = None
    repository_projects: str | None = None
    secret_scanning_alerts: str | None = None
    secrets: str | None = None
    security_events: str | None = None
    single_file: str | None = None
    statuses: str | None = None
    vulnerability_alerts: str | None = None
    workflows: str | None = None
    members: str | None = None
    organization_administration: str | None = None
    organization_custom_roles: str | None = None
    organization_announcement_banners: str | None = None
    organization_hooks: str | None = None
    organization_plan: str | None = None
    organization_projects: str | None = None
    organization_packages: str | None = None
    organization_secrets: str | None = None
    organization_self_hosted_runners: str | None = None
    organization_user_blocking: str | None = None
    team_discussions: str | None = None


class InstallationTokenOptions(BaseModel):
    """Scoping constraints for a new installation access token.

    Passed through unmodified to GitHub; unset fields are omitted from the
    request body.
    """

    repositories: list[str] | None = Field(
        None, description="Repository names the token can access"
    )
    repository_ids: list[int] | None = Field(
        None, description="Repository IDs the token can access"
    )
    permissions: InstallationPermissions | None = Field(
        None, description="Permissions granted to the token"
    )

    def to_request_body(self) -> dict:
        """JSON-ready request body with unset fields dropped."""
        return self.model_dump(mode="json", exclude_none=True)


class Repository(BaseModel):
    """Repository reachable with an installation token."""

    model_config = ConfigDict(extra="allow")

    id: int | None = None
    name: str | None = None


class InstallationToken(BaseModel):
    """Installation access token as returned by GitHub."""

    model_config = ConfigDict(extra="allow")

    token: str = Field(..., repr=False)
    expires_at: datetime
    permissions: InstallationPermissions | None = None
    repositories: list[Repository] | None = None

    def to_token(self) -> Token:
        """Convert to a bearer Token carrying the installation expiry."""
        return Token(access_token=self.token, expiry=self.expires_at)
