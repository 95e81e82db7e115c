"""GitHub App token sources with expiry-aware reuse.

Three primitive sources produce a fresh Token on every ``token()`` call:

- ApplicationTokenSource signs a GitHub App JWT
- InstallationTokenSource exchanges that JWT for an installation token
- PersonalAccessTokenSource returns a static token

ReuseTokenSource wraps any of them and hands back the cached Token until it
is about to expire.
"""

import logging
import threading
from datetime import UTC, datetime, timedelta

import httpx
import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .client import GitHubClient
from .config import Config
from .consts import (
    CLOCK_DRIFT_BUFFER,
    DEFAULT_APPLICATION_TOKEN_EXPIRATION,
    TOKEN_EXPIRY_DELTA,
)
from .exceptions import (
    ConfigError,
    EmptyTokenError,
    InvalidIdentityError,
    KeyParseError,
    SigningError,
    URLParseError,
)
from .models import InstallationTokenOptions, Token
from .protocols import TokenSource
from .transport import TokenSourceAuth

logger = logging.getLogger("github-app-auth.auth")


def resolve_issuer(app_id: int | str) -> str:
    """Canonical ``iss`` claim for an App ID (int) or Client ID (str).

    Raises:
        InvalidIdentityError: If the identifier is zero, empty, or not an
            int or str.
    """
    if isinstance(app_id, bool) or not isinstance(app_id, int | str):
        raise InvalidIdentityError(
            f"Unsupported identifier type: {type(app_id).__name__}",
            suggestions=["Pass the numeric App ID or the Client ID string"],
        )
    if not app_id:
        raise InvalidIdentityError(
            "Application identifier is required",
            suggestions=["Set the GitHub App ID or Client ID"],
        )
    return str(app_id)


def load_rsa_private_key(private_key: bytes | str) -> RSAPrivateKey:
    """Parse a PEM-encoded RSA private key.

    Raises:
        KeyParseError: If the key is empty, malformed, or not RSA.
    """
    if isinstance(private_key, str):
        private_key = private_key.encode()
    if not private_key:
        raise KeyParseError(
            "Private key is required",
            suggestions=["Download a private key from the GitHub App settings"],
        )

    try:
        key = serialization.load_pem_private_key(private_key, password=None)
    except (ValueError, TypeError) as e:
        raise KeyParseError(
            "Failed to parse private key",
            errors=[str(e)],
            suggestions=["Provide the unencrypted PEM key GitHub generated"],
        ) from e

    if not isinstance(key, RSAPrivateKey):
        raise KeyParseError(
            f"Private key must be RSA, got {type(key).__name__}",
            suggestions=["GitHub App keys are RSA; check the key file"],
        )
    return key


def clamp_expiration(expiration: timedelta | None) -> timedelta:
    """Clamp a JWT lifetime to GitHub's (0, 10 minutes] window."""
    if (
        expiration is None
        or expiration <= timedelta(0)
        or expiration > DEFAULT_APPLICATION_TOKEN_EXPIRATION
    ):
        return DEFAULT_APPLICATION_TOKEN_EXPIRATION
    return expiration


class ApplicationTokenSource:
    """Generates RS256-signed GitHub App JWTs.

    Each ``token()`` call signs a new JWT with ``iat``, ``exp`` and ``iss``
    claims. ``iat`` is backdated 60 seconds to absorb clock drift between
    this host and GitHub.

    See https://docs.github.com/en/apps/creating-github-apps/authenticating-with-a-github-app/generating-a-json-web-token-jwt-for-a-github-app
    """

    def __init__(
        self,
        app_id: int | str,
        private_key: bytes | str,
        *,
        expiration: timedelta | None = None,
    ):
        """Initialize ApplicationTokenSource.

        Args:
            app_id: Numeric App ID or alphanumeric Client ID.
            private_key: PEM-encoded RSA private key.
            expiration: JWT lifetime. Values outside (0, 10 minutes] fall
                back to 10 minutes.

        Raises:
            InvalidIdentityError: If app_id is zero or empty.
            KeyParseError: If the private key cannot be parsed.
        """
        self.issuer = resolve_issuer(app_id)
        self._private_key = load_rsa_private_key(private_key)
        self.expiration = clamp_expiration(expiration)

    def token(self) -> Token:
        issued_at = datetime.now(UTC).replace(microsecond=0) - CLOCK_DRIFT_BUFFER
        expires_at = issued_at + self.expiration

        claims = {"iat": issued_at, "exp": expires_at, "iss": self.issuer}
        try:
            assertion = jwt.encode(claims, self._private_key, algorithm="RS256")
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise SigningError(
                "Failed to sign application JWT",
                errors=[str(e)],
                context={"issuer": self.issuer},
            ) from e

        return Token(access_token=assertion, expiry=expires_at)


class InstallationTokenSource:
    """Generates installation access tokens for a GitHub App installation.

    Requests are authenticated with a JWT from the upstream application
    source, attached by the HTTP transport rather than by this class.

    See https://docs.github.com/en/rest/apps/apps#create-an-installation-access-token-for-an-app
    """

    def __init__(
        self,
        installation_id: int,
        source: TokenSource,
        *,
        options: InstallationTokenOptions | None = None,
        http_client: httpx.Client | None = None,
        enterprise_url: str | None = None,
        timeout: float | httpx.Timeout | None = None,
    ):
        """Initialize InstallationTokenSource.

        Args:
            installation_id: GitHub App installation ID.
            source: Source of application JWTs, usually an
                ApplicationTokenSource.
            options: Repository and permission scoping for new tokens.
            http_client: HTTP client to send requests with. It is not
                modified. If None, creates a new one.
            enterprise_url: GitHub Enterprise Server base URL.
            timeout: Deadline for each token request.

        Raises:
            URLParseError: If enterprise_url cannot be parsed.
        """
        self.installation_id = installation_id
        self.source = reuse_token_source(source)
        self.options = options
        self.timeout = timeout
        self.client = GitHubClient(
            http_client,
            auth=TokenSourceAuth(self.source),
        )
        if enterprise_url:
            try:
                self.client.with_enterprise_url(enterprise_url)
            except URLParseError:
                self.client.close()
                raise

    def close(self) -> None:
        """Close the HTTP client if this source created it."""
        self.client.close()

    def __enter__(self) -> "InstallationTokenSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def token(self) -> Token:
        installation_token = self.client.create_installation_token(
            self.installation_id, self.options, timeout=self.timeout
        )
        return installation_token.to_token()


class PersonalAccessTokenSource:
    """Returns a static personal access token (classic or fine-grained).

    The token never expires from this package's point of view. Only the
    empty string is rejected; a whitespace-only token is returned as is.
    """

    def __init__(self, token: str | None):
        self._token = token

    def token(self) -> Token:
        if not self._token:
            raise EmptyTokenError(
                "Token not provided",
                suggestions=["Set a personal access token"],
            )
        return Token(access_token=self._token)


class ReuseTokenSource:
    """Caches the last token from a source until it is about to expire.

    States: empty (no token cached) and valid (token cached). A cached token
    is served while ``token.valid(expiry_delta)`` holds; otherwise the
    wrapped source is asked again. A failed refresh leaves the cache empty
    and raises; stale tokens are never served.

    The check-then-refresh sequence runs under one lock, so concurrent
    callers share a single refresh.
    """

    def __init__(
        self,
        source: TokenSource,
        *,
        initial: Token | None = None,
        expiry_delta: timedelta = TOKEN_EXPIRY_DELTA,
    ):
        self.source = source
        self.expiry_delta = expiry_delta
        self._token = initial
        self._lock = threading.Lock()

    def token(self) -> Token:
        """Get a valid token, refreshing from the wrapped source if needed.

        Raises:
            GitHubAuthError: Whatever the wrapped source raises.
        """
        with self._lock:
            if self._token is not None and self._token.valid(self.expiry_delta):
                return self._token

            self._token = None
            logger.debug(f"Refreshing token from {type(self.source).__name__}")
            self._token = self.source.token()
            return self._token

    def invalidate(self) -> None:
        """Drop the cached token so the next call refreshes."""
        with self._lock:
            self._token = None

    def close(self) -> None:
        """Release resources held by the wrapped source, if it has any."""
        close = getattr(self.source, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "ReuseTokenSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def reuse_token_source(
    source: TokenSource, initial: Token | None = None
) -> ReuseTokenSource:
    """Wrap a source in ReuseTokenSource, without wrapping twice.

    An existing ReuseTokenSource is returned as is, or unwrapped and rewrapped
    when a new initial token is given.
    """
    if isinstance(source, ReuseTokenSource):
        if initial is None:
            return source
        source = source.source
    return ReuseTokenSource(source, initial=initial)


def new_application_token_source(
    app_id: int | str,
    private_key: bytes | str,
    *,
    expiration: timedelta | None = None,
) -> ReuseTokenSource:
    """Create a reusing GitHub App JWT source.

    Raises:
        InvalidIdentityError: If app_id is zero or empty.
        KeyParseError: If the private key cannot be parsed.
    """
    return reuse_token_source(
        ApplicationTokenSource(app_id, private_key, expiration=expiration)
    )


def new_installation_token_source(
    installation_id: int,
    source: TokenSource,
    **kwargs,
) -> ReuseTokenSource:
    """Create a reusing installation token source.

    Keyword arguments are passed to InstallationTokenSource.
    """
    return reuse_token_source(InstallationTokenSource(installation_id, source, **kwargs))


def new_personal_access_token_source(token: str) -> ReuseTokenSource:
    """Create a reusing personal access token source."""
    return reuse_token_source(PersonalAccessTokenSource(token))


def token_source_from_config(
    config: Config, http_client: httpx.Client | None = None
) -> ReuseTokenSource:
    """Build the token source a Config describes.

    A personal access token wins when set. Otherwise the GitHub App identity
    and key are used, for an installation token when an installation ID is
    configured and for an application JWT when not.

    Raises:
        ConfigError: If neither a token nor an App identity is configured,
            or the private key cannot be loaded.
    """
    if config.personal_access_token:
        logger.debug("Using personal access token")
        return new_personal_access_token_source(config.personal_access_token)

    if config.identity is None:
        raise ConfigError(
            "No GitHub credentials configured",
            suggestions=[
                "Set GITHUB_APP_CLIENT_ID or GITHUB_APP_APP_ID with a private key",
                "Or set GITHUB_APP_PERSONAL_ACCESS_TOKEN",
            ],
        )

    app_source = new_application_token_source(
        config.identity,
        config.load_private_key(),
        expiration=config.jwt_expiration,
    )
    if config.installation_id is None:
        logger.debug(f"Using application token source for {config.identity}")
        return app_source

    logger.debug(f"Using installation token source for {config.installation_id}")
    return new_installation_token_source(
        config.installation_id,
        app_source,
        http_client=http_client,
        timeout=config.timeout_seconds,
        enterprise_url=config.base_url if config.is_enterprise else None,
    )
