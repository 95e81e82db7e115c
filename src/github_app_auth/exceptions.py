"""GitHub App auth custom exceptions.

Exception Design Principles:
1. Every error is raised to the caller; nothing is logged or swallowed here
2. Keep the underlying exception chained (``raise ... from e``)
3. Split on domain of actionable information:
   - Fixable only by reconfiguration, fatal at construction (ConfigError)
   - Failure to sign an assertion (SigningError)
   - Network or URL problems, caller may retry (TransportError)
   - Unexpected answer from GitHub, kept verbatim for diagnostics (ProtocolError)
"""


class GitHubAuthError(Exception):
    """Base exception for all GitHub App auth errors.

    Provides rich context and actionable suggestions beyond standard exceptions.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: list[str] | None = None,
        suggestions: list[str] | None = None,
        context: dict | None = None,
    ):
        """Initialize GitHubAuthError.

        Args:
            message: Primary error message
            errors: List of specific error details
            suggestions: List of actionable suggestions for resolution
            context: Additional context information as key-value pairs
        """
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigError(GitHubAuthError):
    """Configuration errors - recoverable only by user reconfiguration.

    Raised while constructing a token source, never retried:
    - Missing or zero application identifier
    - Unreadable or non-RSA private key
    - Missing personal access token
    """

    pass


class InvalidIdentityError(ConfigError):
    """App ID or Client ID is missing, zero, or of an unsupported type."""

    pass


class KeyParseError(ConfigError):
    """Private key is empty or cannot be parsed as a PEM RSA key."""

    pass


class EmptyTokenError(ConfigError):
    """Static personal access token is empty or unset."""

    pass


class SigningError(GitHubAuthError):
    """Application JWT could not be signed."""

    pass


class TransportError(GitHubAuthError):
    """The HTTP call could not be made.

    No internal retry is attempted; callers decide whether to ask for a
    token again.
    """

    pass


class URLParseError(TransportError):
    """Base URL or endpoint URL is malformed."""

    pass


class RequestError(TransportError):
    """Network failure, timeout, or other httpx request error."""

    pass


class ProtocolError(GitHubAuthError):
    """GitHub answered, but not with something usable."""

    pass


class APIStatusError(ProtocolError):
    """GitHub returned a status other than 200/201.

    The status code and raw response body are preserved for diagnostics.
    """

    def __init__(self, status_code: int, body: str, **kwargs):
        super().__init__(
            f"GitHub API returned status {status_code}: {body}", **kwargs
        )
        self.status_code = status_code
        self.body = body


class DecodeError(ProtocolError):
    """Successful response body is not valid JSON or lacks required fields."""

    pass
