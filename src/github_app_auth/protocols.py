"""Protocol definitions for dependency injection and interface contracts."""

from typing import Protocol, runtime_checkable

from .models import Token


@runtime_checkable
class TokenSource(Protocol):
    """Protocol for anything that produces a bearer Token."""

    def token(self) -> Token:
        """Get a token.

        Returns:
            Token with the bearer value and its expiry.

        Raises:
            ConfigError: If the source is misconfigured.
            GitHubAuthError: If a token cannot be produced.
        """
        ...
