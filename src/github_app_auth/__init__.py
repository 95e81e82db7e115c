"""GitHub App Auth Package

Token sources for GitHub App authentication: signed application JWTs,
installation access tokens, and static personal access tokens, each reused
until it is about to expire.
"""

from .auth import (
    ApplicationTokenSource,
    InstallationTokenSource,
    PersonalAccessTokenSource,
    ReuseTokenSource,
    new_application_token_source,
    new_installation_token_source,
    new_personal_access_token_source,
    reuse_token_source,
    token_source_from_config,
)
from .client import GitHubClient
from .config import Config, get_config, setup_logging
from .consts import DEFAULT_APPLICATION_TOKEN_EXPIRATION, PACKAGE_VERSION
from .exceptions import (
    APIStatusError,
    ConfigError,
    DecodeError,
    EmptyTokenError,
    GitHubAuthError,
    InvalidIdentityError,
    KeyParseError,
    ProtocolError,
    RequestError,
    SigningError,
    TransportError,
    URLParseError,
)
from .models import (
    InstallationPermissions,
    InstallationToken,
    InstallationTokenOptions,
    Repository,
    Token,
)
from .protocols import TokenSource
from .transport import TokenSourceAuth, clean_http_client

__version__ = PACKAGE_VERSION

__all__ = [
    "__version__",
    "DEFAULT_APPLICATION_TOKEN_EXPIRATION",
    "get_config",
    "setup_logging",
    "new_application_token_source",
    "new_installation_token_source",
    "new_personal_access_token_source",
    "reuse_token_source",
    "token_source_from_config",
    "clean_http_client",
    "Config",
    "TokenSource",
    "ApplicationTokenSource",
    "InstallationTokenSource",
    "PersonalAccessTokenSource",
    "ReuseTokenSource",
    "GitHubClient",
    "TokenSourceAuth",
    "Token",
    "InstallationToken",
    "InstallationTokenOptions",
    "InstallationPermissions",
    "Repository",
    "GitHubAuthError",
    "ConfigError",
    "InvalidIdentityError",
    "KeyParseError",
    "EmptyTokenError",
    "SigningError",
    "TransportError",
    "URLParseError",
    "RequestError",
    "ProtocolError",
    "APIStatusError",
    "DecodeError",
]
