"""High-value constants for the GitHub App auth package."""

from datetime import timedelta

# Package metadata
PACKAGE_VERSION = "0.3.0"
PACKAGE_NAME = "github-app-auth"
USER_AGENT = f"{PACKAGE_NAME}/{PACKAGE_VERSION}"

# External API contract consts
DEFAULT_BASE_URL = "https://api.github.com/"
ENTERPRISE_API_PATH = "api/v3/"
INSTALLATION_TOKEN_PATH = "app/installations/{installation_id}/access_tokens"
GITHUB_MEDIA_TYPE = "application/vnd.github+json"
BEARER_TOKEN_TYPE = "Bearer"

# Business logic consts
DEFAULT_APPLICATION_TOKEN_EXPIRATION = timedelta(minutes=10)  # GitHub maximum
CLOCK_DRIFT_BUFFER = timedelta(seconds=60)  # backdate iat
TOKEN_EXPIRY_DELTA = timedelta(seconds=10)  # refresh 10s early
DEFAULT_TIMEOUT_SECONDS = 30
