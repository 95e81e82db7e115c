"""GitHub client: creates installation access tokens over the REST API."""

import logging

import httpx
from pydantic import ValidationError

from .consts import (
    DEFAULT_BASE_URL,
    ENTERPRISE_API_PATH,
    GITHUB_MEDIA_TYPE,
    INSTALLATION_TOKEN_PATH,
)
from .exceptions import APIStatusError, DecodeError, RequestError, URLParseError
from .models import InstallationToken, InstallationTokenOptions
from .transport import clean_http_client

logger = logging.getLogger("github-app-auth.client")


def _is_api_host(host: str) -> bool:
    return host.startswith("api.") or ".api." in host


def _parse_base_url(base_url: str) -> httpx.URL:
    try:
        url = httpx.URL(base_url)
    except httpx.InvalidURL as e:
        raise URLParseError(
            f"Failed to parse base URL: {base_url!r}",
            errors=[str(e)],
            context={"base_url": base_url},
        ) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise URLParseError(
            f"Failed to parse base URL: {base_url!r}",
            errors=["Base URL must be an absolute http(s) URL"],
            suggestions=["Use a URL such as https://github.example.com"],
            context={"base_url": base_url},
        )

    host = url.raw_host.decode("ascii", errors="replace")
    if "%" in host or any(char.isspace() for char in host):
        raise URLParseError(
            f"Failed to parse base URL: {base_url!r}",
            errors=[f"Invalid host: {host!r}"],
            context={"base_url": base_url},
        )
    return url


class GitHubClient:
    """Minimal GitHub REST client for the installation token endpoint.

    Responsibilities:
    - Own the API base URL, including GitHub Enterprise Server hosts
    - Issue the create-installation-token request
    - Map HTTP failures and response parsing errors to package exceptions

    The bearer credential is supplied by ``auth`` at the transport layer;
    the client itself never mints JWTs.
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        *,
        auth: httpx.Auth | None = None,
        base_url: str = DEFAULT_BASE_URL,
    ):
        """Initialize GitHubClient.

        Args:
            http_client: HTTP client. If None, creates a new one.
            auth: Authentication applied to every request.
            base_url: API base URL, used as given.
        """
        self._owns_http_client = http_client is None
        self.http_client = http_client or clean_http_client()
        self.auth = auth
        self._base_url = _parse_base_url(base_url)
        if not self._base_url.path.endswith("/"):
            self._base_url = self._base_url.copy_with(path=self._base_url.path + "/")

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def with_enterprise_url(self, base_url: str) -> "GitHubClient":
        """Point the client at a GitHub Enterprise Server instance.

        A bare host gets the conventional ``api/v3/`` prefix appended. URLs
        that already carry a path, and dedicated API hosts (``api.`` prefix
        or ``.api.`` subdomain), are kept as given.

        Args:
            base_url: Enterprise base URL, e.g. ``https://github.example.com``.

        Returns:
            This client, reconfigured.

        Raises:
            URLParseError: If the URL cannot be parsed.
        """
        url = _parse_base_url(base_url)

        path = url.path.rstrip("/") + "/"
        if path == "/" and not _is_api_host(url.host):
            path += ENTERPRISE_API_PATH

        self._base_url = url.copy_with(path=path)
        logger.debug(f"Using enterprise base URL {self._base_url}")
        return self

    def installation_token_url(self, installation_id: int) -> httpx.URL:
        """URL for creating an installation access token."""
        endpoint = INSTALLATION_TOKEN_PATH.format(installation_id=installation_id)
        try:
            return self._base_url.join(endpoint)
        except httpx.InvalidURL as e:
            raise URLParseError(
                f"Failed to parse endpoint URL: {endpoint}",
                errors=[str(e)],
                context={"base_url": str(self._base_url), "endpoint": endpoint},
            ) from e

    def create_installation_token(
        self,
        installation_id: int,
        options: InstallationTokenOptions | None = None,
        *,
        timeout: float | httpx.Timeout | None = None,
    ) -> InstallationToken:
        """Create an installation access token for a GitHub App.

        Args:
            installation_id: GitHub App installation ID.
            options: Repository and permission scoping. None requests the
                installation's full scope.
            timeout: Deadline for this call. None keeps the client default.

        Returns:
            InstallationToken parsed from the response.

        Raises:
            URLParseError: If the endpoint URL cannot be built.
            RequestError: For network errors, timeouts, DNS failures.
            APIStatusError: For any status other than 200/201.
            DecodeError: If the response body cannot be parsed.
        """
        url = self.installation_token_url(installation_id)

        kwargs = {
            "headers": {
                "Accept": GITHUB_MEDIA_TYPE,
                "Content-Type": "application/json",
            },
        }
        if options is not None:
            kwargs["json"] = options.to_request_body()
        if self.auth is not None:
            kwargs["auth"] = self.auth
        if timeout is not None:
            kwargs["timeout"] = timeout

        logger.debug(f"POST {url}")
        try:
            response = self.http_client.post(url, **kwargs)
        except httpx.RequestError as e:
            raise RequestError(
                f"Failed to execute request: {e}",
                errors=[str(e)],
                suggestions=["Check network connectivity and the GitHub base URL"],
                context={"url": str(url)},
            ) from e

        if response.status_code not in (httpx.codes.OK, httpx.codes.CREATED):
            raise APIStatusError(
                response.status_code,
                response.text,
                context={"url": str(url), "installation_id": installation_id},
            )

        try:
            token = InstallationToken.model_validate_json(response.content)
        except ValidationError as e:
            raise DecodeError(
                "Failed to decode installation token response",
                errors=[err["msg"] for err in e.errors()],
                context={"url": str(url), "status_code": response.status_code},
            ) from e

        logger.debug(f"POST {url} successful")
        return token
