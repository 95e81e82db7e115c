"""HTTP transport construction and bearer injection."""

from collections.abc import Generator

import httpx

from .consts import DEFAULT_TIMEOUT_SECONDS, USER_AGENT
from .protocols import TokenSource


class TokenSourceAuth(httpx.Auth):
    """httpx auth that attaches a bearer token from a TokenSource.

    The source is asked for a token on every request, so wrap it in a
    ReuseTokenSource to avoid minting a new one each time.
    """

    def __init__(self, source: TokenSource):
        self.source = source

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        token = self.source.token()
        request.headers["Authorization"] = token.authorization_header
        yield request


def clean_http_client(timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> httpx.Client:
    """Create a new HTTP client with explicit pooling and timeout defaults.

    A fresh client is returned on every call; nothing is shared process-wide.
    """
    return httpx.Client(
        headers={"User-Agent": USER_AGENT},
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(
            max_connections=100,
            max_keepalive_connections=100,
            keepalive_expiry=90.0,
        ),
        trust_env=True,
    )
