"""Pytest configuration and shared fixtures"""

import json
import os
from datetime import UTC, datetime, timedelta

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from github_app_auth.models import Token


@pytest.fixture(scope="session")
def rsa_key():
    """RSA key shared by the whole session (generation is slow)"""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key):
    """PEM-encoded test private key, as GitHub hands it out"""
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def public_key(rsa_key):
    """Public half of the test key, for verifying JWTs"""
    return rsa_key.public_key()


class CountingSource:
    """Token source that hands out queued tokens and counts calls"""

    def __init__(self, *tokens, error=None):
        self.tokens = list(tokens)
        self.error = error
        self.calls = 0

    def token(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if len(self.tokens) > 1:
            return self.tokens.pop(0)
        return self.tokens[0]


@pytest.fixture
def counting_source():
    """Factory for CountingSource"""
    return CountingSource


def future(**kwargs):
    return datetime.now(UTC) + timedelta(**kwargs)


@pytest.fixture
def fresh_token():
    """Token valid for an hour"""
    return Token(access_token="fresh", expiry=future(hours=1))


class MockGitHub:
    """In-memory GitHub API backed by httpx.MockTransport.

    Routes are keyed by "METHOD /path"; unknown routes return 404.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def respond(self, route, status_code=201, json_body=None, content=None):
        self.routes[route] = (status_code, json_body, content)

    def respond_with(self, route, handler):
        self.routes[route] = handler

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(f"{request.method} {request.url.path}")
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(route):
            return route(request)
        status_code, json_body, content = route
        if content is not None:
            return httpx.Response(status_code, content=content)
        return httpx.Response(status_code, json=json_body)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def request_json(self, index=-1):
        return json.loads(self.requests[index].content)


@pytest.fixture
def github():
    """Mock GitHub API"""
    return MockGitHub()


@pytest.fixture
def clean_env():
    """Fixture that temporarily clears GITHUB_APP_* environment variables.

    This ensures Config tests see the true defaults without interference
    from environment variables that might be set in the user's shell.
    """
    saved = {
        key: value for key, value in os.environ.items() if key.startswith("GITHUB_APP_")
    }

    for key in saved:
        os.environ.pop(key, None)

    try:
        yield
    finally:
        for key in [k for k in os.environ if k.startswith("GITHUB_APP_")]:
            os.environ.pop(key, None)
        for key, value in saved.items():
            os.environ[key] = value
