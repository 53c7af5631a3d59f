import asyncio

import pytest
import requests
from fastapi.testclient import TestClient

from app import create_app
from movies_client import MoviesClient
from rate_limit import SlidingWindowLimiter
from retry import RetryPolicy
from settings import GatewaySettings


class FakeResponse:
    def __init__(self, status_code=200, payload=None, bad_json=False):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("not json")
        return self._payload


class FakeHttp:
    """
    Stands in for requests.Session. Each queued outcome is either a
    FakeResponse or an exception instance to raise; the last one repeats.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes) or [FakeResponse(200, {"results": []})]
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeTier:
    """Async tier with scripted answers; `gate` lets a test hold a reply back."""

    def __init__(self, name, results=None, error=None, genres=None, gate=None):
        self.name = name
        self.results = results or []
        self.error = error
        self._genres = genres or []
        self.gate = gate
        self.requests = []

    async def movies(self, request):
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.results)

    async def genres(self):
        if self.error is not None:
            raise self.error
        return list(self._genres)


@pytest.fixture
def fake_http():
    return FakeHttp


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_tier():
    return FakeTier


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_client(sleeps):
    """Build a TestClient around a gateway whose upstream is a FakeHttp."""

    def _make(http=None, api_key="test-key", environment="development", rate_limit_max=100, max_attempts=2):
        settings = GatewaySettings(api_key=api_key, environment=environment,
                                   rate_limit_max=rate_limit_max, max_attempts=max_attempts)
        movies_client = MoviesClient(
            api_key,
            timeout=settings.timeout,
            retry_policy=RetryPolicy(max_attempts=max_attempts, sleep=sleeps.append),
            http=http or FakeHttp(),
        )
        limiter = SlidingWindowLimiter(settings.rate_limit_max, settings.rate_limit_window)
        return TestClient(create_app(settings, client=movies_client, limiter=limiter))

    return _make


@pytest.fixture
def timeout_error():
    return requests.exceptions.Timeout("read timed out")


@pytest.fixture
def run():
    return asyncio.run
