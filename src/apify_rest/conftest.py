"""
Root pytest configuration for apify_rest.

Provides an HTTPClient whose underlying httpx client is a MagicMock, so
tests script responses with real ``httpx.Response`` objects and never touch
the network.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from apify_rest.config import ClientConfig
from apify_rest.http import HTTPClient
from apify_rest.retry import RetryConfig


@pytest.fixture(autouse=True)
def _no_env_token(monkeypatch: pytest.MonkeyPatch):
    """Keep a developer's APIFY_TOKEN out of the tests."""
    monkeypatch.delenv("APIFY_TOKEN", raising=False)


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(token="test-token", base_url="https://api.example.com")


@pytest.fixture
def mock_httpx() -> MagicMock:
    """Stand-in for httpx.Client; set ``request.return_value`` per test."""
    return MagicMock()


@pytest.fixture
def http(config: ClientConfig, mock_httpx: MagicMock) -> HTTPClient:
    client = HTTPClient(config)
    client._client = mock_httpx
    return client


@pytest.fixture
def no_retry() -> RetryConfig:
    return RetryConfig(max_retries=0)


@pytest.fixture
def fast_retry() -> RetryConfig:
    """Retries without sleeping."""
    return RetryConfig(max_retries=2, backoff_ms=0)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner for testing."""
    return CliRunner()
