"""
Pytest configuration and shared fixtures.
Provides a fake environment, a mocked Google Ads client, and a mock HTTP
transport so no test reaches Pipedream, Google Ads or the rate service.
"""

import os

# Settings are read once; give them complete credentials before any import
os.environ.setdefault("PIPEDREAM_CLIENT_ID", "test-client-id")
os.environ.setdefault("PIPEDREAM_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("PIPEDREAM_PROJECT_ID", "proj_test")

from unittest.mock import AsyncMock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # type: ignore  # noqa: E402

from adapters.google.client import AdsIdentity, GoogleAdsClient  # noqa: E402
from config.settings import Settings  # noqa: E402
from core.infrastructure.http_client import close_http_client, init_http_client  # noqa: E402


@pytest.fixture
def identity() -> AdsIdentity:
    return AdsIdentity(external_user_id="test-user-1", account_id="apn_GXhxB59")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        pipedream_client_id="test-client-id",
        pipedream_client_secret="test-client-secret",
        pipedream_project_id="proj_test",
        batch_job_poll_interval_ms=0,
        batch_job_max_poll_attempts=3,
    )


@pytest.fixture
def ads_client() -> AsyncMock:
    """GoogleAdsClient double; tests set return values per call."""
    return AsyncMock(spec=GoogleAdsClient)


@pytest.fixture
def no_sleep() -> AsyncMock:
    return AsyncMock(return_value=None)


@pytest_asyncio.fixture
async def mock_transport():
    """Install an httpx.MockTransport on the shared HTTP client.

    Usage: ``mock_transport(handler)`` where handler maps an
    ``httpx.Request`` to an ``httpx.Response``.
    """

    def install(handler):
        init_http_client(transport=httpx.MockTransport(handler))

    yield install
    await close_http_client()
