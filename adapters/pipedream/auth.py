import asyncio
import time
from typing import Callable

import httpx
import structlog

from core.infrastructure.http_client import http_request
from exceptions.custom_exceptions import UpstreamAuthException

logger = structlog.get_logger(__name__)

# Refresh this many seconds before the token actually expires
TOKEN_EXPIRY_SKEW_SECONDS = 60
DEFAULT_EXPIRES_IN_SECONDS = 3600


class PipedreamTokenCache:
    """Client-credentials access token for the Pipedream API.

    One token is cached per instance. Refreshes are single-flight: concurrent
    callers that find the token stale wait on the same lock and reuse the
    token fetched by whoever got there first.
    """

    def __init__(
        self,
        api_url: str,
        client_id: str,
        client_secret: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.token_url = f"{api_url.rstrip('/')}/v1/oauth/token"
        self.client_id = client_id
        self.client_secret = client_secret
        self._clock = clock
        self._token: str | None = None
        self._expires_at: float = 0
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return bool(self._token) and self._clock() < self._expires_at

    async def get_token(self) -> str:
        if self._is_fresh():
            return self._token

        async with self._lock:
            if self._is_fresh():
                return self._token
            await self._refresh()
            return self._token

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0

    async def _refresh(self) -> None:
        response = await http_request(
            "POST",
            self.token_url,
            data={
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
            error_handler=_raise_token_error,
        )
        try:
            token_data = response.json()
        except ValueError:
            token_data = None
        if not isinstance(token_data, dict):
            raise UpstreamAuthException(
                message="Pipedream token response was not a JSON object",
                upstream_status=response.status_code,
                body=response.text,
            )
        access_token = token_data.get("access_token")
        if not access_token:
            raise UpstreamAuthException(
                message="Pipedream token response did not include an access token",
                upstream_status=response.status_code,
                body=token_data,
            )

        expires_in = token_data.get("expires_in") or DEFAULT_EXPIRES_IN_SECONDS
        self._token = access_token
        self._expires_at = self._clock() + expires_in - TOKEN_EXPIRY_SKEW_SECONDS
        logger.info("Pipedream access token refreshed", component="pipedream-auth", expires_in=expires_in)


def _raise_token_error(response: httpx.Response) -> None:
    logger.error(
        "Pipedream token request failed",
        component="pipedream-auth",
        status=response.status_code,
        error=response.text,
    )
    raise UpstreamAuthException(
        message=f"Failed to get Pipedream access token: {response.status_code}",
        upstream_status=response.status_code,
        body=response.text,
        details={"status": response.status_code},
    )
