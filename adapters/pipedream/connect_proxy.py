import base64
from functools import lru_cache
from typing import Any, Dict

import httpx
import structlog

from adapters.pipedream.auth import PipedreamTokenCache
from config.settings import get_settings
from core.infrastructure.http_client import http_request
from exceptions.custom_exceptions import UpstreamAuthException, UpstreamRequestException

logger = structlog.get_logger(__name__)


def encode_proxy_target(url: str) -> str:
    """Connect proxy addresses the upstream URL as unpadded base64url."""
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")


class ConnectProxy:
    """Sends requests to an upstream API on behalf of a connected account."""

    def __init__(
        self,
        api_url: str,
        project_id: str,
        environment: str,
        token_cache: PipedreamTokenCache,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.project_id = project_id
        self.environment = environment
        self.token_cache = token_cache

    def proxy_url(self, target_url: str) -> str:
        return (
            f"{self.api_url}/v1/connect/{self.project_id}"
            f"/proxy/{encode_proxy_target(target_url)}"
        )

    async def _headers(self) -> Dict[str, str]:
        token = await self.token_cache.get_token()
        return {
            "Authorization": f"Bearer {token}",
            "x-pd-environment": self.environment,
        }

    async def post(
        self,
        target_url: str,
        payload: Dict[str, Any],
        external_user_id: str,
        account_id: str,
        max_attempts: int = 1,
    ) -> Any:
        headers = await self._headers()
        headers["Content-Type"] = "application/json"
        response = await http_request(
            "POST",
            self.proxy_url(target_url),
            params={"external_user_id": external_user_id, "account_id": account_id},
            headers=headers,
            json=payload,
            max_attempts=max_attempts,
            error_handler=self._raise_upstream_error,
        )
        return _parse_body(response)

    async def get_account(self, account_id: str) -> Any:
        """Connected account record, including the Google Ads customer it belongs to."""
        response = await http_request(
            "GET",
            f"{self.api_url}/v1/connect/{self.project_id}/accounts/{account_id}",
            headers=await self._headers(),
            max_attempts=1,
            error_handler=self._raise_account_error,
        )
        return _parse_body(response)

    def _raise_upstream_error(self, response: httpx.Response) -> None:
        self._raise_for(response, "Google Ads API")

    def _raise_account_error(self, response: httpx.Response) -> None:
        self._raise_for(response, "Pipedream account lookup")

    def _raise_for(self, response: httpx.Response, upstream: str) -> None:
        body = _parse_body(response)
        message = f"{upstream} failed: {response.status_code}"
        if isinstance(body, dict):
            error_payload = body.get("error") or {}
            if isinstance(error_payload, dict) and error_payload.get("message"):
                message = error_payload["message"]
            elif isinstance(error_payload, str):
                message = error_payload

        details = {"status_code": response.status_code}
        logger.error(
            "Upstream request failed",
            component="connect-proxy",
            upstream=upstream,
            status=response.status_code,
            error=message,
        )

        if response.status_code in (401, 403):
            # Cached token may have been revoked
            self.token_cache.invalidate()
            raise UpstreamAuthException(
                message=f"{upstream} authentication failed: {message}",
                upstream_status=response.status_code,
                body=body,
                details=details,
            )
        raise UpstreamRequestException(
            message=message,
            upstream_status=response.status_code,
            body=body,
            details=details,
        )


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return response.text


@lru_cache(maxsize=1)
def get_connect_proxy() -> ConnectProxy:
    settings = get_settings()
    token_cache = PipedreamTokenCache(
        api_url=settings.pipedream_api_url,
        client_id=settings.pipedream_client_id,
        client_secret=settings.pipedream_client_secret,
    )
    return ConnectProxy(
        api_url=settings.pipedream_api_url,
        project_id=settings.pipedream_project_id,
        environment=settings.pipedream_environment,
        token_cache=token_cache,
    )
