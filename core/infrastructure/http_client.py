"""Shared httpx client for Pipedream, the Connect proxy and the rate service."""

import asyncio
import random
from collections.abc import Callable, Collection

import httpx
import structlog

logger = structlog.get_logger(__name__)

_client: httpx.AsyncClient | None = None

RETRYABLE_STATUS_CODES = frozenset({429, 500, 503})

# A server-sent Retry-After longer than this is clamped
MAX_RETRY_AFTER_SECONDS = 30.0


def init_http_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    global _client
    _client = httpx.AsyncClient(
        timeout=httpx.Timeout(60, connect=10),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
        transport=transport,
    )
    return _client


async def close_http_client():
    global _client
    if _client:
        await _client.aclose()
        _client = None


def get_http_client() -> httpx.AsyncClient:
    if _client is None:
        raise RuntimeError("HTTP client not initialized")
    return _client


async def http_request(
    method: str,
    url: str,
    *,
    max_attempts: int = 3,
    base_delay: float = 2.0,
    retry_on: Collection[int] = RETRYABLE_STATUS_CODES,
    error_handler: Callable[[httpx.Response], None] | None = None,
    **kwargs,
) -> httpx.Response:
    """Send a request on the shared client, retrying transient failures.

    Timeouts and statuses in ``retry_on`` are retried after the server's
    ``Retry-After`` when it sends one, otherwise with exponential backoff and
    jitter. Any other failure, and the last attempt's, goes to
    ``error_handler`` (expected to raise) and then ``raise_for_status``.
    """
    client = get_http_client()
    log = logger.bind(method=method, host=httpx.URL(url).host)

    for attempt in range(1, max_attempts + 1):
        is_last = attempt == max_attempts
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            if is_last:
                raise
            delay = backoff_delay(attempt, base_delay)
            log.warning("http_timeout_retry", attempt=attempt, retry_in=round(delay, 2))
            await asyncio.sleep(delay)
            continue

        if response.is_success:
            return response

        if response.status_code not in retry_on or is_last:
            if error_handler:
                error_handler(response)
            response.raise_for_status()

        delay = retry_after(response)
        if delay is None:
            delay = backoff_delay(attempt, base_delay)
        log.warning(
            "http_retry",
            status=response.status_code,
            attempt=attempt,
            retry_in=round(delay, 2),
        )
        await asyncio.sleep(delay)

    raise RuntimeError("Request failed after all retry attempts")


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before retry number ``attempt`` (1-based), with up to 25% jitter."""
    delay = base_delay * (2 ** (attempt - 1))
    return delay + random.uniform(0, delay * 0.25)


def retry_after(response: httpx.Response) -> float | None:
    """Seconds from a numeric ``Retry-After`` header, clamped; None if absent."""
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        seconds = float(raw)
    except ValueError:
        # HTTP-date form: fall back to backoff
        return None
    return min(max(seconds, 0.0), MAX_RETRY_AFTER_SECONDS)
