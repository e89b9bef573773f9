from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Optional, Tuple

import httpx
import structlog

from adapters.google.client import AdsIdentity, GoogleAdsClient
from adapters.google.mutation.mutation_config import CONFIG
from core.infrastructure.http_client import http_request
from exceptions.custom_exceptions import CurrencyResolutionException, ExchangeRateException

logger = structlog.get_logger(__name__)

BASE_CURRENCY = "USD"

# CPC bids are rounded to the Google Ads billable unit (0.01 of the currency).
# Every code path that turns a USD ceiling into bid micros uses this unit.
CPC_MICROS_ROUNDING_UNIT = 10_000

CURRENCY_QUERY = "SELECT customer.currency_code FROM customer LIMIT 1"


def round_micros(micros: Decimal, unit: int = CPC_MICROS_ROUNDING_UNIT) -> int:
    """Round half-up to the nearest multiple of ``unit`` micros."""
    units = (micros / unit).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(units) * unit


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class CurrencyNormalizer:
    """Resolves an account's currency and converts USD bid ceilings into its micros.

    Exchange rates are fetched at most once per UTC day per normalizer.
    """

    def __init__(
        self,
        client: GoogleAdsClient,
        exchange_rate_url: str,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        self.client = client
        self.exchange_rate_url = exchange_rate_url
        self._today = today
        self._rates: Optional[Tuple[date, Dict[str, float]]] = None

    async def resolve_currency(self, customer_id: str, identity: AdsIdentity) -> str:
        rows = await self.client.search(customer_id, CURRENCY_QUERY, identity)
        currency_code = rows[0].get("customer", {}).get("currencyCode") if rows else None
        if not currency_code:
            raise CurrencyResolutionException(
                f"Could not resolve currency for customer {customer_id}",
                details={"customer_id": customer_id},
            )
        logger.debug("currency_resolved", customer_id=customer_id, currency=currency_code)
        return currency_code

    async def to_micros(self, amount_usd: float, currency_code: str) -> int:
        amount = Decimal(str(amount_usd))
        if currency_code == BASE_CURRENCY:
            return round_micros(amount * CONFIG.MICROS_PER_UNIT)

        rate = await self._rate_for(currency_code)
        micros = round_micros(amount * Decimal(str(rate)) * CONFIG.MICROS_PER_UNIT)
        logger.info(
            "cpc_converted",
            amount_usd=amount_usd,
            currency=currency_code,
            rate=rate,
            micros=micros,
        )
        return micros

    async def _rate_for(self, currency_code: str) -> float:
        rates = await self._daily_rates()
        rate = rates.get(currency_code)
        if rate is None:
            raise ExchangeRateException(
                f"No exchange rate for {currency_code}",
                details={"currency": currency_code},
            )
        return rate

    async def _daily_rates(self) -> Dict[str, float]:
        today = self._today()
        if self._rates and self._rates[0] == today:
            return self._rates[1]

        try:
            response = await http_request(
                "GET", self.exchange_rate_url, error_handler=_raise_rate_error
            )
            rates = response.json().get("rates")
        except (httpx.HTTPError, ValueError) as e:
            raise ExchangeRateException(
                f"Exchange rate lookup failed: {e}",
                details={"url": self.exchange_rate_url},
            ) from e

        if not isinstance(rates, dict):
            raise ExchangeRateException(
                "Exchange rate response has no rates",
                details={"url": self.exchange_rate_url},
            )
        self._rates = (today, rates)
        return rates


def _raise_rate_error(response: httpx.Response) -> None:
    raise ExchangeRateException(
        f"Exchange rate service returned {response.status_code}",
        details={"status": response.status_code},
    )
