# stockpanel/services/pricing.py
import logging
import math
from functools import lru_cache
from typing import Optional

import requests
from fastapi.concurrency import run_in_threadpool

from stockpanel.core.config import settings

logger = logging.getLogger(__name__)

def round_down(value: float, step: int = 100) -> float:
    """Round down to the nearest multiple of ``step`` (100 minor-currency units by default)."""
    return math.floor(value / step) * step

def cash_price(unit_cost_usd: float, exchange_rate: float, step: int = 100) -> float:
    return round_down(unit_cost_usd * exchange_rate, step)

def card_price(cash: float, surcharge: float = 1.15, step: int = 100) -> float:
    return round_down(cash * surcharge, step)


class ExchangeRateProvider:
    """
    USD -> local currency rate, fetched once and then reused.
    Any failure (network, HTTP status, unexpected JSON) falls back to a fixed rate.
    """

    def __init__(self, url: str, currency: str = "ARS", fallback: float = 350, timeout: float = 8):
        self.url = url
        self.currency = currency
        self.fallback = fallback
        self.timeout = timeout
        self._rate: Optional[float] = None

    def get_rate(self) -> float:
        if self._rate is None:
            self._rate = self._fetch()
        return self._rate

    def _fetch(self) -> float:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            rate = float(resp.json()["rates"][self.currency])
        except (requests.RequestException, ValueError, KeyError, TypeError):
            logger.exception("Error fetching exchange rate from %s, using fallback %s", self.url, self.fallback)
            return float(self.fallback)
        logger.info("Exchange rate USD->%s: %s", self.currency, rate)
        return rate


@lru_cache
def get_exchange_rate_provider() -> ExchangeRateProvider:
    return ExchangeRateProvider(
        settings.exchange_rate_url,
        currency=settings.exchange_rate_currency,
        fallback=settings.fallback_exchange_rate,
        timeout=settings.exchange_rate_timeout,
    )


async def current_rate(provider: ExchangeRateProvider) -> float:
    """The provider's rate, looked up in the threadpool since the first call goes over the network."""
    return await run_in_threadpool(provider.get_rate)
