"""USD conversion rates with a polled provider and last-known fallback.

Rates are held per process as "USD per one unit of currency". A failed
refresh leaves the previous rates untouched.
"""

from __future__ import annotations

import logging
import threading
import time

import requests

from app.core.config import get_config
from app.core.enums import Currency

logger = logging.getLogger(__name__)

DEFAULT_RATES: dict[str, float] = {
    Currency.USD.value: 1.0,
    Currency.AUD.value: 0.65,
    Currency.EUR.value: 1.08,
    Currency.GBP.value: 1.27,
    Currency.SGD.value: 0.74,
    Currency.NZD.value: 0.61,
}

_RATES_LOCK = threading.Lock()
_RATES: dict[str, float] = dict(DEFAULT_RATES)
_LAST_ATTEMPT_TS = 0.0


def _parse_provider_rates(body) -> dict[str, float]:
    provider_rates = (body.get("rates") if isinstance(body, dict) else None) or {}
    parsed: dict[str, float] = {Currency.USD.value: 1.0}
    for currency in Currency:
        if currency is Currency.USD:
            continue
        value = provider_rates.get(currency.value)
        if isinstance(value, (int, float)) and value > 0:
            parsed[currency.value] = 1 / float(value)
    return parsed


def refresh_exchange_rates() -> dict[str, float]:
    """Poll the provider and merge any rates it returns into the cache."""
    global _LAST_ATTEMPT_TS
    config = get_config()
    with _RATES_LOCK:
        _LAST_ATTEMPT_TS = time.monotonic()
    try:
        response = requests.get(config.EXCHANGE_RATE_URL, timeout=(2, config.EXCHANGE_RATE_TIMEOUT_SECONDS))
        response.raise_for_status()
        fresh = _parse_provider_rates(response.json())
    except (requests.exceptions.RequestException, ValueError) as exc:
        logger.warning(
            "exchange_rates.refresh_failed",
            extra={"event": "exchange_rates.refresh_failed", "error": str(exc), "url": config.EXCHANGE_RATE_URL},
        )
        return get_exchange_rates(auto_refresh=False)

    with _RATES_LOCK:
        _RATES.update(fresh)
        snapshot = dict(_RATES)
    logger.info("exchange_rates.refreshed", extra={"event": "exchange_rates.refreshed", "rates": snapshot})
    return snapshot


def get_exchange_rates(auto_refresh: bool = True) -> dict[str, float]:
    """Current rates; refreshes first when the cache is older than the refresh interval."""
    if auto_refresh:
        max_age = get_config().EXCHANGE_RATE_REFRESH_SECONDS
        if _LAST_ATTEMPT_TS == 0.0 or time.monotonic() - _LAST_ATTEMPT_TS > max_age:
            return refresh_exchange_rates()
    with _RATES_LOCK:
        return dict(_RATES)


def reset_exchange_rates() -> None:
    """Restore the built-in defaults and mark the cache stale."""
    global _LAST_ATTEMPT_TS
    with _RATES_LOCK:
        _RATES.clear()
        _RATES.update(DEFAULT_RATES)
        _LAST_ATTEMPT_TS = 0.0


def convert_to_usd(amount: float | None, currency: str | None, rates: dict[str, float] | None = None) -> float:
    """Convert ``amount`` to USD; unknown currencies convert at 1:1."""
    table = rates if rates is not None else get_exchange_rates(auto_refresh=False)
    rate = table.get((currency or "").upper()) or 1.0
    return float(amount or 0) * rate
