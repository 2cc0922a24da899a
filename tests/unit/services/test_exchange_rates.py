from __future__ import annotations

import pytest
import requests

import app.services.exchange_rates as exchange_rates
from app.services.exchange_rates import DEFAULT_RATES, convert_to_usd, get_exchange_rates, refresh_exchange_rates


class _Response:
    def __init__(self, body, status_code: int = 200) -> None:
        self._body = body
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"status {self.status_code}")

    def json(self):
        return self._body


def test_convert_to_usd():
    assert convert_to_usd(100, "AUD", DEFAULT_RATES) == pytest.approx(65.0)
    assert convert_to_usd(100, "usd", DEFAULT_RATES) == 100
    assert convert_to_usd(100, "XYZ", DEFAULT_RATES) == 100
    assert convert_to_usd(None, "EUR", DEFAULT_RATES) == 0


def test_refresh_inverts_provider_rates(monkeypatch):
    monkeypatch.setattr(
        exchange_rates.requests,
        "get",
        lambda url, timeout: _Response({"base": "USD", "rates": {"AUD": 1.6, "EUR": 0.8, "GBP": "bad"}}),
    )

    rates = refresh_exchange_rates()

    assert rates["AUD"] == pytest.approx(0.625)
    assert rates["EUR"] == pytest.approx(1.25)
    assert rates["GBP"] == DEFAULT_RATES["GBP"]
    assert rates["USD"] == 1.0


def test_failed_refresh_keeps_last_known_rates(monkeypatch):
    monkeypatch.setattr(exchange_rates.requests, "get", lambda url, timeout: _Response({"rates": {"AUD": 2.0}}))
    refresh_exchange_rates()

    def _boom(url, timeout):
        raise requests.exceptions.ConnectionError("provider down")

    monkeypatch.setattr(exchange_rates.requests, "get", _boom)
    rates = refresh_exchange_rates()

    assert rates["AUD"] == pytest.approx(0.5)


@pytest.mark.parametrize("response", [_Response({}, status_code=503), _Response(["not", "a", "dict"])])
def test_bad_provider_payload_keeps_defaults(monkeypatch, response):
    monkeypatch.setattr(exchange_rates.requests, "get", lambda url, timeout: response)
    assert refresh_exchange_rates() == DEFAULT_RATES


def test_get_exchange_rates_refreshes_only_when_stale(monkeypatch):
    calls = {"count": 0}

    def _get(url, timeout):
        calls["count"] += 1
        return _Response({"rates": {"AUD": 1.5}})

    monkeypatch.setattr(exchange_rates.requests, "get", _get)

    get_exchange_rates()
    get_exchange_rates()
    assert calls["count"] == 1
    assert get_exchange_rates(auto_refresh=False)["AUD"] == pytest.approx(1 / 1.5)
