"""Shared fixtures for the test suite."""

import threading
from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from insider_tracker.data.cache import TTLCache
from insider_tracker.errors import ConfigurationError, UpstreamError
from insider_tracker.service import TrackerService


class FakeClock:
    """Manually advanced time source for the cache."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFinnhub:
    """
    Stands in for FinnhubClient. `payloads` maps symbol -> raw payload, or an
    exception instance to raise for that symbol.
    """

    def __init__(self, payloads=None, earnings=None, configured=True):
        self.payloads = payloads or {}
        self.earnings = earnings if earnings is not None else {"earningsCalendar": []}
        self.configured = configured
        self.calls = []
        self._lock = threading.Lock()

    def get_insider_transactions(self, symbol, date_from, date_to):
        with self._lock:
            self.calls.append((symbol, date_from, date_to))
        result = self.payloads.get(symbol, {"data": [], "symbol": symbol})
        if isinstance(result, Exception):
            raise result
        return result

    def get_earnings_calendar(self, date_from, date_to):
        with self._lock:
            self.calls.append(("earnings", date_from, date_to))
        if isinstance(self.earnings, Exception):
            raise self.earnings
        return self.earnings


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def raw_txn():
    """Factory fixture — call with overrides to get a raw Finnhub transaction dict."""
    def _make(**overrides):
        txn = {
            "symbol": "AAPL",
            "name": "COOK TIMOTHY D",
            "share": 3280050,
            "change": -59751,
            "filingDate": "2025-01-02",
            "transactionDate": "2024-12-30",
            "transactionPrice": 250.42,
            "transactionCode": "S",
        }
        txn.update(overrides)
        return txn
    return _make


@pytest.fixture
def mock_response():
    """Factory for mock requests responses."""
    def _make(status_code=200, json_data=None):
        resp = MagicMock()
        resp.status_code = status_code
        resp.json.return_value = json_data if json_data is not None else {}
        if status_code >= 400:
            resp.raise_for_status.side_effect = requests.exceptions.HTTPError(
                f"{status_code} Error", response=resp
            )
        else:
            resp.raise_for_status.return_value = None
        return resp
    return _make


@pytest.fixture
def fake_finnhub():
    return FakeFinnhub


@pytest.fixture
def make_service(clock):
    """TrackerService over a FakeFinnhub with a fake-clock cache and a fixed 'today'."""
    def _make(payloads=None, earnings=None, configured=True, symbols=("AAPL", "MSFT"), enabled=True, ttl=300):
        client = FakeFinnhub(payloads, earnings, configured)
        cache = TTLCache(ttl, enabled=enabled, clock=clock)
        return TrackerService(client=client, cache=cache, symbols=symbols, today=lambda: date(2025, 1, 31))
    return _make


@pytest.fixture
def auth_error():
    return ConfigurationError("Invalid API key configuration")


@pytest.fixture
def network_error():
    return UpstreamError("Service temporarily unavailable. Please try again.", status_code=503)
