"""Finnhub API client - insider transactions and earnings calendar."""
from datetime import date
from typing import Optional, Union

import requests

from ..config import FINNHUB_API_KEY, FINNHUB_BASE_URL, REQUEST_TIMEOUT_SECONDS
from ..errors import ConfigurationError, upstream_error

# Finnhub takes the token as a query param
AUTH_PARAM = "token"

DateLike = Union[date, str]


def _iso(d: DateLike) -> str:
    return d.isoformat() if isinstance(d, date) else str(d)


class FinnhubClient:
    """Fetch insider transactions and the earnings calendar from Finnhub."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, timeout: float = REQUEST_TIMEOUT_SECONDS):
        self.api_key = FINNHUB_API_KEY if api_key is None else api_key
        self.base_url = (base_url or FINNHUB_BASE_URL).rstrip("/")
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get(self, path: str, params: Optional[dict] = None) -> dict:
        """GET a Finnhub endpoint; raises a TrackerError subclass on any failure."""
        if not self.api_key:
            raise ConfigurationError()
        url = f"{self.base_url}{path}"
        p = dict(params or {})
        p[AUTH_PARAM] = self.api_key
        try:
            r = requests.get(url, params=p, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise upstream_error(e) from e
        return data

    def get_insider_transactions(self, symbol: str, date_from: DateLike, date_to: DateLike) -> dict:
        """Raw insider-transactions payload for one symbol: {"data": [...], "symbol": ...}."""
        return self._get(
            "/stock/insider-transactions",
            {"symbol": symbol, "from": _iso(date_from), "to": _iso(date_to)},
        )

    def get_earnings_calendar(self, date_from: DateLike, date_to: DateLike) -> dict:
        """Raw earnings-calendar payload: {"earningsCalendar": [...]}."""
        return self._get("/calendar/earnings", {"from": _iso(date_from), "to": _iso(date_to)})
