"""Request handling: range resolution, cache lookup, upstream fetch, response payloads."""
import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Callable, Dict, Optional, Sequence

from .aggregator import fetch_all
from .clients import FinnhubClient
from .config import CACHE_TTL_SECONDS, ENABLE_CACHING, ENVIRONMENT, TRACKED_SYMBOLS
from .data.cache import TTLCache, range_cache_key
from .data.dashboard import build_summary
from .errors import ConfigurationError, InvalidQueryError, TrackerError
from .models import TransactionRecord
from .transform import SORT_KEYS, sort_trades, transform_earnings_payload
from .validation import resolve_earnings_range, resolve_insider_range

logger = logging.getLogger(__name__)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class TrackerService:
    """Owns the response cache and answers the dashboard's queries."""

    def __init__(
        self,
        client: Optional[FinnhubClient] = None,
        cache: Optional[TTLCache] = None,
        symbols: Sequence[str] = TRACKED_SYMBOLS,
        today: Optional[Callable[[], date]] = None,
    ):
        self.client = client or FinnhubClient()
        self.cache = TTLCache(CACHE_TTL_SECONDS, enabled=ENABLE_CACHING) if cache is None else cache
        self.symbols = list(symbols)
        self._today = today or date.today

    def _require_key(self) -> None:
        if not self.client.configured:
            raise ConfigurationError()

    def start(self) -> None:
        if self.cache.enabled:
            self.cache.start_sweeper()

    async def stop(self) -> None:
        await self.cache.stop_sweeper()

    async def insider_trades(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        sort: Optional[str] = None,
        order: str = "desc",
    ) -> Dict:
        """Merged insider transactions for the range, served from cache when fresh."""
        if sort is not None and sort not in SORT_KEYS:
            raise InvalidQueryError(f"Invalid sort column. Use one of: {', '.join(SORT_KEYS)}.")
        self._require_key()
        f, t = resolve_insider_range(date_from, date_to, today=self._today())

        key = range_cache_key("all", f, t)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            payload = dict(cached, cached=True)
        else:
            logger.debug("Cache miss: %s", key)
            records = await fetch_all(self.client, f, t, self.symbols)
            payload = {
                "success": True,
                "data": [r.to_dict() for r in records],
                "timestamp": _utcnow_iso(),
                "count": len(records),
                "symbolsQueried": len(self.symbols),
                "cached": False,
            }
            self.cache.set(key, payload)

        if sort is not None:
            records = [TransactionRecord.from_dict(d) for d in payload["data"]]
            payload = dict(payload, data=[r.to_dict() for r in sort_trades(records, sort, descending=order != "asc")])
        return payload

    async def insider_summary(self, date_from: Optional[str] = None, date_to: Optional[str] = None) -> Dict:
        """Stats bar and chart data for the same range as `insider_trades`."""
        trades = await self.insider_trades(date_from, date_to)
        records = [TransactionRecord.from_dict(d) for d in trades["data"]]
        return {
            "success": True,
            "summary": build_summary(records),
            "timestamp": trades["timestamp"],
            "cached": trades["cached"],
        }

    async def earnings(self, date_from: Optional[str] = None, date_to: Optional[str] = None) -> Dict:
        """Earnings calendar for the range, earliest first."""
        self._require_key()
        f, t = resolve_earnings_range(date_from, date_to, today=self._today())

        key = range_cache_key("earnings", f, t)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            return dict(cached, cached=True)

        logger.info("Fetching earnings calendar from %s to %s", f, t)
        raw = await asyncio.to_thread(self.client.get_earnings_calendar, f, t)
        events = transform_earnings_payload(raw)
        payload = {
            "success": True,
            "data": [e.to_dict() for e in events],
            "timestamp": _utcnow_iso(),
            "count": len(events),
            "cached": False,
        }
        self.cache.set(key, payload)
        return payload

    async def test_upstream(self) -> Dict:
        """Single AAPL request proving the token and network path work."""
        self._require_key()
        today = self._today()
        f = resolve_insider_range(None, None, today=today)[0]
        try:
            raw = await asyncio.to_thread(self.client.get_insider_transactions, "AAPL", f, today)
        except TrackerError as e:
            logger.error("Finnhub API test failed: %s", e)
            raise
        logger.info("Finnhub API test successful")
        return {
            "success": True,
            "message": "Finnhub API connection successful",
            "sampleData": raw,
            "timestamp": _utcnow_iso(),
        }

    def health(self) -> Dict:
        return {
            "success": True,
            "status": "healthy",
            "timestamp": _utcnow_iso(),
            "environment": ENVIRONMENT,
            "caching": self.cache.enabled,
            "cacheEntries": len(self.cache),
            "symbolsTracked": len(self.symbols),
            "apiKeyConfigured": self.client.configured,
        }

