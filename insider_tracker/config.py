"""Configuration and environment for the insider trading tracker."""
import os
from pathlib import Path

from dotenv import load_dotenv
_root = Path(__file__).resolve().parent.parent
load_dotenv(_root / ".env")

def _get(key: str) -> str:
    return (os.getenv(key) or "").strip()


def _flag(key: str, default: bool) -> bool:
    raw = _get(key).lower()
    if not raw:
        return default
    return raw not in ("0", "false", "no", "off")


# Finnhub token - empty string means not configured
FINNHUB_API_KEY = _get("FINNHUB_API_KEY")
FINNHUB_BASE_URL = _get("FINNHUB_BASE_URL") or "https://finnhub.io/api/v1"

# Per-request upstream timeout
REQUEST_TIMEOUT_SECONDS = 10

ENVIRONMENT = _get("ENVIRONMENT") or _get("NODE_ENV") or "development"
LOG_LEVEL = (_get("LOG_LEVEL") or ("DEBUG" if ENVIRONMENT == "development" else "INFO")).upper()

HOST = _get("HOST") or "0.0.0.0"
PORT = int(_get("PORT") or "3000")

# In-memory response cache; entries older than the TTL are refetched
ENABLE_CACHING = _flag("ENABLE_CACHING", True)
CACHE_TTL_SECONDS = int(_get("CACHE_TTL") or "300")

# Default query windows when the caller omits a bound
INSIDER_DEFAULT_DAYS = 30
EARNINGS_DEFAULT_DAYS = 7

# Major S&P 500 companies whose insider transactions are tracked
TRACKED_SYMBOLS = [
    "AAPL", "MSFT", "GOOGL", "AMZN", "NVDA", "META", "TSLA", "BRK.B", "V", "UNH",
    "XOM", "JNJ", "WMT", "JPM", "LLY", "PG", "MA", "HD", "CVX", "ABBV",
    "MRK", "AVGO", "KO", "COST", "PEP", "ADBE", "TMO", "MCD", "CSCO", "ACN",
    "NKE", "ABT", "CRM", "DHR", "NFLX", "VZ", "WFC", "TXN", "ORCL", "INTC",
    "BMY", "PM", "UPS", "NEE", "RTX", "LOW", "MS", "HON", "QCOM", "BA",
]
