"""Insider trading tracker - upstream API clients."""
from .finnhub import FinnhubClient

__all__ = [
    "FinnhubClient",
]
