"""Fan out insider-transaction queries across tracked symbols and merge the results."""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import List, Optional, Sequence, Tuple

from .config import TRACKED_SYMBOLS
from .clients import FinnhubClient
from .errors import ConfigurationError
from .models import TransactionRecord
from .transform import sort_by_filing_date, transform_insider_payload

logger = logging.getLogger(__name__)

# requests is blocking; one worker per tracked symbol keeps every call in flight at once
_executor = ThreadPoolExecutor(max_workers=len(TRACKED_SYMBOLS), thread_name_prefix="finnhub")


async def _fetch_symbol(
    client: FinnhubClient,
    symbol: str,
    date_from: date,
    date_to: date,
) -> Tuple[List[TransactionRecord], Optional[Exception]]:
    """One symbol's records, or ([], error). Never raises."""
    try:
        loop = asyncio.get_running_loop()
        raw = await loop.run_in_executor(_executor, client.get_insider_transactions, symbol, date_from, date_to)
    except Exception as e:
        logger.warning("Failed to fetch %s: %s", symbol, e)
        return [], e
    records = transform_insider_payload(raw)
    if records:
        logger.debug("%s: %d transactions", symbol, len(records))
    return records, None


async def fetch_all(
    client: FinnhubClient,
    date_from: date,
    date_to: date,
    symbols: Sequence[str] = TRACKED_SYMBOLS,
) -> List[TransactionRecord]:
    """
    Query every symbol concurrently and wait for all of them to settle.
    A failed symbol contributes nothing; the merged list is sorted by filing date, newest first.
    """
    logger.info("Fetching transactions for %d symbols from %s to %s", len(symbols), date_from, date_to)

    outcomes = await asyncio.gather(
        *(_fetch_symbol(client, s, date_from, date_to) for s in symbols)
    )

    errors = [err for _, err in outcomes if err is not None]
    logger.info("Results: %d succeeded, %d failed", len(outcomes) - len(errors), len(errors))

    # A rejected or missing token fails every symbol the same way; report it instead of an empty list
    if outcomes and len(errors) == len(outcomes) and all(isinstance(e, ConfigurationError) for e in errors):
        raise errors[0]

    merged: List[TransactionRecord] = []
    for records, _ in outcomes:
        merged.extend(records)
    logger.info("Total transactions: %d", len(merged))
    return sort_by_filing_date(merged)


def aggregate_insider_trades(
    date_from: date,
    date_to: date,
    symbols: Sequence[str] = TRACKED_SYMBOLS,
    client: Optional[FinnhubClient] = None,
) -> List[TransactionRecord]:
    """Blocking wrapper around `fetch_all` for scripts and the CLI."""
    return asyncio.run(fetch_all(client or FinnhubClient(), date_from, date_to, symbols))
