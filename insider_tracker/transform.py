"""Normalize raw Finnhub payloads into records and sort them."""
from datetime import date, datetime
from typing import Any, List, Optional, Union

from .models import EarningsEvent, TransactionRecord


def _parse_date(s: Optional[str]) -> Optional[date]:
    if not s:
        return None
    try:
        return datetime.strptime(str(s)[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def _number(v: Any, default: Union[int, float] = 0) -> Union[int, float]:
    """Numeric value or `default`. Ints stay ints."""
    if v is None or isinstance(v, bool):
        return default
    if isinstance(v, (int, float)):
        return v
    try:
        return int(v)
    except (TypeError, ValueError):
        pass
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


def _is_kept(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    if not item.get("symbol"):
        return False
    if not _number(item.get("share")):
        return False
    return bool(item.get("filingDate") or item.get("transactionDate"))


def _to_record(item: dict) -> TransactionRecord:
    return TransactionRecord(
        symbol=item["symbol"],
        person_name=item.get("name") or "Unknown",
        share=abs(_number(item.get("share"))),
        change=_number(item.get("change")),
        filing_date=item.get("filingDate") or item.get("transactionDate"),
        transaction_date=item.get("transactionDate"),
        transaction_price=abs(_number(item.get("transactionPrice"))),
        transaction_code=item.get("transactionCode") or "N/A",
    )


def _filing_key(r: TransactionRecord):
    d = _parse_date(r.filing_date)
    return (d is not None, d or date.min)


def sort_by_filing_date(records: List[TransactionRecord]) -> List[TransactionRecord]:
    """Most recent filing first. Stable, so ties keep input order; unparseable dates go last."""
    return sorted(records, key=_filing_key, reverse=True)


def transform_insider_payload(raw: Any) -> List[TransactionRecord]:
    """
    Turn one symbol's raw insider-transactions response into records.
    Never raises: anything without a `data` list yields [].
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("data"), list):
        return []

    out: List[TransactionRecord] = []
    seen = set()
    for item in raw["data"]:
        if not _is_kept(item):
            continue
        r = _to_record(item)
        # First occurrence wins on (symbol, filingDate, personName, share)
        if r.dedup_key in seen:
            continue
        seen.add(r.dedup_key)
        out.append(r)
    return sort_by_filing_date(out)


def transform_earnings_payload(raw: Any) -> List[EarningsEvent]:
    """Earnings calendar entries, earliest date first."""
    items = raw.get("earningsCalendar") if isinstance(raw, dict) else None
    if not isinstance(items, list):
        return []

    events = []
    for item in items:
        if not isinstance(item, dict):
            continue
        events.append(
            EarningsEvent(
                date=item.get("date"),
                symbol=item.get("symbol"),
                name=item.get("name") or item.get("symbol"),
                eps_estimate=item.get("epsEstimate"),
                eps_actual=item.get("epsActual"),
                revenue_estimate=item.get("revenueEstimate"),
                revenue_actual=item.get("revenueActual"),
                quarter=item.get("quarter"),
                year=item.get("year"),
            )
        )
    events.sort(key=lambda e: _parse_date(e.date) or date.max)
    return events


# Dashboard column -> sort key
SORT_KEYS = {
    "date": lambda r: _parse_date(r.filing_date) or date.min,
    "ticker": lambda r: r.symbol.lower(),
    "price": lambda r: r.transaction_price or 0,
    "amount": lambda r: r.transaction_value,
    "delta": lambda r: r.change or 0,
}


def sort_trades(records: List[TransactionRecord], column: str = "date", descending: bool = True) -> List[TransactionRecord]:
    """Sort by one of the dashboard's table columns."""
    if column not in SORT_KEYS:
        raise ValueError(f"Unknown sort column: {column}")
    return sorted(records, key=SORT_KEYS[column], reverse=descending)
