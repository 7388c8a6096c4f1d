"""Query date validation and default ranges."""
import re
from datetime import date, timedelta
from typing import Optional, Tuple

from .config import EARNINGS_DEFAULT_DAYS, INSIDER_DEFAULT_DAYS
from .errors import InvalidDateError

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD query value. Empty means "not given" and returns None."""
    if not value:
        return None
    if not _DATE_RE.match(value):
        raise InvalidDateError("Invalid date format. Use YYYY-MM-DD format.")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidDateError("Invalid date.")


def validate_date_range(date_from: Optional[date], date_to: Optional[date]) -> None:
    if date_from is None or date_to is None:
        return
    if date_to <= date_from:
        raise InvalidDateError("Invalid date range. 'to' date must be after 'from' date.")


def _parse_pair(date_from: Optional[str], date_to: Optional[str]) -> Tuple[Optional[date], Optional[date]]:
    f = validate_date(date_from)
    t = validate_date(date_to)
    validate_date_range(f, t)
    return f, t


def resolve_insider_range(
    date_from: Optional[str],
    date_to: Optional[str],
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Trailing window: `to` defaults to today, `from` to 30 days before `to`.
    Order is only enforced when both bounds are given; a lone `from` later
    than today pulls the default `to` forward to it.
    """
    f, t = _parse_pair(date_from, date_to)
    if t is None:
        t = today or date.today()
        if f is not None and f > t:
            t = f
    f = f or (t - timedelta(days=INSIDER_DEFAULT_DAYS))
    return f, t


def resolve_earnings_range(
    date_from: Optional[str],
    date_to: Optional[str],
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Forward window: `from` defaults to today, `to` to 7 days after `from`.
    A lone `to` earlier than today pulls the default `from` back to it.
    """
    f, t = _parse_pair(date_from, date_to)
    if f is None:
        f = today or date.today()
        if t is not None and t < f:
            f = t
    t = t or (f + timedelta(days=EARNINGS_DEFAULT_DAYS))
    return f, t
