#!/usr/bin/env python3
"""
Insider Trading Tracker.

Fetches insider transactions for the tracked major tickers from Finnhub,
merges them newest-filing-first, and prints them (or the earnings calendar).
"""
import argparse
import logging
import sys
import os

_here = os.path.dirname(os.path.abspath(__file__))
if _here not in sys.path:
    sys.path.insert(0, _here)

from pathlib import Path
from dotenv import load_dotenv
load_dotenv(Path(_here) / ".env")

import pandas as pd

from insider_tracker.config import LOG_LEVEL, TRACKED_SYMBOLS
from insider_tracker.clients import FinnhubClient
from insider_tracker.aggregator import aggregate_insider_trades
from insider_tracker.data.dashboard import build_summary, records_frame
from insider_tracker.errors import ConfigurationError, TrackerError
from insider_tracker.transform import SORT_KEYS, sort_trades, transform_earnings_payload
from insider_tracker.validation import resolve_earnings_range, resolve_insider_range


def _print_summary(records) -> None:
    s = build_summary(records)
    print(f"\nTransactions: {s['total']} across {s['symbols']} tickers")
    print(f"Buy volume:   ${s['buyVolume']:,.2f}")
    print(f"Sell volume:  ${s['sellVolume']:,.2f}")
    if s["bySymbol"]:
        print("\nBy ticker:")
        print(pd.DataFrame(s["bySymbol"]).to_string(index=False))


def _run_earnings(client: FinnhubClient, args) -> pd.DataFrame:
    date_from, date_to = resolve_earnings_range(args.date_from, args.date_to)
    print(f"Fetching earnings calendar from {date_from} to {date_to}...")
    events = transform_earnings_payload(client.get_earnings_calendar(date_from, date_to))
    df = pd.DataFrame([e.to_dict() for e in events])
    print(f"{len(df)} earnings releases.")
    if not df.empty:
        shown = df.head(args.limit) if args.limit else df
        print(shown.to_string(index=False))
    return df


def _run_trades(client: FinnhubClient, args) -> pd.DataFrame:
    date_from, date_to = resolve_insider_range(args.date_from, args.date_to)
    print(f"Fetching insider transactions for {len(TRACKED_SYMBOLS)} symbols from {date_from} to {date_to}...")
    records = aggregate_insider_trades(date_from, date_to, client=client)
    print(f"Merged {len(records)} insider transactions.")
    if args.sort:
        records = sort_trades(records, args.sort, descending=not args.asc)

    df = records_frame(records)
    if args.summary:
        _print_summary(records)
    elif df.empty:
        print("  (No data)")
    else:
        shown = df.head(args.limit) if args.limit else df
        print(shown.to_string(index=False))
    return df


def main():
    parser = argparse.ArgumentParser(
        description="Track insider transactions for major S&P 500 companies."
    )
    parser.add_argument("--from", dest="date_from", type=str, default=None,
                        help="Start date YYYY-MM-DD (default: 30 days before --to; for --earnings: today)")
    parser.add_argument("--to", dest="date_to", type=str, default=None,
                        help="End date YYYY-MM-DD (default: today; for --earnings: 7 days after --from)")
    parser.add_argument("--sort", choices=sorted(SORT_KEYS), default=None,
                        help="Sort trades by column (default: filing date, newest first)")
    parser.add_argument("--asc", action="store_true", help="Ascending sort order")
    parser.add_argument("--earnings", action="store_true", help="Show the earnings calendar instead of trades")
    parser.add_argument("--summary", action="store_true", help="Print buy/sell volume statistics instead of rows")
    parser.add_argument("--limit", type=int, default=0, help="Max rows to print (default: all)")
    parser.add_argument("--csv", type=str, default=None, help="Write the full result to CSV path")
    args = parser.parse_args()

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    client = FinnhubClient()
    try:
        if not client.configured:
            raise ConfigurationError("FINNHUB_API_KEY is required in .env file")
        df = _run_earnings(client, args) if args.earnings else _run_trades(client, args)
    except TrackerError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.details:
            print(e.details, file=sys.stderr)
        sys.exit(1)

    if args.csv:
        df.to_csv(args.csv, index=False)
        print(f"\nWrote {args.csv}.")


if __name__ == "__main__":
    main()
