"""Tests for the concurrent per-symbol fan-out and merge."""

import asyncio
import threading
from datetime import date

import pytest

from insider_tracker.aggregator import aggregate_insider_trades, fetch_all
from insider_tracker.errors import ConfigurationError

FROM = date(2025, 1, 1)
TO = date(2025, 1, 31)


def _payload(symbol, *dates):
    return {"symbol": symbol, "data": [
        {"symbol": symbol, "name": f"insider {i}", "share": 100 + i, "filingDate": d, "transactionCode": "S"}
        for i, d in enumerate(dates)
    ]}


class TestFetchAll:
    def test_queries_every_symbol_with_range(self, fake_finnhub):
        client = fake_finnhub()
        asyncio.run(fetch_all(client, FROM, TO, ["AAPL", "MSFT", "NVDA"]))
        assert sorted(c[0] for c in client.calls) == ["AAPL", "MSFT", "NVDA"]
        assert all(c[1] == FROM and c[2] == TO for c in client.calls)

    def test_every_symbol_in_flight_at_once(self, fake_finnhub):
        symbols = ["AAPL", "MSFT", "NVDA", "META", "AMZN"]
        barrier = threading.Barrier(len(symbols), timeout=5)

        class WaitsForAll(fake_finnhub):
            def get_insider_transactions(self, symbol, date_from, date_to):
                # only returns once every symbol's call has started
                barrier.wait()
                return super().get_insider_transactions(symbol, date_from, date_to)

        client = WaitsForAll({s: _payload(s, "2025-01-05") for s in symbols})
        result = asyncio.run(fetch_all(client, FROM, TO, symbols))
        assert len(result) == len(symbols)
        assert not barrier.broken

    def test_merged_output_sorted_newest_first(self, fake_finnhub):
        client = fake_finnhub({
            "AAPL": _payload("AAPL", "2025-01-01", "2025-01-20"),
            "MSFT": _payload("MSFT", "2025-01-05"),
            "NVDA": _payload("NVDA", "2025-01-30", "2025-01-02"),
        })
        result = asyncio.run(fetch_all(client, FROM, TO, ["AAPL", "MSFT", "NVDA"]))
        dates = [r.filing_date for r in result]
        assert len(result) == 5
        assert dates == sorted(dates, reverse=True)
        assert dates[0] == "2025-01-30"

    def test_two_lists_merge_newest_first(self, fake_finnhub):
        client = fake_finnhub({
            "AAPL": _payload("AAPL", "2025-01-01"),
            "MSFT": _payload("MSFT", "2025-01-05"),
        })
        result = asyncio.run(fetch_all(client, FROM, TO, ["AAPL", "MSFT"]))
        assert [r.symbol for r in result] == ["MSFT", "AAPL"]

    def test_failed_symbols_contribute_nothing(self, fake_finnhub, network_error):
        client = fake_finnhub({
            "AAPL": _payload("AAPL", "2025-01-10"),
            "MSFT": network_error,
            "NVDA": RuntimeError("boom"),
            "META": _payload("META", "2025-01-11"),
        })
        result = asyncio.run(fetch_all(client, FROM, TO, ["AAPL", "MSFT", "NVDA", "META"]))
        assert [r.symbol for r in result] == ["META", "AAPL"]

    def test_all_failures_return_empty(self, fake_finnhub, network_error):
        client = fake_finnhub({"AAPL": network_error, "MSFT": network_error})
        assert asyncio.run(fetch_all(client, FROM, TO, ["AAPL", "MSFT"])) == []

    def test_auth_failure_everywhere_is_raised(self, fake_finnhub, auth_error):
        client = fake_finnhub({"AAPL": auth_error, "MSFT": auth_error})
        with pytest.raises(ConfigurationError, match="Invalid API key"):
            asyncio.run(fetch_all(client, FROM, TO, ["AAPL", "MSFT"]))

    def test_partial_auth_failure_is_absorbed(self, fake_finnhub, auth_error):
        client = fake_finnhub({"AAPL": auth_error, "MSFT": _payload("MSFT", "2025-01-05")})
        result = asyncio.run(fetch_all(client, FROM, TO, ["AAPL", "MSFT"]))
        assert [r.symbol for r in result] == ["MSFT"]

    def test_malformed_payload_is_empty(self, fake_finnhub):
        client = fake_finnhub({"AAPL": {"unexpected": True}, "MSFT": _payload("MSFT", "2025-01-05")})
        result = asyncio.run(fetch_all(client, FROM, TO, ["AAPL", "MSFT"]))
        assert len(result) == 1

    def test_no_symbols(self, fake_finnhub):
        assert asyncio.run(fetch_all(fake_finnhub(), FROM, TO, [])) == []


def test_blocking_wrapper(fake_finnhub):
    client = fake_finnhub({"AAPL": _payload("AAPL", "2025-01-03")})
    result = aggregate_insider_trades(FROM, TO, symbols=["AAPL"], client=client)
    assert [r.symbol for r in result] == ["AAPL"]
