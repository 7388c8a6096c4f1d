"""Dashboard statistics: buy/sell volume totals, per-ticker breakdown, daily series for charts."""
from typing import Dict, List

import numpy as np
import pandas as pd

from ..models import TransactionRecord


def _empty_summary() -> Dict:
    return {
        "total": 0,
        "buyVolume": 0.0,
        "sellVolume": 0.0,
        "symbols": 0,
        "bySymbol": [],
        "daily": [],
    }


def _frame(records: List[TransactionRecord]) -> pd.DataFrame:
    """One row per trade: symbol, date, code, value, buy, sell."""
    df = pd.DataFrame([{
        "symbol": r.symbol.upper(),
        "date": r.filing_date,
        "code": r.transaction_code,
        "value": r.transaction_value,
        "is_buy": r.is_purchase,
        "is_sell": r.is_sale,
    } for r in records])
    df["buy"] = np.where(df["is_buy"], df["value"], 0.0)
    df["sell"] = np.where(df["is_sell"], df["value"], 0.0)
    return df


def build_summary(records: List[TransactionRecord]) -> Dict:
    """
    Totals shown in the dashboard stats bar plus the data behind its charts.
    Volumes are dollar values (shares x price); only codes P and S count as buys and sells.
    """
    if not records:
        return _empty_summary()

    df = _frame(records)

    by_symbol = df.groupby("symbol").agg(
        trades=("value", "count"),
        buyVolume=("buy", "sum"),
        sellVolume=("sell", "sum"),
    ).reset_index()
    by_symbol["netVolume"] = by_symbol["buyVolume"] - by_symbol["sellVolume"]
    by_symbol["_activity"] = by_symbol["buyVolume"] + by_symbol["sellVolume"]
    by_symbol = by_symbol.sort_values(["_activity", "trades", "symbol"], ascending=[False, False, True])

    daily = df.groupby("date").agg(
        trades=("value", "count"),
        buyVolume=("buy", "sum"),
        sellVolume=("sell", "sum"),
    ).reset_index().sort_values("date")

    return {
        "total": int(len(df)),
        "buyVolume": float(df["buy"].sum()),
        "sellVolume": float(df["sell"].sum()),
        "symbols": int(df["symbol"].nunique()),
        "bySymbol": [
            {
                "symbol": row["symbol"],
                "trades": int(row["trades"]),
                "buyVolume": float(row["buyVolume"]),
                "sellVolume": float(row["sellVolume"]),
                "netVolume": float(row["netVolume"]),
            }
            for _, row in by_symbol.iterrows()
        ],
        "daily": [
            {
                "date": row["date"],
                "trades": int(row["trades"]),
                "buyVolume": float(row["buyVolume"]),
                "sellVolume": float(row["sellVolume"]),
            }
            for _, row in daily.iterrows()
        ],
    }


def records_frame(records: List[TransactionRecord]) -> pd.DataFrame:
    """Table for the CLI: one row per trade with value and ownership change."""
    columns = ["filingDate", "symbol", "personName", "transactionCode", "share", "change",
               "transactionPrice", "value", "ownershipChangePct"]
    if not records:
        return pd.DataFrame(columns=columns)
    rows = []
    for r in records:
        row = r.to_dict()
        row["value"] = r.transaction_value
        pct = r.ownership_change_pct
        row["ownershipChangePct"] = round(pct, 1) if pct is not None else np.nan
        rows.append(row)
    return pd.DataFrame(rows)[columns]
