"""Insider trading tracker - data models and shared types."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class TransactionRecord:
    """Single normalized insider transaction (one row of merged output)."""
    symbol: str
    person_name: str
    share: float  # shares held after the transaction, always non-negative
    change: float  # signed shares acquired (+) or disposed (-)
    filing_date: str  # YYYY-MM-DD; falls back to transaction_date
    transaction_date: Optional[str]
    transaction_price: float
    transaction_code: str  # "P" purchase | "S" sale | other codes | "N/A"

    @property
    def dedup_key(self):
        return (self.symbol, self.filing_date, self.person_name, self.share)

    @property
    def is_purchase(self) -> bool:
        return self.transaction_code == "P"

    @property
    def is_sale(self) -> bool:
        return self.transaction_code == "S"

    @property
    def transaction_value(self) -> float:
        """Dollar value shown on the dashboard: shares times price."""
        if not self.share or not self.transaction_price:
            return 0.0
        return self.share * self.transaction_price

    @property
    def ownership_change_pct(self) -> Optional[float]:
        """Percent change of the insider's holding, relative to the holding before the transaction."""
        before = self.share - self.change
        if before <= 0:
            return None
        return self.change / before * 100

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "personName": self.person_name,
            "share": self.share,
            "change": self.change,
            "filingDate": self.filing_date,
            "transactionDate": self.transaction_date,
            "transactionPrice": self.transaction_price,
            "transactionCode": self.transaction_code,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TransactionRecord":
        return cls(
            symbol=d["symbol"],
            person_name=d.get("personName") or "Unknown",
            share=d.get("share") or 0,
            change=d.get("change") or 0,
            filing_date=d.get("filingDate"),
            transaction_date=d.get("transactionDate"),
            transaction_price=d.get("transactionPrice") or 0,
            transaction_code=d.get("transactionCode") or "N/A",
        )


@dataclass
class EarningsEvent:
    """One scheduled or reported earnings release."""
    date: str
    symbol: str
    name: str
    eps_estimate: Optional[float]
    eps_actual: Optional[float]
    revenue_estimate: Optional[float]
    revenue_actual: Optional[float]
    quarter: Optional[int]
    year: Optional[int]

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "symbol": self.symbol,
            "name": self.name,
            "epsEstimate": self.eps_estimate,
            "epsActual": self.eps_actual,
            "revenueEstimate": self.revenue_estimate,
            "revenueActual": self.revenue_actual,
            "quarter": self.quarter,
            "year": self.year,
        }
