"""Market-related enums."""

from enum import Enum


class MarketType(str, Enum):
    """Exchange whose local tickers candidates are quoted in."""

    NSE = "nse"  # National Stock Exchange of India
    BSE = "bse"  # Bombay Stock Exchange
    US = "us"

    @property
    def suffix(self) -> str:
        """Yahoo Finance ticker suffix for this market."""
        return _MARKET_SUFFIXES[self]


_MARKET_SUFFIXES = {
    MarketType.NSE: ".NS",
    MarketType.BSE: ".BO",
    MarketType.US: "",
}


class CandidateStatus(str, Enum):
    """Lifecycle status of a screened candidate."""

    SHORTLISTED = "shortlisted"
