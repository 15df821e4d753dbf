from __future__ import annotations

from dataclasses import dataclass

from niftyscan.core.models import MarketType


@dataclass(slots=True)
class NormalizedSymbol:
    raw: str
    upstream: str
    market: MarketType
    rule: str


class SymbolNormalizer:
    """Maps exchange-local tickers to the provider's symbol format."""

    def __init__(self, market: MarketType = MarketType.NSE):
        self.market = market

    def normalize(self, symbol: str) -> NormalizedSymbol:
        cleaned = symbol.strip().upper()
        if not cleaned:
            raise ValueError("symbol must not be empty")
        # Rule 1: index tickers (^NSEI, ^BSESN) are provider-native
        if cleaned.startswith("^"):
            return NormalizedSymbol(raw=symbol, upstream=cleaned, market=self.market, rule="index")
        # Rule 2: already suffixed (RELIANCE.NS)
        if "." in cleaned:
            return NormalizedSymbol(raw=symbol, upstream=cleaned, market=self.market, rule="suffixed")
        # Rule 3: exchange-local ticker
        return NormalizedSymbol(
            raw=symbol,
            upstream=f"{cleaned}{self.market.suffix}",
            market=self.market,
            rule="market_suffix",
        )

    def to_upstream(self, symbol: str) -> str:
        return self.normalize(symbol).upstream
