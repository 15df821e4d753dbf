"""Market data providers."""

from niftyscan.core.providers.base import MarketDataClient
from niftyscan.core.providers.symbol_normalization import NormalizedSymbol, SymbolNormalizer
from niftyscan.core.providers.yfinance_provider import YfinanceMarketDataClient

__all__ = [
    "MarketDataClient",
    "NormalizedSymbol",
    "SymbolNormalizer",
    "YfinanceMarketDataClient",
]
