"""
Mock market data client for testing and development.

Serves fixed quotes and history from memory, can be told to fail for chosen
symbols, and records every call together with the peak number of quote
fetches in flight.
"""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from niftyscan.core.exceptions import HistoryFetchError, QuoteFetchError
from niftyscan.core.models import PriceBar, Quote


def constant_history(close: Decimal, days: int, end: date | None = None) -> list[PriceBar]:
    """Build ``days`` consecutive daily bars ending at ``end``, all closing at ``close``."""
    last = end or date.today()
    return [PriceBar(date=last - timedelta(days=offset), close=close) for offset in range(days)]


class MockMarketDataClient:
    """In-memory ``MarketDataClient``."""

    name = "mock"

    def __init__(
        self,
        quotes: dict[str, Quote] | None = None,
        history: dict[str, list[PriceBar]] | None = None,
        failing_symbols: set[str] | None = None,
        delay: float = 0.0,
    ):
        self.quotes = dict(quotes or {})
        self.history = dict(history or {})
        self.failing_symbols = set(failing_symbols or ())
        self.delay = delay
        self.quote_calls: list[str] = []
        self.history_calls: list[tuple[str, date, date]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def set_quote(self, symbol: str, price: Decimal | None = None, day_high: Decimal | None = None) -> None:
        self.quotes[symbol] = Quote(symbol=symbol, price=price, day_high=day_high)

    async def get_quote(self, symbol: str) -> Quote:
        self.quote_calls.append(symbol)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                await asyncio.sleep(0)
            if symbol in self.failing_symbols or symbol not in self.quotes:
                raise QuoteFetchError(f"Mock quote failure for {symbol}", provider_name=self.name, symbol=symbol)
            return self.quotes[symbol]
        finally:
            self.in_flight -= 1

    async def get_history(self, symbol: str, start: date, end: date) -> list[PriceBar]:
        self.history_calls.append((symbol, start, end))
        if symbol in self.failing_symbols or symbol not in self.history:
            raise HistoryFetchError(f"Mock history failure for {symbol}", provider_name=self.name, symbol=symbol)
        return list(self.history[symbol])
