"""Market data client interface."""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from niftyscan.core.models import PriceBar, Quote


@runtime_checkable
class MarketDataClient(Protocol):
    """Fetches live quotes and daily closing history for exchange-local symbols.

    Implementations do not cache: every call reflects upstream state at call time.
    """

    async def get_quote(self, symbol: str) -> Quote:
        """Return the current quote, raising ``QuoteFetchError`` on failure."""
        ...

    async def get_history(self, symbol: str, start: date, end: date) -> list[PriceBar]:
        """Return daily closes in ``[start, end]``, raising ``HistoryFetchError`` on failure."""
        ...
