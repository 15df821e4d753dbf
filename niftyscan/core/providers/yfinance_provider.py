"""
Yahoo Finance (yfinance) market data client.

Quotes come from ``Ticker.info`` and daily closes from ``Ticker.history``.
yfinance is blocking, so every call is pushed to a worker thread; that is what
lets the enrichment pipeline overlap the quote fetches of one batch.
"""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

import pandas as pd
import yfinance as yf

from niftyscan.core.exceptions import HistoryFetchError, QuoteFetchError
from niftyscan.core.logging import logger
from niftyscan.core.models import MarketType, PriceBar, Quote
from niftyscan.core.providers.symbol_normalization import SymbolNormalizer


def _safe_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
        decimal_value = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    return decimal_value if decimal_value.is_finite() else None


def _safe_int(value: Any) -> int | None:
    decimal_value = _safe_decimal(value)
    return int(decimal_value) if decimal_value is not None else None


class YfinanceMarketDataClient:
    """Market data client backed by Yahoo Finance."""

    name = "yfinance"

    def __init__(
        self,
        market: MarketType = MarketType.NSE,
        normalizer: SymbolNormalizer | None = None,
    ):
        self.market = market
        self.normalizer = normalizer or SymbolNormalizer(market)

    async def get_quote(self, symbol: str) -> Quote:
        upstream = self.normalizer.to_upstream(symbol)
        try:
            info = await asyncio.to_thread(self._fetch_info, upstream)
        except Exception as e:
            logger.debug(f"Error fetching quote for {symbol}: {e}")
            raise QuoteFetchError(
                f"Failed to fetch quote for {symbol}: {e}",
                provider_name=self.name,
                symbol=symbol,
                details={"upstream_symbol": upstream, "error_type": type(e).__name__},
            ) from e

        price = _safe_decimal(info.get("regularMarketPrice"))
        if price is None:
            raise QuoteFetchError(
                f"No market price returned for {symbol}",
                provider_name=self.name,
                symbol=symbol,
                details={"upstream_symbol": upstream},
            )

        return Quote(
            symbol=symbol,
            price=price,
            change=_safe_decimal(info.get("regularMarketChange")),
            change_percent=_safe_decimal(info.get("regularMarketChangePercent")),
            volume=_safe_int(info.get("regularMarketVolume")),
            market_cap=_safe_decimal(info.get("marketCap")),
            day_high=_safe_decimal(info.get("regularMarketDayHigh")),
            day_low=_safe_decimal(info.get("regularMarketDayLow")),
        )

    async def get_history(self, symbol: str, start: date, end: date) -> list[PriceBar]:
        upstream = self.normalizer.to_upstream(symbol)
        try:
            df = await asyncio.to_thread(self._fetch_history, upstream, start, end)
        except Exception as e:
            logger.debug(f"Error fetching historical data for {symbol}: {e}")
            raise HistoryFetchError(
                f"Failed to fetch history for {symbol}: {e}",
                provider_name=self.name,
                symbol=symbol,
                details={"upstream_symbol": upstream, "error_type": type(e).__name__},
            ) from e

        bars = self._standardize_dataframe(df)
        if not bars:
            raise HistoryFetchError(
                f"No historical data returned for {symbol}",
                provider_name=self.name,
                symbol=symbol,
                details={"upstream_symbol": upstream, "start": start.isoformat(), "end": end.isoformat()},
            )
        return bars

    def _fetch_info(self, upstream: str) -> dict[str, Any]:
        info = yf.Ticker(upstream).info
        return dict(info or {})

    def _fetch_history(self, upstream: str, start: date, end: date) -> pd.DataFrame:
        # yfinance treats ``end`` as exclusive
        return yf.Ticker(upstream).history(
            start=start.isoformat(),
            end=(end + timedelta(days=1)).isoformat(),
            interval="1d",
            auto_adjust=False,
        )

    def _standardize_dataframe(self, df: pd.DataFrame | None) -> list[PriceBar]:
        """Convert a yfinance history frame into PriceBars, skipping rows without a close."""
        if df is None or df.empty or "Close" not in df.columns:
            return []

        bars: list[PriceBar] = []
        for timestamp, close in df["Close"].items():
            close_value = _safe_decimal(close)
            if close_value is None:
                continue
            bar_date = pd.Timestamp(timestamp).date()
            bars.append(PriceBar(date=bar_date, close=close_value))
        return bars
