"""Regime-gated enrichment pipeline."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from niftyscan.core.exceptions import QuoteFetchError
from niftyscan.core.indicators import compute_ema, derive_regime
from niftyscan.core.logging import logger
from niftyscan.core.models import Candidate, PipelineResult, RegimeSignal
from niftyscan.core.providers import MarketDataClient


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EnrichmentPipeline:
    """Computes the index regime and, when bullish, adds each candidate's day high.

    The instance holds only configuration and collaborators, so concurrent
    ``run`` calls never share mutable state.
    """

    def __init__(
        self,
        client: MarketDataClient,
        *,
        batch_size: int = 5,
        pacing_delay: float = 1.0,
        lookback_padding_days: int = 20,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            client: market data client used for the index and every candidate
            batch_size: candidates fetched concurrently per batch
            pacing_delay: seconds to wait between batches
            lookback_padding_days: calendar days fetched beyond ``period`` to cover non-trading days
            sleep: coroutine used for pacing
            clock: source of the current time
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        if pacing_delay < 0:
            raise ValueError(f"pacing_delay must not be negative, got {pacing_delay}")
        if lookback_padding_days < 0:
            raise ValueError(f"lookback_padding_days must not be negative, got {lookback_padding_days}")

        self.client = client
        self.batch_size = batch_size
        self.pacing_delay = pacing_delay
        self.lookback_padding_days = lookback_padding_days
        self._sleep = sleep
        self._clock = clock

    async def run(self, candidates: Sequence[Candidate], index_symbol: str, period: int) -> PipelineResult:
        """Evaluate the regime, then enrich every candidate or none of them.

        Any failure while computing the regime propagates. A bearish regime
        collapses the candidate list to empty. Otherwise every candidate comes
        back, in input order, with ``day_high`` set or ``None`` if its quote
        could not be fetched.
        """
        signal = await self.evaluate_regime(index_symbol, period)

        if not signal.is_bullish:
            logger.info(
                f"{index_symbol} ({signal.current_price}) is not above {period} EMA "
                f"({signal.moving_average}). Excluding all {len(candidates)} candidates."
            )
            return PipelineResult(signal=signal, candidates=())

        logger.info(
            f"{index_symbol} ({signal.current_price}) is above {period} EMA "
            f"({signal.moving_average}). Including all {len(candidates)} candidates."
        )
        enriched = await self.enrich(candidates)
        return PipelineResult(signal=signal, candidates=tuple(enriched))

    async def evaluate_regime(self, index_symbol: str, period: int) -> RegimeSignal:
        """Fetch the index quote and history and derive the regime signal."""
        now = self._clock()
        end = now.date()
        start = end - timedelta(days=period + self.lookback_padding_days)

        logger.info(f"Fetching {index_symbol} current price...")
        quote = await self.client.get_quote(index_symbol)
        if quote.price is None:
            raise QuoteFetchError(
                f"No current price for {index_symbol}",
                provider_name=getattr(self.client, "name", type(self.client).__name__),
                symbol=index_symbol,
            )

        logger.info(f"Fetching {index_symbol} history from {start} to {end} for EMA{period}...")
        history = await self.client.get_history(index_symbol, start, end)
        ema = compute_ema(history, period)

        signal = derive_regime(quote.price, ema, index_symbol=index_symbol, period=period, computed_at=now)
        logger.info(f"{index_symbol}: current={signal.current_price}, EMA{period}={signal.moving_average}")
        return signal

    async def enrich(self, candidates: Sequence[Candidate]) -> list[Candidate]:
        """Fill ``day_high`` batch by batch; per-candidate failures yield ``None``."""
        logger.info(f"Enriching {len(candidates)} stocks with day high data...")

        enriched: list[Candidate] = []
        for start in range(0, len(candidates), self.batch_size):
            batch = candidates[start : start + self.batch_size]
            enriched.extend(await self._enrich_batch(batch))

            if start + self.batch_size < len(candidates):
                await self._sleep(self.pacing_delay)

        failed = sum(1 for candidate in enriched if candidate.day_high is None)
        logger.info(f"Stock enrichment completed: {len(enriched) - failed} enriched, {failed} without day high")
        return enriched

    async def _enrich_batch(self, batch: Sequence[Candidate]) -> list[Candidate]:
        results = await asyncio.gather(
            *(self.client.get_quote(candidate.symbol) for candidate in batch),
            return_exceptions=True,
        )

        enriched: list[Candidate] = []
        for candidate, result in zip(batch, results):
            day_high: Decimal | None = None
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.bind(symbol=candidate.symbol).error(f"Error enriching {candidate.symbol}: {result}")
            else:
                day_high = result.day_high
            enriched.append(candidate.with_day_high(day_high))
        return enriched
