"""Trend indicator: exponential moving average and the bullish/bearish regime gate."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from niftyscan.core.exceptions import InsufficientDataError
from niftyscan.core.models import PriceBar, RegimeSignal

_CENT = Decimal("0.01")


def compute_ema(series: Iterable[PriceBar], period: int) -> Decimal:
    """Compute the ``period``-day EMA of a closing-price series.

    Bars are sorted by date and only the last ``period`` are kept. The EMA is
    seeded with their arithmetic mean and then rolled forward over any bars past
    the seed window. Because the window is trimmed to exactly ``period`` bars
    first, the roll-forward never runs and the result equals the simple mean of
    the last ``period`` closes.

    The value is rounded half-up to two decimal places.

    Raises:
        ValueError: ``period`` is not a positive integer.
        InsufficientDataError: fewer than ``period`` bars were supplied.
    """
    if isinstance(period, bool) or not isinstance(period, int) or period < 1:
        raise ValueError(f"period must be a positive integer, got {period!r}")

    window = sorted(series, key=lambda bar: bar.date)[-period:]
    if len(window) < period:
        raise InsufficientDataError(required=period, available=len(window))

    multiplier = Decimal(2) / Decimal(period + 1)
    ema = sum((bar.close for bar in window[:period]), Decimal(0)) / Decimal(period)
    for bar in window[period:]:
        ema = (bar.close - ema) * multiplier + ema

    return ema.quantize(_CENT, rounding=ROUND_HALF_UP)


def derive_regime(
    current_price: Decimal,
    ema: Decimal,
    *,
    index_symbol: str,
    period: int,
    computed_at: datetime | None = None,
) -> RegimeSignal:
    """Classify the regime; a price equal to the average is not bullish."""
    return RegimeSignal(
        index_symbol=index_symbol,
        current_price=current_price,
        moving_average=ema,
        period=period,
        is_bullish=current_price > ema,
        computed_at=computed_at or datetime.now(timezone.utc),
    )
