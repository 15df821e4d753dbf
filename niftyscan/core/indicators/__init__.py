"""Technical indicators."""

from niftyscan.core.indicators.trend import compute_ema, derive_regime

__all__ = ["compute_ema", "derive_regime"]
