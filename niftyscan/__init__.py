"""niftyscan - daily stock screening report gated on the NIFTY 50 trend.

Scrapes a Chartink screener, checks whether the benchmark index trades above
its EMA, enriches the shortlisted stocks with the day's high and mails an
HTML report.

Examples:
    >>> import asyncio
    >>> from niftyscan import ConfigManager, build_service
    >>> service = build_service(ConfigManager().get_config())
    >>> signal = asyncio.run(service.check_regime())
"""

from niftyscan.core.config import ConfigManager, NiftyScanConfig
from niftyscan.core.indicators import compute_ema, derive_regime
from niftyscan.core.models import Candidate, PipelineResult, PriceBar, RegimeSignal
from niftyscan.core.services import DailyReportService, EnrichmentPipeline, build_service

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Candidate",
    "ConfigManager",
    "DailyReportService",
    "EnrichmentPipeline",
    "NiftyScanConfig",
    "PipelineResult",
    "PriceBar",
    "RegimeSignal",
    "build_service",
    "compute_ema",
    "derive_regime",
]
