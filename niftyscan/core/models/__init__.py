"""Data models module."""

from niftyscan.core.models.base import Candidate, PriceBar, Quote
from niftyscan.core.models.market import CandidateStatus, MarketType
from niftyscan.core.models.response import (
    DeliveryReceipt,
    PipelineResult,
    RegimeSignal,
    ReportDocument,
    RunReport,
)

__all__ = [
    "PriceBar",
    "Quote",
    "Candidate",
    "CandidateStatus",
    "MarketType",
    "RegimeSignal",
    "PipelineResult",
    "ReportDocument",
    "DeliveryReceipt",
    "RunReport",
]
