"""Service layer."""

from niftyscan.core.services.daily_report import DailyReportService, build_service
from niftyscan.core.services.enrichment import EnrichmentPipeline
from niftyscan.core.services.mailer import SmtpMailSender
from niftyscan.core.services.report import ReportAssembler
from niftyscan.core.services.screener import ChartinkCandidateSource

__all__ = [
    "ChartinkCandidateSource",
    "DailyReportService",
    "EnrichmentPipeline",
    "ReportAssembler",
    "SmtpMailSender",
    "build_service",
]
