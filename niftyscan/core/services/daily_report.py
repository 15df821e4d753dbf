"""Daily report run orchestration."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Protocol
from zoneinfo import ZoneInfoNotFoundError

from niftyscan.core.config import NiftyScanConfig
from niftyscan.core.exceptions import ConfigurationError, ReportTimeoutError, RunInProgressError
from niftyscan.core.logging import log_context, logger
from niftyscan.core.models import (
    Candidate,
    DeliveryReceipt,
    MarketType,
    PipelineResult,
    RegimeSignal,
    ReportDocument,
    RunReport,
)
from niftyscan.core.providers import YfinanceMarketDataClient
from niftyscan.core.services.enrichment import EnrichmentPipeline
from niftyscan.core.services.mailer import SmtpMailSender
from niftyscan.core.services.report import ReportAssembler
from niftyscan.core.services.screener import ChartinkCandidateSource


class CandidateSource(Protocol):
    async def fetch(self) -> list[Candidate]: ...


class MailSender(Protocol):
    async def send(self, document: ReportDocument) -> DeliveryReceipt: ...


class DailyReportService:
    """Runs scrape -> regime-gated enrichment -> render -> deliver.

    Only one run executes at a time; an overlapping ``run`` is rejected with
    ``RunInProgressError``. The optional ``timeout`` bounds everything before
    delivery, so a timed-out run never sends a report.
    """

    def __init__(
        self,
        source: CandidateSource,
        pipeline: EnrichmentPipeline,
        assembler: ReportAssembler,
        mailer: MailSender,
        *,
        index_symbol: str = "^NSEI",
        period: int = 20,
        timeout: float | None = None,
    ):
        self.source = source
        self.pipeline = pipeline
        self.assembler = assembler
        self.mailer = mailer
        self.index_symbol = index_symbol
        self.period = period
        self.timeout = timeout
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self) -> RunReport:
        """Execute one full report run."""
        if self._running:
            logger.warning("Report run requested while another run is in progress")
            raise RunInProgressError()

        self._running = True
        try:
            with log_context(component="daily_report") as trace_id:
                logger.info("Starting daily report run...")
                scraped, result, document = await self._prepare_with_timeout()
                receipt = await self.mailer.send(document)
                logger.info("Daily report run completed successfully")
                return RunReport(
                    trace_id=trace_id,
                    signal=result.signal,
                    candidates_scraped=len(scraped),
                    candidates_included=len(result.candidates),
                    receipt=receipt,
                )
        finally:
            self._running = False

    async def _prepare_with_timeout(self) -> tuple[list[Candidate], PipelineResult, ReportDocument]:
        if self.timeout is None:
            return await self._prepare()
        try:
            return await asyncio.wait_for(self._prepare(), timeout=self.timeout)
        except TimeoutError as e:
            logger.error(f"Daily report run timed out after {self.timeout} seconds")
            raise ReportTimeoutError(self.timeout) from e

    async def _prepare(self) -> tuple[list[Candidate], PipelineResult, ReportDocument]:
        candidates = await self.source.fetch()
        result = await self.pipeline.run(candidates, self.index_symbol, self.period)
        document = self.assembler.render(result.signal, result.candidates)
        return candidates, result, document

    async def check_regime(self) -> RegimeSignal:
        """Compute the current regime signal without scraping or mailing."""
        return await self.pipeline.evaluate_regime(self.index_symbol, self.period)

    async def scrape(self) -> list[Candidate]:
        """Fetch the screener candidates without enrichment or mailing."""
        return await self.source.fetch()

    async def send_test_report(self) -> DeliveryReceipt:
        """Mail a report built from fixed sample data."""
        today = date.today()
        sample = [
            Candidate(
                id="sample-1",
                name="Reliance Industries Ltd",
                symbol="RELIANCE",
                percent_change=Decimal("2.5"),
                last_close=Decimal("2450.50"),
                volume=5000000,
                shortlisted_date=today,
            ),
            Candidate(
                id="sample-2",
                name="Tata Consultancy Services Ltd",
                symbol="TCS",
                percent_change=Decimal("-1.2"),
                last_close=Decimal("3650.75"),
                volume=2000000,
                shortlisted_date=today,
            ),
        ]
        signal = RegimeSignal(
            index_symbol=self.index_symbol,
            current_price=Decimal("19850.25"),
            moving_average=Decimal("19500.00"),
            period=self.period,
            is_bullish=True,
            computed_at=datetime.now(timezone.utc),
        )
        document = self.assembler.render(signal, sample)
        return await self.mailer.send(document)


def build_service(config: NiftyScanConfig) -> DailyReportService:
    """Compose a DailyReportService from configuration.

    Raises:
        ConfigurationError: a setting has a value the collaborators reject.
    """
    if config.market.ema_period < 1:
        raise ConfigurationError(
            f"market.ema_period must be at least 1, got {config.market.ema_period}",
            details={"setting": "market.ema_period"},
        )
    if config.scheduler.run_timeout is not None and config.scheduler.run_timeout <= 0:
        raise ConfigurationError(
            f"scheduler.run_timeout must be positive, got {config.scheduler.run_timeout}",
            details={"setting": "scheduler.run_timeout"},
        )

    try:
        client = YfinanceMarketDataClient(market=MarketType(config.market.market.lower()))
        pipeline = EnrichmentPipeline(
            client,
            batch_size=config.enrichment.batch_size,
            pacing_delay=config.enrichment.pacing_delay,
            lookback_padding_days=config.enrichment.lookback_padding_days,
        )
        source = ChartinkCandidateSource(config.chartink, timezone=config.scheduler.timezone)
        assembler = ReportAssembler(config.scheduler.timezone)
        mailer = SmtpMailSender(config.email)
    except (ValueError, ZoneInfoNotFoundError) as e:
        logger.error(f"Invalid configuration: {e}")
        raise ConfigurationError(f"Invalid configuration: {e}", details={"error_type": type(e).__name__}) from e

    return DailyReportService(
        source=source,
        pipeline=pipeline,
        assembler=assembler,
        mailer=mailer,
        index_symbol=config.market.index_symbol,
        period=config.market.ema_period,
        timeout=config.scheduler.run_timeout,
    )
