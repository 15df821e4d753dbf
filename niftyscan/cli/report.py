"""Report command implementations for the niftyscan CLI."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer

from niftyscan.core.config import NiftyScanConfig, validate_config
from niftyscan.core.exceptions import ConfigurationError, NiftyScanError, RunInProgressError
from niftyscan.core.services import DailyReportService, build_service

from .constants import CONFIGURATION_EXIT_CODE, RUN_FAILURE_EXIT_CODE, RUN_IN_PROGRESS_EXIT_CODE
from .utils import emit_error, emit_json, load_config

T = TypeVar("T")


def register(app: typer.Typer) -> None:
    """Register the report commands on the provided application."""

    app.command("run")(run_command)
    app.command("regime")(regime_command)
    app.command("scrape")(scrape_command)
    app.command("test-email")(test_email_command)


def get_report_service(config: NiftyScanConfig) -> DailyReportService:
    """Factory hook for obtaining a :class:`DailyReportService` instance."""

    return build_service(config)


def _execute(factory: Callable[[], Awaitable[T]]) -> T:
    try:
        return asyncio.run(factory())
    except ConfigurationError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=CONFIGURATION_EXIT_CODE) from error
    except RunInProgressError as error:
        emit_error(error.message, error.error_code)
        raise typer.Exit(code=RUN_IN_PROGRESS_EXIT_CODE) from error
    except NiftyScanError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=RUN_FAILURE_EXIT_CODE) from error


def _service_for(config: NiftyScanConfig) -> DailyReportService:
    try:
        return get_report_service(config)
    except ConfigurationError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=CONFIGURATION_EXIT_CODE) from error


def _require_mail_config(config: NiftyScanConfig) -> None:
    try:
        validate_config(config)
    except ConfigurationError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=CONFIGURATION_EXIT_CODE) from error


def run_command(ctx: typer.Context) -> None:
    """Scrape, check the index regime, enrich and mail the daily report."""

    config = load_config(ctx)
    _require_mail_config(config)
    service = _service_for(config)
    report = _execute(service.run)
    emit_json(
        {
            "success": True,
            "message": "Report generated and sent successfully",
            "trace_id": report.trace_id,
            "is_bullish": report.signal.is_bullish,
            "index_price": str(report.signal.current_price),
            "moving_average": str(report.signal.moving_average),
            "stocks_scraped": report.candidates_scraped,
            "stocks_included": report.candidates_included,
            "message_id": report.receipt.message_id,
        }
    )


def regime_command(ctx: typer.Context) -> None:
    """Show whether the index trades above its EMA."""

    config = load_config(ctx)
    service = _service_for(config)
    signal = _execute(service.check_regime)
    position = "above" if signal.is_bullish else "below"
    emit_json(
        {
            "success": True,
            "data": signal.model_dump(mode="json"),
            "message": f"{signal.index_symbol} is {position} {signal.period} EMA",
        }
    )


def scrape_command(ctx: typer.Context) -> None:
    """Scrape the screener without enrichment or mail."""

    config = load_config(ctx)
    service = _service_for(config)
    candidates = _execute(service.scrape)
    emit_json(
        {
            "success": True,
            "count": len(candidates),
            "data": [candidate.model_dump(mode="json") for candidate in candidates],
        }
    )


def test_email_command(ctx: typer.Context) -> None:
    """Mail a report built from sample data."""

    config = load_config(ctx)
    _require_mail_config(config)
    service = _service_for(config)
    receipt = _execute(service.send_test_report)
    emit_json({"success": True, "message": "Test email sent successfully", "message_id": receipt.message_id})
