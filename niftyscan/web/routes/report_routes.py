"""
Report trigger and diagnostic routes.

Errors raised by the service propagate to the handlers registered in
``niftyscan.web.app``, which turn them into a single error message.
"""

import secrets
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from niftyscan.core.config import validate_config
from niftyscan.core.models import RunReport

from ..models import APIResponse, ErrorResponse, ReportRunResponse

router = APIRouter()


def _run_response(report: RunReport) -> ReportRunResponse:
    return ReportRunResponse(
        success=True,
        message="Report generated and sent successfully",
        trace_id=report.trace_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
        is_bullish=report.signal.is_bullish,
        index_price=str(report.signal.current_price),
        moving_average=str(report.signal.moving_average),
        stocks_scraped=report.candidates_scraped,
        stocks_included=report.candidates_included,
    )


@router.post("/trigger-report", response_model=ReportRunResponse)
async def trigger_report(request: Request) -> ReportRunResponse:
    """Scrape, gate on the index regime, enrich and mail the report on demand."""
    logger.info("Manual trigger: starting stock report generation...")
    validate_config(request.app.state.config)
    report = await request.app.state.report_service.run()
    return _run_response(report)


@router.api_route("/api/cron", methods=["GET", "POST"], response_model=ReportRunResponse)
async def cron_report(request: Request):
    """Scheduled trigger; requires ``Authorization: Bearer <cron_secret>`` when a secret is configured."""
    cron_secret = request.app.state.config.server.cron_secret
    if cron_secret:
        supplied = request.headers.get("authorization", "")
        if not secrets.compare_digest(supplied, f"Bearer {cron_secret}"):
            logger.warning("Unauthorized cron request attempt")
            return JSONResponse(
                status_code=401,
                content=ErrorResponse(error="Unauthorized", code="UNAUTHORIZED").model_dump(),
            )

    logger.info("Scheduled trigger: starting stock report generation...")
    validate_config(request.app.state.config)
    report = await request.app.state.report_service.run()
    return _run_response(report)


@router.get("/test-scrape", response_model=APIResponse)
async def test_scrape(request: Request) -> APIResponse:
    """Scrape the screener without enrichment or mail."""
    candidates = await request.app.state.report_service.scrape()
    return APIResponse(
        success=True,
        message=f"Scraped {len(candidates)} stocks",
        data={
            "count": len(candidates),
            "stocks": [candidate.model_dump(mode="json") for candidate in candidates],
        },
    )


@router.get("/test-nifty", response_model=APIResponse)
async def test_nifty(request: Request) -> APIResponse:
    """Compute the index regime signal."""
    signal = await request.app.state.report_service.check_regime()
    position = "above" if signal.is_bullish else "below"
    return APIResponse(
        success=True,
        message=f"{signal.index_symbol} is {position} {signal.period} EMA",
        data=signal.model_dump(mode="json"),
    )


@router.post("/test-email", response_model=APIResponse)
async def test_email(request: Request) -> APIResponse:
    """Mail a report built from sample data."""
    validate_config(request.app.state.config)
    receipt = await request.app.state.report_service.send_test_report()
    return APIResponse(
        success=True,
        message="Test email sent successfully",
        data={"message_id": receipt.message_id},
    )
