"""Response models for the HTTP surface."""

from typing import Any

from pydantic import BaseModel


class APIResponse(BaseModel):
    """Envelope shared by every successful endpoint."""

    success: bool = True
    message: str | None = None
    data: Any = None


class ReportRunResponse(BaseModel):
    """Outcome of a triggered report run."""

    success: bool = True
    message: str
    trace_id: str
    timestamp: str
    is_bullish: bool
    index_price: str
    moving_average: str
    stocks_scraped: int
    stocks_included: int


class ErrorResponse(BaseModel):
    """Body returned when a request fails."""

    success: bool = False
    error: str
    code: str
