"""Run result models: regime signal, pipeline output, rendered report and delivery receipt."""

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from .base import Candidate


class RegimeSignal(BaseModel):
    """Whether the benchmark index trades above its moving average."""

    model_config = ConfigDict(frozen=True)

    index_symbol: str
    current_price: Decimal
    moving_average: Decimal
    period: int
    is_bullish: bool
    computed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def check_bullish_matches_prices(self) -> "RegimeSignal":
        if self.is_bullish != (self.current_price > self.moving_average):
            raise ValueError("is_bullish must equal current_price > moving_average")
        return self

    @field_serializer("current_price", "moving_average", when_used="json")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal to string."""
        return str(value)


class PipelineResult(BaseModel):
    """Output of one enrichment pipeline run."""

    model_config = ConfigDict(frozen=True)

    signal: RegimeSignal
    candidates: tuple[Candidate, ...] = ()


class ReportDocument(BaseModel):
    """A rendered, deliverable report."""

    model_config = ConfigDict(frozen=True)

    subject: str
    html: str
    text: str
    generated_at: datetime


class DeliveryReceipt(BaseModel):
    """Acknowledgement that a report left the mail transport."""

    model_config = ConfigDict(frozen=True)

    message_id: str
    recipients: tuple[str, ...]
    sent_at: datetime


class RunReport(BaseModel):
    """Summary of a completed daily report run."""

    model_config = ConfigDict(frozen=True)

    trace_id: str
    signal: RegimeSignal
    candidates_scraped: int
    candidates_included: int
    receipt: DeliveryReceipt
