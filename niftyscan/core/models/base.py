"""Base data models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_serializer

from .market import CandidateStatus


class PriceBar(BaseModel):
    """One trading day's closing price."""

    model_config = ConfigDict(frozen=True)

    date: date
    close: Decimal


class Quote(BaseModel):
    """Current quote for a symbol; any numeric field may be missing upstream."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    price: Decimal | None = None
    change: Decimal | None = None
    change_percent: Decimal | None = None
    volume: int | None = None
    market_cap: Decimal | None = None
    day_high: Decimal | None = None
    day_low: Decimal | None = None

    @field_serializer("price", "change", "change_percent", "market_cap", "day_high", "day_low", when_used="json")
    def serialize_decimal(self, value: Decimal | None) -> str | None:
        """Serialize Decimal to string."""
        if value is None:
            return None
        return str(value)


class Candidate(BaseModel):
    """A screened stock.

    ``day_high`` stays ``None`` until enrichment fills it; enrichment produces a
    copy through ``model_copy`` rather than mutating the instance.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    symbol: str
    exchange_code: str = ""
    percent_change: Decimal | None = None
    last_close: Decimal | None = None
    volume: int | None = None
    day_high: Decimal | None = None
    status: CandidateStatus = CandidateStatus.SHORTLISTED
    shortlisted_date: date

    @field_serializer("percent_change", "last_close", "day_high", when_used="json")
    def serialize_decimal(self, value: Decimal | None) -> str | None:
        """Serialize Decimal to string."""
        if value is None:
            return None
        return str(value)

    def with_day_high(self, day_high: Decimal | None) -> "Candidate":
        """Return a copy with ``day_high`` replaced."""
        return self.model_copy(update={"day_high": day_high})
