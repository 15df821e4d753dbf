"""HTML report rendering."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from jinja2 import Environment, PackageLoader, select_autoescape

from niftyscan.core.models import Candidate, RegimeSignal, ReportDocument


def format_indian_number(value: int | Decimal | None) -> str:
    """Group digits the Indian way: 12345678 -> 1,23,45,678."""
    if value is None:
        return "N/A"
    digits = str(abs(int(value)))
    sign = "-" if int(value) < 0 else ""
    if len(digits) <= 3:
        return f"{sign}{digits}"
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return f"{sign}{','.join(groups)},{tail}"


def format_price(value: Decimal | None) -> str:
    if value is None:
        return "N/A"
    return f"₹{value:.2f}"


def format_change(value: Decimal | None) -> str:
    if value is None:
        return "N/A"
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.2f}%"


class ReportAssembler:
    """Turns a regime signal and candidate list into a deliverable HTML report."""

    def __init__(self, timezone_name: str = "Asia/Kolkata", template_name: str = "report.html.j2"):
        self.timezone = ZoneInfo(timezone_name)
        self.env = Environment(
            loader=PackageLoader("niftyscan", "templates"),
            autoescape=select_autoescape(["html", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["inr_number"] = format_indian_number
        self.env.filters["price"] = format_price
        self.env.filters["change"] = format_change
        self.template = self.env.get_template(template_name)

    def render(
        self,
        signal: RegimeSignal,
        candidates: Sequence[Candidate],
        *,
        generated_at: datetime | None = None,
    ) -> ReportDocument:
        """Render the report; pure apart from reading the clock when ``generated_at`` is omitted."""
        generated = (generated_at or datetime.now(timezone.utc)).astimezone(self.timezone)
        context = {
            "signal": signal,
            "candidates": list(candidates),
            "generated_display": generated.strftime("%d/%m/%Y, %I:%M:%S %p"),
            "report_date": generated.strftime("%d %b %Y, %A"),
        }
        return ReportDocument(
            subject=f"Daily Stock Report - {generated.strftime('%d/%m/%Y')}",
            html=self.template.render(**context),
            text=self._render_text(signal, candidates, context["generated_display"]),
            generated_at=generated,
        )

    def _render_text(self, signal: RegimeSignal, candidates: Sequence[Candidate], generated_display: str) -> str:
        position = "above" if signal.is_bullish else "below"
        lines = [
            "Daily Stock Screening Report",
            f"Generated on: {generated_display}",
            f"{signal.index_symbol}: {signal.current_price} is {position} "
            f"{signal.period} EMA ({signal.moving_average})",
            f"Total Stocks Screened: {len(candidates)}",
            "",
        ]
        if not candidates:
            lines.append("No stocks found matching the criteria.")
        for candidate in candidates:
            lines.append(
                f"{candidate.name} ({candidate.symbol}) close {format_price(candidate.last_close)} "
                f"change {format_change(candidate.percent_change)} "
                f"volume {format_indian_number(candidate.volume)} "
                f"day high {format_price(candidate.day_high)}"
            )
        return "\n".join(lines)
