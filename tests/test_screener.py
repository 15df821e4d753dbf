"""Tests for the Chartink candidate source, using httpx.MockTransport."""

from datetime import date
from decimal import Decimal
from urllib.parse import parse_qs

import httpx
import pytest

from niftyscan.core.config import ChartinkConfig
from niftyscan.core.exceptions import AuthError, ScrapeError
from niftyscan.core.services import ChartinkCandidateSource

CONFIG = ChartinkConfig(
    url="https://chartink.com/screener/test-scan",
    scan_clause="( {cash} ( latest close > latest ema( close,20 ) ) )",
    process_url="https://chartink.com/screener/process",
)

PAGE = """
<html><head>
<meta charset="utf-8">
<meta name="csrf-token" content="tok-123">
</head><body></body></html>
"""

ROWS = [
    {"sr": 1, "nsecode": "RELIANCE", "name": "Reliance Industries Limited", "bsecode": "500325",
     "per_chg": 2.5, "close": 2950.5, "volume": 1234567},
    {"sr": 2, "nsecode": "TCS", "name": "Tata Consultancy Services Limited", "bsecode": "532540",
     "per_chg": -0.75, "close": 3800, "volume": 987654},
]


class ScreenerStub:
    """Request handler recording what the source sends."""

    def __init__(self, page=PAGE, page_status=200, payload=None, process_status=200):
        self.page = page
        self.page_status = page_status
        self.payload = {"draw": 1, "data": ROWS} if payload is None else payload
        self.process_status = process_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            return httpx.Response(
                self.page_status,
                text=self.page,
                headers={"set-cookie": "ci_session=abc; path=/"},
            )
        if isinstance(self.payload, str):
            return httpx.Response(self.process_status, text=self.payload)
        return httpx.Response(self.process_status, json=self.payload)


def _source(stub: ScreenerStub) -> ChartinkCandidateSource:
    return ChartinkCandidateSource(
        CONFIG,
        transport=httpx.MockTransport(stub),
        today=lambda: date(2024, 6, 3),
    )


class TestChartinkCandidateSource:
    """Session handshake and row mapping."""

    @pytest.mark.asyncio
    async def test_fetch_maps_rows(self):
        stub = ScreenerStub()

        candidates = await _source(stub).fetch()

        assert [c.symbol for c in candidates] == ["RELIANCE", "TCS"]
        reliance = candidates[0]
        assert reliance.name == "Reliance Industries Limited"
        assert reliance.exchange_code == "500325"
        assert reliance.percent_change == Decimal("2.5")
        assert reliance.last_close == Decimal("2950.5")
        assert reliance.volume == 1234567
        assert reliance.day_high is None
        assert reliance.shortlisted_date == date(2024, 6, 3)
        assert candidates[1].percent_change == Decimal("-0.75")
        assert len({c.id for c in candidates}) == 2

    @pytest.mark.asyncio
    async def test_posts_scan_clause_with_token_and_cookies(self):
        stub = ScreenerStub()

        await _source(stub).fetch()

        page_request, process_request = stub.requests
        assert str(page_request.url) == CONFIG.url
        assert str(process_request.url) == CONFIG.process_url
        assert process_request.headers["X-CSRF-Token"] == "tok-123"
        assert process_request.headers["X-Requested-With"] == "XMLHttpRequest"
        assert "ci_session=abc" in process_request.headers["cookie"]
        assert parse_qs(process_request.content.decode()) == {"scan_clause": [CONFIG.scan_clause]}

    @pytest.mark.asyncio
    async def test_empty_data_is_valid(self):
        stub = ScreenerStub(payload={"draw": 1, "data": []})

        assert await _source(stub).fetch() == []

    @pytest.mark.asyncio
    async def test_non_finite_numbers_become_missing(self):
        stub = ScreenerStub(
            payload='{"draw": 1, "data": [{"sr": 1, "nsecode": "INFY", "name": "Infosys Limited", '
            '"bsecode": "500209", "per_chg": NaN, "close": Infinity, "volume": Infinity}]}'
        )

        (candidate,) = await _source(stub).fetch()

        assert candidate.symbol == "INFY"
        assert candidate.percent_change is None
        assert candidate.last_close is None
        assert candidate.volume is None

    @pytest.mark.asyncio
    async def test_missing_token_raises_auth_error(self):
        stub = ScreenerStub(page="<html><head></head></html>")

        with pytest.raises(AuthError):
            await _source(stub).fetch()

        assert len(stub.requests) == 1

    @pytest.mark.asyncio
    async def test_page_http_error_raises_auth_error(self):
        stub = ScreenerStub(page_status=403)

        with pytest.raises(AuthError) as exc_info:
            await _source(stub).fetch()

        assert exc_info.value.status_code == 403
        assert exc_info.value.error_code == "AUTHENTICATION_ERROR"

    @pytest.mark.asyncio
    async def test_upstream_message_raises_scrape_error(self):
        stub = ScreenerStub(payload={"message": "Invalid scan clause"})

        with pytest.raises(ScrapeError) as exc_info:
            await _source(stub).fetch()

        assert "Invalid scan clause" in exc_info.value.message
        assert not isinstance(exc_info.value, AuthError)

    @pytest.mark.asyncio
    async def test_process_http_error_raises_scrape_error(self):
        stub = ScreenerStub(process_status=500, payload={"error": "boom"})

        with pytest.raises(ScrapeError) as exc_info:
            await _source(stub).fetch()

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_non_json_response_raises_scrape_error(self):
        stub = ScreenerStub(payload="<html>maintenance</html>")

        with pytest.raises(ScrapeError):
            await _source(stub).fetch()
