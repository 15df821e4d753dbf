"""
Chartink screener candidate source.

Each fetch opens a fresh session: the screener page is loaded to obtain the
session cookies and the CSRF token, then the scan clause is posted to the
process endpoint and the JSON rows are mapped to candidates.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import uuid4
from zoneinfo import ZoneInfo

import httpx
from bs4 import BeautifulSoup

from niftyscan.core.config import ChartinkConfig
from niftyscan.core.exceptions import AuthError, ScrapeError
from niftyscan.core.logging import logger
from niftyscan.core.models import Candidate, CandidateStatus

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

PAGE_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        decimal_value = Decimal(str(value))
    except InvalidOperation:
        return None
    return decimal_value if decimal_value.is_finite() else None


def _to_int(value: Any) -> int | None:
    decimal_value = _to_decimal(value)
    return int(decimal_value) if decimal_value is not None else None


class ChartinkCandidateSource:
    """Fetches the shortlisted stocks of a Chartink scan."""

    def __init__(
        self,
        config: ChartinkConfig | None = None,
        *,
        timezone: str = "Asia/Kolkata",
        transport: httpx.AsyncBaseTransport | None = None,
        today: Callable[[], date] | None = None,
    ):
        """
        Args:
            config: screener URLs and scan clause
            timezone: timezone used to stamp ``shortlisted_date``
            transport: optional httpx transport, mainly for tests
            today: optional date provider overriding the timezone clock
        """
        self.config = config or ChartinkConfig()
        self.timezone = ZoneInfo(timezone)
        self._transport = transport
        self._today = today or (lambda: datetime.now(self.timezone).date())

    async def fetch(self) -> list[Candidate]:
        """Scrape the screener and return its candidates (possibly empty)."""
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout),
            follow_redirects=True,
            max_redirects=5,
            transport=self._transport,
        ) as client:
            csrf_token = await self._fetch_csrf_token(client)

            logger.info("Scraping stocks from Chartink...")
            payload = await self._post_scan(client, csrf_token)

        rows = payload.get("data") or []
        shortlisted_date = self._today()
        candidates = [self._row_to_candidate(row, shortlisted_date) for row in rows]
        logger.info(f"Successfully scraped {len(candidates)} stocks from Chartink")
        return candidates

    async def _fetch_csrf_token(self, client: httpx.AsyncClient) -> str:
        logger.debug("Fetching CSRF token from Chartink...")
        try:
            response = await client.get(self.config.url, headers=PAGE_HEADERS)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Error fetching CSRF token: {e.response.status_code}")
            raise AuthError(
                f"Screener page returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Error fetching CSRF token: {e}")
            raise AuthError(f"Failed to load screener page: {e}") from e

        soup = BeautifulSoup(response.text, "html.parser")
        meta = soup.find("meta", attrs={"name": "csrf-token"})
        token = meta.get("content") if meta is not None else None
        if not token:
            logger.error("CSRF token not found on page")
            raise AuthError("CSRF token not found on page")

        logger.debug("CSRF token fetched successfully")
        return str(token)

    async def _post_scan(self, client: httpx.AsyncClient, csrf_token: str) -> dict[str, Any]:
        headers = {
            "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
            "X-CSRF-Token": csrf_token,
            "X-Requested-With": "XMLHttpRequest",
            "User-Agent": USER_AGENT,
            "Accept": "application/json, text/javascript, */*; q=0.01",
            "Accept-Language": "en-US,en;q=0.9",
            "Origin": "https://chartink.com",
            "Referer": self.config.url,
            "Connection": "keep-alive",
        }
        try:
            response = await client.post(
                self.config.process_url,
                data={"scan_clause": self.config.scan_clause},
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Error scraping stocks: {e.response.status_code} - {e.response.text}")
            raise ScrapeError(
                f"Screener returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Error scraping stocks: {e}")
            raise ScrapeError(f"Screener request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ScrapeError("Screener returned a non-JSON response") from e

        if not isinstance(payload, dict):
            raise ScrapeError("Screener returned an unexpected payload")
        if payload.get("message"):
            raise ScrapeError(f"Chartink API Error: {payload['message']}", details={"upstream_message": payload["message"]})
        return payload

    def _row_to_candidate(self, row: dict[str, Any], shortlisted_date: date) -> Candidate:
        return Candidate(
            id=uuid4().hex,
            name=str(row.get("name") or ""),
            symbol=str(row.get("nsecode") or ""),
            exchange_code=str(row.get("bsecode") or ""),
            percent_change=_to_decimal(row.get("per_chg")),
            last_close=_to_decimal(row.get("close")),
            volume=_to_int(row.get("volume")),
            status=CandidateStatus.SHORTLISTED,
            shortlisted_date=shortlisted_date,
        )
