"""Pytest configuration for the niftyscan test suite."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from niftyscan.core.models import Candidate


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--niftyscan-run-integration",
        action="store_true",
        default=False,
        help="Run niftyscan integration tests that require external services.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--niftyscan-run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="integration tests require --niftyscan-run-integration",
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def make_candidate(index: int, symbol: str | None = None) -> Candidate:
    return Candidate(
        id=f"cand-{index}",
        name=f"Company {index} Ltd",
        symbol=symbol or f"SYM{index}",
        exchange_code=str(500000 + index),
        percent_change=Decimal("1.25"),
        last_close=Decimal(100 + index),
        volume=10000 * (index + 1),
        shortlisted_date=date(2024, 6, 3),
    )


@pytest.fixture
def candidate_factory():
    """Factory producing distinct candidates."""
    return make_candidate


@pytest.fixture
def sample_candidates() -> list[Candidate]:
    """Three shortlisted candidates."""
    return [make_candidate(i) for i in range(3)]
