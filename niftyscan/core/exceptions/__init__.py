"""Exception handling module."""

from niftyscan.core.exceptions.base import (
    AuthError,
    ConfigurationError,
    DeliveryError,
    HistoryFetchError,
    InsufficientDataError,
    NiftyScanError,
    ProviderError,
    QuoteFetchError,
    ReportTimeoutError,
    RunInProgressError,
    ScrapeError,
)

__all__ = [
    "NiftyScanError",
    "ConfigurationError",
    "InsufficientDataError",
    "ProviderError",
    "QuoteFetchError",
    "HistoryFetchError",
    "ScrapeError",
    "AuthError",
    "DeliveryError",
    "RunInProgressError",
    "ReportTimeoutError",
]
